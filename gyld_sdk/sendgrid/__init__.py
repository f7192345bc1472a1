from .client import SENDGRID_MAIL_SEND_URL, SendGridClient, SendGridResponse
from .payload import build_dynamic_template_data, build_fallback_html, build_mail_payload, has_template_id

__all__ = [
    "SENDGRID_MAIL_SEND_URL",
    "SendGridClient",
    "SendGridResponse",
    "build_dynamic_template_data",
    "build_fallback_html",
    "build_mail_payload",
    "has_template_id",
]
