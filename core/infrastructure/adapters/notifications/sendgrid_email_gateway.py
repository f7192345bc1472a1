"""
SendGrid Email Gateway.

Sends templated email through SendGrid's v3 mail send API. SendGrid
accepts or rejects a send as a whole, so receipts never carry
per-recipient results.
"""
from typing import Any, Dict, Optional

from core.application.interfaces import EmailSendReceipt, IEmailGateway, TemplatedEmail
from core.domain.enums import FailureReason
from core.settings.sections.email import EmailSettings
from gyld_sdk.errors import SendGridAPIError
from gyld_sdk.logging import get_logger
from gyld_sdk.sendgrid import SendGridClient, build_dynamic_template_data, build_mail_payload

logger = get_logger(__name__)


class SendGridEmailGateway(IEmailGateway):
    """IEmailGateway over SendGrid."""

    def __init__(self, settings: EmailSettings, client: Optional[SendGridClient] = None):
        self.settings = settings
        self.client = client or SendGridClient(
            api_key=settings.api_key,
            api_url=settings.api_url,
            timeout=settings.request_timeout,
        )
        logger.info("sendgrid_email_gateway_initialized", templates=sorted(settings.template_ids))

    def build_payload(self, email: TemplatedEmail) -> Dict[str, Any]:
        template_id = self.settings.template_ids.get(email.template_name)
        if not template_id:
            logger.warning("email_template_id_missing", template_name=email.template_name)
        template_data = build_dynamic_template_data(
            subject=email.subject,
            body1=email.body,
            body2=email.secondary_body,
            button_text=email.button_text,
            button_url=email.button_url,
            unsubscribe_url=email.unsubscribe_url,
            header_image=email.header_image,
            body_image=email.body_image,
        )
        return build_mail_payload(
            recipients=[{"email": p.email, "first": p.first} for p in email.personalizations],
            from_email=email.from_email,
            from_name=email.from_name,
            subject=email.subject,
            template_data=template_data,
            template_id=template_id,
            reply_to=email.reply_to,
        )

    async def send(self, email: TemplatedEmail) -> EmailSendReceipt:
        payload = self.build_payload(email)
        try:
            response = await self.client.send(payload)
        except SendGridAPIError as exc:
            if not exc.is_client_error:
                raise
            message = "; ".join(str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in exc.errors)
            logger.warning("sendgrid_rejected", status=exc.status, error=message or str(exc))
            return EmailSendReceipt(
                accepted=False,
                error_code=FailureReason.PROVIDER_REJECTED.value,
                error_message=message or str(exc),
            )
        return EmailSendReceipt(accepted=True, message_id=response.message_id)
