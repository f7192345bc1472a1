"""Build SendGrid v3 ``mail/send`` payloads."""

from html import escape
from typing import Any, Dict, List, Optional

PLACEHOLDER_TEMPLATE_IDS = ("", "d-placeholder123")


def has_template_id(template_id: Optional[str]) -> bool:
    return bool(template_id) and template_id not in PLACEHOLDER_TEMPLATE_IDS


def build_dynamic_template_data(
    subject: str,
    body1: str,
    body2: Optional[str] = None,
    button_text: Optional[str] = None,
    button_url: Optional[str] = None,
    unsubscribe_url: Optional[str] = None,
    header_image: Optional[str] = None,
    body_image: Optional[str] = None,
) -> Dict[str, Any]:
    """Template data shared by every recipient of a send.

    ``body2`` is also exposed as ``sub`` and ``body1`` as ``subtitle`` for
    the invitation templates.
    """
    data: Dict[str, Any] = {
        "body1": body1,
        "subject": subject,
        "buttonurl": button_url or "",
        "buttontext": button_text or "",
        "unsubscribeurl": unsubscribe_url or "",
        "subtitle": body1,
    }
    if body2:
        data["body2"] = body2
        data["sub"] = body2
    if header_image:
        data["header_image"] = header_image
    if body_image:
        data["body_image"] = body_image
    return data


def build_fallback_html(template_data: Dict[str, Any]) -> str:
    """Plain HTML body used when no provider template is configured."""
    parts = [
        '<html><body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">',
        '<div style="max-width: 600px; margin: 0 auto; padding: 20px;">',
        f'<h2 style="color: #13BEC7;">{escape(str(template_data.get("subject", "")))}</h2>',
        f'<p>{escape(str(template_data.get("body1", "")))}</p>',
    ]
    if template_data.get("body2"):
        parts.append(f'<p>{escape(str(template_data["body2"]))}</p>')
    if template_data.get("buttontext") and template_data.get("buttonurl"):
        parts.append(
            '<div style="margin: 30px 0; text-align: center;">'
            f'<a href="{escape(str(template_data["buttonurl"]), quote=True)}" '
            'style="background-color: #13BEC7; color: white; padding: 12px 30px; '
            'text-decoration: none; border-radius: 5px; display: inline-block;">'
            f'{escape(str(template_data["buttontext"]))}</a></div>'
        )
    if template_data.get("unsubscribeurl"):
        parts.append(
            '<hr style="margin: 30px 0; border: none; border-top: 1px solid #eee;">'
            '<p style="font-size: 12px; color: #666;">'
            f'<a href="{escape(str(template_data["unsubscribeurl"]), quote=True)}" '
            'style="color: #666;">Unsubscribe</a></p>'
        )
    parts.append("</div></body></html>")
    return "".join(parts)


def build_mail_payload(
    recipients: List[Dict[str, Optional[str]]],
    from_email: str,
    from_name: str,
    subject: str,
    template_data: Dict[str, Any],
    template_id: Optional[str] = None,
    reply_to: Optional[str] = None,
    reply_to_name: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build a ``mail/send`` payload with one personalization per recipient.

    Args:
        recipients: ``{"email": ..., "first": ...}`` dicts
        template_data: Data shared by all recipients; ``first`` is merged
            per recipient
        template_id: Provider template ID. Without a usable ID the payload
            carries plain text and HTML content instead.
    """
    payload: Dict[str, Any] = {"from": {"email": from_email, "name": from_name}}

    if has_template_id(template_id):
        personalizations = []
        for recipient in recipients:
            data = dict(template_data)
            if recipient.get("first"):
                data["first"] = recipient["first"]
            personalizations.append({
                "to": [{"email": recipient["email"]}],
                "dynamic_template_data": data,
            })
        payload["personalizations"] = personalizations
        payload["template_id"] = template_id
    else:
        payload["personalizations"] = [
            {"to": [{"email": recipient["email"]}], "subject": subject}
            for recipient in recipients
        ]
        payload["subject"] = subject
        payload["content"] = [
            {"type": "text/plain", "value": str(template_data.get("body1", ""))},
            {"type": "text/html", "value": build_fallback_html(template_data)},
        ]

    if reply_to:
        reply = {"email": reply_to}
        if reply_to_name:
            reply["name"] = reply_to_name
        payload["reply_to"] = reply

    return payload
