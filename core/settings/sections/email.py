from typing import Dict

from pydantic import Field
from pydantic_settings import BaseSettings


class EmailSettings(BaseSettings):
    """
    Email channel settings (SendGrid-compatible provider).

    ``template_ids`` maps a template name (e.g. ``basic_with_button``) to the
    provider template ID; names with no ID are sent as plain HTML content.
    ``sender_addresses`` maps an email type to its From address.
    Both are JSON objects in the environment.
    """

    enabled: bool = Field(default=False, alias="EMAIL_ENABLED")
    api_url: str = Field(default="https://api.sendgrid.com/v3/mail/send", alias="EMAIL_API_URL")
    api_key: str = Field(default="", alias="SENDGRID_API_KEY")
    batch_size: int = Field(default=1000, alias="EMAIL_BATCH_SIZE", ge=1, le=1000)
    request_timeout: float = Field(default=15.0, alias="EMAIL_REQUEST_TIMEOUT", gt=0)

    default_template_name: str = Field(default="basic_with_button", alias="EMAIL_DEFAULT_TEMPLATE")
    default_email_type: str = Field(default="notification", alias="EMAIL_DEFAULT_TYPE")
    default_sender_name: str = Field(default="Gyld Notifications", alias="EMAIL_DEFAULT_SENDER_NAME")
    default_sender_address: str = Field(default="noreply@gyld.org", alias="EMAIL_DEFAULT_SENDER_ADDRESS")
    default_reply_to: str = Field(default="noreply@gyld.org", alias="EMAIL_DEFAULT_REPLY_TO")
    default_unsubscribe_url: str = Field(
        default="https://app.gyld.org/unsubscribe", alias="EMAIL_DEFAULT_UNSUBSCRIBE_URL"
    )

    template_ids: Dict[str, str] = Field(default_factory=dict, alias="EMAIL_TEMPLATE_IDS")
    sender_addresses: Dict[str, str] = Field(default_factory=dict, alias="EMAIL_SENDER_ADDRESSES")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    def sender_address_for(self, email_type: str) -> str:
        return self.sender_addresses.get(email_type) or self.default_sender_address
