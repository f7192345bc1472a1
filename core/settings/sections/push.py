from pydantic import Field
from pydantic_settings import BaseSettings


class PushSettings(BaseSettings):
    """
    Push channel settings (Expo-compatible provider).
    Loaded from .env with prefix PUSH_*
    """

    enabled: bool = Field(default=False, alias="PUSH_ENABLED")
    api_url: str = Field(default="https://exp.host/--/api/v2/push/send", alias="PUSH_API_URL")
    access_token: str = Field(default="", alias="PUSH_ACCESS_TOKEN")
    batch_size: int = Field(default=100, alias="PUSH_BATCH_SIZE", ge=1, le=100)
    max_concurrent_batches: int = Field(default=4, alias="PUSH_MAX_CONCURRENT_BATCHES", ge=1)
    request_timeout: float = Field(default=10.0, alias="PUSH_REQUEST_TIMEOUT", gt=0)
    logo_url: str = Field(default="", alias="PUSH_LOGO_URL")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }
