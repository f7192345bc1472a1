from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class ApiSettings(BaseSettings):
    """HTTP API settings. An empty auth token disables bearer auth."""

    auth_token: str = Field(default="", alias="API_AUTH_TOKEN")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], alias="API_CORS_ORIGINS")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }
