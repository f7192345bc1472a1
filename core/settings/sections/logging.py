from pydantic import Field
from pydantic_settings import BaseSettings


class LoggingSettings(BaseSettings):
    """Log level and renderer."""

    level: str = Field(default="INFO", alias="LOG_LEVEL")
    json_output: bool = Field(default=False, alias="LOG_JSON")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }
