from pydantic import Field
from pydantic_settings import BaseSettings


class OrchestrationSettings(BaseSettings):
    """Orchestrator and data-source timeouts.

    ``executing_timeout`` is how long (seconds) a workflow may sit in
    ``executing`` before retry treats it as abandoned.
    """

    lookup_timeout: float = Field(default=10.0, alias="ORCHESTRATION_LOOKUP_TIMEOUT", gt=0)
    concurrent_channels: bool = Field(default=True, alias="ORCHESTRATION_CONCURRENT_CHANNELS")
    due_batch_limit: int = Field(default=100, alias="ORCHESTRATION_DUE_BATCH_LIMIT", ge=1)
    executing_timeout: float = Field(default=900.0, alias="ORCHESTRATION_EXECUTING_TIMEOUT", gt=0)
    service_name: str = Field(default="gyld-notify", alias="SERVICE_NAME")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }
