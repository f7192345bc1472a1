from .api import ApiSettings
from .email import EmailSettings
from .logging import LoggingSettings
from .orchestration import OrchestrationSettings
from .push import PushSettings

__all__ = ["ApiSettings", "EmailSettings", "LoggingSettings", "OrchestrationSettings", "PushSettings"]
