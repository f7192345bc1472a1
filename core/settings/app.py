"""Application settings: one pydantic-settings section per concern."""
from functools import lru_cache

from core.settings.sections.api import ApiSettings
from core.settings.sections.email import EmailSettings
from core.settings.sections.logging import LoggingSettings
from core.settings.sections.orchestration import OrchestrationSettings
from core.settings.sections.push import PushSettings


class AppSettings:
    """
    All settings sections, read from the environment (and ``.env``)
    when the aggregate is built rather than at import time.
    """

    def __init__(self):
        self.push = PushSettings()
        self.email = EmailSettings()
        self.orchestration = OrchestrationSettings()
        self.api = ApiSettings()
        self.logging = LoggingSettings()


@lru_cache()
def get_app_settings() -> AppSettings:
    """Process-wide settings. Tests call ``cache_clear()`` after changing the environment."""
    return AppSettings()
