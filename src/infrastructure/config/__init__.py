from .settings import (
    Settings,
    DatabaseSettings,
    LLMSettings,
    TwilioSettings,
    ServerSettings,
    get_settings,
)

__all__ = [
    "Settings",
    "DatabaseSettings",
    "LLMSettings",
    "TwilioSettings",
    "ServerSettings",
    "get_settings",
]
