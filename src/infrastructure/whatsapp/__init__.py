from .messaging_provider import (
    MessagingProvider,
    TwilioProvider,
    ConsoleProvider,
    create_provider,
    to_channel_address,
)

__all__ = [
    "MessagingProvider",
    "TwilioProvider",
    "ConsoleProvider",
    "create_provider",
    "to_channel_address",
]
