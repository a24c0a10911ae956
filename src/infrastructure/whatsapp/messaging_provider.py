"""
Messaging Provider - Abstraction Layer for WhatsApp Messaging
==============================================================

Provides a unified interface for sending WhatsApp replies.
Currently supports the Twilio WhatsApp API, plus a console provider for
local development without credentials.

USAGE:
    provider = TwilioProvider(account_sid="AC...", auth_token="...",
                              from_number="whatsapp:+14155238886")
    provider.connect()
    provider.send_message("whatsapp:+923001234567", "Hello!")
"""

import logging
from abc import ABC, abstractmethod
from collections import deque

import requests

from ..config import get_settings
from ..http import post_with_retry
from ...domain.errors import ExternalServiceError
from ...domain.learner import CHANNEL_PREFIX

logger = logging.getLogger(__name__)

SERVICE_NAME = "delivery-api"


def to_channel_address(recipient: str) -> str:
    """Twilio expects 'whatsapp:+<number>' on both ends."""
    recipient = recipient.strip()
    if recipient.lower().startswith(CHANNEL_PREFIX):
        return recipient
    return f"{CHANNEL_PREFIX}{recipient}"


class MessagingProvider(ABC):
    """
    Abstract base class for WhatsApp messaging providers.
    Implement this interface to add new messaging backends.
    """

    @abstractmethod
    def connect(self, **kwargs) -> bool:
        """Connect to the messaging service. Returns True if successful."""
        ...

    @abstractmethod
    def is_connected(self) -> bool:
        """Check if provider is currently connected and ready."""
        ...

    @abstractmethod
    def send_message(self, recipient: str, text: str) -> str:
        """
        Send a text message. Returns the provider's message id.
        Raises ExternalServiceError when the provider rejects it.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Clean up resources."""
        ...


class TwilioProvider(MessagingProvider):
    """
    Twilio WhatsApp API provider.

    Configuration needed:
        - account_sid / auth_token: Twilio credentials
        - from_number: registered WhatsApp sender, e.g. "whatsapp:+14155238886"
    """

    DEFAULT_API_URL = "https://api.twilio.com/2010-04-01"

    def __init__(
        self,
        account_sid: str = "",
        auth_token: str = "",
        from_number: str = "",
        api_url: str = "",
        timeout: int = 15,
        max_retries: int = 2,
    ):
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._from_number = from_number
        self._api_url = api_url or self.DEFAULT_API_URL
        self._timeout = timeout
        self._max_retries = max_retries
        self._connected = False

    @classmethod
    def from_settings(cls, settings=None) -> "TwilioProvider":
        twilio = (settings or get_settings()).twilio
        return cls(
            account_sid=twilio.account_sid,
            auth_token=twilio.auth_token,
            from_number=twilio.whatsapp_number,
            api_url=twilio.api_base_url,
            timeout=twilio.timeout_seconds,
            max_retries=twilio.max_retries,
        )

    @property
    def messages_url(self) -> str:
        return f"{self._api_url}/Accounts/{self._account_sid}/Messages.json"

    def connect(self, **kwargs) -> bool:
        """Check that credentials are present."""
        if not self._account_sid or not self._auth_token or not self._from_number:
            logger.error("TwilioProvider: account_sid, auth_token and from_number are required")
            return False
        self._connected = True
        return True

    def is_connected(self) -> bool:
        return self._connected

    def send_message(self, recipient: str, text: str) -> str:
        """Send message via Twilio Messages API."""
        if not self._connected:
            raise ExternalServiceError(SERVICE_NAME, "Twilio provider not connected")

        data = {
            "From": to_channel_address(self._from_number),
            "To": to_channel_address(recipient),
            "Body": text,
        }

        try:
            response = post_with_retry(
                self.messages_url,
                max_retries=self._max_retries,
                data=data,
                auth=(self._account_sid, self._auth_token),
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise ExternalServiceError(SERVICE_NAME, f"request failed: {e}") from e

        if not response.ok:
            raise ExternalServiceError(
                SERVICE_NAME,
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            sid = response.json().get("sid", "")
        except (ValueError, AttributeError):
            sid = ""

        logger.info(f"Reply accepted by Twilio for {recipient} (sid={sid or 'unknown'})")
        return sid

    def close(self) -> None:
        self._connected = False
        logger.info("TwilioProvider: closed")


class ConsoleProvider(MessagingProvider):
    """
    Logs replies instead of sending them.
    Used when Twilio credentials are missing (local development).
    """

    def __init__(self, keep: int = 100):
        # Most recent replies only; older ones are in the log
        self.sent = deque(maxlen=keep)
        self._count = 0

    def connect(self, **kwargs) -> bool:
        logger.warning("ConsoleProvider: replies will be logged, not delivered")
        return True

    def is_connected(self) -> bool:
        return True

    def send_message(self, recipient: str, text: str) -> str:
        self._count += 1
        self.sent.append((recipient, text))
        logger.info(f"[console] to {recipient}: {text[:200]}")
        return f"console-{self._count}"

    def close(self) -> None:
        pass


def create_provider(settings=None) -> MessagingProvider:
    """Pick Twilio when configured, console otherwise, and connect it."""
    settings = settings or get_settings()
    if settings.twilio.is_configured:
        provider: MessagingProvider = TwilioProvider.from_settings(settings)
    else:
        provider = ConsoleProvider()
    provider.connect()
    return provider
