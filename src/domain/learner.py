"""
Learner Domain Types
====================

Plain dataclasses shared by the orchestrator, the profile store and the
webhook. No persistence or transport concerns live here.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

CHANNEL_PREFIX = "whatsapp:"

START_COMMANDS = frozenset({"start", "hi"})


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_phone(sender: str) -> str:
    """Strip the channel tag: 'whatsapp:+923001234567' -> '+923001234567'."""
    sender = sender.strip()
    if sender.lower().startswith(CHANNEL_PREFIX):
        sender = sender[len(CHANNEL_PREFIX):]
    return sender.strip()


def is_start_command(text: str) -> bool:
    """True when the message asks for today's plan ('start' / 'hi', any case)."""
    return text.strip().lower() in START_COMMANDS


@dataclass
class LearnerProfile:
    """Per-phone learning progress record."""
    phone: str
    name: str = ""
    last_topic: Optional[str] = None
    history: List[str] = field(default_factory=list)
    created_at: str = field(default_factory=_utc_now)

    def assign_topic(self, topic: str, record: bool = True) -> None:
        """Mark topic as today's topic, appending it to history if recorded."""
        self.last_topic = topic
        if record and topic not in self.history:
            self.history.append(topic)

    def to_dict(self) -> dict:
        return {
            "phone": self.phone,
            "name": self.name,
            "last_topic": self.last_topic,
            "history": list(self.history),
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class InboundMessage:
    """Message received on the webhook."""
    sender: str
    body: str
    profile_name: str = ""

    @property
    def phone(self) -> str:
        return normalize_phone(self.sender)

    @property
    def text(self) -> str:
        return self.body.strip()


@dataclass(frozen=True)
class OutboundReply:
    """Reply handed to the messaging provider."""
    recipient: str
    body: str
