# Domain Layer
# ============
# Pure learning logic, no I/O:
# - topics: fixed topic catalog and next-topic selection
# - plan: daily plan and greeting text
# - learner: learner profile and message event types
# - errors: failure taxonomy shared by every layer

from .learner import (
    LearnerProfile,
    InboundMessage,
    OutboundReply,
    normalize_phone,
    is_start_command,
)
from .topics import TOPIC_CATALOG, FALLBACK_TOPIC, select_topic
from .plan import GREETING, generate_plan, compose_greeting
from .errors import (
    AbsoluteLearnerError,
    MalformedRequestError,
    PersistenceError,
    ExternalServiceError,
)

__all__ = [
    "LearnerProfile",
    "InboundMessage",
    "OutboundReply",
    "normalize_phone",
    "is_start_command",
    "TOPIC_CATALOG",
    "FALLBACK_TOPIC",
    "select_topic",
    "GREETING",
    "generate_plan",
    "compose_greeting",
    "AbsoluteLearnerError",
    "MalformedRequestError",
    "PersistenceError",
    "ExternalServiceError",
]
