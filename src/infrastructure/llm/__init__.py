from .conversation_service import (
    ConversationService,
    SYSTEM_PROMPT,
    build_messages,
    topic_hint,
)

__all__ = ["ConversationService", "SYSTEM_PROMPT", "build_messages", "topic_hint"]
