"""
Conversation Service - LLM Mentor Answers
==========================================

ARCHITECTURAL DECISION:
- Uses Groq's OpenAI-compatible chat completions endpoint
- Stateless: every call sends system prompt + topic hint + user message
- Failures raise ExternalServiceError; the orchestrator decides the fallback

EXTENSIBILITY:
- To use different model: set GROQ_MODEL
- To use OpenRouter/OpenAI: change GROQ_API_URL and key
"""

import logging
from typing import Dict, List, Optional

import requests

from ..config import get_settings
from ..http import post_with_retry
from ...domain.errors import ExternalServiceError

logger = logging.getLogger(__name__)

SERVICE_NAME = "completion-api"

SYSTEM_PROMPT = """
You are AbsoluteLearner AI – a daily mentor helping users learn one skill deeply each day.
You must suggest a topic, break it into 3 time slots, and help the user track progress.
Be supportive, structured, and focused on helping them master new domains every 24 hrs.
"""


def topic_hint(last_topic: Optional[str]) -> str:
    """Context line naming the learner's active topic ('' when none)."""
    if not last_topic:
        return ""
    return f"User is currently learning {last_topic}"


def build_messages(user_message: str, context_hint: str = "") -> List[Dict[str, str]]:
    """
    Assemble the ordered chat message list.

    Order: system prompt, optional context hint, raw user message.
    """
    messages = [{"role": "system", "content": SYSTEM_PROMPT}]
    if context_hint:
        messages.append({"role": "user", "content": context_hint})
    messages.append({"role": "user", "content": user_message})
    return messages


class ConversationService:
    """
    Mentor conversation client.

    USAGE:
        service = ConversationService()
        answer = service.converse("How do I write a JOIN?", "User is currently learning SQL in 24 hrs")
    """

    def __init__(self, settings=None):
        """Initialize conversation service with settings."""
        llm = (settings or get_settings()).llm
        self._api_key = llm.api_key
        self._api_url = llm.api_url
        self._model = llm.model
        self._timeout = llm.timeout_seconds
        self._max_retries = llm.max_retries

        if not self._api_key:
            logger.warning("No GROQ_API_KEY set. Conversation requests will fail.")

    def converse(self, user_message: str, context_hint: str = "") -> str:
        """
        Ask the mentor model for a reply.

        Args:
            user_message: Raw text the learner sent.
            context_hint: Optional line describing the learner's current topic.

        Returns:
            Generated reply text.

        Raises:
            ExternalServiceError: network failure, non-2xx status or unusable body.
        """
        if not self._api_key:
            raise ExternalServiceError(SERVICE_NAME, "GROQ_API_KEY is not configured")

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        payload = {
            "model": self._model,
            "messages": build_messages(user_message, context_hint),
        }

        try:
            response = post_with_retry(
                self._api_url,
                max_retries=self._max_retries,
                headers=headers,
                json=payload,
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
            data = response.json()
        except ValueError as e:
            raise ExternalServiceError(SERVICE_NAME, "response is not JSON") from e

        content = self._extract_response_content(data)
        if not content:
            raise ExternalServiceError(SERVICE_NAME, "response has no message content")

        logger.debug(f"Completion received ({len(content)} chars)")
        return content

    def _extract_response_content(self, data: dict) -> str:
        """Extract text content from API response."""
        try:
            choices = data.get("choices", [])
            if choices:
                message = choices[0].get("message", {})
                return (message.get("content") or "").strip()
        except (KeyError, IndexError, TypeError, AttributeError):
            pass
        return ""
