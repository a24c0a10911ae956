"""
Learning Orchestrator - One Inbound Message to One Reply
=========================================================

FLOW:
    received -> profile loaded -> start flow | converse flow
             -> profile persisted (start only) -> reply sent

- "start" / "hi" (any case): pick the next topic, record it, send the plan
- anything else: ask the mentor model, using the current topic as context

The collaborators (store, completion client, messaging provider) are
blocking, so each call runs in a worker thread. Network calls get a time
bound; store calls are bounded by the store itself (sqlite busy timeout)
so a write is never abandoned while still in flight. Events for the same
phone number are serialised by a per-phone lock.

handle() never raises: every failure is logged and reported as an Outcome.
"""

import asyncio
import logging
import weakref
from enum import Enum
from typing import Mapping, Sequence, Tuple

from ..domain.errors import (
    ExternalServiceError,
    MalformedRequestError,
    PersistenceError,
)
from ..domain.learner import InboundMessage, LearnerProfile, OutboundReply, is_start_command
from ..domain.plan import compose_greeting, generate_plan
from ..domain.topics import TOPIC_CATALOG, is_fallback, select_topic
from ..infrastructure.config import get_settings
from ..infrastructure.llm import ConversationService, topic_hint
from ..infrastructure.persistence import init_database
from ..infrastructure.whatsapp import create_provider

logger = logging.getLogger(__name__)

FALLBACK_REPLY = (
    "🤖 Sorry, I couldn't come up with an answer right now. "
    "Please try again in a moment, or send \"start\" for today's plan."
)


class Outcome(Enum):
    """How processing of one inbound message ended."""
    REPLIED = "replied"
    FALLBACK_REPLIED = "fallback_replied"
    PERSISTENCE_FAILED = "persistence_failed"
    DELIVERY_FAILED = "delivery_failed"
    NO_REPLY = "no_reply"


def parse_inbound(payload: Mapping) -> InboundMessage:
    """
    Build an InboundMessage from webhook fields (Body, From, ProfileName).

    Raises:
        MalformedRequestError: Body or From missing/blank.
    """
    body = payload.get("Body")
    sender = payload.get("From")

    if not isinstance(body, str) or not body.strip():
        raise MalformedRequestError("Missing 'Body' field")
    if not isinstance(sender, str) or not sender.strip():
        raise MalformedRequestError("Missing 'From' field")

    message = InboundMessage(
        sender=sender.strip(),
        body=body,
        profile_name=str(payload.get("ProfileName") or "").strip(),
    )
    if not message.phone:
        raise MalformedRequestError(f"No phone number in 'From': {sender!r}")
    return message


class LearningOrchestrator:
    """
    Routes an inbound WhatsApp message to a reply.

    USAGE:
        orchestrator = LearningOrchestrator(store, conversation, provider)
        outcome = await orchestrator.handle(parse_inbound(form))
    """

    def __init__(
        self,
        store,
        conversation,
        provider,
        catalog: Sequence[str] = TOPIC_CATALOG,
        llm_timeout: float = 45.0,
        delivery_timeout: float = 30.0,
    ):
        self._store = store
        self._conversation = conversation
        self._provider = provider
        self._catalog = tuple(catalog)
        self._llm_timeout = llm_timeout
        self._delivery_timeout = delivery_timeout
        self._locks = weakref.WeakValueDictionary()

    def _lock_for(self, phone: str) -> asyncio.Lock:
        lock = self._locks.get(phone)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[phone] = lock
        return lock

    def close(self) -> None:
        self._provider.close()

    async def _call(self, timeout: float, func, *args):
        return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=timeout)

    async def _store_call(self, func, *args):
        return await asyncio.to_thread(func, *args)

    async def handle(self, message: InboundMessage) -> Outcome:
        """Process one message end to end. Never raises."""
        phone = message.phone
        lock = self._lock_for(phone)
        async with lock:
            try:
                reply, fallback = await self._build_reply(message)
            except PersistenceError as e:
                logger.error(f"Profile store failure for {phone}, no reply sent: {e}")
                return Outcome.PERSISTENCE_FAILED
            except Exception as e:
                logger.exception(f"Unexpected error handling message from {phone}: {e}")
                return Outcome.NO_REPLY

        if not await self._deliver(OutboundReply(recipient=message.sender, body=reply)):
            return Outcome.DELIVERY_FAILED
        return Outcome.FALLBACK_REPLIED if fallback else Outcome.REPLIED

    async def _build_reply(self, message: InboundMessage) -> Tuple[str, bool]:
        """Return the reply text and whether it is the fallback reply."""
        profile = await self._load_profile(message)

        if is_start_command(message.text):
            return await self._start_flow(profile, message.profile_name), False
        return await self._converse_flow(profile, message.text)

    async def _load_profile(self, message: InboundMessage) -> LearnerProfile:
        return await self._store_call(
            self._store.get_or_create, message.phone, message.profile_name
        )

    async def _start_flow(self, profile: LearnerProfile, profile_name: str = "") -> str:
        topic = select_topic(profile.history, self._catalog)
        plan = generate_plan(topic)

        # The review day is never recorded, so history stays within the catalog
        profile.assign_topic(topic, record=not is_fallback(topic))
        if profile_name and not profile.name:
            profile.name = profile_name
        await self._store_call(self._store.save, profile)

        logger.info(f"Assigned '{topic}' to {profile.phone} ({len(profile.history)} seen)")
        return compose_greeting(plan)

    async def _converse_flow(self, profile: LearnerProfile, text: str) -> Tuple[str, bool]:
        hint = topic_hint(profile.last_topic)
        try:
            answer = await self._call(self._llm_timeout, self._conversation.converse, text, hint)
            return answer, False
        except ExternalServiceError as e:
            logger.error(f"Completion failed for {profile.phone}: {e}")
        except asyncio.TimeoutError:
            logger.error(f"Completion timed out for {profile.phone} after {self._llm_timeout}s")
        return FALLBACK_REPLY, True

    async def _deliver(self, reply: OutboundReply) -> bool:
        recipient = reply.recipient
        try:
            await self._call(self._delivery_timeout, self._provider.send_message, recipient, reply.body)
            return True
        except ExternalServiceError as e:
            logger.error(f"Delivery to {recipient} failed: {e}")
        except asyncio.TimeoutError:
            logger.error(f"Delivery to {recipient} timed out after {self._delivery_timeout}s")
        except Exception as e:
            logger.exception(f"Unexpected delivery error for {recipient}: {e}")
        return False


def build_orchestrator(settings=None, store=None, conversation=None, provider=None) -> LearningOrchestrator:
    """Wire the orchestrator from settings, creating any collaborator not given."""
    settings = settings or get_settings()
    store = store or init_database(settings.database.path, timeout=settings.database.timeout_seconds)
    conversation = conversation or ConversationService(settings)
    provider = provider or create_provider(settings)

    # Headroom over the per-request timeouts so retries can finish
    retries = settings.llm.max_retries + 1
    return LearningOrchestrator(
        store,
        conversation,
        provider,
        llm_timeout=settings.llm.timeout_seconds * retries + 5,
        delivery_timeout=settings.twilio.timeout_seconds * (settings.twilio.max_retries + 1) + 5,
    )

