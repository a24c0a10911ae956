"""Scenario tests for the learning orchestrator."""

from __future__ import annotations

import asyncio
import logging
import time

import pytest

from src.application import FALLBACK_REPLY, LearningOrchestrator, Outcome, parse_inbound
from src.domain import (
    ExternalServiceError,
    LearnerProfile,
    MalformedRequestError,
    TOPIC_CATALOG,
    generate_plan,
)

SENDER = "whatsapp:+923001234567"
PHONE = "+923001234567"


def _handle(orchestrator: LearningOrchestrator, body: str, sender: str = SENDER) -> Outcome:
    return asyncio.run(orchestrator.handle(parse_inbound({"Body": body, "From": sender})))


def test_new_learner_says_hi(orchestrator, store, provider) -> None:
    outcome = _handle(orchestrator, "hi")

    assert outcome is Outcome.REPLIED
    recipient, reply = provider.sent[0]
    assert recipient == SENDER
    assert reply.startswith("👋 Welcome back")
    assert generate_plan("Git & GitHub") in reply
    assert store.profiles[PHONE].history == ["Git & GitHub"]
    assert store.profiles[PHONE].last_topic == "Git & GitHub"


def test_existing_learner_gets_next_topic(orchestrator, store, provider) -> None:
    store.profiles[PHONE] = LearnerProfile(phone=PHONE, last_topic="Git & GitHub", history=["Git & GitHub"])

    _handle(orchestrator, "start")

    assert store.profiles[PHONE].history == ["Git & GitHub", "APIs with Postman"]
    assert "APIs with Postman" in provider.sent[0][1]


def test_question_is_delegated_with_topic_hint(orchestrator, store, conversation, provider) -> None:
    store.profiles[PHONE] = LearnerProfile(phone=PHONE, last_topic="SQL in 24 hrs", history=["SQL in 24 hrs"])

    outcome = _handle(orchestrator, "How do I write a JOIN?")

    assert outcome is Outcome.REPLIED
    message, hint = conversation.calls[0]
    assert message == "How do I write a JOIN?"
    assert "SQL in 24 hrs" in hint
    assert provider.sent == [(SENDER, conversation.answer)]
    assert store.profiles[PHONE].history == ["SQL in 24 hrs"]
    assert store.saves == 0


def test_question_before_any_topic_has_no_hint(orchestrator, conversation) -> None:
    _handle(orchestrator, "what is this bot?")
    assert conversation.calls == [("what is this bot?", "")]


def test_exhausted_catalog_stays_on_review_day(orchestrator, store, provider) -> None:
    store.profiles[PHONE] = LearnerProfile(
        phone=PHONE, last_topic=TOPIC_CATALOG[-1], history=list(TOPIC_CATALOG)
    )

    _handle(orchestrator, "Start")
    _handle(orchestrator, "start")

    profile = store.profiles[PHONE]
    assert len(profile.history) == len(TOPIC_CATALOG) == 10
    assert profile.last_topic == "Review & Reflect Day"
    assert all("Review & Reflect Day" in reply for _, reply in provider.sent)


def test_save_failure_sends_nothing(orchestrator, store, provider, caplog) -> None:
    store.fail_save = True

    with caplog.at_level(logging.ERROR):
        outcome = _handle(orchestrator, "start")

    assert outcome is Outcome.PERSISTENCE_FAILED
    assert provider.sent == []
    assert "disk full" in caplog.text


def test_completion_failure_sends_fallback(orchestrator, conversation, provider) -> None:
    conversation.error = ExternalServiceError("completion-api", "HTTP 503", status_code=503)

    outcome = _handle(orchestrator, "explain git rebase")

    assert outcome is Outcome.FALLBACK_REPLIED
    assert provider.sent == [(SENDER, FALLBACK_REPLY)]


def test_delivery_failure_is_reported_not_raised(orchestrator, store, provider) -> None:
    provider.fail = True

    outcome = _handle(orchestrator, "hi")

    assert outcome is Outcome.DELIVERY_FAILED
    # state was persisted before delivery was attempted
    assert store.profiles[PHONE].history == ["Git & GitHub"]


def test_unexpected_error_is_contained(orchestrator, store) -> None:
    def boom(phone):
        raise RuntimeError("bug")

    store.find_by_phone = boom
    assert _handle(orchestrator, "hi") is Outcome.NO_REPLY


def test_completion_timeout_sends_fallback(store, provider) -> None:
    class SlowConversation:
        def converse(self, user_message, context_hint=""):
            time.sleep(0.5)
            return "late"

    orchestrator = LearningOrchestrator(store, SlowConversation(), provider, llm_timeout=0.05)
    assert _handle(orchestrator, "anything") is Outcome.FALLBACK_REPLIED
    assert provider.sent[0][1] == FALLBACK_REPLY


def test_slow_save_is_awaited_before_replying(store, conversation, provider) -> None:
    fast_save = store.save

    def slow_save(profile):
        time.sleep(0.3)
        fast_save(profile)

    store.save = slow_save
    orchestrator = LearningOrchestrator(store, conversation, provider, llm_timeout=0.05)

    assert _handle(orchestrator, "start") is Outcome.REPLIED
    assert store.profiles[PHONE].history == ["Git & GitHub"]
    assert "Git & GitHub" in provider.sent[0][1]


def test_profile_name_recorded_on_first_contact(orchestrator, store) -> None:
    message = parse_inbound({"Body": "hi", "From": SENDER, "ProfileName": "Ayesha"})
    asyncio.run(orchestrator.handle(message))
    assert store.profiles[PHONE].name == "Ayesha"


def test_profile_name_filled_in_on_start_when_missing(orchestrator, store) -> None:
    store.profiles[PHONE] = LearnerProfile(phone=PHONE, name="")

    message = parse_inbound({"Body": "start", "From": SENDER, "ProfileName": "Ayesha"})
    asyncio.run(orchestrator.handle(message))

    assert store.profiles[PHONE].name == "Ayesha"
    assert store.profiles[PHONE].history == ["Git & GitHub"]


def test_profile_name_is_not_overwritten(orchestrator, store) -> None:
    store.profiles[PHONE] = LearnerProfile(phone=PHONE, name="Sam")

    message = parse_inbound({"Body": "start", "From": SENDER, "ProfileName": "Ayesha"})
    asyncio.run(orchestrator.handle(message))

    assert store.profiles[PHONE].name == "Sam"


def test_question_does_not_touch_profile_name(orchestrator, store) -> None:
    store.profiles[PHONE] = LearnerProfile(phone=PHONE, name="")

    message = parse_inbound({"Body": "what is REST?", "From": SENDER, "ProfileName": "Ayesha"})
    asyncio.run(orchestrator.handle(message))

    assert store.profiles[PHONE].name == ""
    assert store.saves == 0


def test_concurrent_starts_get_distinct_topics(orchestrator, store) -> None:
    async def burst():
        message = parse_inbound({"Body": "start", "From": SENDER})
        return await asyncio.gather(*(orchestrator.handle(message) for _ in range(3)))

    outcomes = asyncio.run(burst())

    assert outcomes == [Outcome.REPLIED] * 3
    assert store.profiles[PHONE].history == list(TOPIC_CATALOG[:3])


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"From": SENDER},
        {"Body": "hi"},
        {"Body": "   ", "From": SENDER},
        {"Body": "hi", "From": "whatsapp:"},
    ],
)
def test_parse_inbound_rejects_missing_fields(payload) -> None:
    with pytest.raises(MalformedRequestError):
        parse_inbound(payload)


def test_parse_inbound_keeps_raw_sender() -> None:
    message = parse_inbound({"Body": " Hi ", "From": SENDER})
    assert message.sender == SENDER
    assert message.phone == PHONE
    assert message.text == "Hi"
