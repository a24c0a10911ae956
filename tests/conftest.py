"""Shared fakes for the profile store, completion client and provider."""

from __future__ import annotations

import copy

import pytest

from src.application import LearningOrchestrator
from src.domain import ExternalServiceError, LearnerProfile, PersistenceError


class FakeStore:
    def __init__(self) -> None:
        self.profiles: dict[str, LearnerProfile] = {}
        self.fail_save = False
        self.saves = 0

    def find_by_phone(self, phone: str) -> LearnerProfile | None:
        profile = self.profiles.get(phone)
        return copy.deepcopy(profile) if profile else None

    def create(self, phone: str, name: str = "") -> LearnerProfile:
        profile = self.profiles.setdefault(phone, LearnerProfile(phone=phone, name=name))
        return copy.deepcopy(profile)

    def get_or_create(self, phone: str, name: str = "") -> LearnerProfile:
        return self.find_by_phone(phone) or self.create(phone, name=name)

    def save(self, profile: LearnerProfile) -> None:
        if self.fail_save:
            raise PersistenceError("disk full")
        self.saves += 1
        self.profiles[profile.phone] = copy.deepcopy(profile)


class FakeConversation:
    def __init__(self, answer: str = "Use INNER JOIN ... ON ...") -> None:
        self.answer = answer
        self.calls: list[tuple[str, str]] = []
        self.error: Exception | None = None

    def converse(self, user_message: str, context_hint: str = "") -> str:
        self.calls.append((user_message, context_hint))
        if self.error:
            raise self.error
        return self.answer


class FakeProvider:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    def send_message(self, recipient: str, text: str) -> str:
        if self.fail:
            raise ExternalServiceError("delivery-api", "HTTP 500")
        self.sent.append((recipient, text))
        return f"SM{len(self.sent)}"


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def conversation() -> FakeConversation:
    return FakeConversation()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def orchestrator(store, conversation, provider) -> LearningOrchestrator:
    return LearningOrchestrator(store, conversation, provider)


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload
