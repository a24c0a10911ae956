"""
Error Taxonomy
==============

Every failure the orchestrator can observe maps onto one of these.
Infrastructure code wraps library exceptions (sqlite3, requests) into
them so the application layer never depends on a specific backend.
"""


class AbsoluteLearnerError(Exception):
    """Base exception for the learning bot."""
    pass


class MalformedRequestError(AbsoluteLearnerError):
    """Inbound message is missing its sender or body."""
    pass


class PersistenceError(AbsoluteLearnerError):
    """Profile store unavailable or a write failed."""
    pass


class ExternalServiceError(AbsoluteLearnerError):
    """Completion API or delivery API call failed."""

    def __init__(self, service: str, message: str, status_code: int = 0):
        super().__init__(f"{service}: {message}")
        self.service = service
        self.status_code = status_code
