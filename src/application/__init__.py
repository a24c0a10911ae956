# Application Layer
# =================
# Use-case orchestration: one inbound message in, one reply out.
# No business rules live here; topic and plan logic come from the domain.

from .orchestrator import (
    LearningOrchestrator,
    Outcome,
    FALLBACK_REPLY,
    parse_inbound,
    build_orchestrator,
)

__all__ = [
    "LearningOrchestrator",
    "Outcome",
    "FALLBACK_REPLY",
    "parse_inbound",
    "build_orchestrator",
]
