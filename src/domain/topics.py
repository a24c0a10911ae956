"""
Topic Scheduler - Daily Topic Rotation
======================================

Walks a fixed catalog in order and hands out the first topic the learner
has not seen yet. Once the catalog is exhausted every learner lands on the
review day.
"""

from typing import Sequence, Tuple

# Order matters: learners progress through the catalog top to bottom.
TOPIC_CATALOG: Tuple[str, ...] = (
    "Git & GitHub",
    "APIs with Postman",
    "Linux Basics",
    "SQL in 24 hrs",
    "Python Crash Course",
    "Financial Statements",
    "Prompt Engineering",
    "Figma UI Design",
    "Startup Idea Validation",
    "Intro to Blockchain",
)

FALLBACK_TOPIC = "Review & Reflect Day"


def select_topic(history: Sequence[str], catalog: Sequence[str] = TOPIC_CATALOG) -> str:
    """
    Return the first catalog topic not present in history.

    Args:
        history: Topics already presented to the learner (may be empty).
        catalog: Ordered topic catalog.

    Returns:
        The next unseen topic, or FALLBACK_TOPIC when all are seen.
    """
    seen = set(history)
    for topic in catalog:
        if topic not in seen:
            return topic
    return FALLBACK_TOPIC


def is_fallback(topic: str) -> bool:
    return topic == FALLBACK_TOPIC
