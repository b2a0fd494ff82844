"""
Core module - data models and shared helpers.
"""

from quire.core.models import (
    Comment,
    Decision,
    Identity,
    Publication,
    Recommendation,
    ReviewerInfo,
    Submission,
    User,
)
from quire.core.utils import generate_id, utc_now

__all__ = [
    "Comment",
    "Decision",
    "Identity",
    "Publication",
    "Recommendation",
    "ReviewerInfo",
    "Submission",
    "User",
    "generate_id",
    "utc_now",
]
