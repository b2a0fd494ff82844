"""
Core data models for the submission platform.

Field names are snake_case in Python and in the document store. The JSON
the API speaks is camelCase, so every multi-word field carries an alias
and outward serialization goes through `by_alias=True`.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from quire.core.utils import generate_id, utc_now


# =============================================================================
# Enums
# =============================================================================


class Decision(str, Enum):
    """Editorial decision on a submission."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Recommendation(str, Enum):
    """A reviewer's recommendation ahead of the decision."""

    NONE = "none"
    ACCEPT = "accept"
    REVISE = "revise"
    REJECT = "reject"


# =============================================================================
# Users and identities
# =============================================================================


class Identity(BaseModel):
    """
    Authenticated snapshot of a user.

    This is what gets embedded as the `user` claim of a session token and
    what every authorization decision is made against. It is frozen: once
    issued it does not follow later edits to the stored user.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    email: str
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    admin: bool = False
    editor: bool = False

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_claim(self) -> dict[str, Any]:
        """The claim dict: {id, email, firstName, lastName, admin, editor}."""
        return self.model_dump(by_alias=True)


class User(BaseModel):
    """User record as held by the credential store."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: generate_id("user"))
    email: str
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    password_hash: str = Field(alias="passwordHash")
    admin: bool = False
    editor: bool = False

    def to_identity(self) -> Identity:
        return Identity(
            id=self.id,
            email=self.email,
            first_name=self.first_name,
            last_name=self.last_name,
            admin=self.admin,
            editor=self.editor,
        )

    def serialize(self) -> dict[str, Any]:
        """Public representation. Never includes the password hash."""
        return self.to_identity().to_claim()


# =============================================================================
# Publications
# =============================================================================


class Publication(BaseModel):
    """A journal or magazine that accepts submissions."""

    id: str = Field(default_factory=lambda: generate_id("pub"))
    title: str

    def serialize(self) -> str:
        return self.title


# =============================================================================
# Submissions
# =============================================================================


class Comment(BaseModel):
    """A reviewer comment attached to a submission."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    author_id: str = Field(alias="authorID")
    date: datetime = Field(default_factory=utc_now)
    text: str


class ReviewerInfo(BaseModel):
    """Editorial state only editors and admins get to see."""

    model_config = ConfigDict(populate_by_name=True)

    decision: Decision = Decision.PENDING
    recommendation: Recommendation = Recommendation.NONE
    last_action: datetime = Field(default_factory=utc_now, alias="lastAction")
    comments: list[Comment] = Field(default_factory=list)


class Submission(BaseModel):
    """A manuscript submitted to a publication."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: generate_id("sub"))
    title: str
    author: str
    author_id: str = Field(alias="authorID")
    submitted: datetime = Field(default_factory=utc_now)
    publication: str
    status: Decision = Decision.PENDING
    file: str = ""
    reviewer_info: ReviewerInfo = Field(default_factory=ReviewerInfo, alias="reviewerInfo")

    def serialize(self, reviewer: bool = False) -> dict[str, Any]:
        """
        Outward representation.

        `file` and `reviewerInfo` are only included for reviewers
        (editors and admins).
        """
        data = self.model_dump(mode="json", by_alias=True)
        if not reviewer:
            data.pop("file")
            data.pop("reviewerInfo")
        return data
