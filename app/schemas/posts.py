"""Pydantic schemas for posts: creation, moderation, and responses."""

from datetime import datetime
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# Minimum lengths in codepoints, measured after normalization.
TITLE_MIN_LEN = 5
BODY_MIN_LEN = 20

DEFAULT_REJECTION_NOTE = "No comments provided"


class PostStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


TERMINAL_STATUSES: frozenset[PostStatus] = frozenset({PostStatus.APPROVED, PostStatus.REJECTED})


class PostCreate(BaseModel):
    """Body for POST /posts. Length rules are enforced by the workflow, not here."""

    title: str = Field(default="", max_length=255, description="Post title (at least 5 characters)")
    body: str = Field(
        default="",
        validation_alias=AliasChoices("body", "content"),
        description="Post body (at least 20 characters); 'content' is accepted as an alias",
    )


class PostModerate(BaseModel):
    """Body for POST /posts/validate/{id}."""

    is_valid: bool = Field(
        ...,
        validation_alias=AliasChoices("isValid", "is_valid"),
        description="True approves the post, False rejects it",
    )
    note: str | None = Field(
        default=None,
        max_length=2000,
        validation_alias=AliasChoices("note", "comments"),
        description="Rejection note; ignored on approval",
    )


class PostOut(BaseModel):
    """Post as returned to API callers."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    author_username: str
    title: str
    body: str
    status: PostStatus
    rejection_note: str | None = None
    created_at: datetime | None = None


class PostMessage(BaseModel):
    message: str
    post: PostOut


class MessageResponse(BaseModel):
    message: str
