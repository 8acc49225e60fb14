"""Moderation workflow: post creation, pending → approved | rejected, listing, and deletion.

Callers are expected to have passed the policy check for the static action
(create, list, validate) before reaching these functions. Deletion checks the
policy here because the action depends on who authored the post.
"""

import logging
import unicodedata

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.models import Post
from app.schemas.auth import CurrentUser
from app.schemas.posts import (
    BODY_MIN_LEN,
    DEFAULT_REJECTION_NOTE,
    TERMINAL_STATUSES,
    TITLE_MIN_LEN,
    PostStatus,
)
from app.services.errors import (
    AuthorizationError,
    ConflictError,
    InputValidationError,
    NotFoundError,
)
from app.services.policy import delete_action_for, is_allowed

logger = logging.getLogger(__name__)


def normalize_text(value: str | None) -> str:
    """NFC-normalize and trim; lengths are counted on the result."""
    if not value:
        return ""
    return unicodedata.normalize("NFC", value).strip()


def check_post_content(title: str, body: str) -> tuple[str, str]:
    """Return normalized (title, body) or raise title_too_short / body_too_short."""
    title = normalize_text(title)
    body = normalize_text(body)
    if len(title) < TITLE_MIN_LEN:
        raise InputValidationError(
            f"Title must be at least {TITLE_MIN_LEN} characters long",
            code="title_too_short",
        )
    if len(body) < BODY_MIN_LEN:
        raise InputValidationError(
            f"Body must be at least {BODY_MIN_LEN} characters long",
            code="body_too_short",
        )
    return title, body


def create_post(db: Session, author: CurrentUser, title: str, body: str) -> Post:
    """Create a pending post owned by author. Nothing is written if a rule fails."""
    title, body = check_post_content(title, body)
    post = Post(
        author_username=author.username,
        title=title,
        body=body,
        status=PostStatus.PENDING.value,
        rejection_note=None,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("Post created", extra={"post_id": post.id, "author": author.username})
    return post


def get_post(db: Session, post_id: int) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return post


def list_posts(db: Session) -> list[Post]:
    """Every post regardless of status."""
    return db.query(Post).order_by(Post.id).all()


def list_pending(db: Session) -> list[Post]:
    """Posts still waiting for a moderator."""
    return (
        db.query(Post)
        .filter(Post.status == PostStatus.PENDING.value)
        .order_by(Post.id)
        .all()
    )


def moderate_post(
    db: Session,
    post_id: int,
    is_valid: bool,
    note: str | None = None,
    moderator: CurrentUser | None = None,
    allow_remoderation: bool = True,
) -> Post:
    """
    Approve or reject a post.

    Rejection stores the note (default "No comments provided"); approval
    clears it. With allow_remoderation the last decision wins on a post that
    was already decided; otherwise that is an invalid_transition conflict.
    A concurrent update of the same row surfaces as a conflict too.
    """
    post = get_post(db, post_id)
    current = PostStatus(post.status)
    if current in TERMINAL_STATUSES and not allow_remoderation:
        raise ConflictError(
            f"Post has already been {current.value}",
            code="invalid_transition",
        )

    if is_valid:
        post.status = PostStatus.APPROVED.value
        post.rejection_note = None
    else:
        cleaned = normalize_text(note)
        post.status = PostStatus.REJECTED.value
        post.rejection_note = cleaned or DEFAULT_REJECTION_NOTE

    try:
        db.commit()
    except StaleDataError as e:
        db.rollback()
        raise ConflictError("Post was modified concurrently; retry", code="conflict") from e
    db.refresh(post)
    logger.info(
        "Post moderated",
        extra={
            "post_id": post.id,
            "from_status": current.value,
            "to_status": post.status,
            "moderator": moderator.username if moderator else None,
        },
    )
    return post


def delete_post(db: Session, caller: CurrentUser, post_id: int) -> None:
    """Delete a post in any state if caller is its author or may delete any post."""
    post = get_post(db, post_id)
    action = delete_action_for(caller.username, post.author_username)
    if not is_allowed(caller.role, action):
        logger.debug(
            "Delete denied",
            extra={"post_id": post.id, "caller": caller.username, "action": action.value},
        )
        raise AuthorizationError()

    db.delete(post)
    try:
        db.commit()
    except StaleDataError as e:
        db.rollback()
        raise ConflictError("Post was modified concurrently; retry", code="conflict") from e
    logger.info(
        "Post deleted",
        extra={"post_id": post_id, "caller": caller.username, "action": action.value},
    )
