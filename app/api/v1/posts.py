"""Post routes: create, list, moderation queue, moderate, delete."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user, require_action
from app.core.config import get_settings
from app.core.database import get_db
from app.schemas.auth import CurrentUser
from app.schemas.posts import (
    MessageResponse,
    PostCreate,
    PostMessage,
    PostModerate,
    PostOut,
    PostStatus,
)
from app.services import moderation
from app.services.policy import Action

router = APIRouter()


@router.post("", response_model=PostMessage, status_code=status.HTTP_201_CREATED)
def create_post(
    body: PostCreate,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(require_action(Action.CREATE_CONTENT))],
) -> PostMessage:
    """Submit a post; it starts pending until a moderator decides."""
    post = moderation.create_post(db, user, body.title, body.body)
    return PostMessage(
        message="Post created successfully, waiting for validation",
        post=PostOut.model_validate(post),
    )


@router.get("", response_model=list[PostOut])
def list_posts(
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[CurrentUser, Depends(require_action(Action.LIST_CONTENT))],
) -> list[PostOut]:
    """Return every post regardless of status."""
    return [PostOut.model_validate(p) for p in moderation.list_posts(db)]


@router.get("/unvalidated", response_model=list[PostOut])
def list_unvalidated_posts(
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[CurrentUser, Depends(require_action(Action.LIST_PENDING))],
) -> list[PostOut]:
    """Return posts still pending moderation (moderators and admins)."""
    return [PostOut.model_validate(p) for p in moderation.list_pending(db)]


@router.post("/validate/{post_id}", response_model=PostMessage)
def validate_post(
    post_id: int,
    body: PostModerate,
    db: Annotated[Session, Depends(get_db)],
    moderator: Annotated[CurrentUser, Depends(require_action(Action.VALIDATE_CONTENT))],
) -> PostMessage:
    """Approve (isValid=true) or reject (isValid=false, optional note) a post."""
    post = moderation.moderate_post(
        db,
        post_id,
        is_valid=body.is_valid,
        note=body.note,
        moderator=moderator,
        allow_remoderation=get_settings().ALLOW_REMODERATION,
    )
    if post.status == PostStatus.APPROVED.value:
        message = "Post validated successfully"
    else:
        message = f"Post rejected: {post.rejection_note}"
    return PostMessage(message=message, post=PostOut.model_validate(post))


@router.delete("/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: int,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> MessageResponse:
    """Delete a post. Authors may delete their own; admins may delete any."""
    moderation.delete_post(db, user, post_id)
    return MessageResponse(message="Post deleted successfully")
