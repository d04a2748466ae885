"""
Shared FastAPI dependencies.

get_session_context() reads the cookie session into a SessionContext.
Handlers that change it call ctx.write_to(request.session) before returning.
require_login() resolves the signed-in account or raises Unauthenticated.
get_owned_story() is the story lookup for mutations: sign-in first, then
existence and read visibility, then ownership.
"""

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

import models
from db import get_db
from repositories import story_repository
from services import authorization, otp_authenticator
from services.session_context import SessionContext
from utils.exceptions import NotFound, Unauthenticated


def get_session_context(request: Request) -> SessionContext:
    return SessionContext.from_session(request.session)


def get_current_user(
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
) -> Optional[models.User]:
    """The signed-in account, or None for anonymous readers."""
    return otp_authenticator.current_account(db, ctx)


def require_login(current_user: Optional[models.User] = Depends(get_current_user)) -> models.User:
    if not current_user:
        raise Unauthenticated()
    return current_user


def get_story_or_404(story_id: int, db: Session = Depends(get_db)) -> models.Story:
    story = story_repository.get_story(db=db, story_id=story_id)
    if not story:
        raise NotFound(f"Story with id {story_id} not found.")
    return story


def current_user_id(current_user: Optional[models.User]) -> Optional[int]:
    return current_user.id if current_user else None


def get_owned_story(
    story_id: int,
    current_user: models.User = Depends(require_login),
    db: Session = Depends(get_db),
) -> models.Story:
    # A story the caller cannot read is reported missing, never forbidden
    story = get_story_or_404(story_id, db)
    authorization.ensure_story_visible(current_user.id, story)
    authorization.authorize_story_owner(current_user.id, story)
    return story
