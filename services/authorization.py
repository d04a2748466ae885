"""Ownership checks applied before every story and chapter mutation."""

from typing import Optional

import models
from config import settings
from utils.exceptions import Forbidden, NotFound, Unauthenticated


def authorize_owner(acting_account_id: Optional[int], owner_id: Optional[int],
                    location: Optional[str] = None) -> None:
    """
    Admit only when an identity is present and equals the owner.

    Raises Unauthenticated when nobody is signed in, Forbidden when the
    signed-in account is not the owner.
    """
    if acting_account_id is None:
        raise Unauthenticated()
    if owner_id is None or acting_account_id != owner_id:
        raise Forbidden(location=location)


def authorize_story_owner(acting_account_id: Optional[int], story: models.Story) -> None:
    authorize_owner(acting_account_id, story.user_id, location=f"/stories/{story.id}")


def can_view_drafts(acting_account_id: Optional[int], story: models.Story) -> bool:
    """Whether draft content of this story is visible to the caller."""
    if settings.draft_visibility == "public":
        return True
    return acting_account_id is not None and acting_account_id == story.user_id


def ensure_story_visible(acting_account_id: Optional[int], story: models.Story) -> None:
    if story.status == "draft" and not can_view_drafts(acting_account_id, story):
        raise NotFound(f"Story with id {story.id} not found.")


def ensure_chapter_visible(acting_account_id: Optional[int], chapter: models.Chapter) -> None:
    ensure_story_visible(acting_account_id, chapter.story)
    if chapter.status == "draft" and not can_view_drafts(acting_account_id, chapter.story):
        raise NotFound(f"Chapter with id {chapter.id} not found.")
