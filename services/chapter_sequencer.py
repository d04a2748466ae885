"""
Ordered chapters within a story.

Invariants kept here:
  - (story_id, order) is unique. The schema enforces it; a violation raised by
    the database under concurrent writes comes back as ValidationError.
  - order is a positive integer; gaps are allowed.
  - status is "draft" or "published" and only changes via publish/unpublish.
  - stories.chapters_count moves in the same commit as the insert or delete.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models
from repositories import chapter_repository
from utils.exceptions import ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

TITLE_MAX_LENGTH = 200
_UNSET = object()


def next_order_value(db: Session, story: models.Story) -> int:
    """Suggested order for a new chapter: one past the highest, or 1."""
    highest = chapter_repository.get_max_order(db, story.id)
    return (highest or 0) + 1


def list_chapters(db: Session, story: models.Story, include_drafts: bool = True) -> List[models.Chapter]:
    return chapter_repository.get_chapters(db, story.id, published_only=not include_drafts)


def next_chapter(db: Session, chapter: models.Chapter, include_drafts: bool = True) -> Optional[models.Chapter]:
    return chapter_repository.get_neighbour(db, chapter, after=True, published_only=not include_drafts)


def previous_chapter(db: Session, chapter: models.Chapter, include_drafts: bool = True) -> Optional[models.Chapter]:
    return chapter_repository.get_neighbour(db, chapter, after=False, published_only=not include_drafts)


def _add_error(errors: Dict[str, List[str]], field: str, message: str) -> None:
    errors.setdefault(field, []).append(message)


def _check_title(title: Any, errors: Dict[str, List[str]]) -> None:
    cleaned = "" if title is None else str(title).strip()
    if not cleaned:
        _add_error(errors, "title", "can't be blank")
    elif len(cleaned) > TITLE_MAX_LENGTH:
        _add_error(errors, "title", f"is too long (maximum is {TITLE_MAX_LENGTH} characters)")


def _check_order(db: Session, story_id: int, order: Any, errors: Dict[str, List[str]],
                 exclude_id: Optional[int] = None) -> None:
    if order is None:
        _add_error(errors, "order", "can't be blank")
    elif isinstance(order, bool) or not isinstance(order, int):
        _add_error(errors, "order", "must be an integer")
    elif order <= 0:
        _add_error(errors, "order", "must be greater than 0")
    elif chapter_repository.order_taken(db, story_id, order, exclude_id=exclude_id):
        _add_error(errors, "order", "has already been taken")


def _check_status(status: Any, errors: Dict[str, List[str]]) -> None:
    if status not in models.STATUSES:
        _add_error(errors, "status", f"{status} is not a valid status")


def _adjust_count(db: Session, story_id: int, delta: int) -> None:
    db.query(models.Story).filter(models.Story.id == story_id).update(
        {models.Story.chapters_count: models.Story.chapters_count + delta},
        synchronize_session=False,
    )


def _order_conflict(db: Session, story_id: int, order: Any) -> ValidationError:
    # Callers pass plain values; ORM attributes cannot be read until after the rollback
    db.rollback()
    logger.warning(f"Order {order} already taken in story {story_id}")
    return ValidationError({"order": ["has already been taken"]})


def create_chapter(db: Session, story: models.Story, title: str, content: Optional[str] = "",
                   order: Optional[int] = None, status: str = "draft") -> models.Chapter:
    """
    Insert a chapter and bump the story's chapter count in one transaction.

    A missing order defaults to next_order_value(). Raises ValidationError
    with field-level detail; nothing is written when it does.
    """
    if order is None:
        order = next_order_value(db, story)

    errors: Dict[str, List[str]] = {}
    _check_title(title, errors)
    _check_order(db, story.id, order, errors)
    _check_status(status, errors)
    if errors:
        raise ValidationError(errors)

    story_id = story.id
    chapter = models.Chapter(
        story_id=story_id,
        title=title.strip(),
        content=content or "",
        order=order,
        status=status,
    )
    db.add(chapter)
    try:
        db.flush()
        _adjust_count(db, story_id, +1)
        db.commit()
    except IntegrityError:
        raise _order_conflict(db, story_id, order)

    db.refresh(chapter)
    logger.info(f"Created chapter {chapter.id} at order {chapter.order} in story {story_id}")
    return chapter


def update_chapter(db: Session, chapter: models.Chapter, title: Any = _UNSET,
                   content: Any = _UNSET, order: Any = _UNSET) -> models.Chapter:
    """Edit title, content or order. Status is left alone."""
    story_id = chapter.story_id
    errors: Dict[str, List[str]] = {}
    if title is not _UNSET:
        _check_title(title, errors)
    if order is not _UNSET:
        _check_order(db, story_id, order, errors, exclude_id=chapter.id)
    if errors:
        raise ValidationError(errors)

    if title is not _UNSET:
        chapter.title = title.strip()
    if content is not _UNSET:
        chapter.content = content or ""
    if order is not _UNSET:
        chapter.order = order
    try:
        db.commit()
    except IntegrityError:
        raise _order_conflict(db, story_id, order)
    db.refresh(chapter)
    return chapter


def destroy_chapter(db: Session, chapter: models.Chapter) -> None:
    chapter_id, story_id = chapter.id, chapter.story_id
    db.delete(chapter)
    db.flush()
    _adjust_count(db, story_id, -1)
    db.commit()
    logger.info(f"Deleted chapter {chapter_id} from story {story_id}")


def _set_status(db: Session, chapter: models.Chapter, status: str) -> models.Chapter:
    if chapter.status != status:
        chapter.status = status
        db.commit()
        db.refresh(chapter)
    return chapter


def publish(db: Session, chapter: models.Chapter) -> models.Chapter:
    return _set_status(db, chapter, "published")


def unpublish(db: Session, chapter: models.Chapter) -> models.Chapter:
    return _set_status(db, chapter, "draft")
