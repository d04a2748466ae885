from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

import models
from utils import attachments
from utils.exceptions import ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

TITLE_MAX_LENGTH = 200
INDEX_LIMIT = 20


def _validate(fields: Dict[str, Any]) -> None:
    """Check only the fields present in `fields`."""
    errors: Dict[str, List[str]] = {}
    if "title" in fields:
        title = (fields["title"] or "").strip()
        if not title:
            errors.setdefault("title", []).append("can't be blank")
        elif len(title) > TITLE_MAX_LENGTH:
            errors.setdefault("title", []).append(
                f"is too long (maximum is {TITLE_MAX_LENGTH} characters)")
    if "category" in fields and not (fields["category"] or "").strip():
        errors.setdefault("category", []).append("can't be blank")
    if "language" in fields and fields["language"] not in models.LANGUAGES:
        errors.setdefault("language", []).append("is not included in the list")
    if "status" in fields and fields["status"] not in models.STATUSES:
        errors.setdefault("status", []).append("is not included in the list")
    if errors:
        raise ValidationError(errors)


def _clean(fields: Dict[str, Any]) -> Dict[str, Any]:
    cleaned = dict(fields)
    for key in ("title", "category"):
        if key in cleaned:
            cleaned[key] = cleaned[key].strip()
    return cleaned


def create_story(db: Session, user_id: int, title: str, category: str,
                 description: Optional[str] = None, language: str = "en",
                 status: str = "draft"):
    fields = {"title": title, "category": category, "language": language, "status": status}
    _validate(fields)
    db_story = models.Story(user_id=user_id, description=description, **_clean(fields))
    db.add(db_story)
    db.commit()
    db.refresh(db_story)
    return db_story


def get_stories(db: Session, category: Optional[str] = None, language: Optional[str] = None,
                sort: str = "recent", limit: int = INDEX_LIMIT):
    """Published stories for the public index."""
    query = db.query(models.Story).filter(models.Story.status == "published")
    if category:
        query = query.filter(models.Story.category == category)
    if language:
        query = query.filter(models.Story.language == language)
    if sort == "popular":
        query = query.order_by(models.Story.view_count.desc(), models.Story.id.desc())
    else:
        query = query.order_by(models.Story.created_at.desc(), models.Story.id.desc())
    return query.limit(limit).all()


def get_user_stories(db: Session, user_id: int, limit: Optional[int] = None,
                     recently_updated: bool = False):
    query = db.query(models.Story).filter(models.Story.user_id == user_id)
    if recently_updated:
        query = query.order_by(models.Story.updated_at.desc(), models.Story.id.desc())
    else:
        query = query.order_by(models.Story.created_at.desc(), models.Story.id.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


def count_user_stories(db: Session, user_id: int, status: Optional[str] = None) -> int:
    query = db.query(models.Story).filter(models.Story.user_id == user_id)
    if status:
        query = query.filter(models.Story.status == status)
    return query.count()


def get_story(db: Session, story_id: int):
    return db.query(models.Story).filter(models.Story.id == story_id).first()


def update_story(db: Session, story: models.Story, **fields):
    _validate(fields)
    for key, value in _clean(fields).items():
        setattr(story, key, value)
    db.commit()
    db.refresh(story)
    return story


def increment_views(db: Session, story: models.Story):
    db.query(models.Story).filter(models.Story.id == story.id).update(
        {models.Story.view_count: models.Story.view_count + 1},
        synchronize_session=False,
    )
    db.commit()
    db.refresh(story)
    return story


def set_cover_image(db: Session, story: models.Story, path: str):
    previous = story.cover_image_path
    story.cover_image_path = path
    db.commit()
    db.refresh(story)
    if previous and previous != path:
        attachments.delete_file(previous)
    return story


def delete_story(db: Session, story: models.Story) -> None:
    """Delete a story with its chapters, reading-list entries and cover file."""
    story_id, cover = story.id, story.cover_image_path
    chapter_count = len(story.chapters)
    db.delete(story)
    db.commit()
    if cover:
        attachments.delete_file(cover)
    logger.info(f"Deleted story {story_id} with {chapter_count} chapters")
