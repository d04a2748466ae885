from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

import models


def get_chapter(db: Session, story_id: int, chapter_id: int):
    """Fetch a chapter only if it belongs to the given story."""
    return (
        db.query(models.Chapter)
        .filter(models.Chapter.story_id == story_id, models.Chapter.id == chapter_id)
        .first()
    )


def get_chapters(db: Session, story_id: int, published_only: bool = False):
    query = db.query(models.Chapter).filter(models.Chapter.story_id == story_id)
    if published_only:
        query = query.filter(models.Chapter.status == "published")
    return query.order_by(models.Chapter.order.asc()).all()


def get_max_order(db: Session, story_id: int) -> Optional[int]:
    return (
        db.query(func.max(models.Chapter.order))
        .filter(models.Chapter.story_id == story_id)
        .scalar()
    )


def order_taken(db: Session, story_id: int, order: int, exclude_id: Optional[int] = None) -> bool:
    query = db.query(models.Chapter.id).filter(
        models.Chapter.story_id == story_id, models.Chapter.order == order
    )
    if exclude_id is not None:
        query = query.filter(models.Chapter.id != exclude_id)
    return query.first() is not None


def get_neighbour(db: Session, chapter: models.Chapter, after: bool, published_only: bool = False):
    """Closest chapter of the same story after (or before) this one by order."""
    query = db.query(models.Chapter).filter(models.Chapter.story_id == chapter.story_id)
    if published_only:
        query = query.filter(models.Chapter.status == "published")
    if after:
        query = query.filter(models.Chapter.order > chapter.order).order_by(models.Chapter.order.asc())
    else:
        query = query.filter(models.Chapter.order < chapter.order).order_by(models.Chapter.order.desc())
    return query.first()
