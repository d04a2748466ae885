from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

import models
from utils.exceptions import ValidationError


def add_story(db: Session, user_id: int, story_id: int):
    db_entry = models.ReadingList(user_id=user_id, story_id=story_id)
    db.add(db_entry)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError({"story": ["is already in your reading list"]},
                              message="Unable to add story to your reading list.",
                              location=f"/stories/{story_id}")
    db.refresh(db_entry)
    return db_entry


def get_entries(db: Session, user_id: int):
    return (
        db.query(models.ReadingList)
        .options(joinedload(models.ReadingList.story).joinedload(models.Story.owner))
        .filter(models.ReadingList.user_id == user_id)
        .order_by(models.ReadingList.created_at.desc(), models.ReadingList.id.desc())
        .all()
    )


def get_entry(db: Session, user_id: int, entry_id: int):
    """Only returns the entry when it belongs to `user_id`."""
    return (
        db.query(models.ReadingList)
        .filter(models.ReadingList.id == entry_id, models.ReadingList.user_id == user_id)
        .first()
    )


def remove_entry(db: Session, entry: models.ReadingList) -> None:
    db.delete(entry)
    db.commit()
