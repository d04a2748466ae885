from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

import models
from db import get_db
from routes.deps import require_login
from schemas.reading_list_schema import ReadingListCreate, ReadingListOut
from repositories import reading_list_repository, story_repository
from utils.exceptions import NotFound

router = APIRouter(
    prefix="/reading_lists",
    tags=["Reading Lists"]
)


@router.get("", response_model=List[ReadingListOut])
def list_reading_list(current_user: models.User = Depends(require_login), db: Session = Depends(get_db)):
    return reading_list_repository.get_entries(db, user_id=current_user.id)


@router.post("", response_model=ReadingListOut, status_code=201)
def add_to_reading_list(
    payload: ReadingListCreate,
    current_user: models.User = Depends(require_login),
    db: Session = Depends(get_db),
):
    story = story_repository.get_story(db=db, story_id=payload.story_id)
    if not story:
        raise NotFound(f"Story with id {payload.story_id} not found.")
    return reading_list_repository.add_story(db, user_id=current_user.id, story_id=story.id)


@router.delete("/{entry_id}", status_code=204)
def remove_from_reading_list(
    entry_id: int,
    current_user: models.User = Depends(require_login),
    db: Session = Depends(get_db),
):
    # Scoped to the current user: other people's entries look missing
    entry = reading_list_repository.get_entry(db, user_id=current_user.id, entry_id=entry_id)
    if not entry:
        raise NotFound("Reading list entry not found.")
    reading_list_repository.remove_entry(db, entry)
