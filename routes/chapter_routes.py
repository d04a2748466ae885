from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

import models
from db import get_db
from routes.deps import current_user_id, get_current_user, get_owned_story, get_story_or_404
from schemas.chapter_schema import (
    AutoSaveOut,
    ChapterCreate,
    ChapterDetail,
    ChapterOut,
    ChapterSummary,
    ChapterUpdate,
    NewChapterOut,
)
from repositories import chapter_repository
from services import authorization, chapter_sequencer
from utils.exceptions import NotFound

router = APIRouter(
    prefix="/stories/{story_id}/chapters",
    tags=["Chapters"]
)


def _find_chapter(db: Session, story: models.Story, chapter_id: int) -> models.Chapter:
    chapter = chapter_repository.get_chapter(db, story_id=story.id, chapter_id=chapter_id)
    if not chapter:
        raise NotFound(f"Chapter with id {chapter_id} not found.")
    return chapter


def _summary(chapter: Optional[models.Chapter]) -> Optional[ChapterSummary]:
    return ChapterSummary.model_validate(chapter) if chapter else None


@router.get("", response_model=List[ChapterSummary])
def list_chapters(
    story: models.Story = Depends(get_story_or_404),
    current_user: Optional[models.User] = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    acting_id = current_user_id(current_user)
    authorization.ensure_story_visible(acting_id, story)
    return chapter_sequencer.list_chapters(
        db, story, include_drafts=authorization.can_view_drafts(acting_id, story)
    )


@router.get("/new", response_model=NewChapterOut)
def new_chapter(story: models.Story = Depends(get_owned_story), db: Session = Depends(get_db)):
    """Suggested order for the creation form: one past the highest existing order."""
    return NewChapterOut(story_id=story.id, order=chapter_sequencer.next_order_value(db, story))


@router.post("", response_model=ChapterOut, status_code=201)
def create_chapter(
    chapter_data: ChapterCreate,
    story: models.Story = Depends(get_owned_story),
    db: Session = Depends(get_db),
):
    return chapter_sequencer.create_chapter(db, story, **chapter_data.model_dump())


@router.get("/{chapter_id}", response_model=ChapterDetail)
def show_chapter(
    chapter_id: int,
    story: models.Story = Depends(get_story_or_404),
    current_user: Optional[models.User] = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    acting_id = current_user_id(current_user)
    chapter = _find_chapter(db, story, chapter_id)
    authorization.ensure_chapter_visible(acting_id, chapter)

    include_drafts = authorization.can_view_drafts(acting_id, story)
    return ChapterDetail.model_validate(chapter).model_copy(update={
        "previous_chapter": _summary(chapter_sequencer.previous_chapter(db, chapter, include_drafts)),
        "next_chapter": _summary(chapter_sequencer.next_chapter(db, chapter, include_drafts)),
    })


@router.put("/{chapter_id}", response_model=ChapterOut)
def update_chapter(
    chapter_id: int,
    chapter_data: ChapterUpdate,
    story: models.Story = Depends(get_owned_story),
    db: Session = Depends(get_db),
):
    chapter = _find_chapter(db, story, chapter_id)
    return chapter_sequencer.update_chapter(db, chapter, **chapter_data.model_dump(exclude_unset=True))


@router.patch("/{chapter_id}/autosave", response_model=AutoSaveOut)
def autosave_chapter(
    chapter_id: int,
    chapter_data: ChapterUpdate,
    story: models.Story = Depends(get_owned_story),
    db: Session = Depends(get_db),
):
    """Editor auto-save. Same rules as a full update, lighter response."""
    chapter = _find_chapter(db, story, chapter_id)
    chapter_sequencer.update_chapter(db, chapter, **chapter_data.model_dump(exclude_unset=True))
    return AutoSaveOut()


@router.delete("/{chapter_id}", status_code=204)
def delete_chapter(
    chapter_id: int,
    story: models.Story = Depends(get_owned_story),
    db: Session = Depends(get_db),
):
    chapter = _find_chapter(db, story, chapter_id)
    chapter_sequencer.destroy_chapter(db, chapter)


@router.patch("/{chapter_id}/publish", response_model=ChapterOut)
def publish_chapter(
    chapter_id: int,
    story: models.Story = Depends(get_owned_story),
    db: Session = Depends(get_db),
):
    chapter = _find_chapter(db, story, chapter_id)
    return chapter_sequencer.publish(db, chapter)


@router.patch("/{chapter_id}/unpublish", response_model=ChapterOut)
def unpublish_chapter(
    chapter_id: int,
    story: models.Story = Depends(get_owned_story),
    db: Session = Depends(get_db),
):
    chapter = _find_chapter(db, story, chapter_id)
    return chapter_sequencer.unpublish(db, chapter)
