from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session
from typing import List, Optional

import models
from db import get_db
from routes.deps import current_user_id, get_current_user, get_owned_story, get_story_or_404, require_login
from schemas.chapter_schema import ChapterSummary
from schemas.story_schema import StoryCreate, StoryDetail, StoryOut, StoryUpdate
from repositories import story_repository
from services import authorization, chapter_sequencer
from utils import attachments
from utils.exceptions import ValidationError

router = APIRouter(
    prefix="/stories",
    tags=["Stories"]
)


# PUBLIC INDEX: published stories only, newest (or most viewed) first
@router.get("", response_model=List[StoryOut])
def list_stories(
    category: Optional[str] = None,
    language: Optional[str] = None,
    sort: str = Query("recent", pattern="^(recent|popular)$"),
    db: Session = Depends(get_db),
):
    return story_repository.get_stories(db, category=category, language=language, sort=sort)


@router.get("/mine", response_model=List[StoryOut])
def my_stories(current_user: models.User = Depends(require_login), db: Session = Depends(get_db)):
    return story_repository.get_user_stories(db, user_id=current_user.id)


@router.post("", response_model=StoryOut, status_code=201)
def create_story(
    story_data: StoryCreate,
    current_user: models.User = Depends(require_login),
    db: Session = Depends(get_db),
):
    return story_repository.create_story(db=db, user_id=current_user.id, **story_data.model_dump())


@router.get("/{story_id}", response_model=StoryDetail)
def show_story(
    story: models.Story = Depends(get_story_or_404),
    current_user: Optional[models.User] = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    acting_id = current_user_id(current_user)
    authorization.ensure_story_visible(acting_id, story)
    story_repository.increment_views(db, story)

    chapters = chapter_sequencer.list_chapters(
        db, story, include_drafts=authorization.can_view_drafts(acting_id, story)
    )
    return StoryDetail.model_validate(story).model_copy(
        update={"chapters": [ChapterSummary.model_validate(c) for c in chapters]}
    )


@router.put("/{story_id}", response_model=StoryOut)
def update_story(
    story_data: StoryUpdate,
    story: models.Story = Depends(get_owned_story),
    db: Session = Depends(get_db),
):
    return story_repository.update_story(db, story, **story_data.model_dump(exclude_unset=True))


@router.delete("/{story_id}", status_code=204)
def delete_story(story: models.Story = Depends(get_owned_story), db: Session = Depends(get_db)):
    story_repository.delete_story(db, story)


@router.post("/{story_id}/cover", response_model=StoryOut)
def upload_cover(
    cover_image: UploadFile = File(...),
    story: models.Story = Depends(get_owned_story),
    db: Session = Depends(get_db),
):
    """Attach or replace the story's cover image (JPEG, PNG, GIF or WebP, up to 5 MB)."""
    if cover_image.content_type not in attachments.ALLOWED_CONTENT_TYPES:
        raise ValidationError({"cover_image": ["must be a JPEG, PNG, GIF or WebP image"]})
    data = cover_image.file.read(attachments.MAX_COVER_BYTES + 1)
    if len(data) > attachments.MAX_COVER_BYTES:
        raise ValidationError({"cover_image": ["is too large (maximum is 5 MB)"]})
    path = attachments.save_cover(story.id, data, cover_image.content_type)
    return story_repository.set_cover_image(db, story, path)
