from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import models
from db import get_db
from routes.deps import require_login
from schemas.story_schema import StoryOut
from schemas.user_schema import DashboardOut, UserOut, UserUpdate
from repositories import story_repository, user_repository

router = APIRouter(tags=["Users"])

DASHBOARD_STORY_LIMIT = 10


@router.get("/user", response_model=UserOut)
def show_profile(current_user: models.User = Depends(require_login)):
    return current_user


@router.put("/user", response_model=UserOut)
def update_profile(
    payload: UserUpdate,
    current_user: models.User = Depends(require_login),
    db: Session = Depends(get_db),
):
    return user_repository.update_profile(db, current_user, **payload.model_dump(exclude_unset=True))


@router.get("/dashboard", response_model=DashboardOut)
def dashboard(current_user: models.User = Depends(require_login), db: Session = Depends(get_db)):
    """The author's most recently updated stories plus totals by status."""
    return DashboardOut(
        user=UserOut.model_validate(current_user),
        stories=[
            StoryOut.model_validate(s)
            for s in story_repository.get_user_stories(
                db, user_id=current_user.id, limit=DASHBOARD_STORY_LIMIT, recently_updated=True
            )
        ],
        total_stories=story_repository.count_user_stories(db, current_user.id),
        published_stories=story_repository.count_user_stories(db, current_user.id, status="published"),
        draft_stories=story_repository.count_user_stories(db, current_user.id, status="draft"),
    )
