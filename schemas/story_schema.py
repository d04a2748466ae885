from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional
from schemas.chapter_schema import ChapterSummary

class StoryBase(BaseModel):
    title: str
    description: Optional[str] = None
    category: str
    language: str = "en"
    status: str = "draft"

class StoryCreate(StoryBase):
    pass

class StoryUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    language: Optional[str] = None
    status: Optional[str] = None

class StoryOut(StoryBase):
    id: int
    user_id: int
    author_name: Optional[str] = None
    language_name: str
    view_count: int
    chapters_count: int
    has_cover_image: bool
    cover_image_url: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class StoryDetail(StoryOut):
    # Always ascending by order
    chapters: List[ChapterSummary] = []
