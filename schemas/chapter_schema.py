from pydantic import BaseModel
from datetime import datetime
from typing import Optional

class ChapterCreate(BaseModel):
    title: str
    content: Optional[str] = ""
    # Omitted -> one past the story's highest order
    order: Optional[int] = None
    status: str = "draft"

class ChapterUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    order: Optional[int] = None

class ChapterSummary(BaseModel):
    id: int
    story_id: int
    title: str
    order: int
    status: str
    word_count: int
    excerpt: str

    class Config:
        from_attributes = True

class ChapterOut(ChapterSummary):
    content: Optional[str] = ""
    plain_text: str
    created_at: datetime
    updated_at: Optional[datetime] = None

class ChapterDetail(ChapterOut):
    previous_chapter: Optional[ChapterSummary] = None
    next_chapter: Optional[ChapterSummary] = None

class NewChapterOut(BaseModel):
    story_id: int
    order: int

class AutoSaveOut(BaseModel):
    status: str = "success"
    message: str = "Auto-saved successfully"
