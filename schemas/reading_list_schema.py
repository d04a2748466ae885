from pydantic import BaseModel
from datetime import datetime
from schemas.story_schema import StoryOut

class ReadingListCreate(BaseModel):
    story_id: int

class ReadingListOut(BaseModel):
    id: int
    story_id: int
    created_at: datetime
    story: StoryOut

    class Config:
        from_attributes = True
