from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional, Union
from schemas.story_schema import StoryOut

class UserOut(BaseModel):
    id: int
    email: str
    name: str
    bio: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    bio: Optional[str] = None

# ── Passwordless sign-in ──────────────────────────────────────────────────────
# email is a plain str: blank and malformed addresses get their own errors
class SignInRequest(BaseModel):
    email: Optional[str] = None

class OtpValidateRequest(BaseModel):
    otp_code: Optional[Union[str, int]] = None

class SessionMessage(BaseModel):
    status: str = "success"
    message: str
    location: Optional[str] = None

class PendingVerificationOut(BaseModel):
    email: str
    otp_sent_at: Optional[datetime] = None

class DashboardOut(BaseModel):
    user: UserOut
    stories: List[StoryOut]
    total_stories: int
    published_stories: int
    draft_stories: int
