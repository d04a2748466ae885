from sqlalchemy import Column, Integer, String, ForeignKey, Text, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from db import Base
from utils import attachments
from utils.rich_text import excerpt, to_plain_text, word_count

STATUSES = ("draft", "published")

LANGUAGES = {
    "en": "English",
    "id": "Bahasa Indonesia",
    "ms": "Bahasa Melayu",
}

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    bio = Column(Text)
    # Written only by services.otp_authenticator
    otp_code = Column(String(6))
    otp_sent_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    stories = relationship("Story", back_populates="owner", cascade="all, delete-orphan")
    reading_lists = relationship("ReadingList", back_populates="user", cascade="all, delete-orphan")

class Story(Base):
    __tablename__ = "stories"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), index=True, nullable=False)
    description = Column(Text)
    category = Column(String, index=True)
    language = Column(String, nullable=False, default="en")
    status = Column(String, index=True, nullable=False, default="draft")
    view_count = Column(Integer, nullable=False, default=0)
    chapters_count = Column(Integer, nullable=False, default=0)
    cover_image_path = Column(String)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship("User", back_populates="stories")
    chapters = relationship(
        "Chapter",
        back_populates="story",
        order_by="Chapter.order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    reading_lists = relationship(
        "ReadingList",
        back_populates="story",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def language_name(self) -> str:
        return LANGUAGES.get(self.language, self.language)

    @property
    def has_cover_image(self) -> bool:
        return bool(self.cover_image_path)

    @property
    def cover_image_url(self):
        return attachments.url_for(self.cover_image_path) if self.cover_image_path else None

    @property
    def author_name(self):
        return self.owner.name if self.owner else None

class Chapter(Base):
    __tablename__ = "chapters"
    __table_args__ = (
        UniqueConstraint("story_id", "order", name="uq_chapters_story_id_order"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, default="")
    # order and status are written only by services.chapter_sequencer
    order = Column(Integer, nullable=False)
    status = Column(String, nullable=False, default="draft")
    story_id = Column(Integer, ForeignKey("stories.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    story = relationship("Story", back_populates="chapters")

    @property
    def plain_text(self) -> str:
        return to_plain_text(self.content)

    @property
    def word_count(self) -> int:
        return word_count(self.content)

    @property
    def excerpt(self) -> str:
        return excerpt(self.content)

    @property
    def is_draft(self) -> bool:
        return self.status == "draft"

    @property
    def is_published(self) -> bool:
        return self.status == "published"

class ReadingList(Base):
    __tablename__ = "reading_lists"
    __table_args__ = (
        UniqueConstraint("user_id", "story_id", name="uq_reading_lists_user_id_story_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    story_id = Column(Integer, ForeignKey("stories.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="reading_lists")
    story = relationship("Story", back_populates="reading_lists")
