import uuid
from typing import Optional
from datetime import datetime, timezone
from pydantic import field_validator
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import Text


def new_blog_id() -> str:
    return uuid.uuid4().hex


class BlogPost(SQLModel, table=True):
    id: str = Field(default_factory=new_blog_id, primary_key=True)

    # Content
    title: str
    description: str  # Short excerpt shown on the listing page
    content: str = Field(sa_column=Column(Text, nullable=False))

    # Lookup key used in page URLs. Unique by convention only.
    slug: str = Field(index=True)

    # Normalized JPEG as a data URI, see services/images.py
    image: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    date: datetime = Field(default_factory=datetime.utcnow, index=True)


def _parse_date(value):
    """Accept ISO-8601 dates/datetimes, store naive UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            raise ValueError(f"Invalid date: {value!r}")
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class BlogPostCreate(SQLModel):
    title: str
    description: str
    content: str
    slug: str
    date: Optional[datetime] = None
    image: Optional[str] = None

    @field_validator("title", "description", "content", "slug")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value):
        return _parse_date(value)


class BlogPostUpdate(SQLModel):
    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    slug: Optional[str] = None
    date: Optional[datetime] = None
    image: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value):
        return _parse_date(value)
