"""
Database Schemas for Minispace

Each top-level Pydantic model corresponds to a MongoDB collection.
The collection name is the lowercase of the class name.

Collections:
- User: authentication + identity
- Profile: public profile customization keyed by username
- Article: writings, joined to their owner through author_name

UserData is not stored; it is the read-only snapshot (profile + identity)
handed to every renderer.

Unknown enum values never fail validation: they fall back to the default
named next to each enumeration below.
"""
import re
from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

import config

PROFILE_THEMES = ("minimal", "modern", "creative")
PAGE_LAYOUTS = ("default", "sidebar", "centered")
PROJECT_STATUSES = ("active", "completed", "archived")
BOOK_STATUSES = ("want-to-read", "reading", "completed")

ProfileTheme = Literal["minimal", "modern", "creative"]
PageLayout = Literal["default", "sidebar", "centered"]
BookStatus = Literal["want-to-read", "reading", "completed"]

_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
# Usernames are path segments of the public profile URL
USERNAME_PATTERN = r"^[a-z0-9_-]+$"


def normalize_username(value: str) -> str:
    return (value or "").strip().lower()


class User(BaseModel):
    username: str = Field(
        ...,
        min_length=USERNAME_MIN_LENGTH,
        max_length=USERNAME_MAX_LENGTH,
        pattern=USERNAME_PATTERN,
        description="Unique handle for public profile URL",
    )
    email: EmailStr
    password_hash: str = Field(..., description="Hashed password")
    created_at: Optional[datetime] = None

    @field_validator("username", mode="before")
    @classmethod
    def _lowercase_username(cls, v):
        return normalize_username(v) if isinstance(v, str) else v


class SocialLinks(BaseModel):
    website: Optional[str] = None
    twitter: Optional[str] = None
    github: Optional[str] = None
    linkedin: Optional[str] = None


class GeneralInfo(BaseModel):
    display_name: Optional[str] = None
    profession: Optional[str] = None
    location: Optional[str] = None
    tagline: Optional[str] = None


class ProjectItem(BaseModel):
    title: str
    description: Optional[str] = None
    url: Optional[str] = None
    # Free text: values outside PROJECT_STATUSES are displayed as written
    status: Optional[str] = "active"
    year: Optional[str] = None

    @field_validator("year", mode="before")
    @classmethod
    def _year_as_text(cls, v):
        if v is None or v == "":
            return None
        return str(v)


class BookItem(BaseModel):
    title: str
    author: str = ""
    status: BookStatus = "want-to-read"
    rating: int = 0

    @field_validator("status", mode="before")
    @classmethod
    def _known_status(cls, v):
        return v if v in BOOK_STATUSES else "want-to-read"

    @field_validator("rating", mode="before")
    @classmethod
    def _rating_default(cls, v):
        return 0 if v in (None, "") else v


class Profile(BaseModel):
    username: str = Field(..., description="Owner username (unique)")
    bio: Optional[str] = None
    profile_emoji: Optional[str] = None
    banner_image: Optional[str] = None
    banner_preset: Optional[str] = None
    accent_color: Optional[str] = None
    profile_theme: ProfileTheme = "minimal"
    page_layout: PageLayout = "default"
    custom_css: Optional[str] = None
    header_text: Optional[str] = None
    footer_text: Optional[str] = None
    show_join_date: bool = True
    social_links: SocialLinks = Field(default_factory=SocialLinks)
    custom_layout: str = config.DEFAULT_LAYOUT
    general: GeneralInfo = Field(default_factory=GeneralInfo)
    projects: List[ProjectItem] = Field(default_factory=list)
    bookshelf: List[BookItem] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    tools: List[str] = Field(default_factory=list)

    @field_validator("username", mode="before")
    @classmethod
    def _lowercase_username(cls, v):
        return normalize_username(v) if isinstance(v, str) else v

    @field_validator("profile_theme", mode="before")
    @classmethod
    def _known_theme(cls, v):
        return v if v in PROFILE_THEMES else "minimal"

    @field_validator("page_layout", mode="before")
    @classmethod
    def _known_layout(cls, v):
        return v if v in PAGE_LAYOUTS else "default"

    @field_validator("accent_color", mode="before")
    @classmethod
    def _hex_color(cls, v):
        if isinstance(v, str) and _HEX_COLOR_RE.match(v.strip()):
            return v.strip()
        return None

    @field_validator("custom_layout", mode="before")
    @classmethod
    def _layout_default(cls, v):
        return v if v else config.DEFAULT_LAYOUT

    @field_validator("social_links", "general", mode="before")
    @classmethod
    def _empty_mapping(cls, v):
        return v or {}

    @field_validator("projects", "bookshelf", "skills", "tools", mode="before")
    @classmethod
    def _empty_collection(cls, v):
        return v or []

    @field_validator("show_join_date", mode="before")
    @classmethod
    def _join_date_default(cls, v):
        # Only an explicit false hides the join date
        return v is not False


class UserData(Profile):
    """Immutable snapshot of one account as seen by the renderers."""

    model_config = ConfigDict(frozen=True)

    email: Optional[str] = None
    created_at: Any = None

    @property
    def accent(self) -> str:
        return self.accent_color or config.DEFAULT_ACCENT_COLOR


class Article(BaseModel):
    id: Optional[str] = None
    author_name: str = Field(..., description="Owner username, denormalized")
    title: str
    excerpt: str = ""
    content: str = ""
    tags: List[str] = Field(default_factory=list)
    published: bool = False
    # datetime, ISO string, epoch number or a store timestamp object
    created_at: Any = None

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_default(cls, v):
        return v or []

    @field_validator("excerpt", "content", mode="before")
    @classmethod
    def _text_default(cls, v):
        return v or ""
