"""
Structured sections of a profile page.

Each renderer takes a slice of the user's data and returns a view model
(a Pydantic model, so it serializes straight into API responses) that the
page templates turn into HTML. Collections that are empty render as None:
the section is left out entirely. The posts list is the exception and always
produces its empty-state message.

Tag clicks are expressed as links built by an injected `tag_link(tag)`
callable; `tag_link(None)` clears the filter.
"""
import math
from collections import Counter
from typing import Callable, List, Literal, Optional, Sequence
from urllib.parse import quote

from pydantic import BaseModel

import config
from dates import format_date, format_month_year
from schemas import PROFILE_THEMES, Article, BookItem, ProjectItem, UserData

PostsVariant = Literal["profile", "public", "discover"]
TagLink = Callable[[Optional[str]], str]

DEFAULT_BANNER = "bg-gradient-to-r from-gray-200 to-gray-300"
BANNER_PRESETS = {
    "garden-green": "bg-gradient-to-r from-green-400 to-green-600",
    "sunset-orange": "bg-gradient-to-r from-orange-400 to-pink-500",
    "ocean-blue": "bg-gradient-to-r from-blue-400 to-blue-600",
    "lavender-purple": "bg-gradient-to-r from-purple-400 to-purple-600",
    "warm-earth": "bg-gradient-to-r from-amber-400 to-orange-500",
    "cool-gray": "bg-gradient-to-r from-gray-400 to-gray-600",
    "minimal-dots": "bg-gray-100 bg-[radial-gradient(circle_at_1px_1px,rgba(0,0,0,0.15)_1px,transparent_0)] bg-[length:20px_20px]",
}

SOCIAL_LABELS = (
    ("website", "Website"),
    ("twitter", "Twitter"),
    ("github", "GitHub"),
    ("linkedin", "LinkedIn"),
)

TAG_CLOUD_LIMIT = 12
TAG_PREVIEW_LIMIT = 3
MAX_STARS = 5
WORDS_PER_MINUTE = 200


def default_tag_link(tag: Optional[str]) -> str:
    return f"?tag={quote(tag, safe='')}" if tag is not None else "?"


def ensure_scheme(url: str) -> str:
    url = url.strip()
    if "://" in url or url.startswith("mailto:"):
        return url
    return f"https://{url}"


# Profile card

class Banner(BaseModel):
    image_url: Optional[str] = None
    css_class: str = DEFAULT_BANNER


class SocialLink(BaseModel):
    network: str
    label: str
    href: str


class ProfileCard(BaseModel):
    username: str
    avatar: Optional[str] = None
    join_date: Optional[str] = None
    banner: Banner
    bio: Optional[str] = None
    social_links: List[SocialLink] = []
    theme: str
    accent_color: str
    profile_url: str


def banner_for(user: UserData) -> Banner:
    if user.banner_image:
        return Banner(image_url=user.banner_image)
    return Banner(css_class=BANNER_PRESETS.get(user.banner_preset or "", DEFAULT_BANNER))


def social_links_for(user: UserData) -> List[SocialLink]:
    links = []
    for network, label in SOCIAL_LABELS:
        value = getattr(user.social_links, network)
        if value and value.strip():
            links.append(SocialLink(network=network, label=label, href=ensure_scheme(value)))
    return links


def render_profile_card(user: UserData, site_host: str = config.SITE_HOST) -> ProfileCard:
    join_date = None
    if user.show_join_date:
        join_date = format_month_year(user.created_at) or None
    return ProfileCard(
        username=user.username,
        avatar=user.profile_emoji or None,
        join_date=join_date,
        banner=banner_for(user),
        bio=user.bio or None,
        social_links=social_links_for(user),
        theme=user.profile_theme if user.profile_theme in PROFILE_THEMES else "minimal",
        accent_color=user.accent,
        profile_url=f"{site_host}/{user.username}",
    )


# Posts

class OwnerControls(BaseModel):
    published: bool
    toggle_label: str
    toggle_disabled: bool
    edit_href: str
    delete_disabled: bool
    delete_label: str


class PostItem(BaseModel):
    id: Optional[str] = None
    title: str
    href: str
    author: Optional[str] = None
    author_href: Optional[str] = None
    excerpt: str = ""
    reading_minutes: Optional[int] = None
    tags: List[str] = []
    hidden_tag_count: int = 0
    date: str = ""
    controls: Optional[OwnerControls] = None


class PostsList(BaseModel):
    variant: str
    accent_color: str
    items: List[PostItem] = []
    empty_message: Optional[str] = None
    empty_subtext: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.items


def reading_minutes(excerpt: str) -> Optional[int]:
    if not excerpt:
        return None
    return math.ceil(len(excerpt.split(" ")) / WORDS_PER_MINUTE)


def _post_item(article: Article, variant: str, show_author: bool, link_prefix: str,
               updating_id: Optional[str], deleting_id: Optional[str]) -> PostItem:
    if variant == "profile":
        tags, hidden = list(article.tags), 0
    else:
        tags = list(article.tags[:TAG_PREVIEW_LIMIT])
        hidden = max(0, len(article.tags) - TAG_PREVIEW_LIMIT)

    controls = None
    if variant == "profile":
        deleting = deleting_id is not None and deleting_id == article.id
        controls = OwnerControls(
            published=article.published,
            toggle_label="Unpublish" if article.published else "Publish",
            toggle_disabled=updating_id is not None and updating_id == article.id,
            edit_href=f"/articles/{article.id}",
            delete_disabled=deleting,
            delete_label="Deleting..." if deleting else "Delete",
        )

    return PostItem(
        id=article.id,
        title=article.title,
        href=f"{link_prefix}/{article.id}",
        author=article.author_name if show_author else None,
        author_href=f"/{article.author_name}" if show_author else None,
        excerpt=article.excerpt,
        reading_minutes=reading_minutes(article.excerpt),
        tags=tags,
        hidden_tag_count=hidden,
        date=format_date(article.created_at),
        controls=controls,
    )


def render_posts(
    articles: Sequence[Article],
    variant: PostsVariant = "public",
    show_author: bool = False,
    *,
    updating_id: Optional[str] = None,
    deleting_id: Optional[str] = None,
    empty_message: str = "No articles found",
    empty_subtext: Optional[str] = None,
    link_prefix: str = "/articles",
    accent_color: Optional[str] = None,
) -> PostsList:
    if variant not in ("profile", "public", "discover"):
        variant = "public"
    show_author = show_author or variant == "discover"
    accent = accent_color or config.DEFAULT_ACCENT_COLOR
    if not articles:
        return PostsList(variant=variant, accent_color=accent,
                         empty_message=empty_message, empty_subtext=empty_subtext)
    items = [
        _post_item(a, variant, show_author, link_prefix, updating_id, deleting_id)
        for a in articles
    ]
    return PostsList(variant=variant, accent_color=accent, items=items)


# Tag cloud

class TagChip(BaseModel):
    tag: Optional[str]
    label: str
    count: int
    selected: bool
    href: str


class TagCloud(BaseModel):
    accent_color: str
    all_chip: TagChip
    chips: List[TagChip] = []
    overflow: List[TagChip] = []
    total_tags: int = 0
    empty_message: Optional[str] = None

    @property
    def expandable(self) -> bool:
        return bool(self.overflow)


def tag_counts(articles: Sequence[Article]) -> List[tuple]:
    """(tag, count) pairs, most used first.

    Equal counts keep the order in which tags were first seen, walking
    articles then each article's tags in order.
    """
    counts = Counter()
    for article in articles:
        for tag in article.tags:
            counts[tag] += 1
    return counts.most_common()


def render_tag_cloud(
    articles: Sequence[Article],
    selected_tag: Optional[str] = None,
    tag_link: TagLink = default_tag_link,
    accent_color: Optional[str] = None,
    limit: int = TAG_CLOUD_LIMIT,
) -> TagCloud:
    ranked = tag_counts(articles)
    chips = [
        TagChip(tag=tag, label=f"#{tag}", count=count,
                selected=selected_tag == tag, href=tag_link(tag))
        for tag, count in ranked
    ]
    all_chip = TagChip(tag=None, label="All", count=len(articles),
                       selected=selected_tag is None, href=tag_link(None))
    return TagCloud(
        accent_color=accent_color or config.DEFAULT_ACCENT_COLOR,
        all_chip=all_chip,
        chips=chips[:limit],
        overflow=chips[limit:],
        total_tags=len(chips),
        empty_message=None if chips else "No tags found",
    )


# Collections

class ProjectCard(BaseModel):
    title: str
    description: Optional[str] = None
    href: Optional[str] = None
    status: Optional[str] = None
    year: Optional[str] = None


class ProjectsSection(BaseModel):
    accent_color: str
    projects: List[ProjectCard]


class BookEntry(BaseModel):
    title: str
    author: str
    status: str
    rating: int
    stars: List[bool]


class BookshelfSection(BaseModel):
    accent_color: str
    books: List[BookEntry]


class SkillsSection(BaseModel):
    accent_color: str
    skills: List[str]


def render_projects(projects: Sequence[ProjectItem], accent_color: Optional[str] = None) -> Optional[ProjectsSection]:
    if not projects:
        return None
    cards = [
        ProjectCard(
            title=p.title,
            description=p.description or None,
            href=ensure_scheme(p.url) if p.url and p.url.strip() else None,
            status=p.status or None,
            year=p.year,
        )
        for p in projects
    ]
    return ProjectsSection(accent_color=accent_color or config.DEFAULT_ACCENT_COLOR, projects=cards)


def star_row(rating: int) -> List[bool]:
    filled = min(max(rating, 0), MAX_STARS)
    return [i < filled for i in range(MAX_STARS)]


def render_bookshelf(books: Sequence[BookItem], accent_color: Optional[str] = None) -> Optional[BookshelfSection]:
    if not books:
        return None
    entries = [
        BookEntry(
            title=b.title,
            author=b.author,
            status=b.status,
            rating=min(max(b.rating, 0), MAX_STARS),
            stars=star_row(b.rating),
        )
        for b in books
    ]
    return BookshelfSection(accent_color=accent_color or config.DEFAULT_ACCENT_COLOR, books=entries)


def render_skills(skills: Sequence[str], accent_color: Optional[str] = None) -> Optional[SkillsSection]:
    if not skills:
        return None
    return SkillsSection(accent_color=accent_color or config.DEFAULT_ACCENT_COLOR, skills=list(skills))


# Inline fields

def display_name(user: UserData) -> str:
    return user.general.display_name or user.username


def profession(user: UserData) -> Optional[str]:
    return user.general.profession or None


def location(user: UserData) -> Optional[str]:
    return user.general.location or None
