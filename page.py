"""
Profile page composition.

The user's layout template is parsed into render units, each unit is
dispatched to its renderer, and the results come back as `RenderedUnit`s in
template order. Units that produce nothing (an empty collection, a missing
profession, blank text between two tokens) are dropped.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup
from pydantic import BaseModel

import config
import sections
from markdown_renderer import render_markdown
from schemas import Article, UserData
from session import filter_articles
from token_parser import LiteralMarkdown, SectionKind, SectionToken, parse

logger = logging.getLogger("minispace.page")

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

jinja_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
    trim_blocks=True,
    lstrip_blocks=True,
)

PAGE_LAYOUT_CLASSES = {
    "default": "max-w-3xl mx-auto",
    "sidebar": "grid grid-cols-1 md:grid-cols-[16rem_1fr] gap-8",
    "centered": "max-w-xl mx-auto text-center",
}


class RenderedUnit(BaseModel):
    key: str
    kind: str
    html: str
    data: Optional[Dict[str, Any]] = None


@dataclass
class PageContext:
    user: UserData
    articles: Sequence[Article]
    all_articles: Sequence[Article]
    selected_tag: Optional[str] = None
    link_prefix: str = "/articles"
    tag_link: sections.TagLink = sections.default_tag_link
    site_host: str = config.SITE_HOST

    @property
    def visible_articles(self) -> List[Article]:
        return filter_articles(self.articles, self.selected_tag)


def _render_section(template_name: str, model: Optional[BaseModel]):
    if model is None:
        return None
    html = jinja_env.get_template(template_name).render(section=model)
    return html, model.model_dump()


def _inline(text: Optional[str]):
    if not text:
        return None
    return str(Markup('<span class="inline-field">{}</span>').format(text)), {"text": text}


def _profile_card(ctx: PageContext):
    card = sections.render_profile_card(ctx.user, ctx.site_host)
    return _render_section("sections/profile_card.html", card)


def _posts(ctx: PageContext):
    posts = sections.render_posts(
        ctx.visible_articles,
        link_prefix=ctx.link_prefix,
        accent_color=ctx.user.accent,
    )
    return _render_section("sections/posts.html", posts)


def _tags(ctx: PageContext):
    # The cloud always counts every article, whatever tag is selected
    cloud = sections.render_tag_cloud(
        ctx.all_articles,
        selected_tag=ctx.selected_tag,
        tag_link=ctx.tag_link,
        accent_color=ctx.user.accent,
    )
    return _render_section("sections/tags.html", cloud)


def _projects(ctx: PageContext):
    return _render_section("sections/projects.html",
                           sections.render_projects(ctx.user.projects, ctx.user.accent))


def _bookshelf(ctx: PageContext):
    return _render_section("sections/bookshelf.html",
                           sections.render_bookshelf(ctx.user.bookshelf, ctx.user.accent))


def _skills(ctx: PageContext):
    return _render_section("sections/skills.html",
                           sections.render_skills(ctx.user.skills, ctx.user.accent))


SECTION_RENDERERS: Dict[SectionKind, Callable[[PageContext], Any]] = {
    SectionKind.PROFILE_CARD: _profile_card,
    SectionKind.POSTS: _posts,
    SectionKind.TAGS: _tags,
    SectionKind.PROJECTS: _projects,
    SectionKind.BOOKSHELF: _bookshelf,
    SectionKind.SKILLS: _skills,
    SectionKind.DISPLAY_NAME: lambda ctx: _inline(sections.display_name(ctx.user)),
    SectionKind.PROFESSION: lambda ctx: _inline(sections.profession(ctx.user)),
    SectionKind.LOCATION: lambda ctx: _inline(sections.location(ctx.user)),
}


def render_units(ctx: PageContext, template: Optional[str] = None) -> List[RenderedUnit]:
    rendered: List[RenderedUnit] = []
    source = ctx.user.custom_layout if template is None else template
    for unit in parse(source):
        if isinstance(unit, LiteralMarkdown):
            html = render_markdown(unit.text, ctx.user.accent)
            if html:
                rendered.append(RenderedUnit(key=unit.key, kind="markdown", html=html))
            continue
        if isinstance(unit, SectionToken):
            result = SECTION_RENDERERS[unit.kind](ctx)
            if result is None:
                continue
            html, data = result
            rendered.append(RenderedUnit(key=unit.key, kind=unit.kind.slug, html=html, data=data))
    return rendered


def compose(
    user: UserData,
    articles: Sequence[Article],
    all_articles: Optional[Sequence[Article]] = None,
    selected_tag: Optional[str] = None,
    link_prefix: str = "/articles",
    tag_link: sections.TagLink = sections.default_tag_link,
    template: Optional[str] = None,
) -> List[RenderedUnit]:
    """Render a user's layout template.

    `articles` is the publishable set shown by {displayPosts}; `all_articles`
    feeds {displayTags} and defaults to `articles`.
    """
    ctx = PageContext(
        user=user,
        articles=articles,
        all_articles=articles if all_articles is None else all_articles,
        selected_tag=selected_tag,
        link_prefix=link_prefix,
        tag_link=tag_link,
    )
    units = render_units(ctx, template)
    logger.debug("composed %d units for %s", len(units), user.username)
    return units


def scrub_css(css: Optional[str]) -> str:
    """Keep owner CSS inside its <style> element."""
    if not css:
        return ""
    return css.replace("<", "")


def render_page(user: UserData, units: Sequence[RenderedUnit]) -> str:
    template = jinja_env.get_template("page.html")
    return template.render(
        user=user,
        units=[Markup(u.html) for u in units],
        layout_class=PAGE_LAYOUT_CLASSES.get(user.page_layout, PAGE_LAYOUT_CLASSES["default"]),
        custom_css=Markup(scrub_css(user.custom_css)),
        accent_color=user.accent,
        title=sections.display_name(user),
    )
