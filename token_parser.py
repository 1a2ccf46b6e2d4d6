"""
Profile layout templates.

A layout is free text mixing Markdown with `{token}` placeholders:

    # Hi, I'm {displayName}

    {displayProfileCard}
    {displayPosts}

`parse` splits it into an ordered list of render units. Known tokens become
`SectionToken`s; every other segment, unknown `{braces}` included, stays a
`LiteralMarkdown` so that nothing the author typed is lost.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Union

TOKEN_RE = re.compile(r"(\{[^}]+\})")


class SectionKind(str, Enum):
    PROFILE_CARD = "{displayProfileCard}"
    POSTS = "{displayPosts}"
    TAGS = "{displayTags}"
    PROJECTS = "{projects}"
    BOOKSHELF = "{bookshelf}"
    SKILLS = "{skills}"
    DISPLAY_NAME = "{displayName}"
    PROFESSION = "{profession}"
    LOCATION = "{location}"

    @property
    def slug(self) -> str:
        return self.name.lower().replace("_", "-")


_TOKENS = {kind.value: kind for kind in SectionKind}

INLINE_KINDS = frozenset({SectionKind.DISPLAY_NAME, SectionKind.PROFESSION, SectionKind.LOCATION})


@dataclass(frozen=True)
class LiteralMarkdown:
    text: str
    index: int

    @property
    def key(self) -> str:
        return f"markdown-{self.index}"

    @property
    def source(self) -> str:
        return self.text


@dataclass(frozen=True)
class SectionToken:
    kind: SectionKind
    index: int

    @property
    def key(self) -> str:
        return f"{self.kind.slug}-{self.index}"

    @property
    def source(self) -> str:
        return self.kind.value


RenderUnit = Union[LiteralMarkdown, SectionToken]


def lookup_token(segment: str):
    """Return the SectionKind for an exact token string, or None."""
    return _TOKENS.get(segment)


def parse(template: str) -> List[RenderUnit]:
    units: List[RenderUnit] = []
    for index, segment in enumerate(TOKEN_RE.split(template or "")):
        if not segment:
            continue
        kind = lookup_token(segment)
        if kind is None:
            units.append(LiteralMarkdown(segment, index))
        else:
            units.append(SectionToken(kind, index))
    return units


def to_template(units: Iterable[RenderUnit]) -> str:
    """Reassemble the template text a list of units was parsed from."""
    return "".join(unit.source for unit in units)
