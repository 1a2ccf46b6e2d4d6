"""
Markdown for the literal parts of a profile layout.

Line breaks are kept (hard wrap), tables, ~~strikethrough~~ and bare URLs
follow GitHub conventions, and links, quotes, headings and emphasis pick up
the profile's accent colour. Raw HTML is passed through unescaped.
"""
import html
from functools import lru_cache
from typing import Optional

import mistune
from mistune.plugins.formatting import strikethrough
from mistune.plugins.table import table
from mistune.plugins.url import url
from mistune.util import safe_entity

import config

_HEADING_CLASSES = {
    1: "text-3xl font-bold mb-4 mt-6",
    2: "text-2xl font-bold mb-3 mt-5",
    3: "text-xl font-bold mb-3 mt-4",
    4: "text-lg font-bold mb-2 mt-4",
    5: "text-base font-bold mb-2 mt-3",
    6: "text-sm font-bold mb-2 mt-3",
}


class AccentRenderer(mistune.HTMLRenderer):
    def __init__(self, accent_color: str):
        super().__init__(escape=False)
        self.accent_color = accent_color

    def paragraph(self, text: str) -> str:
        return f'<p class="mb-3 last:mb-0">{text}</p>\n'

    def heading(self, text: str, level: int, **attrs) -> str:
        return f'<h{level} class="{_HEADING_CLASSES[level]}">{text}</h{level}>\n'

    def link(self, text: str, url: str, title: Optional[str] = None) -> str:
        href = self.safe_url(url)
        title_attr = f' title="{safe_entity(title)}"' if title else ""
        return (
            f'<a href="{href}"{title_attr} class="hover:underline" '
            f'style="color: {self.accent_color}">{text}</a>'
        )

    def block_quote(self, text: str) -> str:
        return (
            '<blockquote class="border-l-4 pl-4 italic mb-3" '
            f'style="border-color: {self.accent_color}">\n{text}</blockquote>\n'
        )

    def strong(self, text: str) -> str:
        return f'<strong class="font-bold">{text}</strong>'

    def emphasis(self, text: str) -> str:
        return f'<em class="italic">{text}</em>'

    def codespan(self, text: str) -> str:
        return f'<code class="bg-gray-100 px-1 py-0.5 rounded text-sm">{html.escape(text)}</code>'

    def block_code(self, code: str, info: Optional[str] = None) -> str:
        lang = info.split()[0] if info else ""
        lang_attr = f' class="language-{html.escape(lang)}"' if lang else ""
        return (
            '<pre class="bg-gray-100 p-3 rounded mb-3 text-sm overflow-x-auto">'
            f"<code{lang_attr}>{html.escape(code)}</code></pre>\n"
        )

    def list(self, text: str, ordered: bool, **attrs) -> str:
        if ordered:
            start = attrs.get("start")
            start_attr = f' start="{start}"' if start is not None and start != 1 else ""
            return f'<ol class="list-decimal pl-6 mb-3"{start_attr}>\n{text}</ol>\n'
        return f'<ul class="list-disc pl-6 mb-3">\n{text}</ul>\n'

    def list_item(self, text: str) -> str:
        return f'<li class="mb-1">{text}</li>\n'


@lru_cache(maxsize=64)
def _markdown_for(accent_color: str):
    return mistune.create_markdown(
        renderer=AccentRenderer(accent_color),
        hard_wrap=True,
        plugins=[table, strikethrough, url],
    )


def render_markdown(text: str, accent_color: Optional[str] = None) -> str:
    if not text or not text.strip():
        return ""
    md = _markdown_for(accent_color or config.DEFAULT_ACCENT_COLOR)
    return md(text)
