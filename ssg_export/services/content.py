"""Rendering pipeline applied to raw post content before export."""

from __future__ import annotations

import logging
import re
from typing import Callable, Iterable, List

from ..models import Post

logger = logging.getLogger(__name__)


ContentFilter = Callable[[str, Post], str]

_MORE_TAG = re.compile(r"<!--(?:more(?:\s[^>]*?)?|noteaser)-->")
_CAPTION = re.compile(r"\[caption[^\]]*\](.*?)\[/caption\]", re.DOTALL)
_EMBED = re.compile(r"\[embed[^\]]*\](.*?)\[/embed\]", re.DOTALL)
_BLOCK_START = re.compile(
    r"^\s*<(?:table|thead|tfoot|caption|col|colgroup|tbody|tr|td|th|div|dl|dd|dt|ul|ol|li"
    r"|pre|form|map|area|blockquote|address|math|style|p|h[1-6]|hr|fieldset|legend"
    r"|section|article|aside|hgroup|header|footer|nav|figure|figcaption|details|menu"
    r"|summary|iframe|script|!--)[\s/>]",
    re.IGNORECASE,
)
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def strip_more_tag(content: str, post: Post) -> str:
    """Remove teaser markers, which only make sense on archive pages."""

    return _MORE_TAG.sub("", content)


def expand_core_shortcodes(content: str, post: Post) -> str:
    """Unwrap the caption and embed shortcodes, keeping their inner markup."""

    content = _CAPTION.sub(lambda match: match.group(1).strip(), content)
    return _EMBED.sub(lambda match: match.group(1).strip(), content)


def autop(content: str, post: Post) -> str:
    """Wrap blank-line separated text blocks in paragraphs.

    Blocks that already start with a block-level element are left alone;
    single newlines inside a paragraph become ``<br />``.
    """

    normalized = content.replace("\r\n", "\n").replace("\r", "\n").strip()
    if not normalized:
        return ""
    blocks: List[str] = []
    for chunk in _PARAGRAPH_BREAK.split(normalized):
        chunk = chunk.strip()
        if not chunk:
            continue
        if _BLOCK_START.match(chunk):
            blocks.append(chunk)
            continue
        lines = [line.strip() for line in chunk.split("\n")]
        blocks.append("<p>" + "<br />\n".join(lines) + "</p>")
    return "\n".join(blocks) + "\n"


class ContentRenderer:
    """Ordered chain of content filters.

    Each filter receives the post being rendered explicitly, so shortcode
    handlers that need the post (for its id or attachments) never depend on
    shared state.
    """

    def __init__(self, filters: Iterable[ContentFilter] | None = None) -> None:
        self._filters: List[ContentFilter] = list(filters or [])

    @property
    def filters(self) -> tuple[ContentFilter, ...]:
        return tuple(self._filters)

    def add_filter(self, content_filter: ContentFilter) -> None:
        self._filters.append(content_filter)

    def render(self, content: str | None, post: Post) -> str:
        text = content or ""
        logger.debug("event=content.render post_id=%s filters=%s", post.id, len(self._filters))
        for content_filter in self._filters:
            text = content_filter(text, post)
        return text


def default_renderer() -> ContentRenderer:
    return ContentRenderer([strip_more_tag, expand_core_shortcodes, autop])
