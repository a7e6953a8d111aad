"""Front-matter construction for exported posts."""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Sequence

from sqlalchemy.orm import Session

from ..models import ZERO_DATE, Post, Term
from . import repository
from .permalinks import build_permalink, site_relative

logger = logging.getLogger(__name__)


OPENID_META_KEY = "openid_comments"
HIDDEN_META_PREFIX = "_"
NO_CATEGORY_PLACEHOLDER = "-no category-"
POST_FORMAT_PREFIX = "post-format-"
TAG_TAXONOMIES = ("category", "post_tag")
FORMAT_TAXONOMY = "post_format"

_WP_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_NUMERIC = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*$")


@dataclass
class PostLookups:
    """Everything the normalizer needs about a post besides the row itself."""

    author: str | None = None
    permalink: str = ""
    featured_image: str | None = None
    custom_fields: Dict[str, List[Any]] = field(default_factory=dict)
    terms: Dict[str, List[Term]] = field(default_factory=dict)


def parse_wp_datetime(raw: str | None) -> datetime | None:
    """Parse a WordPress DATETIME string as UTC, ``None`` for the zero date."""

    if not raw or raw == ZERO_DATE:
        return None
    try:
        parsed = datetime.strptime(raw.strip(), _WP_DATE_FORMAT)
    except ValueError:
        logger.warning("event=export.date_invalid value=%r", raw)
        return None
    return parsed.replace(tzinfo=timezone.utc)


def post_timestamp(post: Post) -> datetime | None:
    """Return the post creation time.

    The GMT column is sometimes the zero date even on old published posts;
    the local column is then used even if it is off by the site's offset.
    """

    return parse_wp_datetime(post.post_date_gmt) or parse_wp_datetime(post.post_date)


def iso_date(timestamp: datetime) -> str:
    return timestamp.isoformat()


def is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and bool(_NUMERIC.match(value))


def _is_blank(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value in ("", "0")
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def is_empty_custom_value(value: Any) -> bool:
    """Return True for ``[]`` and single-element lists holding a blank value."""

    if isinstance(value, (list, tuple)):
        if not value:
            return True
        return len(value) == 1 and _is_blank(value[0])
    return _is_blank(value)


def declutter(meta: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop falsy values, except numbers and numeric strings."""

    return {key: value for key, value in meta.items() if is_numeric(value) or value}


def convert_custom_fields(fields: Mapping[str, Sequence[Any]]) -> Dict[str, List[Any]]:
    custom: Dict[str, List[Any]] = {}
    for key, values in fields.items():
        if key.startswith(HIDDEN_META_PREFIX):
            continue
        if key == OPENID_META_KEY:
            continue
        if is_empty_custom_value(values):
            continue
        custom[key] = list(values)
    return custom


def convert_meta(post: Post, lookups: PostLookups, urls: repository.SiteUrls) -> Dict[str, Any]:
    """Build the ordered front-matter for the post row itself."""

    output: Dict[str, Any] = {
        "title": html.unescape(post.post_title or ""),
        "id": post.id,
        "author": lookups.author,
    }
    timestamp = post_timestamp(post)
    if timestamp is not None:
        output["date"] = iso_date(timestamp)
    if post.post_excerpt:
        output["excerpt"] = post.post_excerpt

    if post.post_status in ("draft", "private"):
        # Private posts are flagged as drafts too so static builds skip them.
        output["draft"] = True
    if post.post_status == "private":
        output["private"] = True

    output["url"] = site_relative(lookups.permalink, urls.home)

    if lookups.featured_image:
        output["featured_image"] = lookups.featured_image.replace(urls.site, "")

    custom = convert_custom_fields(lookups.custom_fields)
    if custom:
        output["custom"] = custom
    return output


def _dedupe(names: Sequence[str]) -> List[str]:
    seen: set[str] = set()
    unique: List[str] = []
    for name in names:
        if name in seen:
            continue
        seen.add(name)
        unique.append(name)
    return unique


def convert_terms(terms: Mapping[str, Sequence[Term]]) -> Dict[str, Any]:
    """Turn taxonomy terms into front-matter keys.

    Categories and tags are merged into a single ``tags`` list, the post
    format becomes ``format`` and every other taxonomy keeps its own key.
    """

    output: Dict[str, Any] = {}
    tags: List[str] = []
    for taxonomy, taxonomy_terms in terms.items():
        if taxonomy in TAG_TAXONOMIES:
            tags.extend(term.name for term in taxonomy_terms)
        elif taxonomy == FORMAT_TAXONOMY:
            output["format"] = next(
                (
                    term.slug[len(POST_FORMAT_PREFIX):]
                    for term in taxonomy_terms
                    if term.slug and term.slug.startswith(POST_FORMAT_PREFIX)
                ),
                False,
            )
        else:
            output[taxonomy] = [term.name for term in taxonomy_terms]

    tags = [name for name in _dedupe(tags) if name != NO_CATEGORY_PLACEHOLDER]
    if tags:
        output["tags"] = tags
    return output


def build_post_metadata(post: Post, lookups: PostLookups, urls: repository.SiteUrls) -> Dict[str, Any]:
    meta = {**convert_meta(post, lookups, urls), **convert_terms(lookups.terms)}
    return declutter(meta)


def load_post_lookups(
    session: Session,
    post: Post,
    urls: repository.SiteUrls,
    *,
    permalink_structure: str | None,
) -> PostLookups:
    """Collect author, permalink, thumbnail, custom fields and terms."""

    terms = repository.post_terms(session, post.id)
    categories = terms.get("category") or []
    first_category = min(categories, key=lambda term: term.id).slug if categories else None
    permalink = build_permalink(
        post,
        home_url=urls.home,
        structure=permalink_structure,
        category=first_category,
        author=repository.author_login(session, post),
    )
    return PostLookups(
        author=repository.author_display_name(session, post),
        permalink=permalink,
        featured_image=repository.featured_image_url(session, post.id),
        custom_fields=repository.custom_fields(session, post.id),
        terms=terms,
    )
