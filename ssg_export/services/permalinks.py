"""Permalink reconstruction from the site's rewrite structure."""

from __future__ import annotations

import re
from datetime import datetime
from urllib.parse import unquote_plus

from ..models import ZERO_DATE, Post

_REWRITE_TAG = re.compile(r"%([a-z_]+)%")
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _plain_permalink(post: Post, home_url: str) -> str:
    return f"{home_url}/?p={post.id}"


def build_permalink(
    post: Post,
    *,
    home_url: str,
    structure: str | None,
    category: str | None = None,
    author: str | None = None,
) -> str:
    """Return the absolute permalink of ``post``.

    Pretty permalinks only apply to published posts; drafts, private posts
    and sites without a structure get the ``?p=ID`` form.
    """

    home_url = home_url.rstrip("/")
    if not structure or post.post_status != "publish" or not post.post_name:
        return _plain_permalink(post, home_url)
    if not post.post_date or post.post_date == ZERO_DATE:
        return _plain_permalink(post, home_url)
    try:
        local = datetime.strptime(post.post_date, _DATE_FORMAT)
    except ValueError:
        return _plain_permalink(post, home_url)

    values = {
        "year": f"{local.year:04d}",
        "monthnum": f"{local.month:02d}",
        "day": f"{local.day:02d}",
        "hour": f"{local.hour:02d}",
        "minute": f"{local.minute:02d}",
        "second": f"{local.second:02d}",
        "postname": post.post_name,
        "post_id": str(post.id),
        "category": category or "uncategorized",
        "author": author or "",
    }

    def _expand(match: re.Match[str]) -> str:
        return values.get(match.group(1), match.group(0))

    path = _REWRITE_TAG.sub(_expand, structure)
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{home_url}{path}"


def site_relative(url: str | None, base_url: str) -> str:
    """Strip ``base_url`` from ``url`` and percent-decode the remainder."""

    if not url:
        return ""
    base_url = base_url.rstrip("/")
    stripped = url.replace(base_url, "") if base_url else url
    return unquote_plus(stripped)
