"""Comment normalisation for the export.

Comment ``date`` is the GMT timestamp in ISO 8601. A comment whose GMT date
is the zero date or unparsable is written with ``"date": null``; there is
no fallback to the local date.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Set

from ..models import Comment
from ..schemas import CommentFrontMatter
from .post_metadata import iso_date, parse_wp_datetime

logger = logging.getLogger(__name__)


_SERIALIZED_SCALAR = re.compile(r'i:(-?\d+);|s:\d+:"([^"]*)";')


def _coerce_id(value: Any) -> int | None:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def parse_comment_ids(raw: str | None) -> Set[int]:
    """Decode the ``openid_comments`` post meta into a set of comment ids.

    The plugin that writes the field stores a PHP-serialized array; JSON
    arrays and comma separated ids are accepted as well.
    """

    if raw is None:
        return set()
    text = raw.strip()
    if not text:
        return set()

    if text.startswith("a:"):
        tokens = [
            match.group(1) if match.group(1) is not None else match.group(2)
            for match in _SERIALIZED_SCALAR.finditer(text)
        ]
        # Serialized arrays alternate key, value.
        values = tokens[1::2]
    elif text.startswith("["):
        try:
            values = json.loads(text)
        except ValueError:
            logger.warning("event=export.openid_invalid value=%r", raw)
            return set()
        if not isinstance(values, list):
            return set()
    else:
        values = text.split(",")

    ids = {_coerce_id(value) for value in values}
    ids.discard(None)
    return ids  # type: ignore[return-value]


def comment_type(comment: Comment) -> str:
    return (comment.comment_type or "").strip() or "comment"


def comment_filename(comment: Comment) -> str:
    return f"comment_{comment_type(comment)}_{comment.id}.md"


def build_comment_metadata(comment: Comment, verified_ids: Set[int] | None = None) -> Dict[str, Any]:
    """Return ordered front-matter for one comment.

    The author name is the one typed on the comment; the linked user account
    is not consulted because that link is unreliable on imported sites.
    """

    timestamp = parse_wp_datetime(comment.comment_date_gmt)
    schema = CommentFrontMatter(
        id=comment.id,
        type=comment_type(comment),
        date=iso_date(timestamp) if timestamp is not None else None,
        author=comment.comment_author or "",
        authorUrl=comment.comment_author_url or "",
        openID=True if verified_ids and comment.id in verified_ids else None,
    )
    return schema.front_matter()
