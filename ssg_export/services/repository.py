"""Read-only queries against the WordPress tables."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List

from sqlalchemy.orm import Session

from ..config import get_site_base_url
from ..models import Comment, Option, Post, PostMeta, Term, TermRelationship, TermTaxonomy, User

logger = logging.getLogger(__name__)


EXPORTABLE_STATUSES = ("publish", "draft", "private")
EXPORTABLE_TYPE = "post"
HIDDEN_COMMENT_STATUSES = ("spam", "trash", "post-trashed")
CORE_TAXONOMIES = ("category", "post_tag", "post_format")
THUMBNAIL_META_KEY = "_thumbnail_id"


@dataclass(frozen=True)
class SiteUrls:
    """Public URLs of the site, without trailing slashes."""

    home: str
    site: str


def exportable_post_ids(session: Session) -> List[int]:
    """Return ids of every post that belongs in the export, in id order.

    Only plain ``post`` rows are considered; pages, attachments and custom
    types are skipped, as are trashed, scheduled and auto-draft posts.
    """

    rows = (
        session.query(Post.id)
        .filter(Post.post_status.in_(EXPORTABLE_STATUSES))
        .filter(Post.post_type == EXPORTABLE_TYPE)
        .order_by(Post.id.asc())
        .all()
    )
    return [int(row[0]) for row in rows]


def load_post(session: Session, post_id: int) -> Post | None:
    return session.get(Post, post_id)


def author_display_name(session: Session, post: Post) -> str | None:
    user = session.get(User, post.post_author) if post.post_author else None
    if user is None:
        logger.warning("event=export.author_missing post_id=%s author_id=%s", post.id, post.post_author)
        return None
    return user.display_name


def author_login(session: Session, post: Post) -> str | None:
    """Return the author's login, used for ``%author%`` in permalinks."""

    user = session.get(User, post.post_author) if post.post_author else None
    return user.user_login if user is not None else None


def custom_fields(session: Session, post_id: int) -> Dict[str, List[str | None]]:
    """Return every meta key of the post with all of its raw values."""

    rows = (
        session.query(PostMeta.meta_key, PostMeta.meta_value)
        .filter(PostMeta.post_id == post_id)
        .order_by(PostMeta.id.asc())
        .all()
    )
    fields: Dict[str, List[str | None]] = {}
    for key, value in rows:
        if key is None:
            continue
        fields.setdefault(key, []).append(value)
    return fields


def post_meta_value(session: Session, post_id: int, key: str) -> str | None:
    row = (
        session.query(PostMeta.meta_value)
        .filter(PostMeta.post_id == post_id)
        .filter(PostMeta.meta_key == key)
        .order_by(PostMeta.id.asc())
        .first()
    )
    return row[0] if row else None


def _taxonomy_sort_key(taxonomy: str) -> tuple[int, str]:
    if taxonomy in CORE_TAXONOMIES:
        return (CORE_TAXONOMIES.index(taxonomy), "")
    return (len(CORE_TAXONOMIES), taxonomy)


def post_terms(session: Session, post_id: int) -> Dict[str, List[Term]]:
    """Return the post's terms grouped by taxonomy.

    Core taxonomies come first in registration order, custom ones follow
    alphabetically; terms inside a taxonomy are sorted by name.
    """

    rows = (
        session.query(TermTaxonomy.taxonomy, Term)
        .join(Term, Term.id == TermTaxonomy.term_id)
        .join(TermRelationship, TermRelationship.term_taxonomy_id == TermTaxonomy.id)
        .filter(TermRelationship.object_id == post_id)
        .order_by(Term.name.asc(), Term.id.asc())
        .all()
    )
    grouped: Dict[str, List[Term]] = {}
    for taxonomy, term in rows:
        grouped.setdefault(taxonomy, []).append(term)
    return {taxonomy: grouped[taxonomy] for taxonomy in sorted(grouped, key=_taxonomy_sort_key)}


def post_comments(session: Session, post_id: int) -> List[Comment]:
    """Return visible comments of the post, oldest first."""

    return (
        session.query(Comment)
        .filter(Comment.post_id == post_id)
        .filter(Comment.comment_approved.not_in(HIDDEN_COMMENT_STATUSES))
        .order_by(Comment.comment_date_gmt.asc(), Comment.id.asc())
        .all()
    )


def featured_image_url(session: Session, post_id: int) -> str | None:
    """Return the absolute URL of the post thumbnail, if one is assigned."""

    raw = post_meta_value(session, post_id, THUMBNAIL_META_KEY)
    try:
        attachment_id = int(raw) if raw else 0
    except ValueError:
        logger.warning("event=export.thumbnail_invalid post_id=%s value=%r", post_id, raw)
        return None
    if attachment_id <= 0:
        return None
    attachment = session.get(Post, attachment_id)
    if attachment is None or not attachment.guid:
        return None
    return attachment.guid


def get_option(session: Session, name: str, default: str | None = None) -> str | None:
    row = session.query(Option.option_value).filter(Option.option_name == name).first()
    if row is None:
        return default
    return row[0]


def site_urls(session: Session) -> SiteUrls:
    fallback = get_site_base_url()
    home = (get_option(session, "home") or fallback).rstrip("/")
    site = (get_option(session, "siteurl") or home).rstrip("/")
    return SiteUrls(home=home, site=site)
