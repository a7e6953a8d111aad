"""Seed a small WordPress-shaped site for local runs and tests."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Dict, List

from sqlalchemy.orm import Session

from ssg_export.db import Base, SessionLocal, engine
from ssg_export.models import (
    ZERO_DATE,
    Comment,
    Option,
    Post,
    PostMeta,
    Term,
    TermRelationship,
    TermTaxonomy,
    User,
)

logger = logging.getLogger(__name__)


HOME_URL = "https://blog.example.com"
PERMALINK_STRUCTURE = "/%year%/%monthnum%/%postname%/"

OPTIONS = (
    ("home", HOME_URL),
    ("siteurl", HOME_URL),
    ("permalink_structure", PERMALINK_STRUCTURE),
)

USERS = (
    (1, "admin", "Ada Admin"),
    (2, "editor", "Émile Éditeur"),
)

# (id, status, type, slug, title, local date, gmt date, author)
POSTS = (
    (1, "publish", "post", "hello-world", "Hello &amp; Welcome", "2020-01-02 04:04:05", "2020-01-02 03:04:05", 1),
    (2, "draft", "post", "work-in-progress", "Work in progress", "2021-05-06 07:08:09", "2021-05-06 07:08:09", 2),
    (3, "private", "post", "secret", "Secret notes", "2021-03-04 10:00:00", ZERO_DATE, 1),
    (4, "publish", "post", "caf%C3%A9-notes", "Café notes", ZERO_DATE, ZERO_DATE, 2),
    (5, "trash", "post", "binned", "Binned", "2019-01-01 00:00:00", "2019-01-01 00:00:00", 1),
    (6, "future", "post", "scheduled", "Scheduled", "2031-01-01 00:00:00", "2031-01-01 00:00:00", 1),
    (7, "publish", "page", "about", "About", "2019-02-02 00:00:00", "2019-02-02 00:00:00", 1),
)

ATTACHMENT_ID = 8
ATTACHMENT_GUID = f"{HOME_URL}/wp-content/uploads/2020/01/cover.jpg"

POST_META = (
    (1, "_thumbnail_id", str(ATTACHMENT_ID)),
    (1, "_edit_lock", "1577934245:1"),
    (1, "color", "blue"),
    (1, "empty_field", ""),
    (1, "mood", "happy"),
    (1, "mood", "calm"),
    (1, "openid_comments", 'a:1:{i:0;s:1:"2";}'),
    (3, "rating", "0"),
)

# (term id, name, slug, taxonomy)
TERMS = (
    (1, "News", "news", "category"),
    (2, "-no category-", "no-category", "category"),
    (3, "News", "news-2", "post_tag"),
    (4, "Updates", "updates", "post_tag"),
    (5, "Aside", "post-format-aside", "post_format"),
    (6, "Travel Diaries", "travel-diaries", "series"),
)

RELATIONSHIPS = (
    (1, 1),
    (1, 2),
    (1, 3),
    (1, 4),
    (1, 5),
    (1, 6),
    (2, 4),
)

# (id, post, type, approved, author, url, gmt date, content)
COMMENTS = (
    (1, 1, "comment", "1", "Reader One", "https://reader.example.org", "2020-01-03 09:00:00", "Great post!"),
    (2, 1, "pingback", "1", "Other Blog", "https://other.example.net/linking-post/", "2020-01-04 10:30:00", "[...] linked here [...]"),
    (3, 1, "comment", "spam", "Spammer", "", "2020-01-05 11:00:00", "Buy now"),
)

POST_CONTENT = {
    1: "First paragraph.\n\nSecond paragraph<!--more-->\nwith a break.",
    3: "<p>Already formatted.</p>",
}


def seed_sample_site(session: Session) -> Dict[str, List[int]]:
    """Insert the sample site and return the ids that should be exported."""

    session.add_all(Option(option_name=name, option_value=value) for name, value in OPTIONS)
    session.add_all(User(id=uid, user_login=login, display_name=name) for uid, login, name in USERS)
    for post_id, status, post_type, slug, title, local, gmt, author in POSTS:
        session.add(
            Post(
                id=post_id,
                post_status=status,
                post_type=post_type,
                post_name=slug,
                post_title=title,
                post_date=local,
                post_date_gmt=gmt,
                post_author=author,
                post_content=POST_CONTENT.get(post_id, f"Body of {title}."),
                post_excerpt="A short teaser." if post_id == 1 else "",
            )
        )
    session.add(
        Post(
            id=ATTACHMENT_ID,
            post_status="inherit",
            post_type="attachment",
            post_name="cover",
            post_title="cover",
            guid=ATTACHMENT_GUID,
        )
    )
    session.flush()

    session.add_all(PostMeta(post_id=pid, meta_key=key, meta_value=value) for pid, key, value in POST_META)
    for term_id, name, slug, taxonomy in TERMS:
        session.add(Term(id=term_id, name=name, slug=slug))
        session.add(TermTaxonomy(id=term_id, term_id=term_id, taxonomy=taxonomy))
    session.flush()
    session.add_all(
        TermRelationship(object_id=object_id, term_taxonomy_id=tt_id) for object_id, tt_id in RELATIONSHIPS
    )
    for cid, pid, ctype, approved, author, url, gmt, content in COMMENTS:
        session.add(
            Comment(
                id=cid,
                post_id=pid,
                comment_type=ctype,
                comment_approved=approved,
                comment_author=author,
                comment_author_url=url,
                comment_date=gmt,
                comment_date_gmt=gmt,
                comment_content=content,
            )
        )
    session.commit()
    exported = [
        post_id
        for post_id, status, post_type, *_ in POSTS
        if status in ("publish", "draft", "private") and post_type == "post"
    ]
    return {"exported": exported, "comments": [1, 2]}


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed a sample WordPress site")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop and recreate the WordPress tables before seeding",
    )
    return parser.parse_args(argv)


def main(argv: List[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    args = parse_args(argv)
    if args.reset:
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    try:
        with SessionLocal() as session:
            seeded = seed_sample_site(session)
    except Exception:  # pragma: no cover - CLI reporting
        logger.exception("Failed to seed sample site")
        return 1
    logger.info("Sample site seeded: %s exportable posts", len(seeded["exported"]))
    return 0


if __name__ == "__main__":
    sys.exit(main())
