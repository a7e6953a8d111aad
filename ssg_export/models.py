"""Read-only models for the WordPress tables the exporter reads."""

from sqlalchemy import BigInteger, Column, ForeignKey, Integer, String, Text

from .config import get_table_prefix
from .db import Base


PREFIX = get_table_prefix()

# WordPress keeps DATETIME columns as plain text in dumps and allows the
# "zero date" sentinel, which no driver maps to a datetime.
ZERO_DATE = "0000-00-00 00:00:00"

ID_TYPE = BigInteger().with_variant(Integer, "sqlite")


class Post(Base):
    __tablename__ = f"{PREFIX}posts"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column("ID", ID_TYPE, primary_key=True, autoincrement=True)
    post_author = Column(ID_TYPE, nullable=False, default=0)
    post_date = Column(String(19), nullable=False, default=ZERO_DATE)
    post_date_gmt = Column(String(19), nullable=False, default=ZERO_DATE)
    post_content = Column(Text, nullable=False, default="")
    post_title = Column(Text, nullable=False, default="")
    post_excerpt = Column(Text, nullable=False, default="")
    post_status = Column(String(20), nullable=False, default="publish", index=True)
    post_name = Column(String(200), nullable=False, default="", index=True)
    post_type = Column(String(20), nullable=False, default="post", index=True)
    guid = Column(String(255), nullable=False, default="")


class PostMeta(Base):
    __tablename__ = f"{PREFIX}postmeta"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column("meta_id", ID_TYPE, primary_key=True, autoincrement=True)
    post_id = Column(ID_TYPE, ForeignKey(f"{PREFIX}posts.ID"), nullable=False, index=True)
    meta_key = Column(String(255), nullable=True, index=True)
    meta_value = Column(Text, nullable=True)


class User(Base):
    __tablename__ = f"{PREFIX}users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column("ID", ID_TYPE, primary_key=True, autoincrement=True)
    user_login = Column(String(60), nullable=False, default="")
    display_name = Column(String(250), nullable=False, default="")


class Comment(Base):
    __tablename__ = f"{PREFIX}comments"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column("comment_ID", ID_TYPE, primary_key=True, autoincrement=True)
    post_id = Column(
        "comment_post_ID",
        ID_TYPE,
        ForeignKey(f"{PREFIX}posts.ID"),
        nullable=False,
        index=True,
    )
    comment_author = Column(Text, nullable=False, default="")
    comment_author_url = Column(String(200), nullable=False, default="")
    comment_date = Column(String(19), nullable=False, default=ZERO_DATE)
    comment_date_gmt = Column(String(19), nullable=False, default=ZERO_DATE)
    comment_content = Column(Text, nullable=False, default="")
    comment_approved = Column(String(20), nullable=False, default="1")
    comment_type = Column(String(20), nullable=False, default="comment")


class Term(Base):
    __tablename__ = f"{PREFIX}terms"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column("term_id", ID_TYPE, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, default="")
    slug = Column(String(200), nullable=False, default="", index=True)


class TermTaxonomy(Base):
    __tablename__ = f"{PREFIX}term_taxonomy"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column("term_taxonomy_id", ID_TYPE, primary_key=True, autoincrement=True)
    term_id = Column(ID_TYPE, ForeignKey(f"{PREFIX}terms.term_id"), nullable=False)
    taxonomy = Column(String(32), nullable=False, index=True)


class TermRelationship(Base):
    __tablename__ = f"{PREFIX}term_relationships"

    object_id = Column(ID_TYPE, primary_key=True)
    term_taxonomy_id = Column(
        ID_TYPE,
        ForeignKey(f"{PREFIX}term_taxonomy.term_taxonomy_id"),
        primary_key=True,
    )


class Option(Base):
    __tablename__ = f"{PREFIX}options"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column("option_id", ID_TYPE, primary_key=True, autoincrement=True)
    option_name = Column(String(191), nullable=False, unique=True)
    option_value = Column(Text, nullable=False, default="")
