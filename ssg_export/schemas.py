"""Pydantic schemas for exported documents."""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class CommentFrontMatter(BaseModel):
    """Front-matter written at the top of each comment file.

    Unlike posts, comment metadata is not decluttered: an anonymous author
    keeps an empty ``authorUrl`` so every comment file has the same keys.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int
    type: str = "comment"
    date: str | None = None
    author: str = ""
    author_url: str = Field(default="", alias="authorUrl")
    open_id: bool | None = Field(default=None, alias="openID")

    def front_matter(self) -> Dict[str, Any]:
        """Return the ordered mapping to serialize, ``openID`` only when set."""
        exclude = None if self.open_id else {"open_id"}
        return self.model_dump(by_alias=True, exclude=exclude)
