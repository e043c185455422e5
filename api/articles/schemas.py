"""
Articles API schemas (request filters, store records, connection responses).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class ArticleFilter(BaseModel):
    """
    Normalized page request.

    - page_size: missing/zero/negative -> DEFAULT_PAGE_SIZE, above MAX_PAGE_SIZE -> capped
    - after: empty string means "first page"
    - text_query / author_filter: trimmed, empty means "no filter"
    """

    page_size: int = DEFAULT_PAGE_SIZE
    after: str | None = None
    text_query: str | None = None
    author_filter: str | None = None

    @field_validator("page_size", mode="before")
    @classmethod
    def _clamp_page_size(cls, value: Any) -> int:
        if value is None:
            return DEFAULT_PAGE_SIZE
        size = int(value)
        if size <= 0:
            return DEFAULT_PAGE_SIZE
        return min(size, MAX_PAGE_SIZE)

    @field_validator("after", mode="before")
    @classmethod
    def _empty_cursor_is_absent(cls, value: Any) -> str | None:
        if value is None or value == "":
            return None
        return value

    @field_validator("text_query", "author_filter", mode="before")
    @classmethod
    def _trim_filter(cls, value: Any) -> str | None:
        if value is None:
            return None
        trimmed = str(value).strip()
        return trimmed or None


@dataclass(frozen=True)
class CursorBound:
    anchor_id: int
    anchor_created_at: datetime


@dataclass(frozen=True)
class ArticleRecord:
    """One article row joined with its author, as returned by the store."""

    id: int
    title: str
    body: str
    author_id: int
    author_name: str
    created_at: datetime


class CreateArticleRequest(BaseModel):
    title: str = Field(..., max_length=500)
    body: str
    author_name: str = Field(..., max_length=255)


class AuthorResponse(BaseModel):
    id: int
    name: str


class ArticleResponse(BaseModel):
    id: int
    title: str
    body: str
    author: AuthorResponse
    created_at: datetime


class ArticleEdge(BaseModel):
    node: ArticleResponse
    cursor: str


class PageInfo(BaseModel):
    has_next_page: bool
    has_previous_page: bool
    start_cursor: str | None = None
    end_cursor: str | None = None


class ArticleConnection(BaseModel):
    edges: list[ArticleEdge]
    page_info: PageInfo
    total_count: int
