"""
Articles service (orchestration).

This is where we:
- decode the `after` cursor and turn a page request into a store window
- call the store twice (total count, then the window) and build a connection
- validate and create articles (write path)

The store is injected; nothing here touches the connection pool.
"""

from __future__ import annotations

import logging

from . import cursor, schemas
from .errors import InvalidCursor, MalformedCursor, ValidationFailed
from .repository import ArticleStore

logger = logging.getLogger(__name__)


def _to_article_response(record: schemas.ArticleRecord) -> schemas.ArticleResponse:
    return schemas.ArticleResponse(
        id=record.id,
        title=record.title,
        body=record.body,
        author=schemas.AuthorResponse(id=record.author_id, name=record.author_name),
        created_at=record.created_at,
    )


class ArticleQueryEngine:
    """
    Keyset-paginated article search.

    Page semantics:
    - edges are ordered created_at DESC, id DESC and start strictly after `after`
    - one extra row is fetched to decide has_next_page, then dropped
    - has_previous_page is simply "a cursor was given"; it is not checked
      against the store
    - total_count ignores the cursor and page size

    The count and the window are two separate reads, so under concurrent
    writes total_count can disagree with the edges of the same page.
    """

    def __init__(self, store: ArticleStore) -> None:
        self._store = store

    def _cursor_bound(self, after: str | None) -> schemas.CursorBound | None:
        if after is None:
            return None
        try:
            anchor_id, anchor_created_at = cursor.decode_cursor(after)
        except MalformedCursor as e:
            raise InvalidCursor(f"Invalid cursor: {e}") from e
        return schemas.CursorBound(anchor_id=anchor_id, anchor_created_at=anchor_created_at)

    async def get_articles_page(self, filters: schemas.ArticleFilter) -> schemas.ArticleConnection:
        cursor_bound = self._cursor_bound(filters.after)

        total_count = await self._store.count_articles(filters)
        records = await self._store.query_articles(
            filters,
            limit=filters.page_size + 1,
            cursor_bound=cursor_bound,
        )

        has_next_page = len(records) > filters.page_size
        if has_next_page:
            records = records[: filters.page_size]

        edges = [
            schemas.ArticleEdge(
                node=_to_article_response(record),
                cursor=cursor.encode_cursor(record.id, record.created_at),
            )
            for record in records
        ]

        page_info = schemas.PageInfo(
            has_next_page=has_next_page,
            has_previous_page=filters.after is not None,
            start_cursor=edges[0].cursor if edges else None,
            end_cursor=edges[-1].cursor if edges else None,
        )

        logger.debug(
            "articles_page page_size=%s edges=%s has_next=%s total=%s",
            filters.page_size,
            len(edges),
            has_next_page,
            total_count,
        )
        return schemas.ArticleConnection(edges=edges, page_info=page_info, total_count=total_count)


class ArticleWriter:
    def __init__(self, store: ArticleStore) -> None:
        self._store = store

    async def create_article(self, payload: schemas.CreateArticleRequest) -> schemas.ArticleResponse:
        title = (payload.title or "").strip()
        body = (payload.body or "").strip()
        author_name = (payload.author_name or "").strip()

        if not title:
            raise ValidationFailed("title", "Title cannot be empty.")
        if not body:
            raise ValidationFailed("body", "Body cannot be empty.")
        if not author_name:
            raise ValidationFailed("author_name", "Author name cannot be empty.")

        record = await self._store.insert_article(title=title, body=body, author_name=author_name)
        logger.info("article_created article_id=%s author_id=%s", record.id, record.author_id)
        return _to_article_response(record)
