"""
Article persistence (raw SQL).

This module contains the Postgres queries for:
- counting articles that match a filter (no pagination window)
- fetching one keyset-paginated window of articles joined with their authors
- inserting an article, creating its author on first use

Canonical order is `created_at DESC, id DESC` with `created_at` compared at
second resolution, the same resolution cursors carry. Ordering and the cursor
bound therefore agree even when several articles share a second.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Protocol

import asyncpg

from .errors import StoreQueryFailed, StoreUnavailable
from .schemas import ArticleFilter, ArticleRecord, CursorBound

logger = logging.getLogger(__name__)

CREATED_AT_SECOND = "date_trunc('second', a.created_at)"

ARTICLE_COLUMNS = """
  a.id,
  a.title,
  a.body,
  a.author_id,
  a.created_at,
  au.name AS author_name
"""

_CONNECTION_ERRORS = (
    OSError,
    asyncio.TimeoutError,
    asyncpg.exceptions.PostgresConnectionError,
)


class ArticleStore(Protocol):
    async def count_articles(self, filters: ArticleFilter) -> int: ...

    async def query_articles(
        self,
        filters: ArticleFilter,
        *,
        limit: int,
        cursor_bound: CursorBound | None = None,
    ) -> list[ArticleRecord]: ...

    async def insert_article(self, *, title: str, body: str, author_name: str) -> ArticleRecord: ...


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_filter_conditions(filters: ArticleFilter, *, first_arg: int = 1) -> tuple[list[str], list[Any]]:
    """
    WHERE conditions (AND-ed) for the text and author filters.

    Returns (conditions, args); placeholders start at $first_arg.
    """
    conditions: list[str] = []
    args: list[Any] = []
    arg_index = first_arg

    if filters.text_query:
        conditions.append(
            f"(to_tsvector('english', a.title) @@ plainto_tsquery('english', ${arg_index})"
            f" OR to_tsvector('english', a.body) @@ plainto_tsquery('english', ${arg_index}))"
        )
        args.append(filters.text_query)
        arg_index += 1

    if filters.author_filter:
        conditions.append(f"au.name ILIKE ${arg_index}")
        args.append(f"%{_escape_like(filters.author_filter)}%")
        arg_index += 1

    return conditions, args


def _where(conditions: list[str]) -> str:
    if not conditions:
        return ""
    return "WHERE " + "\n  AND ".join(conditions)


def build_count_query(filters: ArticleFilter) -> tuple[str, list[Any]]:
    conditions, args = build_filter_conditions(filters)
    sql = f"""
        SELECT count(*) AS n
        FROM articles a
        JOIN authors au ON au.id = a.author_id
        {_where(conditions)}
        """
    return sql, args


def build_page_query(
    filters: ArticleFilter,
    *,
    limit: int,
    cursor_bound: CursorBound | None = None,
) -> tuple[str, list[Any]]:
    conditions, args = build_filter_conditions(filters)

    if cursor_bound is not None:
        ts_arg = len(args) + 1
        id_arg = len(args) + 2
        conditions.append(
            f"({CREATED_AT_SECOND} < ${ts_arg}"
            f" OR ({CREATED_AT_SECOND} = ${ts_arg} AND a.id < ${id_arg}))"
        )
        args.extend([cursor_bound.anchor_created_at, cursor_bound.anchor_id])

    args.append(limit)
    sql = f"""
        SELECT {ARTICLE_COLUMNS}
        FROM articles a
        JOIN authors au ON au.id = a.author_id
        {_where(conditions)}
        ORDER BY {CREATED_AT_SECOND} DESC, a.id DESC
        LIMIT ${len(args)}
        """
    return sql, args


def _row_to_record(row: Any) -> ArticleRecord:
    return ArticleRecord(
        id=int(row["id"]),
        title=str(row["title"]),
        body=str(row["body"]),
        author_id=int(row["author_id"]),
        author_name=str(row["author_name"]),
        created_at=row["created_at"],
    )


@asynccontextmanager
async def _store_errors(operation: str) -> AsyncIterator[None]:
    try:
        yield
    except asyncpg.InterfaceError as e:
        if isinstance(e, ValueError):
            # Client-side argument encoding failure (e.g. int out of BIGINT range).
            logger.exception("article_store_bad_argument operation=%s", operation)
            raise StoreQueryFailed(f"Article store rejected a query argument ({operation}).") from e
        logger.exception("article_store_unavailable operation=%s", operation)
        raise StoreUnavailable(f"Article store is unavailable ({operation}).") from e
    except _CONNECTION_ERRORS as e:
        logger.exception("article_store_unavailable operation=%s", operation)
        raise StoreUnavailable(f"Article store is unavailable ({operation}).") from e
    except asyncpg.PostgresError as e:
        logger.exception("article_store_query_failed operation=%s", operation)
        raise StoreQueryFailed(f"Article store query failed ({operation}).") from e


class PostgresArticleStore:
    """
    ArticleStore backed by an asyncpg pool.

    Each read is its own statement on whatever connection the pool hands out;
    no transaction spans the count and the page fetch.
    """

    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def count_articles(self, filters: ArticleFilter) -> int:
        sql, args = build_count_query(filters)
        async with _store_errors("count_articles"):
            row = await self._pool.fetchrow(sql, *args)
        return int(row["n"]) if row is not None else 0

    async def query_articles(
        self,
        filters: ArticleFilter,
        *,
        limit: int,
        cursor_bound: CursorBound | None = None,
    ) -> list[ArticleRecord]:
        sql, args = build_page_query(filters, limit=limit, cursor_bound=cursor_bound)
        async with _store_errors("query_articles"):
            rows = await self._pool.fetch(sql, *args)
        return [_row_to_record(r) for r in rows]

    async def insert_article(self, *, title: str, body: str, author_name: str) -> ArticleRecord:
        """
        Insert an article in a single transaction, creating the author if needed.
        """
        async with _store_errors("insert_article"):
            async with self._pool.acquire() as conn:  # type: asyncpg.Connection
                async with conn.transaction():
                    author = await conn.fetchrow(
                        """
                        INSERT INTO authors (name) VALUES ($1)
                        ON CONFLICT (name) DO UPDATE SET name = EXCLUDED.name
                        RETURNING id, name
                        """,
                        author_name,
                    )
                    if author is None:
                        raise StoreQueryFailed("Failed to insert or get author.")

                    row = await conn.fetchrow(
                        """
                        INSERT INTO articles (title, body, author_id)
                        VALUES ($1, $2, $3)
                        RETURNING id, title, body, author_id, created_at
                        """,
                        title,
                        body,
                        int(author["id"]),
                    )
                    if row is None:
                        raise StoreQueryFailed("Failed to insert article.")

        return ArticleRecord(
            id=int(row["id"]),
            title=str(row["title"]),
            body=str(row["body"]),
            author_id=int(row["author_id"]),
            author_name=str(author["name"]),
            created_at=row["created_at"],
        )
