"""
Idempotent schema DDL for authors and articles.

Run once on startup (see `api/main.py`) when DB_AUTO_MIGRATE is enabled.
Every statement is safe to re-run.
"""

from __future__ import annotations

import logging

from core import db

logger = logging.getLogger(__name__)

CREATE_AUTHORS_TABLE = """
CREATE TABLE IF NOT EXISTS authors (
  id BIGSERIAL PRIMARY KEY,
  name VARCHAR(255) NOT NULL UNIQUE,
  created_at TIMESTAMPTZ NOT NULL DEFAULT now()
)
"""

CREATE_ARTICLES_TABLE = """
CREATE TABLE IF NOT EXISTS articles (
  id BIGSERIAL PRIMARY KEY,
  title VARCHAR(500) NOT NULL,
  body TEXT NOT NULL,
  author_id BIGINT NOT NULL REFERENCES authors(id),
  created_at TIMESTAMPTZ NOT NULL DEFAULT now()
)
"""

CREATE_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_articles_created_at ON articles (created_at DESC, id DESC)",
    "CREATE INDEX IF NOT EXISTS idx_articles_author_id ON articles (author_id)",
    "CREATE INDEX IF NOT EXISTS idx_articles_title_fts ON articles USING gin (to_tsvector('english', title))",
    "CREATE INDEX IF NOT EXISTS idx_articles_body_fts ON articles USING gin (to_tsvector('english', body))",
    "CREATE INDEX IF NOT EXISTS idx_authors_name ON authors (name)",
)


def statements() -> list[tuple[str, str]]:
    """
    Ordered (step name, SQL) pairs. Tables first, then indexes.
    """
    steps = [
        ("create authors table", CREATE_AUTHORS_TABLE),
        ("create articles table", CREATE_ARTICLES_TABLE),
    ]
    steps.extend(("create index", sql) for sql in CREATE_INDEXES)
    return steps


async def ensure_schema() -> None:
    for step, sql in statements():
        try:
            await db.execute(sql)
        except Exception as e:
            raise RuntimeError(f"Schema migration failed to {step}.") from e
    logger.info("schema_ready statements=%s", len(statements()))
