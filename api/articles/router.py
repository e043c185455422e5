"""
Articles API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from core import db

from . import schemas
from .errors import (
    ArticlesError,
    InvalidCursor,
    StoreQueryFailed,
    StoreUnavailable,
    ValidationFailed,
)
from .repository import ArticleStore, PostgresArticleStore
from .service import ArticleQueryEngine, ArticleWriter

router = APIRouter()


def _http_error(exc: ArticlesError) -> HTTPException:
    if isinstance(exc, InvalidCursor):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, ValidationFailed):
        return HTTPException(
            status_code=422,
            detail={"field": exc.field, "message": str(exc)},
        )
    if isinstance(exc, StoreUnavailable):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    if isinstance(exc, StoreQueryFailed):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unexpected articles error.")


def get_article_store() -> ArticleStore:
    try:
        return PostgresArticleStore(db.pool())
    except db.PoolNotInitialized as e:
        raise _http_error(StoreUnavailable("Article store is unavailable (no pool).")) from e


def get_query_engine(store: ArticleStore = Depends(get_article_store)) -> ArticleQueryEngine:
    return ArticleQueryEngine(store)


def get_article_writer(store: ArticleStore = Depends(get_article_store)) -> ArticleWriter:
    return ArticleWriter(store)


@router.get("/articles", response_model=schemas.ArticleConnection)
async def list_articles(
    first: int | None = Query(None, description="Page size; defaults to 10, capped at 100."),
    after: str | None = Query(None, description="Cursor of the last edge already seen."),
    query: str | None = Query(None, description="Full-text match on title or body."),
    author: str | None = Query(None, description="Case-insensitive substring of the author name."),
    engine: ArticleQueryEngine = Depends(get_query_engine),
) -> schemas.ArticleConnection:
    filters = schemas.ArticleFilter(
        page_size=first,
        after=after,
        text_query=query,
        author_filter=author,
    )
    try:
        return await engine.get_articles_page(filters)
    except ArticlesError as e:
        raise _http_error(e) from e


@router.post(
    "/articles",
    response_model=schemas.ArticleResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_article(
    payload: schemas.CreateArticleRequest,
    writer: ArticleWriter = Depends(get_article_writer),
) -> schemas.ArticleResponse:
    try:
        return await writer.create_article(payload)
    except ArticlesError as e:
        raise _http_error(e) from e
