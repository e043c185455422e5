"""HTTP tests for the articles endpoints."""

from __future__ import annotations

import base64

from articles.cursor import encode_cursor
from articles.errors import StoreQueryFailed, StoreUnavailable
from articles.router import get_article_store

from .fakes import FailingArticleStore


class TestListArticles:
    """GET /articles"""

    async def test_connection_shape(self, client, five_articles):
        response = await client.get("/articles", params={"first": 2})

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"edges", "page_info", "total_count"}
        assert data["total_count"] == 5
        assert [e["node"]["title"] for e in data["edges"]] == ["Article 5", "Article 4"]
        assert data["edges"][0]["node"]["author"] == {"id": 5, "name": "Author 5"}
        assert data["page_info"] == {
            "has_next_page": True,
            "has_previous_page": False,
            "start_cursor": data["edges"][0]["cursor"],
            "end_cursor": data["edges"][1]["cursor"],
        }

    async def test_follows_end_cursor(self, client, five_articles):
        first = (await client.get("/articles", params={"first": 2})).json()

        response = await client.get(
            "/articles",
            params={"first": 2, "after": first["page_info"]["end_cursor"]},
        )

        data = response.json()
        assert [e["node"]["id"] for e in data["edges"]] == [3, 2]
        assert data["page_info"]["has_previous_page"] is True

    async def test_defaults_to_ten(self, client, store):
        for i in range(12):
            store.add(f"Post {i}", "text", "Writer")

        data = (await client.get("/articles")).json()

        assert len(data["edges"]) == 10
        assert data["page_info"]["has_next_page"] is True

    async def test_large_first_is_capped_not_rejected(self, client, five_articles):
        response = await client.get("/articles", params={"first": 1000})

        assert response.status_code == 200
        assert len(response.json()["edges"]) == 5

    async def test_query_and_author_filters(self, client, store):
        store.add("Python tips", "body", "Alice")
        store.add("Python tricks", "body", "Bob")
        store.add("Rust tips", "body", "alice")

        response = await client.get("/articles", params={"query": " python ", "author": "ALICE"})

        data = response.json()
        assert [e["node"]["title"] for e in data["edges"]] == ["Python tips"]
        assert data["total_count"] == 1

    async def test_empty_after_means_first_page(self, client, five_articles):
        data = (await client.get("/articles", params={"after": ""})).json()

        assert data["page_info"]["has_previous_page"] is False
        assert len(data["edges"]) == 5

    async def test_invalid_cursor_is_400(self, client, five_articles):
        response = await client.get("/articles", params={"after": "definitely not a cursor"})

        assert response.status_code == 400
        assert "Invalid cursor" in response.json()["detail"]
        assert five_articles.calls == []

    async def test_oversized_cursor_id_is_400(self, client, five_articles):
        after = base64.urlsafe_b64encode(("9" * 5000 + ":1").encode()).decode()

        response = await client.get("/articles", params={"after": after})

        assert response.status_code == 400
        assert five_articles.calls == []

    async def test_cursor_from_listed_row(self, client, five_articles):
        anchor = five_articles.articles[1]

        response = await client.get("/articles", params={"after": encode_cursor(anchor.id, anchor.created_at)})

        assert response.status_code == 200
        assert [e["node"]["id"] for e in response.json()["edges"]] == [1]

    async def test_store_unavailable_is_503(self, app, client):
        app.dependency_overrides[get_article_store] = lambda: FailingArticleStore(StoreUnavailable("down"))

        response = await client.get("/articles")

        assert response.status_code == 503

    async def test_store_query_failure_is_500(self, app, client):
        app.dependency_overrides[get_article_store] = lambda: FailingArticleStore(StoreQueryFailed("bad"))

        response = await client.get("/articles")

        assert response.status_code == 500

    async def test_no_pool_is_503(self, app, client):
        app.dependency_overrides.clear()

        response = await client.get("/articles")

        assert response.status_code == 503


class TestCreateArticle:
    """POST /articles"""

    async def test_creates_article(self, client, store):
        response = await client.post(
            "/articles",
            json={"title": "Test Article", "body": "This is a test article body", "author_name": "John Doe"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == 1
        assert data["title"] == "Test Article"
        assert data["author"]["name"] == "John Doe"
        assert data["created_at"]

    async def test_created_article_is_listed(self, client, store):
        await client.post("/articles", json={"title": "Hello", "body": "World", "author_name": "Jane"})

        data = (await client.get("/articles")).json()

        assert data["total_count"] == 1
        assert data["edges"][0]["node"]["title"] == "Hello"

    async def test_empty_title_is_422(self, client, store):
        response = await client.post("/articles", json={"title": "  ", "body": "b", "author_name": "a"})

        assert response.status_code == 422
        assert response.json()["detail"]["field"] == "title"
        assert store.articles == []

    async def test_missing_field_is_422(self, client):
        response = await client.post("/articles", json={"title": "t", "body": "b"})

        assert response.status_code == 422


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
