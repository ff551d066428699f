from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from hero_catalog.common.exceptions import (
    DatabaseTimeoutError,
    HeroNotFoundError,
    UserNotFoundError,
)
from hero_catalog.favorite.models import FavoriteEntry, FavoriteOutcome
from hero_catalog.favorite.service import get_favorite_service
from hero_catalog.hero.models import (
    AdjacentDirection,
    BatchFetchError,
    BatchFetchResult,
    HeroLookup,
    HeroPage,
    HeroSource,
)
from hero_catalog.hero.service import get_hero_sync_service
from hero_catalog.main import create_app
from tests.factories import make_hero_record


@pytest.fixture
def hero_service() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def favorite_service() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def client(hero_service: AsyncMock, favorite_service: AsyncMock) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_hero_sync_service] = lambda: hero_service
    app.dependency_overrides[get_favorite_service] = lambda: favorite_service
    return TestClient(app)


def test_health(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestHeroRoutes:
    def test_get_hero_uses_camel_case(self, client, hero_service):
        hero_service.get_hero.return_value = HeroLookup(
            record=make_hero_record(70, favorites_count=2),
            source=HeroSource.REMOTE_CATALOG,
        )

        async def adjacent(hero_id, direction):
            if direction == AdjacentDirection.PREV:
                return make_hero_record(69, "Batgirl")
            return None

        hero_service.find_adjacent_hero.side_effect = adjacent

        response = client.get("/heroes/70")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == 70
        assert body["biography"]["fullName"] == "Bruce Wayne"
        assert body["appearance"]["eyeColor"] == "blue"
        assert body["imageUrl"] == "https://example.com/70.jpg"
        assert body["favoritesCount"] == 2
        assert body["source"] == "remote_catalog"
        assert body["stale"] is False
        assert body["prevId"] == 69
        assert body["nextId"] is None
        hero_service.get_hero.assert_awaited_once_with(70)

    def test_get_unknown_hero_is_404(self, client, hero_service):
        hero_service.get_hero.side_effect = HeroNotFoundError(999)

        response = client.get("/heroes/999")

        assert response.status_code == 404
        assert response.json() == {"detail": "hero 999 not found"}

    def test_invalid_hero_id_is_422(self, client):
        assert client.get("/heroes/0").status_code == 422

    def test_search_returns_summaries(self, client, hero_service):
        hero_service.search_heroes.return_value = [
            make_hero_record(70),
            make_hero_record(900, "Nameless", publisher=""),
        ]

        response = client.get("/heroes/search", params={"query": "bat", "limit": 5})

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert body["heroes"][0] == {
            "id": 70,
            "name": "Batman",
            "publisher": "DC Comics",
            "imageUrl": "https://example.com/70.jpg",
        }
        assert body["heroes"][1]["publisher"] == "Unknown"
        hero_service.search_heroes.assert_awaited_once_with("bat", 5)

    def test_list_heroes(self, client, hero_service):
        hero_service.get_paginated_heroes.return_value = HeroPage(
            heroes=[make_hero_record(1, "A-Bomb")],
            current_page=2,
            total_pages=3,
            total_heroes=41,
        )

        response = client.get("/heroes", params={"page": 2, "limit": 20})

        assert response.status_code == 200
        body = response.json()
        assert body["currentPage"] == 2
        assert body["totalPages"] == 3
        assert body["totalHeroes"] == 41
        assert [h["name"] for h in body["heroes"]] == ["A-Bomb"]

    def test_page_zero_is_422(self, client):
        assert client.get("/heroes", params={"page": 0}).status_code == 422

    def test_batch_fetch(self, client, hero_service):
        hero_service.fetch_hero_batch.return_value = BatchFetchResult(
            heroes=[make_hero_record(1, "A-Bomb")],
            errors=[BatchFetchError(id=2, error="hero 2 not found")],
        )

        response = client.post("/heroes/batch", json={"startId": 1, "count": 60})

        assert response.status_code == 200
        body = response.json()
        assert body["totalFetched"] == 1
        assert body["errors"] == [{"id": 2, "error": "hero 2 not found"}]
        hero_service.fetch_hero_batch.assert_awaited_once_with(1, 60)

    def test_top_heroes(self, client, favorite_service):
        favorite_service.top_favorited.return_value = [
            make_hero_record(70, favorites_count=3)
        ]

        response = client.get("/heroes/top", params={"limit": 5})

        assert response.status_code == 200
        assert [h["favoritesCount"] for h in response.json()] == [3]
        favorite_service.top_favorited.assert_awaited_once_with(5)

    def test_store_failure_is_503(self, client, hero_service):
        hero_service.get_hero.side_effect = DatabaseTimeoutError("find hero 70 timed out")

        response = client.get("/heroes/70")

        assert response.status_code == 503


class TestFavoriteRoutes:
    def test_add_with_reason(self, client, favorite_service):
        favorite_service.add_favorite.return_value = FavoriteOutcome.ADDED

        response = client.post("/users/1/favorites/70", json={"reason": "Dark Knight"})

        assert response.status_code == 200
        assert response.json() == {"userId": 1, "heroId": 70, "outcome": "added"}
        favorite_service.add_favorite.assert_awaited_once_with(1, 70, reason="Dark Knight")

    def test_add_without_body(self, client, favorite_service):
        favorite_service.add_favorite.return_value = FavoriteOutcome.ALREADY_FAVORITED

        response = client.post("/users/1/favorites/70")

        assert response.status_code == 200
        assert response.json()["outcome"] == "already_favorited"
        favorite_service.add_favorite.assert_awaited_once_with(1, 70, reason=None)

    def test_remove(self, client, favorite_service):
        favorite_service.remove_favorite.return_value = FavoriteOutcome.NOT_FAVORITED

        response = client.delete("/users/1/favorites/70")

        assert response.status_code == 200
        assert response.json()["outcome"] == "not_favorited"

    def test_unknown_user_is_404(self, client, favorite_service):
        favorite_service.add_favorite.side_effect = UserNotFoundError(5)

        response = client.post("/users/5/favorites/70")

        assert response.status_code == 404
        assert response.json() == {"detail": "user 5 not found"}

    def test_list(self, client, favorite_service):
        favorite_service.list_favorites.return_value = [
            FavoriteEntry(hero_id=70, hero=make_hero_record(70), reason="Dark Knight"),
            FavoriteEntry(hero_id=332, hero=None, reason=None),
        ]

        response = client.get("/users/1/favorites")

        assert response.status_code == 200
        favorites = response.json()["favorites"]
        assert favorites[0]["heroId"] == 70
        assert favorites[0]["hero"]["name"] == "Batman"
        assert favorites[0]["reason"] == "Dark Knight"
        assert favorites[1] == {"heroId": 332, "reason": None, "hero": None}
