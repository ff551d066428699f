import asyncio

import pytest
import pytest_asyncio

from hero_catalog.common.exceptions import (
    DatabaseTimeoutError,
    HeroNotFoundError,
    UserNotFoundError,
)
from hero_catalog.database.repository import UserRepository
from hero_catalog.favorite.models import FavoriteOutcome
from hero_catalog.favorite.service import FavoriteService
from hero_catalog.hero.transform import transform_remote_hero
from tests.factories import NOW, make_raw_hero


@pytest_asyncio.fixture
async def alice(user_repo):
    return await user_repo.create(username="alice", email="alice@example.com")


@pytest_asyncio.fixture
async def heroes(hero_repo):
    for raw in (
        make_raw_hero(70, "Batman"),
        make_raw_hero(332, "Iron Man", "Tony Stark", "Marvel Comics"),
        make_raw_hero(644, "Superman", "Clark Kent"),
    ):
        await hero_repo.upsert(transform_remote_hero(raw), fetched_at=NOW)


async def _favorites_count(hero_repo, hero_id: int) -> int:
    hero = await hero_repo.find_by_id(hero_id)
    return hero.favorites_count


class TestAddFavorite:
    @pytest.mark.asyncio
    async def test_adds_with_reason(self, favorite_service, hero_repo, alice, heroes):
        outcome = await favorite_service.add_favorite(alice.id, 70, reason="Dark Knight")

        assert outcome == FavoriteOutcome.ADDED
        assert alice.favorite_heroes == [70]
        assert alice.favorite_reasons == [{"hero_id": 70, "reason": "Dark Knight"}]
        assert await _favorites_count(hero_repo, 70) == 1

    @pytest.mark.asyncio
    async def test_second_add_without_reason_is_noop(
        self, favorite_service, hero_repo, alice, heroes
    ):
        await favorite_service.add_favorite(alice.id, 70, reason="Dark Knight")

        outcome = await favorite_service.add_favorite(alice.id, 70)

        assert outcome == FavoriteOutcome.ALREADY_FAVORITED
        assert alice.favorite_heroes == [70]
        assert await _favorites_count(hero_repo, 70) == 1

    @pytest.mark.asyncio
    async def test_second_add_with_reason_updates_reason(
        self, favorite_service, hero_repo, alice, heroes
    ):
        await favorite_service.add_favorite(alice.id, 70, reason="Dark Knight")

        outcome = await favorite_service.add_favorite(alice.id, 70, reason="Detective")

        assert outcome == FavoriteOutcome.REASON_UPDATED
        assert alice.favorite_reasons == [{"hero_id": 70, "reason": "Detective"}]
        assert await _favorites_count(hero_repo, 70) == 1

    @pytest.mark.asyncio
    async def test_blank_reason_is_ignored(self, favorite_service, alice, heroes):
        outcome = await favorite_service.add_favorite(alice.id, 70, reason="   ")

        assert outcome == FavoriteOutcome.ADDED
        assert alice.favorite_reasons == []

    @pytest.mark.asyncio
    async def test_unknown_hero_raises(self, favorite_service, alice, heroes):
        with pytest.raises(HeroNotFoundError):
            await favorite_service.add_favorite(alice.id, 999)

        assert alice.favorite_heroes == []

    @pytest.mark.asyncio
    async def test_unknown_user_raises(self, favorite_service, heroes):
        with pytest.raises(UserNotFoundError):
            await favorite_service.add_favorite(999, 70)

    @pytest.mark.asyncio
    async def test_write_timeout_propagates(self, session, hero_repo, alice, heroes, monkeypatch):
        async def slow_commit():
            await asyncio.sleep(1)

        service = FavoriteService(hero_repo, UserRepository(session, timeout=0.01))
        monkeypatch.setattr(session, "commit", slow_commit)

        with pytest.raises(DatabaseTimeoutError):
            await service.add_favorite(alice.id, 70)


class TestRemoveFavorite:
    @pytest.mark.asyncio
    async def test_removes_favorite_and_reason(self, favorite_service, hero_repo, alice, heroes):
        await favorite_service.add_favorite(alice.id, 70, reason="Dark Knight")

        outcome = await favorite_service.remove_favorite(alice.id, 70)

        assert outcome == FavoriteOutcome.REMOVED
        assert alice.favorite_heroes == []
        assert alice.favorite_reasons == []
        assert await _favorites_count(hero_repo, 70) == 0

    @pytest.mark.asyncio
    async def test_second_remove_is_noop(self, favorite_service, hero_repo, alice, heroes):
        await favorite_service.add_favorite(alice.id, 70)
        await favorite_service.remove_favorite(alice.id, 70)

        outcome = await favorite_service.remove_favorite(alice.id, 70)

        assert outcome == FavoriteOutcome.NOT_FAVORITED
        assert await _favorites_count(hero_repo, 70) == 0

    @pytest.mark.asyncio
    async def test_removes_hero_deleted_from_store(self, favorite_service, hero_repo, alice, heroes):
        await favorite_service.add_favorite(alice.id, 332)
        await hero_repo.delete_by_ids([332])

        outcome = await favorite_service.remove_favorite(alice.id, 332)

        assert outcome == FavoriteOutcome.REMOVED
        assert alice.favorite_heroes == []

    @pytest.mark.asyncio
    async def test_unknown_user_raises(self, favorite_service):
        with pytest.raises(UserNotFoundError):
            await favorite_service.remove_favorite(999, 70)


@pytest.mark.asyncio
async def test_counts_match_number_of_users(favorite_service, hero_repo, user_repo, alice, heroes):
    bob = await user_repo.create(username="bob", email="bob@example.com")
    carol = await user_repo.create(username="carol", email="carol@example.com")

    await favorite_service.add_favorite(alice.id, 70)
    await favorite_service.add_favorite(bob.id, 70)
    await favorite_service.add_favorite(carol.id, 70)
    await favorite_service.add_favorite(bob.id, 644)
    await favorite_service.remove_favorite(carol.id, 70)

    assert await _favorites_count(hero_repo, 70) == 2
    assert await _favorites_count(hero_repo, 644) == 1
    assert await _favorites_count(hero_repo, 332) == 0

    top = await favorite_service.top_favorited(limit=10)

    assert [h.id for h in top] == [70, 644]


@pytest.mark.asyncio
async def test_list_favorites_keeps_order_and_missing_heroes(
    favorite_service, hero_repo, alice, heroes
):
    await favorite_service.add_favorite(alice.id, 644, reason="Hope")
    await favorite_service.add_favorite(alice.id, 70)
    await hero_repo.delete_by_ids([70])

    entries = await favorite_service.list_favorites(alice.id)

    assert [e.hero_id for e in entries] == [644, 70]
    assert entries[0].hero.name == "Superman"
    assert entries[0].reason == "Hope"
    assert entries[1].hero is None
    assert entries[1].reason is None
