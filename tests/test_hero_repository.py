import asyncio

import pytest
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from hero_catalog.common.exceptions import DatabaseTimeoutError
from hero_catalog.database.repository import HeroRepository
from hero_catalog.database.repository.hero_repository import insert_for_dialect
from hero_catalog.hero.models import AdjacentDirection
from hero_catalog.hero.transform import transform_remote_hero
from tests.factories import NOW, as_utc, make_hero_record, make_raw_hero


async def _seed(repo: HeroRepository) -> None:
    for raw in (
        make_raw_hero(70, "Batman", "Bruce Wayne", "DC Comics"),
        make_raw_hero(332, "Iron Man", "Tony Stark", "Marvel Comics"),
        make_raw_hero(644, "Superman", "Clark Kent", "DC Comics"),
    ):
        await repo.upsert(transform_remote_hero(raw), fetched_at=NOW)


async def _slow(*args, **kwargs):
    await asyncio.sleep(1)


class TestUpsert:
    @pytest.mark.asyncio
    async def test_creates_record(self, hero_repo):
        hero = await hero_repo.upsert(transform_remote_hero(make_raw_hero()), fetched_at=NOW)

        assert hero.id == 60
        assert hero.biography["full_name"] == "Bruce Wayne"
        assert as_utc(hero.fetched_at) == NOW
        assert hero.favorites_count == 0

    @pytest.mark.asyncio
    async def test_identical_upserts_keep_single_record(self, hero_repo):
        data = transform_remote_hero(make_raw_hero())

        first = await hero_repo.upsert(data, fetched_at=NOW)
        first_values = first.model_dump()
        second = await hero_repo.upsert(data, fetched_at=NOW)

        assert await hero_repo.count() == 1
        assert second.model_dump() == first_values

    @pytest.mark.asyncio
    async def test_overwrites_fields_but_keeps_favorites_count(self, hero_repo):
        await hero_repo.upsert(transform_remote_hero(make_raw_hero()), fetched_at=NOW)
        await hero_repo.increment_favorites_count(60, 3)

        updated = await hero_repo.upsert(
            transform_remote_hero(make_raw_hero(full_name="Bruce Thomas Wayne")),
            fetched_at=NOW,
        )

        assert updated.biography["full_name"] == "Bruce Thomas Wayne"
        assert updated.favorites_count == 3

    @pytest.mark.asyncio
    async def test_write_timeout_raises(self, session, monkeypatch):
        repo = HeroRepository(session, write_timeout=0.01)
        monkeypatch.setattr(session, "exec", _slow)

        with pytest.raises(DatabaseTimeoutError):
            await repo.upsert(transform_remote_hero(make_raw_hero()), fetched_at=NOW)


class TestReads:
    @pytest.mark.asyncio
    async def test_find_by_id_missing_returns_none(self, hero_repo):
        assert await hero_repo.find_by_id(1) is None

    @pytest.mark.asyncio
    async def test_find_page(self, hero_repo):
        await _seed(hero_repo)

        heroes, total = await hero_repo.find_page(skip=1, limit=1)

        assert [h.id for h in heroes] == [332]
        assert total == 3

    @pytest.mark.asyncio
    async def test_find_by_ids_skips_missing(self, hero_repo):
        await _seed(hero_repo)

        heroes = await hero_repo.find_by_ids([644, 1, 70])

        assert [h.id for h in heroes] == [70, 644]

    @pytest.mark.asyncio
    async def test_find_adjacent(self, hero_repo):
        await _seed(hero_repo)

        prev_hero = await hero_repo.find_adjacent(332, AdjacentDirection.PREV)
        next_hero = await hero_repo.find_adjacent(332, AdjacentDirection.NEXT)
        none_after = await hero_repo.find_adjacent(644, AdjacentDirection.NEXT)

        assert prev_hero.id == 70
        assert next_hero.id == 644
        assert none_after is None

    @pytest.mark.asyncio
    async def test_read_timeout_degrades_to_empty_page(self, session, monkeypatch):
        repo = HeroRepository(session, read_timeout=0.01, page_timeout=0.01)
        monkeypatch.setattr(session, "exec", _slow)

        assert await repo.find_page(skip=0, limit=20) == ([], 0)
        assert await repo.find_by_id(60) is None
        assert await repo.find_top_favorited(10) == []

    @pytest.mark.asyncio
    async def test_strict_read_timeout_raises(self, session, monkeypatch):
        repo = HeroRepository(session, read_timeout=0.01)
        monkeypatch.setattr(session, "exec", _slow)

        with pytest.raises(DatabaseTimeoutError):
            await repo.find_by_id(60, strict=True)


class TestSearch:
    @pytest.mark.asyncio
    async def test_text_search_ranks_by_matched_terms(self, hero_repo):
        await _seed(hero_repo)

        heroes = await hero_repo.search_text("Batman DC", limit=10)

        assert [h.id for h in heroes] == [70, 644]

    @pytest.mark.asyncio
    async def test_text_search_matches_whole_words_only(self, hero_repo):
        await _seed(hero_repo)

        assert await hero_repo.search_text("bat", limit=10) == []

    @pytest.mark.asyncio
    async def test_text_search_respects_limit(self, hero_repo):
        await _seed(hero_repo)

        heroes = await hero_repo.search_text("comics", limit=2)

        assert [h.id for h in heroes] == [70, 332]

    @pytest.mark.asyncio
    async def test_substring_search_is_case_insensitive(self, hero_repo):
        await _seed(hero_repo)

        assert [h.id for h in await hero_repo.search_substring("BAT", 10)] == [70]
        assert [h.id for h in await hero_repo.search_substring("stark", 10)] == [332]
        assert [h.id for h in await hero_repo.search_substring("marvel", 10)] == [332]

    @pytest.mark.asyncio
    async def test_substring_search_escapes_wildcards(self, hero_repo):
        await _seed(hero_repo)

        assert await hero_repo.search_substring("%", 10) == []


class TestFavoritesCount:
    @pytest.mark.asyncio
    async def test_never_below_zero(self, hero_repo):
        await hero_repo.upsert(transform_remote_hero(make_raw_hero()), fetched_at=NOW)

        await hero_repo.increment_favorites_count(60, -1)
        assert (await hero_repo.find_by_id(60)).favorites_count == 0

        await hero_repo.increment_favorites_count(60, 2)
        assert (await hero_repo.find_by_id(60)).favorites_count == 2

    @pytest.mark.asyncio
    async def test_top_favorited_excludes_zero(self, hero_repo):
        await _seed(hero_repo)
        await hero_repo.increment_favorites_count(644, 1)
        await hero_repo.increment_favorites_count(332, 5)

        heroes = await hero_repo.find_top_favorited(10)

        assert [h.id for h in heroes] == [332, 644]


@pytest.mark.asyncio
async def test_delete_by_ids(hero_repo):
    await _seed(hero_repo)

    removed = await hero_repo.delete_by_ids([70, 999])

    assert removed == 1
    assert await hero_repo.count() == 2


@pytest.mark.asyncio
async def test_text_search_scores_every_candidate(hero_repo, session):
    session.add_all(make_hero_record(hero_id, f"Zzza {hero_id}") for hero_id in range(1, 501))
    await session.commit()
    await hero_repo.upsert(
        transform_remote_hero(make_raw_hero(620, "Spider-Man", "Peter Parker")),
        fetched_at=NOW,
    )

    heroes = await hero_repo.search_text("a man", limit=20)

    assert [h.id for h in heroes] == [620]


class TestInsertForDialect:
    def test_postgresql_uses_postgres_insert(self):
        assert insert_for_dialect("postgresql") is pg_insert

    def test_sqlite_uses_sqlite_insert(self):
        assert insert_for_dialect("sqlite") is sqlite_insert
