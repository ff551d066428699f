"""ヒーローデータ同期のサービスモジュール."""

import asyncio
import logging
import math
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime, timedelta
from typing import Annotated, Any

from fastapi import Depends

from hero_catalog.common.exceptions import (
    HeroCatalogError,
    HeroNotFoundError,
    InvalidRemoteRecordError,
    StoreError,
    UpstreamError,
    UpstreamNotFoundError,
    UpstreamTransportError,
)
from hero_catalog.common.log_prefix import LogPrefix
from hero_catalog.database.model.hero import HeroRecord
from hero_catalog.database.repository.hero_repository import (
    HeroRepository,
    get_hero_repository,
)
from hero_catalog.hero.models import (
    AdjacentDirection,
    BatchFetchError,
    BatchFetchResult,
    HeroLookup,
    HeroPage,
    HeroSource,
)
from hero_catalog.hero.protocol import HeroCatalogClient
from hero_catalog.hero.schema import HeroData
from hero_catalog.hero.transform import transform_remote_hero
from hero_catalog.infra.external.superhero_api_client import get_catalog_client
from hero_catalog.settings.settings import Settings, get_settings

DEFAULT_FRESHNESS = timedelta(hours=24)

# 一括取得の上限件数 (外部APIの乱用防止)
MAX_BATCH_SIZE = 50

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class HeroSyncService:
    """ローカルキャッシュと外部カタログの同期ロジックを提供するサービス.

    Attributes
    ----------
        hero_repo: HeroRecordリポジトリ
        catalog_client: 外部カタログクライアント
        freshness: キャッシュを新鮮とみなす期間
        batch_max_size: 一括取得の上限件数
        batch_concurrency: 一括取得の同時実行数

    """

    def __init__(
        self,
        hero_repo: HeroRepository,
        catalog_client: HeroCatalogClient,
        freshness: timedelta = DEFAULT_FRESHNESS,
        batch_max_size: int = MAX_BATCH_SIZE,
        batch_concurrency: int = 10,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """HeroSyncServiceを初期化.

        Args:
        ----
            hero_repo: HeroRecordリポジトリ
            catalog_client: 外部カタログクライアント
            freshness: キャッシュを新鮮とみなす期間
            batch_max_size: 一括取得の上限件数
            batch_concurrency: 一括取得の同時実行数
            clock: 現在時刻を返す関数(UTC)

        """
        self.hero_repo = hero_repo
        self.catalog_client = catalog_client
        self.freshness = freshness
        self.batch_max_size = batch_max_size
        self.batch_concurrency = max(batch_concurrency, 1)
        self._clock = clock

    # --- パブリックメソッド ---

    async def get_hero(self, hero_id: int) -> HeroLookup:
        """ヒーローを1件取得.

        キャッシュが新鮮ならそのまま返し、期限切れまたは未取得なら
        外部カタログから取得して保存する。外部カタログの取得に失敗した場合、
        期限切れのキャッシュがあれば stale=True で返す。

        Args:
        ----
            hero_id: ヒーローID

        Returns:
        -------
            取得元付きのヒーロー

        Raises:
        ------
            HeroNotFoundError: ローカルにもリモートにも存在しない場合

        """
        now = self._clock()
        cached = await self.hero_repo.find_by_id(hero_id)

        if cached is not None and self._is_fresh(cached, now):
            logger.debug(f"{LogPrefix.SYNC_HERO} id={hero_id} cache hit")
            return HeroLookup(record=cached, source=HeroSource.LOCAL_CACHE)

        try:
            raw = await self.catalog_client.fetch_by_id(hero_id)
            data = transform_remote_hero(raw)
        except UpstreamError as e:
            if cached is not None:
                logger.warning(
                    f"{LogPrefix.SYNC_HERO} id={hero_id} refresh failed, "
                    f"serving stale record: {e}"
                )
                return HeroLookup(
                    record=cached,
                    source=HeroSource.LOCAL_CACHE,
                    stale=True,
                )
            logger.info(f"{LogPrefix.SYNC_HERO} id={hero_id} not found: {e}")
            raise HeroNotFoundError(hero_id) from e

        record = await self._store(data, now, cached)
        logger.info(f"{LogPrefix.SYNC_HERO} id={hero_id} refreshed from remote")
        return HeroLookup(record=record, source=HeroSource.REMOTE_CATALOG)

    async def search_heroes(self, query: str, limit: int = 20) -> list[HeroRecord]:
        """ヒーローを検索.

        以下の順に試し、最初に結果が得られた段階で返す。

        1. 空のクエリ: ID順の先頭 limit 件
        2. 関連度スコア順のテキスト検索
        3. 部分一致検索
        4. 外部カタログの名前検索(結果を最大 limit 件保存して返す)

        Args:
        ----
            query: 検索クエリ
            limit: 取得件数

        Returns:
        -------
            ヒーローのリスト(該当なしは空リスト)

        """
        query = (query or "").strip()
        limit = max(limit, 1)

        if not query:
            heroes, _ = await self.hero_repo.find_page(skip=0, limit=limit)
            return heroes

        heroes = await self.hero_repo.search_text(query, limit)
        if heroes:
            return heroes

        heroes = await self.hero_repo.search_substring(query, limit)
        if heroes:
            return heroes

        logger.info(
            f"{LogPrefix.SEARCH_HERO} no local heroes for {query!r}, searching remote"
        )
        try:
            raw_results = await self.search_remote_catalog(query)
        except UpstreamTransportError as e:
            logger.warning(f"{LogPrefix.SEARCH_HERO} remote search failed: {e}")
            return []

        if not raw_results:
            return []

        logger.info(
            f"{LogPrefix.SEARCH_HERO} found {len(raw_results)} remote heroes "
            f"for {query!r}, storing up to {limit}"
        )
        return await self._store_raw_records(raw_results[:limit], keep_unsaved=True)

    async def fetch_hero_batch(self, start_id: int, count: int) -> BatchFetchResult:
        """連続したIDのヒーローを並行して取得.

        count は batch_max_size で丸める。個々のIDの失敗は errors に集め、
        他のIDの取得は継続する。

        Args:
        ----
            start_id: 開始ID
            count: 取得件数

        Returns:
        -------
            取得できたヒーロー、失敗したIDとエラー内容

        """
        size = max(0, min(count, self.batch_max_size))
        result = BatchFetchResult()
        semaphore = asyncio.Semaphore(self.batch_concurrency)

        async def fetch_one(hero_id: int) -> None:
            async with semaphore:
                try:
                    lookup = await self.get_hero(hero_id)
                except HeroCatalogError as e:
                    result.errors.append(BatchFetchError(id=hero_id, error=str(e)))
                    return
                except Exception as e:
                    logger.error(
                        f"{LogPrefix.SYNC_HERO} id={hero_id} unexpected error: {e}",
                        exc_info=True,
                    )
                    result.errors.append(BatchFetchError(id=hero_id, error=str(e)))
                    return
                result.heroes.append(lookup.record)

        await asyncio.gather(
            *(fetch_one(hero_id) for hero_id in range(start_id, start_id + size))
        )

        logger.info(
            f"{LogPrefix.BATCH_JOB} ids {start_id}..{start_id + size - 1}: "
            f"fetched={result.total_fetched} errors={len(result.errors)}"
        )
        return result

    async def search_remote_catalog(self, name: str) -> list[dict[str, Any]]:
        """外部カタログを名前で検索.

        Raises
        ------
            UpstreamTransportError: 通信エラー時

        """
        try:
            return await self.catalog_client.search_by_name(name)
        except UpstreamNotFoundError:
            return []

    async def get_paginated_heroes(self, page: int = 1, limit: int = 20) -> HeroPage:
        """ID順のヒーロー一覧を1ページ分取得.

        DBの読み込みに失敗した場合は空のページを返す。
        """
        page = max(page, 1)
        limit = max(limit, 1)
        heroes, total = await self.hero_repo.find_page(
            skip=(page - 1) * limit,
            limit=limit,
        )
        return HeroPage(
            heroes=heroes,
            current_page=page,
            total_pages=math.ceil(total / limit) or 1,
            total_heroes=total,
        )

    async def find_adjacent_hero(
        self,
        hero_id: int,
        direction: AdjacentDirection,
    ) -> HeroRecord | None:
        """前後のヒーローを取得."""
        return await self.hero_repo.find_adjacent(hero_id, direction)

    async def import_remote_records(
        self,
        raw_records: Iterable[dict[str, Any]],
    ) -> list[HeroRecord]:
        """外部カタログ形式のレコード(静的データや検索結果)を保存."""
        return await self._store_raw_records(raw_records)

    async def remove_heroes(self, hero_ids: Sequence[int]) -> int:
        """ヒーローを削除(メンテナンス用)."""
        removed = await self.hero_repo.delete_by_ids(hero_ids)
        logger.info(f"{LogPrefix.BATCH_JOB} removed {removed} hero(es)")
        return removed

    # --- プライベートメソッド ---

    def _is_fresh(self, record: HeroRecord, now: datetime) -> bool:
        fetched_at = record.fetched_at
        # SQLite はタイムゾーンを保持しないため UTC とみなす
        if fetched_at.tzinfo is None:
            fetched_at = fetched_at.replace(tzinfo=UTC)
        return now - fetched_at < self.freshness

    async def _store(
        self,
        data: HeroData,
        now: datetime,
        cached: HeroRecord | None,
    ) -> HeroRecord:
        """取得したヒーローを保存. 保存に失敗しても取得結果は返す."""
        try:
            return await self.hero_repo.upsert(data, fetched_at=now)
        except StoreError as e:
            logger.error(
                f"{LogPrefix.UPSERT_HERO} id={data.id} could not be stored: {e}"
            )
            return HeroRecord(
                **data.to_record_values(),
                fetched_at=now,
                favorites_count=cached.favorites_count if cached else 0,
            )

    async def _store_raw_records(
        self,
        raw_records: Iterable[dict[str, Any]],
        *,
        keep_unsaved: bool = False,
    ) -> list[HeroRecord]:
        """外部カタログのレコードを変換して保存.

        変換できないレコードはスキップする。保存に失敗したレコードは、
        keep_unsaved=True なら未保存のまま結果に含め、それ以外はスキップする。
        """
        now = self._clock()
        stored: list[HeroRecord] = []
        for raw in raw_records:
            try:
                data = transform_remote_hero(raw)
            except InvalidRemoteRecordError as e:
                logger.error(
                    f"{LogPrefix.UPSERT_HERO} skipping remote hero "
                    f"{raw.get('name')!r}: {e}"
                )
                continue
            if keep_unsaved:
                stored.append(await self._store(data, now, None))
                continue
            try:
                stored.append(await self.hero_repo.upsert(data, fetched_at=now))
            except StoreError as e:
                logger.error(
                    f"{LogPrefix.UPSERT_HERO} skipping remote hero {data.id}: {e}"
                )
        return stored


async def get_hero_sync_service(
    hero_repo: Annotated[HeroRepository, Depends(get_hero_repository)],
    catalog_client: Annotated[HeroCatalogClient, Depends(get_catalog_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HeroSyncService:
    """FastAPI DI用のHeroSyncServiceファクトリ.

    Returns
    -------
        HeroSyncService

    """
    return HeroSyncService(
        hero_repo=hero_repo,
        catalog_client=catalog_client,
        freshness=timedelta(hours=settings.hero_freshness_hours),
        batch_max_size=settings.batch_max_size,
        batch_concurrency=settings.batch_concurrency,
    )
