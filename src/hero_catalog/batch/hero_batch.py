"""ヒーローカタログのメンテナンス用バッチジョブ.

外部カタログからのヒーロー一括取得、静的データの投入、
検索結果の取り込み、不要なヒーローの削除を行う。
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Annotated

import typer
from sqlmodel.ext.asyncio.session import AsyncSession

from hero_catalog.batch.seed_data import STATIC_HEROES
from hero_catalog.common.log_prefix import LogPrefix
from hero_catalog.database.database import create_tables, get_async_engine
from hero_catalog.database.repository import HeroRepository
from hero_catalog.hero.service import HeroSyncService
from hero_catalog.infra.external.superhero_api_client import SuperheroApiClient
from hero_catalog.settings.settings import get_settings

app = typer.Typer()

settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.batch_log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@app.command()
def fetch(
    start_id: Annotated[int, typer.Option(min=1, help="取得を開始するヒーローID")] = 1,
    count: Annotated[int, typer.Option(min=1, help="取得件数(上限50)")] = 20,
) -> None:
    """外部カタログから連続したIDのヒーローを取得してDBに取り込む."""
    asyncio.run(fetch_heroes(start_id=start_id, count=count))


@app.command()
def seed() -> None:
    """静的ヒーローデータをDBに投入する(外部カタログには接続しない)."""
    asyncio.run(seed_heroes())


@app.command()
def search(
    name: Annotated[str, typer.Argument(help="外部カタログで検索する名前")],
) -> None:
    """外部カタログを名前で検索し、結果をDBに取り込む."""
    asyncio.run(import_search_results(name))


@app.command()
def remove(
    hero_ids: Annotated[list[int], typer.Argument(help="削除するヒーローID")],
) -> None:
    """指定したIDのヒーローをDBから削除する."""
    asyncio.run(remove_heroes(hero_ids))


@app.command("count")
def count_command(
    seed_if_empty: Annotated[
        bool,
        typer.Option(help="ヒーローが0件なら静的データを投入する"),
    ] = False,
) -> None:
    """DB内のヒーロー件数を表示する."""
    asyncio.run(count_heroes(seed_if_empty=seed_if_empty))


@asynccontextmanager
async def hero_sync_service() -> AsyncIterator[HeroSyncService]:
    """バッチ用のHeroSyncServiceを生成し、終了時にリソースを解放する."""
    engine = get_async_engine()
    await create_tables(engine)
    catalog_client = SuperheroApiClient.from_settings(settings)
    try:
        async with AsyncSession(engine, expire_on_commit=False) as session:
            yield HeroSyncService(
                hero_repo=HeroRepository(
                    session,
                    read_timeout=settings.db_read_timeout_seconds,
                    page_timeout=settings.db_page_timeout_seconds,
                    write_timeout=settings.db_write_timeout_seconds,
                ),
                catalog_client=catalog_client,
                freshness=timedelta(hours=settings.hero_freshness_hours),
                batch_max_size=settings.batch_max_size,
                batch_concurrency=settings.batch_concurrency,
            )
    finally:
        await catalog_client.aclose()


async def fetch_heroes(start_id: int, count: int) -> None:
    """ヒーローを一括取得.

    Args:
    ----
        start_id: 開始ID
        count: 取得件数

    """
    logger.info(f"{LogPrefix.BATCH_JOB} Starting fetch with start_id={start_id}, count={count}")

    async with hero_sync_service() as service:
        result = await service.fetch_hero_batch(start_id, count)

    for error in result.errors:
        logger.warning(f"{LogPrefix.BATCH_JOB} id={error.id} failed: {error.error}")
    logger.info(
        f"{LogPrefix.BATCH_JOB} Completed: fetched {result.total_fetched} hero(es), "
        f"{len(result.errors)} error(s)"
    )


async def seed_heroes() -> None:
    """静的ヒーローデータを投入."""
    async with hero_sync_service() as service:
        stored = await service.import_remote_records(STATIC_HEROES)
    logger.info(f"{LogPrefix.BATCH_JOB} Seeded {len(stored)} hero(es)")


async def import_search_results(name: str) -> None:
    """外部カタログの検索結果を取り込み."""
    async with hero_sync_service() as service:
        raw_results = await service.search_remote_catalog(name)
        if not raw_results:
            logger.info(f"{LogPrefix.BATCH_JOB} No heroes found for {name!r}")
            return
        stored = await service.import_remote_records(raw_results)
    for hero in stored:
        typer.echo(f"{hero.id}\t{hero.name}")
    logger.info(f"{LogPrefix.BATCH_JOB} Imported {len(stored)} hero(es) for {name!r}")


async def remove_heroes(hero_ids: list[int]) -> None:
    """ヒーローを削除."""
    async with hero_sync_service() as service:
        before = await service.hero_repo.count()
        removed = await service.remove_heroes(hero_ids)
        after = await service.hero_repo.count()
    logger.info(
        f"{LogPrefix.BATCH_JOB} Removed {removed} hero(es): {before} -> {after} in database"
    )


async def count_heroes(seed_if_empty: bool) -> None:
    """ヒーロー件数を表示."""
    async with hero_sync_service() as service:
        total = await service.hero_repo.count()
        typer.echo(f"{total} hero(es) in database")
        if total == 0 and seed_if_empty:
            stored = await service.import_remote_records(STATIC_HEROES)
            typer.echo(f"Seeded {len(stored)} hero(es)")


if __name__ == "__main__":
    app()
