"""データベース接続とセッション管理を提供するモジュール."""

from collections.abc import AsyncGenerator
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from hero_catalog.database import model  # noqa: F401
from hero_catalog.settings.settings import Settings, get_settings


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """設定値から非同期エンジンを生成する.

    Args:
    ----
        settings: アプリケーション設定

    Returns:
    -------
        AsyncEngine: asyncpg用の非同期エンジン

    """
    return create_async_engine(
        url=settings.postgres_driver_url,
        echo=settings.sql_log,
        connect_args={"server_settings": {"timezone": "UTC"}},
    )


@lru_cache
def get_async_engine() -> AsyncEngine:
    """プロセス内で共有する非同期エンジンを取得する.

    初回呼び出し時に生成するため、インポートだけでは設定を読み込まない。
    """
    return create_engine_from_settings(get_settings())


async def create_tables(engine: AsyncEngine) -> None:
    """全テーブルを作成する(存在するものはスキップ)."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_async_db_session() -> AsyncGenerator[AsyncSession]:
    """非同期データベースセッションを生成する.

    FastAPIの依存性注入で使用されるジェネレーター関数。
    セッションのライフサイクルを管理し、リクエスト終了時に自動的にクローズする。
    コミット後も取得済みレコードを参照できるよう expire_on_commit は無効にする。

    Yields
    ------
        AsyncSession: 非同期データベースセッション

    """
    async with AsyncSession(get_async_engine(), expire_on_commit=False) as session:
        yield session
