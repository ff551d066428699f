"""HeroRecordテーブルのリポジトリモジュール."""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime
from typing import Annotated, Any, TypeVar, cast

from fastapi import Depends
from sqlalchemy import case, delete, func, or_, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from hero_catalog.common.exceptions import DatabaseTimeoutError, StoreError
from hero_catalog.common.log_prefix import LogPrefix
from hero_catalog.database.database import get_async_db_session
from hero_catalog.database.model.hero import HeroRecord
from hero_catalog.hero.models import AdjacentDirection
from hero_catalog.hero.schema import HeroData
from hero_catalog.settings.settings import Settings, get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

_WORD = re.compile(r"\w+")


class HeroRepository:
    """HeroRecordテーブルへのデータアクセスを提供するリポジトリ.

    読み込みはタイムアウト付きで実行し、タイムアウトやDBエラー時は
    ログを出して空の結果を返す(DB障害時はカタログが空に見えるだけにする)。
    書き込みの失敗は例外として呼び出し元に伝える。

    Attributes
    ----------
        session: 非同期DBセッション
        read_timeout: 読み込みのタイムアウト(秒)
        page_timeout: ページング・ランキング読み込みのタイムアウト(秒)
        write_timeout: 書き込みのタイムアウト(秒)

    """

    def __init__(
        self,
        session: AsyncSession,
        read_timeout: float = 5.0,
        page_timeout: float = 8.0,
        write_timeout: float = 5.0,
    ) -> None:
        """HeroRepositoryを初期化.

        Args:
        ----
            session: 非同期DBセッション
            read_timeout: 読み込みのタイムアウト(秒)
            page_timeout: ページング・ランキング読み込みのタイムアウト(秒)
            write_timeout: 書き込みのタイムアウト(秒)

        """
        self.session = session
        self.read_timeout = read_timeout
        self.page_timeout = page_timeout
        self.write_timeout = write_timeout
        # AsyncSession は複数タスクから同時に使えないため直列化する
        self._lock = asyncio.Lock()

    # --- 読み込み ---

    async def find_by_id(
        self,
        hero_id: int,
        *,
        strict: bool = False,
    ) -> HeroRecord | None:
        """IDでヒーローを取得.

        Args:
        ----
            hero_id: ヒーローID
            strict: Trueの場合、タイムアウトやDBエラーを例外として送出する

        Returns:
        -------
            HeroRecord(存在しない場合はNone)

        """
        stmt = self._select().where(col(HeroRecord.id) == hero_id)

        async def query() -> HeroRecord | None:
            result = await self.session.exec(stmt)
            return result.first()

        operation = f"find hero {hero_id}"
        if strict:
            return await self._run(operation, query, self.read_timeout)
        return await self._read(operation, query, None)

    async def find_by_ids(self, hero_ids: Sequence[int]) -> list[HeroRecord]:
        """複数IDのヒーローを取得(存在するもののみ、ID順)."""
        if not hero_ids:
            return []
        stmt = (
            self._select()
            .where(col(HeroRecord.id).in_(list(hero_ids)))
            .order_by(col(HeroRecord.id))
        )
        return await self._read("find heroes by ids", self._all(stmt), [])

    async def find_page(
        self,
        skip: int,
        limit: int,
    ) -> tuple[list[HeroRecord], int]:
        """ID順で1ページ分のヒーローと総件数を取得.

        Args:
        ----
            skip: 読み飛ばす件数
            limit: 取得件数

        Returns:
        -------
            (ヒーローのリスト, 総件数)

        """
        stmt = (
            self._select()
            .order_by(col(HeroRecord.id))
            .offset(skip)
            .limit(limit)
        )
        heroes = await self._read(
            "paginated heroes query", self._all(stmt), [], self.page_timeout
        )
        total = await self.count()
        return heroes, total

    async def count(self) -> int:
        """ヒーローの総件数を取得."""
        stmt = select(func.count()).select_from(HeroRecord)

        async def query() -> int:
            result = await self.session.exec(stmt)
            return int(result.one())

        return await self._read("heroes count query", query, 0)

    async def search_text(self, query: str, limit: int) -> list[HeroRecord]:
        """単語単位の関連度スコアでヒーローを検索.

        name, biography.full_name, biography.publisher の単語と
        クエリの単語が一致した回数をスコアとし、スコアの高い順に返す。
        LIKE で絞り込んだ候補は全件スコア計算し、件数の制限はランキング後に適用する。

        Args:
        ----
            query: 検索クエリ
            limit: 取得件数

        Returns:
        -------
            スコア降順(同点はID順)のヒーローのリスト

        """
        terms = _terms(query)
        if not terms:
            return []

        conditions = [
            func.lower(field).like(f"%{_escape_like(term)}%", escape="\\")
            for term in terms
            for field in self._search_fields()
        ]
        stmt = self._select().where(or_(*conditions)).order_by(col(HeroRecord.id))
        candidates = await self._read("text search", self._all(stmt), [])

        scored = [(score_text_match(terms, _searchable(hero)), hero) for hero in candidates]
        ranked = sorted(
            (item for item in scored if item[0] > 0),
            key=lambda item: (-item[0], item[1].id),
        )
        return [hero for _, hero in ranked[:limit]]

    async def search_substring(self, query: str, limit: int) -> list[HeroRecord]:
        """大文字小文字を区別しない部分一致でヒーローを検索(ID順)."""
        needle = query.strip().lower()
        if not needle:
            return []

        pattern = f"%{_escape_like(needle)}%"
        stmt = (
            self._select()
            .where(
                or_(
                    *(
                        func.lower(field).like(pattern, escape="\\")
                        for field in self._search_fields()
                    )
                )
            )
            .order_by(col(HeroRecord.id))
            .limit(limit)
        )
        return await self._read("substring search", self._all(stmt), [])

    async def find_top_favorited(self, limit: int) -> list[HeroRecord]:
        """お気に入り数が1以上のヒーローをお気に入り数の降順で取得."""
        stmt = (
            self._select()
            .where(col(HeroRecord.favorites_count) > 0)
            .order_by(
                col(HeroRecord.favorites_count).desc(),
                col(HeroRecord.id),
            )
            .limit(limit)
        )
        return await self._read(
            "top heroes query", self._all(stmt), [], self.page_timeout
        )

    async def find_adjacent(
        self,
        hero_id: int,
        direction: AdjacentDirection,
    ) -> HeroRecord | None:
        """指定IDの前(より小さいID)または次(より大きいID)のヒーローを取得."""
        if direction == AdjacentDirection.PREV:
            stmt = (
                self._select()
                .where(col(HeroRecord.id) < hero_id)
                .order_by(col(HeroRecord.id).desc())
            )
        else:
            stmt = (
                self._select()
                .where(col(HeroRecord.id) > hero_id)
                .order_by(col(HeroRecord.id))
            )

        async def query() -> HeroRecord | None:
            result = await self.session.exec(stmt.limit(1))
            return result.first()

        return await self._read(f"find {direction} hero of {hero_id}", query, None)

    # --- 書き込み ---

    async def upsert(self, data: HeroData, fetched_at: datetime) -> HeroRecord:
        """ヒーローを登録、または既存レコードを上書き.

        同一IDへの同時更新は後勝ち。favorites_count は変更しない。

        Args:
        ----
            data: 変換済みのヒーローデータ
            fetched_at: 同期日時

        Returns:
        -------
            保存後のHeroRecord

        Raises:
        ------
            DatabaseTimeoutError: タイムアウト時
            StoreError: DBエラー時

        """
        values = {**data.to_record_values(), "fetched_at": fetched_at}

        async def action() -> HeroRecord:
            await self.session.exec(self._build_upsert_statement(values))  # type: ignore[call-overload]
            await self.session.commit()
            result = await self.session.exec(
                self._select().where(col(HeroRecord.id) == data.id)
            )
            return result.one()

        hero = await self._run(f"upsert hero {data.id}", action, self.write_timeout)
        logger.debug(f"{LogPrefix.UPSERT_HERO} id={hero.id} name={hero.name}")
        return hero

    async def increment_favorites_count(
        self,
        hero_id: int,
        delta: int,
        *,
        commit: bool = True,
    ) -> None:
        """お気に入り数を増減する(0未満にはしない).

        Args:
        ----
            hero_id: ヒーローID
            delta: 増減値
            commit: Falseの場合はコミットせず、同じセッションの後続コミットに含める

        """
        new_count = col(HeroRecord.favorites_count) + delta
        stmt = (
            update(HeroRecord)
            .where(col(HeroRecord.id) == hero_id)
            .values(favorites_count=case((new_count < 0, 0), else_=new_count))
            .execution_options(synchronize_session=False)
        )

        async def action() -> None:
            await self.session.exec(stmt)  # type: ignore[call-overload]
            if commit:
                await self.session.commit()

        await self._run(
            f"increment favorites of hero {hero_id}", action, self.write_timeout
        )

    async def delete_by_ids(self, hero_ids: Sequence[int]) -> int:
        """指定IDのヒーローを削除(メンテナンス用).

        Returns
        -------
            削除件数

        """
        if not hero_ids:
            return 0
        stmt = delete(HeroRecord).where(col(HeroRecord.id).in_(list(hero_ids)))

        async def action() -> int:
            result = await self.session.exec(stmt)  # type: ignore[call-overload]
            await self.session.commit()
            return int(result.rowcount or 0)

        return await self._run("delete heroes", action, self.write_timeout)

    # --- プライベートメソッド ---

    def _select(self) -> Any:
        """セッション内の既存オブジェクトも最新の値で上書きするSELECT."""
        return select(HeroRecord).execution_options(populate_existing=True)

    def _all(self, stmt: Any) -> Callable[[], Awaitable[list[HeroRecord]]]:
        async def query() -> list[HeroRecord]:
            result = await self.session.exec(stmt)
            return list(result.all())

        return query

    def _search_fields(self) -> list[Any]:
        biography = cast(Any, col(HeroRecord.biography))
        return [
            col(HeroRecord.name),
            biography["full_name"].as_string(),
            biography["publisher"].as_string(),
        ]

    def _build_upsert_statement(self, values: dict[str, Any]) -> Any:
        """ON CONFLICT (id) DO UPDATE 付きINSERT文を構築."""
        table = cast(Any, HeroRecord.__table__)  # type: ignore[attr-defined]
        insert = insert_for_dialect(self.session.bind.dialect.name)
        stmt = insert(table).values(values)
        return stmt.on_conflict_do_update(
            index_elements=[table.c.id],
            set_={key: stmt.excluded[key] for key in values if key != "id"},
        )

    async def _read(
        self,
        operation: str,
        query: Callable[[], Awaitable[T]],
        default: T,
        timeout: float | None = None,
    ) -> T:
        """読み込みを実行し、失敗時は既定値を返す."""
        try:
            return await self._run(operation, query, timeout or self.read_timeout)
        except StoreError:
            return default

    async def _run(
        self,
        operation: str,
        action: Callable[[], Awaitable[T]],
        timeout: float,
    ) -> T:
        """DB操作をタイムアウト付きで実行し、失敗時はロールバックして例外を送出."""
        async with self._lock:
            try:
                return await asyncio.wait_for(action(), timeout)
            except TimeoutError as e:
                logger.warning(
                    f"{LogPrefix.DB_TIMEOUT} {operation} timed out after {timeout}s"
                )
                await self._rollback(operation)
                raise DatabaseTimeoutError(
                    f"{operation} timed out after {timeout}s"
                ) from e
            except SQLAlchemyError as e:
                logger.error(f"{operation} failed: {e}", exc_info=True)
                await self._rollback(operation)
                raise StoreError(f"{operation} failed: {e}") from e

    async def _rollback(self, operation: str) -> None:
        try:
            await self.session.rollback()
        except SQLAlchemyError as e:
            logger.error(f"rollback after {operation} failed: {e}")


def insert_for_dialect(dialect_name: str) -> Callable[..., Any]:
    """ON CONFLICT 句を組み立てられる INSERT 関数を返す.

    本番は PostgreSQL。SQLite はテスト用のインメモリエンジンのためだけに受け付ける。
    """
    if dialect_name == "sqlite":
        return sqlite_insert
    return pg_insert


def score_text_match(terms: Sequence[str], values: Sequence[str]) -> int:
    """クエリの単語が各フィールドの単語に一致した回数を数える.

    Args:
    ----
        terms: 小文字化済みのクエリ単語
        values: 検索対象フィールドの値

    Returns:
    -------
        一致回数の合計(0は不一致)

    """
    score = 0
    for value in values:
        words = _terms(value)
        score += sum(words.count(term) for term in terms)
    return score


def _terms(text: str) -> list[str]:
    return _WORD.findall(text.lower())


def _searchable(hero: HeroRecord) -> tuple[str, str, str]:
    return (
        hero.name,
        str(hero.biography.get("full_name", "")),
        str(hero.biography.get("publisher", "")),
    )


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def get_hero_repository(
    session: Annotated[AsyncSession, Depends(get_async_db_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HeroRepository:
    """FastAPI DI用のHeroRepositoryファクトリ.

    Returns
    -------
        HeroRepository

    """
    return HeroRepository(
        session,
        read_timeout=settings.db_read_timeout_seconds,
        page_timeout=settings.db_page_timeout_seconds,
        write_timeout=settings.db_write_timeout_seconds,
    )
