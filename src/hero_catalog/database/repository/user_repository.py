"""UserAccountテーブルのリポジトリモジュール."""

import asyncio
import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from hero_catalog.common.exceptions import DatabaseTimeoutError, StoreError
from hero_catalog.common.log_prefix import LogPrefix
from hero_catalog.database.database import get_async_db_session
from hero_catalog.database.model.user import UserAccount
from hero_catalog.settings.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class UserRepository:
    """UserAccountテーブルへのデータアクセスを提供するリポジトリ.

    お気に入り台帳の更新に使うため、失敗は全て例外として送出する。

    Attributes
    ----------
        session: 非同期DBセッション
        timeout: DB操作のタイムアウト(秒)

    """

    def __init__(self, session: AsyncSession, timeout: float = 5.0) -> None:
        """UserRepositoryを初期化.

        Args:
        ----
            session: 非同期DBセッション
            timeout: DB操作のタイムアウト(秒)

        """
        self.session = session
        self.timeout = timeout

    async def get_by_id(self, user_id: int) -> UserAccount | None:
        """IDでユーザーを取得.

        Raises
        ------
            DatabaseTimeoutError: タイムアウト時
            StoreError: DBエラー時

        """
        stmt = (
            select(UserAccount)
            .where(col(UserAccount.id) == user_id)
            .execution_options(populate_existing=True)
        )
        try:
            result = await asyncio.wait_for(self.session.exec(stmt), self.timeout)
            return result.first()
        except TimeoutError as e:
            logger.warning(f"{LogPrefix.DB_TIMEOUT} find user {user_id} timed out")
            raise DatabaseTimeoutError(f"find user {user_id} timed out") from e
        except SQLAlchemyError as e:
            logger.error(f"find user {user_id} failed: {e}", exc_info=True)
            raise StoreError(f"find user {user_id} failed: {e}") from e

    async def create(
        self,
        username: str,
        email: str,
        password_hash: str = "",
    ) -> UserAccount:
        """ユーザーを登録."""
        user = UserAccount(username=username, email=email, password_hash=password_hash)
        await self.save(user)
        return user

    async def save(self, user: UserAccount) -> None:
        """ユーザーの変更をコミット.

        同じセッションで未コミットの変更(お気に入り数の増減等)もまとめて確定する。

        Raises
        ------
            DatabaseTimeoutError: タイムアウト時
            StoreError: DBエラー時

        """
        self.session.add(user)
        try:
            await asyncio.wait_for(self.session.commit(), self.timeout)
        except TimeoutError as e:
            logger.warning(f"{LogPrefix.DB_TIMEOUT} save user {user.id} timed out")
            await self.session.rollback()
            raise DatabaseTimeoutError(f"save user {user.id} timed out") from e
        except SQLAlchemyError as e:
            logger.error(f"save user {user.id} failed: {e}", exc_info=True)
            await self.session.rollback()
            raise StoreError(f"save user {user.id} failed: {e}") from e


async def get_user_repository(
    session: Annotated[AsyncSession, Depends(get_async_db_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> UserRepository:
    """FastAPI DI用のUserRepositoryファクトリ.

    Returns
    -------
        UserRepository

    """
    return UserRepository(session, timeout=settings.db_write_timeout_seconds)
