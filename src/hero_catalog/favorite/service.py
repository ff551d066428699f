"""お気に入り台帳のサービスモジュール."""

import logging
from typing import Annotated, Any

from fastapi import Depends

from hero_catalog.common.exceptions import HeroNotFoundError, UserNotFoundError
from hero_catalog.common.log_prefix import LogPrefix
from hero_catalog.database.model.hero import HeroRecord
from hero_catalog.database.model.user import UserAccount
from hero_catalog.database.repository.hero_repository import (
    HeroRepository,
    get_hero_repository,
)
from hero_catalog.database.repository.user_repository import (
    UserRepository,
    get_user_repository,
)
from hero_catalog.favorite.models import FavoriteEntry, FavoriteOutcome

logger = logging.getLogger(__name__)


class FavoriteService:
    """ユーザーごとのお気に入りヒーローを管理するサービス.

    お気に入りの追加・削除では、ユーザーの台帳とヒーローのお気に入り数を
    同じトランザクションで更新する。そのため両リポジトリは同じセッションを共有する。

    Attributes
    ----------
        hero_repo: HeroRecordリポジトリ
        user_repo: UserAccountリポジトリ

    """

    def __init__(
        self,
        hero_repo: HeroRepository,
        user_repo: UserRepository,
    ) -> None:
        """FavoriteServiceを初期化.

        Args:
        ----
            hero_repo: HeroRecordリポジトリ
            user_repo: UserAccountリポジトリ

        """
        self.hero_repo = hero_repo
        self.user_repo = user_repo

    async def add_favorite(
        self,
        user_id: int,
        hero_id: int,
        reason: str | None = None,
    ) -> FavoriteOutcome:
        """ヒーローをお気に入りに追加.

        登録済みの場合、理由が指定されていれば理由を更新し、
        指定されていなければ何もしない。

        Args:
        ----
            user_id: ユーザーID
            hero_id: ヒーローID
            reason: お気に入りの理由(空白のみは未指定扱い)

        Returns:
        -------
            ADDED / ALREADY_FAVORITED / REASON_UPDATED

        Raises:
        ------
            UserNotFoundError: ユーザーが存在しない場合
            HeroNotFoundError: ヒーローが存在しない場合
            StoreError: DB書き込みに失敗した場合

        """
        user = await self._get_user(user_id)
        hero = await self.hero_repo.find_by_id(hero_id, strict=True)
        if hero is None:
            raise HeroNotFoundError(hero_id)

        reason = _normalize_reason(reason)

        if hero_id in user.favorite_heroes:
            if reason is None:
                return FavoriteOutcome.ALREADY_FAVORITED
            user.favorite_reasons = _with_reason(user.favorite_reasons, hero_id, reason)
            await self.user_repo.save(user)
            logger.info(
                f"{LogPrefix.FAVORITE} user={user_id} hero={hero_id} reason updated"
            )
            return FavoriteOutcome.REASON_UPDATED

        user.favorite_heroes = [*user.favorite_heroes, hero_id]
        if reason is not None:
            user.favorite_reasons = _with_reason(user.favorite_reasons, hero_id, reason)
        await self.hero_repo.increment_favorites_count(hero_id, 1, commit=False)
        await self.user_repo.save(user)
        logger.info(f"{LogPrefix.FAVORITE} user={user_id} hero={hero_id} added")
        return FavoriteOutcome.ADDED

    async def remove_favorite(self, user_id: int, hero_id: int) -> FavoriteOutcome:
        """ヒーローをお気に入りから削除.

        ヒーローがストアから消えていても台帳からは削除できる。

        Returns
        -------
            REMOVED / NOT_FAVORITED

        Raises
        ------
            UserNotFoundError: ユーザーが存在しない場合
            StoreError: DB書き込みに失敗した場合

        """
        user = await self._get_user(user_id)
        if hero_id not in user.favorite_heroes:
            return FavoriteOutcome.NOT_FAVORITED

        user.favorite_heroes = [h for h in user.favorite_heroes if h != hero_id]
        user.favorite_reasons = [
            entry for entry in user.favorite_reasons if entry.get("hero_id") != hero_id
        ]
        await self.hero_repo.increment_favorites_count(hero_id, -1, commit=False)
        await self.user_repo.save(user)
        logger.info(f"{LogPrefix.FAVORITE} user={user_id} hero={hero_id} removed")
        return FavoriteOutcome.REMOVED

    async def top_favorited(self, limit: int = 10) -> list[HeroRecord]:
        """お気に入り数の多いヒーローを取得(0件のヒーローは含めない)."""
        return await self.hero_repo.find_top_favorited(max(limit, 1))

    async def list_favorites(self, user_id: int) -> list[FavoriteEntry]:
        """ユーザーのお気に入りを登録順に取得."""
        user = await self._get_user(user_id)
        heroes = {
            hero.id: hero
            for hero in await self.hero_repo.find_by_ids(user.favorite_heroes)
        }
        reasons = {
            entry["hero_id"]: entry.get("reason")
            for entry in user.favorite_reasons
            if "hero_id" in entry
        }
        return [
            FavoriteEntry(
                hero_id=hero_id,
                hero=heroes.get(hero_id),
                reason=reasons.get(hero_id),
            )
            for hero_id in user.favorite_heroes
        ]

    async def _get_user(self, user_id: int) -> UserAccount:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user


def _normalize_reason(reason: str | None) -> str | None:
    if reason is None:
        return None
    return reason.strip() or None


def _with_reason(
    reasons: list[dict[str, Any]],
    hero_id: int,
    reason: str,
) -> list[dict[str, Any]]:
    """hero_id の理由を差し替えた新しいリストを返す(1ヒーロー1件)."""
    updated = [entry for entry in reasons if entry.get("hero_id") != hero_id]
    updated.append({"hero_id": hero_id, "reason": reason})
    return updated


async def get_favorite_service(
    hero_repo: Annotated[HeroRepository, Depends(get_hero_repository)],
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
) -> FavoriteService:
    """FastAPI DI用のFavoriteServiceファクトリ.

    Returns
    -------
        FavoriteService

    """
    return FavoriteService(hero_repo=hero_repo, user_repo=user_repo)
