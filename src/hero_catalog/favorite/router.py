"""お気に入りAPIのルーター定義.

ユーザーIDは認証レイヤーで検証済みのものを受け取る。
"""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Path

from hero_catalog.favorite.schema import (
    FavoriteEntryResponse,
    FavoriteListResponse,
    FavoriteOutcomeResponse,
    FavoriteRequest,
)
from hero_catalog.favorite.service import FavoriteService, get_favorite_service

router = APIRouter(prefix="/users/{user_id}/favorites", tags=["favorites"])

FavoriteServiceDep = Annotated[FavoriteService, Depends(get_favorite_service)]
UserId = Annotated[int, Path(ge=1)]
HeroId = Annotated[int, Path(ge=1)]


@router.get("", response_model=FavoriteListResponse)
async def get_favorites(
    service: FavoriteServiceDep,
    user_id: UserId,
) -> FavoriteListResponse:
    """ユーザーのお気に入り一覧を登録順で返す."""
    entries = await service.list_favorites(user_id)
    return FavoriteListResponse(
        user_id=user_id,
        favorites=[FavoriteEntryResponse.from_entry(e) for e in entries],
    )


@router.post("/{hero_id}", response_model=FavoriteOutcomeResponse)
async def add_favorite(
    service: FavoriteServiceDep,
    user_id: UserId,
    hero_id: HeroId,
    request: Annotated[FavoriteRequest | None, Body()] = None,
) -> FavoriteOutcomeResponse:
    """ヒーローをお気に入りに追加する(理由は任意)."""
    outcome = await service.add_favorite(
        user_id,
        hero_id,
        reason=request.reason if request else None,
    )
    return FavoriteOutcomeResponse(user_id=user_id, hero_id=hero_id, outcome=outcome)


@router.delete("/{hero_id}", response_model=FavoriteOutcomeResponse)
async def remove_favorite(
    service: FavoriteServiceDep,
    user_id: UserId,
    hero_id: HeroId,
) -> FavoriteOutcomeResponse:
    """ヒーローをお気に入りから削除する."""
    outcome = await service.remove_favorite(user_id, hero_id)
    return FavoriteOutcomeResponse(user_id=user_id, hero_id=hero_id, outcome=outcome)
