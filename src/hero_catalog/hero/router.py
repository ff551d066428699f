"""ヒーローAPIのルーター定義."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from hero_catalog.favorite.service import FavoriteService, get_favorite_service
from hero_catalog.hero.models import AdjacentDirection
from hero_catalog.hero.schema import (
    BatchFetchErrorResponse,
    BatchFetchRequest,
    BatchFetchResponse,
    HeroDetailResponse,
    HeroPageResponse,
    HeroResponse,
    HeroSearchResponse,
    HeroSummaryResponse,
)
from hero_catalog.hero.service import HeroSyncService, get_hero_sync_service

router = APIRouter(prefix="/heroes", tags=["heroes"])

HeroSyncServiceDep = Annotated[HeroSyncService, Depends(get_hero_sync_service)]


@router.get("", response_model=HeroPageResponse)
async def get_heroes(
    service: HeroSyncServiceDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> HeroPageResponse:
    """キャッシュ済みヒーローの一覧をID順で返す."""
    result = await service.get_paginated_heroes(page=page, limit=limit)
    return HeroPageResponse(
        heroes=[HeroResponse.model_validate(h) for h in result.heroes],
        current_page=result.current_page,
        total_pages=result.total_pages,
        total_heroes=result.total_heroes,
    )


@router.get("/search", response_model=HeroSearchResponse)
async def search_heroes(
    service: HeroSyncServiceDep,
    query: Annotated[str, Query(max_length=100)] = "",
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> HeroSearchResponse:
    """ヒーローを検索する. ローカルに無ければ外部カタログも検索する."""
    heroes = await service.search_heroes(query, limit)
    return HeroSearchResponse(
        count=len(heroes),
        heroes=[HeroSummaryResponse.from_record(h) for h in heroes],
    )


@router.get("/top", response_model=list[HeroResponse])
async def get_top_heroes(
    favorites: Annotated[FavoriteService, Depends(get_favorite_service)],
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> list[HeroResponse]:
    """お気に入り数の多いヒーローを返す."""
    heroes = await favorites.top_favorited(limit)
    return [HeroResponse.model_validate(h) for h in heroes]


@router.post("/batch", response_model=BatchFetchResponse)
async def fetch_hero_batch(
    service: HeroSyncServiceDep,
    request: BatchFetchRequest,
) -> BatchFetchResponse:
    """連続したIDのヒーローを外部カタログから取得してキャッシュする."""
    result = await service.fetch_hero_batch(request.start_id, request.count)
    return BatchFetchResponse(
        heroes=[HeroResponse.model_validate(h) for h in result.heroes],
        errors=[
            BatchFetchErrorResponse(id=error.id, error=error.error)
            for error in result.errors
        ],
        total_fetched=result.total_fetched,
    )


@router.get("/{hero_id}", response_model=HeroDetailResponse)
async def get_hero(
    service: HeroSyncServiceDep,
    hero_id: Annotated[int, Path(ge=1)],
) -> HeroDetailResponse:
    """ヒーローの詳細を返す. キャッシュが古ければ外部カタログから更新する."""
    lookup = await service.get_hero(hero_id)
    prev_hero = await service.find_adjacent_hero(hero_id, AdjacentDirection.PREV)
    next_hero = await service.find_adjacent_hero(hero_id, AdjacentDirection.NEXT)
    return HeroDetailResponse.model_validate(
        {
            **HeroResponse.model_validate(lookup.record).model_dump(),
            "source": lookup.source,
            "stale": lookup.stale,
            "prev_id": prev_hero.id if prev_hero else None,
            "next_id": next_hero.id if next_hero else None,
        }
    )
