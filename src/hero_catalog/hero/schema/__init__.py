"""ヒーロースキーマモジュール."""

from .hero import (
    Appearance,
    BatchFetchErrorResponse,
    BatchFetchRequest,
    BatchFetchResponse,
    Biography,
    Connections,
    HeroData,
    HeroDetailResponse,
    HeroPageResponse,
    HeroResponse,
    HeroSearchResponse,
    HeroSummaryResponse,
    PowerStats,
    Work,
)

__all__ = [
    "Appearance",
    "BatchFetchErrorResponse",
    "BatchFetchRequest",
    "BatchFetchResponse",
    "Biography",
    "Connections",
    "HeroData",
    "HeroDetailResponse",
    "HeroPageResponse",
    "HeroResponse",
    "HeroSearchResponse",
    "HeroSummaryResponse",
    "PowerStats",
    "Work",
]
