"""お気に入りスキーマモジュール."""

from .favorite import (
    FavoriteEntryResponse,
    FavoriteListResponse,
    FavoriteOutcomeResponse,
    FavoriteRequest,
)

__all__ = [
    "FavoriteEntryResponse",
    "FavoriteListResponse",
    "FavoriteOutcomeResponse",
    "FavoriteRequest",
]
