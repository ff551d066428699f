"""お気に入りのリクエスト・レスポンススキーマ."""

from pydantic import Field

from hero_catalog.favorite.models import FavoriteEntry, FavoriteOutcome
from hero_catalog.hero.schema import HeroSummaryResponse
from hero_catalog.hero.schema.hero import CamelModel


class FavoriteRequest(CamelModel):
    """お気に入り追加リクエストスキーマ."""

    reason: str | None = Field(default=None, max_length=500)


class FavoriteOutcomeResponse(CamelModel):
    """お気に入り操作の結果レスポンススキーマ."""

    user_id: int
    hero_id: int
    outcome: FavoriteOutcome


class FavoriteEntryResponse(CamelModel):
    """お気に入り1件のレスポンススキーマ."""

    hero_id: int
    reason: str | None
    hero: HeroSummaryResponse | None

    @classmethod
    def from_entry(cls, entry: FavoriteEntry) -> "FavoriteEntryResponse":
        """FavoriteEntryからレスポンスを生成する."""
        return cls(
            hero_id=entry.hero_id,
            reason=entry.reason,
            hero=HeroSummaryResponse.from_record(entry.hero) if entry.hero else None,
        )


class FavoriteListResponse(CamelModel):
    """お気に入り一覧レスポンススキーマ."""

    user_id: int
    favorites: list[FavoriteEntryResponse]
