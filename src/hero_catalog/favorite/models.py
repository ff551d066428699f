"""お気に入り台帳の結果型."""

from dataclasses import dataclass
from enum import StrEnum

from hero_catalog.database.model.hero import HeroRecord


class FavoriteOutcome(StrEnum):
    """お気に入り操作の結果."""

    ADDED = "added"
    ALREADY_FAVORITED = "already_favorited"
    REASON_UPDATED = "reason_updated"
    REMOVED = "removed"
    NOT_FAVORITED = "not_favorited"


@dataclass(frozen=True)
class FavoriteEntry:
    """お気に入り1件. ヒーローがストアから消えている場合 hero は None."""

    hero_id: int
    hero: HeroRecord | None
    reason: str | None
