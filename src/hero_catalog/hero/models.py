"""同期エンジンが返す結果型."""

from dataclasses import dataclass, field
from enum import StrEnum

from hero_catalog.database.model.hero import HeroRecord


class HeroSource(StrEnum):
    """ヒーローレコードの取得元."""

    LOCAL_CACHE = "local_cache"
    REMOTE_CATALOG = "remote_catalog"


class AdjacentDirection(StrEnum):
    """隣接ヒーローの探索方向."""

    PREV = "prev"
    NEXT = "next"


@dataclass(frozen=True)
class HeroLookup:
    """get_hero の結果.

    stale=True はリモート更新に失敗し、期限切れのキャッシュを返したことを示す。
    """

    record: HeroRecord
    source: HeroSource
    stale: bool = False


@dataclass(frozen=True)
class BatchFetchError:
    """一括取得で失敗したIDとエラー内容."""

    id: int
    error: str


@dataclass
class BatchFetchResult:
    """一括取得の結果. heroes の並びは完了順."""

    heroes: list[HeroRecord] = field(default_factory=list)
    errors: list[BatchFetchError] = field(default_factory=list)

    @property
    def total_fetched(self) -> int:
        return len(self.heroes)


@dataclass(frozen=True)
class HeroPage:
    """ページング済みヒーロー一覧."""

    heroes: list[HeroRecord]
    current_page: int
    total_pages: int
    total_heroes: int
