"""ヒーローのスキーマ定義.

属性名は snake_case で保持し、レスポンスでは camelCase で出力する。
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from hero_catalog.database.model.hero import HeroRecord
from hero_catalog.hero.models import HeroSource


class CamelModel(BaseModel):
    """camelCase エイリアスで入出力するスキーマの基底クラス."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PowerStats(CamelModel):
    """能力値6項目. 値は外部カタログに合わせて文字列で保持する."""

    intelligence: str = "0"
    strength: str = "0"
    speed: str = "0"
    durability: str = "0"
    power: str = "0"
    combat: str = "0"


class Biography(CamelModel):
    """経歴."""

    full_name: str = ""
    alter_egos: str = ""
    aliases: list[str] = Field(default_factory=list)
    place_of_birth: str = ""
    first_appearance: str = ""
    publisher: str = ""
    alignment: str = ""


class Appearance(CamelModel):
    """外見."""

    gender: str = ""
    race: str = ""
    height: list[str] = Field(default_factory=list)
    weight: list[str] = Field(default_factory=list)
    eye_color: str = ""
    hair_color: str = ""


class Work(CamelModel):
    """職業・拠点."""

    occupation: str = ""
    base: str = ""


class Connections(CamelModel):
    """所属・親族."""

    group_affiliation: str = ""
    relatives: str = ""


class HeroData(CamelModel):
    """外部カタログのレコードを変換した、全項目が埋まったヒーローデータ."""

    id: int
    name: str
    powerstats: PowerStats = Field(default_factory=PowerStats)
    biography: Biography = Field(default_factory=Biography)
    appearance: Appearance = Field(default_factory=Appearance)
    work: Work = Field(default_factory=Work)
    connections: Connections = Field(default_factory=Connections)
    image_url: str = ""

    def to_record_values(self) -> dict[str, Any]:
        """heroes テーブルのカラム値に変換する(favorites_count, fetched_at は含まない)."""
        return {
            "id": self.id,
            "name": self.name,
            "powerstats": self.powerstats.model_dump(),
            "biography": self.biography.model_dump(),
            "appearance": self.appearance.model_dump(),
            "work": self.work.model_dump(),
            "connections": self.connections.model_dump(),
            "image_url": self.image_url,
        }


class HeroResponse(HeroData):
    """ヒーローレスポンススキーマ."""

    fetched_at: datetime
    favorites_count: int = 0


class HeroDetailResponse(HeroResponse):
    """ヒーロー詳細レスポンススキーマ(取得元と前後のヒーローIDを含む)."""

    source: HeroSource
    stale: bool = False
    prev_id: int | None = None
    next_id: int | None = None


class HeroSummaryResponse(CamelModel):
    """検索結果用の簡易ヒーロースキーマ."""

    id: int
    name: str
    publisher: str
    image_url: str | None

    @classmethod
    def from_record(cls, record: HeroRecord) -> "HeroSummaryResponse":
        """HeroRecordから簡易スキーマを生成する."""
        return cls(
            id=record.id,
            name=record.name,
            publisher=record.biography.get("publisher") or "Unknown",
            image_url=record.image_url or None,
        )


class HeroSearchResponse(CamelModel):
    """ヒーロー検索レスポンススキーマ."""

    count: int
    heroes: list[HeroSummaryResponse]


class HeroPageResponse(CamelModel):
    """ページング済みヒーロー一覧レスポンススキーマ."""

    heroes: list[HeroResponse]
    current_page: int
    total_pages: int
    total_heroes: int


class BatchFetchRequest(CamelModel):
    """一括取得リクエストスキーマ. count の上限はサービス側で丸める."""

    start_id: int = Field(default=1, ge=1)
    count: int = Field(default=20, ge=1)


class BatchFetchErrorResponse(CamelModel):
    """一括取得で失敗したIDとエラー内容."""

    id: int
    error: str


class BatchFetchResponse(CamelModel):
    """一括取得レスポンススキーマ."""

    heroes: list[HeroResponse]
    errors: list[BatchFetchErrorResponse]
    total_fetched: int
