"""ヒーローのデータモデルを定義するモジュール."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, BigInteger, Column, DateTime
from sqlmodel import Field, SQLModel


class HeroRecord(SQLModel, table=True):
    """外部カタログから取得したヒーローのキャッシュを表すデータベースモデル.

    ネストした属性グループ(powerstats, biography 等)はJSONドキュメントとして保持する。

    Attributes
    ----------
        id: 外部カタログが採番したヒーローID(主キー、不変)
        name: ヒーローの公開名(インデックス付き)
        powerstats: 能力値6項目 (例: {"intelligence": "100", ...})
        biography: 経歴 (例: {"full_name": "Bruce Wayne", "publisher": "DC Comics", ...})
        appearance: 外見
        work: 職業・拠点
        connections: 所属・親族
        image_url: 画像URL
        fetched_at: 外部カタログと最後に同期した日時
        favorites_count: お気に入り登録しているユーザー数

    """

    __tablename__ = "heroes"

    id: int = Field(
        sa_column=Column(BigInteger, primary_key=True, autoincrement=False),
    )
    name: str = Field(
        max_length=200,
        index=True,
    )
    powerstats: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )
    biography: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )
    appearance: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )
    work: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )
    connections: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )
    image_url: str = Field(
        default="",
        max_length=500,
    )
    fetched_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    favorites_count: int = Field(
        default=0,
        index=True,
    )
