"""ユーザーアカウントのデータモデルを定義するモジュール."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, BigInteger, Column, DateTime, Integer
from sqlmodel import Field, SQLModel


class UserAccount(SQLModel, table=True):
    """ユーザーアカウントを表すデータベースモデル.

    認証情報は認証レイヤーが管理し、ここではお気に入り台帳のみ扱う。
    favorite_reasons の各要素は favorite_heroes に含まれるヒーローに対応する。

    Attributes
    ----------
        id: 自動採番ID(主キー)
        username: ユーザー名
        email: メールアドレス
        password_hash: ハッシュ化済みパスワード
        favorite_heroes: お気に入りヒーローIDのリスト(登録順、重複なし)
        favorite_reasons: {"hero_id": int, "reason": str} のリスト
        created_at: 登録日時

    """

    __tablename__ = "users"

    id: int | None = Field(
        default=None,
        sa_column=Column(
            BigInteger().with_variant(Integer, "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
    )
    username: str = Field(
        max_length=30,
        unique=True,
        index=True,
    )
    email: str = Field(
        max_length=254,
        unique=True,
        index=True,
    )
    password_hash: str = Field(
        default="",
        max_length=255,
    )
    favorite_heroes: list[int] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
    favorite_reasons: list[dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
