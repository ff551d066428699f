"""アプリケーション共通の例外階層.

全モジュールは HeroCatalogError のサブクラスを送出する。
"""

__all__ = [
    "DatabaseTimeoutError",
    "HeroCatalogError",
    "HeroNotFoundError",
    "InvalidRemoteRecordError",
    "StoreError",
    "UpstreamError",
    "UpstreamNotFoundError",
    "UpstreamTransportError",
    "UserNotFoundError",
]


class HeroCatalogError(Exception):
    """hero-catalog の全例外のルート."""


# --- 参照エラー ---


class HeroNotFoundError(HeroCatalogError):
    """ヒーローがローカルにもリモートにも存在しない."""

    def __init__(self, hero_id: int) -> None:
        self.hero_id = hero_id
        super().__init__(f"hero {hero_id} not found")


class UserNotFoundError(HeroCatalogError):
    """ユーザーが存在しない."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"user {user_id} not found")


# --- 外部カタログAPI ---


class UpstreamError(HeroCatalogError):
    """外部カタログAPI関連エラーの基底クラス."""


class UpstreamNotFoundError(UpstreamError):
    """外部カタログAPIが該当レコードなしを明示的に返した."""


class UpstreamTransportError(UpstreamError):
    """外部カタログAPIに到達できない(タイムアウト, 5xx, 不正なレスポンス等)."""


class InvalidRemoteRecordError(UpstreamError):
    """外部カタログAPIのレコードに id または name が欠けている."""


# --- ストア ---


class StoreError(HeroCatalogError):
    """DB書き込みに失敗した."""


class DatabaseTimeoutError(StoreError):
    """DB操作が制限時間を超えた."""
