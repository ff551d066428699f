"""アプリケーション設定を管理するモジュール."""

from functools import lru_cache

from pydantic import computed_field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """アプリケーション全体の設定を管理するクラス.

    環境変数から設定値を読み込み、データベース接続情報や
    外部ヒーローカタログAPIの接続情報などを提供する。

    Attributes
    ----------
        environment: 実行環境(development, production等)
        postgres_host: PostgreSQLホスト名
        postgres_port: PostgreSQLポート番号
        postgres_user: PostgreSQLユーザー名
        postgres_password: PostgreSQLパスワード
        postgres_database: PostgreSQLデータベース名
        sql_log: SQLログの出力有無(デフォルト: False)
        log_level: APIサーバーのログレベル
        superhero_api_base_url: ヒーローカタログAPIのベースURL
        superhero_api_key: ヒーローカタログAPIのアクセストークン
        superhero_api_timeout_seconds: ヒーローカタログAPIのタイムアウト(秒)
        hero_freshness_hours: キャッシュ済みヒーローを新鮮とみなす時間
        batch_max_size: 一括取得の上限件数
        batch_concurrency: 一括取得の同時実行数
        db_read_timeout_seconds: DB読み込みのタイムアウト(秒)
        db_page_timeout_seconds: ページング読み込みのタイムアウト(秒)
        db_write_timeout_seconds: DB書き込みのタイムアウト(秒)
        batch_log_level: バッチジョブのログレベル

    """

    environment: str = "development"

    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_database: str = "hero_catalog"

    sql_log: bool = False
    log_level: str = "INFO"

    superhero_api_base_url: str = "https://superheroapi.com/api"
    superhero_api_key: str = ""
    superhero_api_timeout_seconds: float = 10.0

    hero_freshness_hours: int = 24

    batch_max_size: int = 50
    batch_concurrency: int = 10

    db_read_timeout_seconds: float = 5.0
    db_page_timeout_seconds: float = 8.0
    db_write_timeout_seconds: float = 5.0

    batch_log_level: str = "INFO"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def postgres_driver_url(self) -> str:
        """PostgreSQLの非同期接続URLを生成する.

        Returns
        -------
            str: asyncpg用のPostgreSQL接続URL

        """
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@"
            f"{self.postgres_host}:{self.postgres_port}/{self.postgres_database}"
        )


@lru_cache
def get_settings() -> Settings:
    """アプリケーション設定のシングルトンインスタンスを取得する.

    LRUキャッシュにより同一インスタンスを再利用し、
    環境変数の読み込みコストを削減する。

    Returns
    -------
        Settings: アプリケーション設定オブジェクト

    """
    return Settings()
