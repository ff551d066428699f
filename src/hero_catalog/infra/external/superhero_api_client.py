"""Superhero API ラッパーモジュール."""

import logging
from typing import Any, cast
from urllib.parse import quote

import httpx
from fastapi import Request

from hero_catalog.common.exceptions import (
    UpstreamNotFoundError,
    UpstreamTransportError,
)
from hero_catalog.common.log_prefix import LogPrefix
from hero_catalog.settings.settings import Settings

logger = logging.getLogger(__name__)


class SuperheroApiClient:
    """superheroapi.com のラッパークラス.

    トランスポート層のエラーは UpstreamTransportError に変換する。
    1リクエスト内での自動リトライは行わない。

    Attributes
    ----------
        base_url: APIのベースURL
        api_key: APIアクセストークン

    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """SuperheroApiClientを初期化.

        Args:
        ----
            base_url: APIのベースURL
            api_key: APIアクセストークン
            timeout: リクエストのタイムアウト(秒)
            client: 共有するhttpxクライアント(省略時は内部で生成)

        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SuperheroApiClient":
        """設定値からクライアントを生成."""
        return cls(
            base_url=settings.superhero_api_base_url,
            api_key=settings.superhero_api_key,
            timeout=settings.superhero_api_timeout_seconds,
        )

    async def fetch_by_id(self, hero_id: int) -> dict[str, Any]:
        """IDでヒーローを1件取得.

        Args:
        ----
            hero_id: ヒーローID

        Returns:
        -------
            外部カタログのレコード

        Raises:
        ------
            UpstreamNotFoundError: 該当ヒーローなし
            UpstreamTransportError: 通信エラー時

        """
        logger.info(f"{LogPrefix.FETCH_HERO} id={hero_id}")
        payload = await self._get(f"/{hero_id}")
        if payload.get("response") == "error":
            raise UpstreamNotFoundError(
                payload.get("error") or f"hero {hero_id} not found upstream"
            )
        return payload

    async def search_by_name(self, name: str) -> list[dict[str, Any]]:
        """名前でヒーローを検索.

        Args:
        ----
            name: 検索する名前

        Returns:
        -------
            外部カタログのレコードのリスト(該当なしは空リスト)

        Raises:
        ------
            UpstreamTransportError: 通信エラー時

        """
        logger.info(f"{LogPrefix.FETCH_HERO} search name={name!r}")
        payload = await self._get(f"/search/{quote(name, safe='')}")
        if payload.get("response") == "error":
            logger.info(f"{LogPrefix.FETCH_HERO} no match for {name!r}: {payload.get('error')}")
            return []
        results = payload.get("results") or []
        return [result for result in results if isinstance(result, dict)]

    async def aclose(self) -> None:
        """内部で生成したhttpxクライアントを閉じる."""
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, path: str) -> dict[str, Any]:
        """GETリクエストを送り、JSONオブジェクトを返す."""
        url = f"{self.base_url}/{self.api_key}{path}"
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            logger.warning(f"{LogPrefix.FETCH_HERO} request to {path} failed: {e}")
            raise UpstreamTransportError(f"request to superhero api failed: {e}") from e

        if response.status_code >= 400:
            logger.warning(
                f"{LogPrefix.FETCH_HERO} {path} returned status {response.status_code}"
            )
            raise UpstreamTransportError(
                f"superhero api returned status {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamTransportError("superhero api returned invalid JSON") from e

        if not isinstance(payload, dict):
            raise UpstreamTransportError("superhero api returned unexpected payload")
        return payload


def get_catalog_client(request: Request) -> SuperheroApiClient:
    """FastAPI DI用のカタログクライアント取得関数.

    クライアントはアプリケーションの lifespan で生成し app.state に保持する。
    """
    return cast(SuperheroApiClient, request.app.state.catalog_client)
