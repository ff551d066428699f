"""ヒーローカタログ取得のプロトコル定義."""

from typing import Any, Protocol


class HeroCatalogClient(Protocol):
    """外部ヒーローカタログのインターフェース."""

    async def fetch_by_id(self, hero_id: int) -> dict[str, Any]:
        """IDでヒーローを1件取得.

        UpstreamNotFoundError / UpstreamTransportError を送出する。
        """
        ...

    async def search_by_name(self, name: str) -> list[dict[str, Any]]:
        """名前でヒーローを検索. 該当なしは空リスト."""
        ...
