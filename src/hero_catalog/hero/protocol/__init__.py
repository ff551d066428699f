"""ヒーローカタログのプロトコル."""

from .catalog_client import HeroCatalogClient

__all__ = ["HeroCatalogClient"]
