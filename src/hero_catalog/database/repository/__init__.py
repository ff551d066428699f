"""リポジトリモジュール."""

from .hero_repository import (
    HeroRepository,
    get_hero_repository,
)
from .user_repository import (
    UserRepository,
    get_user_repository,
)

__all__ = [
    "HeroRepository",
    "UserRepository",
    "get_hero_repository",
    "get_user_repository",
]
