"""外部カタログのレコードを内部のヒーローデータへ変換するモジュール.

外部カタログはケバブケース(full-name, eye-color 等)のフィールド名を使う。
欠けている項目は空文字・空リスト・"0" で埋め、None を残さない。
"""

from collections.abc import Mapping
from typing import Any

from hero_catalog.common.exceptions import InvalidRemoteRecordError
from hero_catalog.hero.schema import (
    Appearance,
    Biography,
    Connections,
    HeroData,
    PowerStats,
    Work,
)

POWER_STATS = (
    "intelligence",
    "strength",
    "speed",
    "durability",
    "power",
    "combat",
)

# 外部カタログは不明値を文字列 "null" で返すことがある
_NULL_MARKER = "null"


def transform_remote_hero(raw: Mapping[str, Any]) -> HeroData:
    """外部カタログのレコードをHeroDataに変換する.

    Args:
    ----
        raw: 外部カタログのレコード(JSONをデコードした辞書)

    Returns:
    -------
        全項目が埋まったHeroData

    Raises:
    ------
        InvalidRemoteRecordError: id または name が欠けている場合

    """
    hero_id = _parse_id(raw.get("id"))
    name = _text(raw.get("name"))
    if not name:
        raise InvalidRemoteRecordError(f"remote hero {hero_id} has no name")

    powerstats = _group(raw, "powerstats")
    biography = _group(raw, "biography")
    appearance = _group(raw, "appearance")
    work = _group(raw, "work")
    connections = _group(raw, "connections")
    image = _group(raw, "image")

    return HeroData(
        id=hero_id,
        name=name,
        powerstats=PowerStats(
            **{stat: _stat(powerstats.get(stat)) for stat in POWER_STATS}
        ),
        biography=Biography(
            full_name=_text(biography.get("full-name")),
            alter_egos=_text(biography.get("alter-egos")),
            aliases=_text_list(biography.get("aliases")),
            place_of_birth=_text(biography.get("place-of-birth")),
            first_appearance=_text(biography.get("first-appearance")),
            publisher=_text(biography.get("publisher")),
            alignment=_text(biography.get("alignment")),
        ),
        appearance=Appearance(
            gender=_text(appearance.get("gender")),
            race=_text(appearance.get("race")),
            height=_text_list(appearance.get("height")),
            weight=_text_list(appearance.get("weight")),
            eye_color=_text(appearance.get("eye-color")),
            hair_color=_text(appearance.get("hair-color")),
        ),
        work=Work(
            occupation=_text(work.get("occupation")),
            base=_text(work.get("base")),
        ),
        connections=Connections(
            group_affiliation=_text(connections.get("group-affiliation")),
            relatives=_text(connections.get("relatives")),
        ),
        image_url=_text(image.get("url")),
    )


def _parse_id(value: Any) -> int:
    """外部カタログのID(文字列)を正の整数に変換."""
    try:
        hero_id = int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidRemoteRecordError(f"invalid remote hero id: {value!r}") from None
    if hero_id < 1:
        raise InvalidRemoteRecordError(f"invalid remote hero id: {value!r}")
    return hero_id


def _group(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key)
    return value if isinstance(value, Mapping) else {}


def _text(value: Any) -> str:
    if value is None or value == _NULL_MARKER:
        return ""
    return str(value)


def _stat(value: Any) -> str:
    text = _text(value).strip()
    return text or "0"


def _text_list(value: Any) -> list[str]:
    if value is None or value == _NULL_MARKER:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list | tuple):
        return [str(item) for item in value if item is not None]
    return [str(value)]
