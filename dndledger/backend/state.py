"""State builders for first character snapshots."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from dndledger.backend.models import Character, Currency, SpellSlot, parse_character
from dndledger.backend.spellcasting import spell_slot_maxima


def build_spell_slots(class_name: str, level: int) -> dict[int, SpellSlot]:
    return {
        spell_level: SpellSlot(used=0, max=maximum)
        for spell_level, maximum in spell_slot_maxima(class_name, level).items()
        if maximum > 0
    }


def build_initial_character(
    character_id: str,
    name: str,
    class_name: str,
    level: int,
    abilities: Mapping[str, int],
    racial_bonuses: Mapping[str, int] | None = None,
    skills: Iterable[str] = (),
    currency: Currency | None = None,
    feature_uses: Mapping[str, Mapping[str, Any]] | None = None,
    trait_uses: Mapping[str, Mapping[str, Any]] | None = None,
    user_id: str | None = None,
) -> Character:
    """Return the first snapshot of a new character with every pool unused."""
    return parse_character(
        {
            "id": character_id,
            "name": name,
            "class_name": class_name,
            "level": level,
            "user_id": user_id,
            "abilities": dict(abilities),
            "racial_bonuses": dict(racial_bonuses or {}),
            "skills": list(skills),
            "currency": (currency or Currency()).model_dump(),
            "spell_slots": {spell_level: slot.model_dump() for spell_level, slot in build_spell_slots(class_name, level).items()},
            "feature_uses": _unused_pools(feature_uses),
            "trait_uses": _unused_pools(trait_uses),
            "stealth_roll": 0,
        }
    )


def _unused_pools(pools: Mapping[str, Mapping[str, Any]] | None) -> dict[str, dict[str, Any]]:
    built: dict[str, dict[str, Any]] = {}
    for key, pool in (pools or {}).items():
        built[key] = {"used": 0, "max": pool.get("max"), "resets_on": pool.get("resets_on", "long")}
    return built
