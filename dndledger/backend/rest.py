"""Short- and long-rest replenishment across every pool of a character."""

from __future__ import annotations

import logging

from dndledger.backend.errors import ValidationError
from dndledger.backend.models import AbilityUse, Character, RestoredPool, RestSummary
from dndledger.backend.pools import NAMED_KINDS

logger = logging.getLogger(__name__)

SHORT_CADENCES = frozenset({"short"})
LONG_CADENCES = frozenset({"short", "long"})


def short_rest(character: Character) -> tuple[Character, RestSummary]:
    """Reset every named pool that recharges on a short rest."""
    updates, restored = _reset_named_pools(character, SHORT_CADENCES)
    summary = RestSummary(rest="short", restored=tuple(restored))
    logger.info("short rest for %s restored %s", character.id, summary.restored_pool_keys or "nothing")
    return character.model_copy(update=updates), summary


def long_rest(character: Character) -> tuple[Character, RestSummary]:
    """Reset all spell slots plus every short- and long-cadence named pool."""
    restored: list[RestoredPool] = []
    slots = {}
    for level in sorted(character.spell_slots):
        slot = character.spell_slots[level]
        if slot.used > 0:
            restored.append(RestoredPool(kind="spell_slot", key=level, recovered=slot.used))
            slot = slot.model_copy(update={"used": 0})
        slots[level] = slot

    updates, named_restored = _reset_named_pools(character, LONG_CADENCES)
    restored.extend(named_restored)
    updates["spell_slots"] = slots

    summary = RestSummary(rest="long", restored=tuple(restored))
    logger.info("long rest for %s restored %s", character.id, summary.restored_pool_keys or "nothing")
    return character.model_copy(update=updates), summary


def take_rest(character: Character, kind: str) -> tuple[Character, RestSummary]:
    normalized = str(kind).strip().lower()
    if normalized == "short":
        return short_rest(character)
    if normalized == "long":
        return long_rest(character)
    raise ValidationError(f"unknown rest kind: {kind!r}")


def needs_short_rest(character: Character) -> bool:
    return any(
        pool.used > 0 and pool.resets_on in SHORT_CADENCES
        for kind in NAMED_KINDS
        for pool in character.named_pools(kind).values()
    )


def needs_long_rest(character: Character) -> bool:
    if any(slot.used > 0 for slot in character.spell_slots.values()):
        return True
    return any(
        pool.used > 0 and pool.resets_on in LONG_CADENCES
        for kind in NAMED_KINDS
        for pool in character.named_pools(kind).values()
    )


def rest_benefits(character: Character, kind: str) -> list[str]:
    """Describe what a rest of ``kind`` would restore, one line per pool."""
    normalized = str(kind).strip().lower()
    if normalized not in ("short", "long"):
        raise ValidationError(f"unknown rest kind: {kind!r}")

    lines: list[str] = []
    if normalized == "long":
        for level in sorted(character.spell_slots):
            used = character.spell_slots[level].used
            if used > 0:
                lines.append(f"Level {level} spell slots ({used} used)")

    cadences = SHORT_CADENCES if normalized == "short" else LONG_CADENCES
    for pool_kind in NAMED_KINDS:
        for key, pool in sorted(character.named_pools(pool_kind).items()):
            if pool.used > 0 and pool.resets_on in cadences:
                lines.append(f"{key} ({pool.used}/{pool.max} used)")
    return lines


def _reset_named_pools(
    character: Character, cadences: frozenset[str]
) -> tuple[dict[str, dict], list[RestoredPool]]:
    updates: dict[str, dict] = {}
    restored: list[RestoredPool] = []
    for kind in NAMED_KINDS:
        pools: dict[str, AbilityUse] = {}
        for key in sorted(character.named_pools(kind)):
            pool = character.named_pools(kind)[key]
            if pool.resets_on in cadences and pool.used > 0:
                restored.append(RestoredPool(kind=kind, key=key, recovered=pool.used))
                pool = pool.model_copy(update={"used": 0})
            pools[key] = pool
        updates["feature_uses" if kind == "feature" else "trait_uses"] = pools
    return updates, restored
