"""Use/restore bookkeeping for capped, replenishable resource pools.

Named pools (``feature``/``trait``) are keyed by ability key, spell slots by
spell level. Every function returns a new snapshot; the input is untouched.
"""

from __future__ import annotations

import logging
from typing import Literal, TypeVar

from dndledger.backend.errors import NothingToRestore, PoolExhausted, UntrackedAbility, ValidationError
from dndledger.backend.models import SPELL_LEVELS, AbilityUse, Character, NamedPoolKind, ResourcePool, SpellSlot

logger = logging.getLogger(__name__)

PoolKind = Literal["feature", "trait", "spell_slot"]
NAMED_KINDS = ("feature", "trait")

PoolT = TypeVar("PoolT", bound=ResourcePool)


def get_pool(character: Character, key: str | int, kind: PoolKind) -> ResourcePool | None:
    """Return the pool, or ``None`` when the character does not track it."""
    if kind == "spell_slot":
        return character.spell_slots.get(_spell_level(key))
    if kind not in NAMED_KINDS:
        raise ValidationError(f"unknown pool kind: {kind!r}")
    return character.named_pools(kind).get(str(key))


def can_use(pool: ResourcePool) -> bool:
    return pool.used < pool.max


def remaining(pool: ResourcePool) -> int:
    return max(0, pool.max - pool.used)


def check_bounds(pool: ResourcePool, kind: str = "pool", key: str | int = "?") -> None:
    if pool.used < 0 or pool.used > pool.max:
        raise ValidationError(f"{kind} pool {key!r} out of bounds: {pool.used}/{pool.max}")


def use(pool: PoolT, kind: str = "pool", key: str | int = "?") -> PoolT:
    check_bounds(pool, kind, key)
    if not can_use(pool):
        raise PoolExhausted(kind=kind, key=key, used=pool.used, maximum=pool.max)
    return pool.model_copy(update={"used": pool.used + 1})


def restore(pool: PoolT, kind: str = "pool", key: str | int = "?") -> PoolT:
    check_bounds(pool, kind, key)
    if pool.used <= 0:
        raise NothingToRestore(kind=kind, key=key)
    return pool.model_copy(update={"used": pool.used - 1})


def use_ability(character: Character, key: str, kind: NamedPoolKind) -> Character:
    pool = _named_pool(character, key, kind)
    return _with_named_pool(character, key, kind, use(pool, kind, key))


def restore_ability(character: Character, key: str, kind: NamedPoolKind) -> Character:
    pool = _named_pool(character, key, kind)
    return _with_named_pool(character, key, kind, restore(pool, kind, key))


def use_spell_slot(character: Character, level: int) -> Character:
    level = _spell_level(level)
    slot = _spell_slot(character, level)
    return _with_spell_slot(character, level, use(slot, "spell_slot", level))


def restore_spell_slot(character: Character, level: int) -> Character:
    level = _spell_level(level)
    slot = _spell_slot(character, level)
    return _with_spell_slot(character, level, restore(slot, "spell_slot", level))


def validate_pools(character: Character) -> None:
    for level, slot in character.spell_slots.items():
        check_bounds(slot, "spell_slot", level)
    for kind in NAMED_KINDS:
        for key, pool in character.named_pools(kind).items():
            check_bounds(pool, kind, key)


def _spell_level(key: str | int) -> int:
    try:
        level = int(key)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"spell slot level must be an integer, got {key!r}") from exc
    if level not in SPELL_LEVELS:
        raise ValidationError(f"spell slot level must be 1-9, got {level}")
    return level


def _named_pool(character: Character, key: str, kind: NamedPoolKind) -> AbilityUse:
    if kind not in NAMED_KINDS:
        raise ValidationError(f"unknown pool kind: {kind!r}")
    pool = character.named_pools(kind).get(key)
    if pool is None:
        logger.info("character %s has no %s pool %r", character.id, kind, key)
        raise UntrackedAbility(kind=kind, key=key)
    return pool


def _spell_slot(character: Character, level: int) -> SpellSlot:
    slot = character.spell_slots.get(level)
    if slot is None:
        logger.info("character %s has no level %d spell slots", character.id, level)
        raise UntrackedAbility(kind="spell_slot", key=level)
    return slot


def _with_named_pool(character: Character, key: str, kind: NamedPoolKind, pool: AbilityUse) -> Character:
    field = "feature_uses" if kind == "feature" else "trait_uses"
    pools = dict(character.named_pools(kind))
    pools[key] = pool
    return character.model_copy(update={field: pools})


def _with_spell_slot(character: Character, level: int, slot: SpellSlot) -> Character:
    slots = dict(character.spell_slots)
    slots[level] = slot
    return character.model_copy(update={"spell_slots": slots})
