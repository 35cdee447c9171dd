"""Spell-slot maxima by class and level."""

from __future__ import annotations

FULL_CASTERS = frozenset({"bard", "cleric", "druid", "sorcerer", "wizard"})
HALF_CASTERS = frozenset({"paladin", "ranger"})
PACT_CASTERS = frozenset({"warlock"})

# Index 0 is character level 1; each row lists slots for spell levels 1-9.
FULL_CASTER_SLOTS = (
    (2, 0, 0, 0, 0, 0, 0, 0, 0),
    (3, 0, 0, 0, 0, 0, 0, 0, 0),
    (4, 2, 0, 0, 0, 0, 0, 0, 0),
    (4, 3, 0, 0, 0, 0, 0, 0, 0),
    (4, 3, 2, 0, 0, 0, 0, 0, 0),
    (4, 3, 3, 0, 0, 0, 0, 0, 0),
    (4, 3, 3, 1, 0, 0, 0, 0, 0),
    (4, 3, 3, 2, 0, 0, 0, 0, 0),
    (4, 3, 3, 3, 1, 0, 0, 0, 0),
    (4, 3, 3, 3, 2, 0, 0, 0, 0),
    (4, 3, 3, 3, 2, 1, 0, 0, 0),
    (4, 3, 3, 3, 2, 1, 0, 0, 0),
    (4, 3, 3, 3, 2, 1, 1, 0, 0),
    (4, 3, 3, 3, 2, 1, 1, 0, 0),
    (4, 3, 3, 3, 2, 1, 1, 1, 0),
    (4, 3, 3, 3, 2, 1, 1, 1, 0),
    (4, 3, 3, 3, 2, 1, 1, 1, 1),
    (4, 3, 3, 3, 2, 1, 1, 1, 1),
    (4, 3, 3, 3, 2, 2, 1, 1, 1),
    (4, 3, 3, 3, 2, 2, 2, 1, 1),
)

HALF_CASTER_SLOTS = (
    (0, 0, 0, 0, 0),
    (2, 0, 0, 0, 0),
    (3, 0, 0, 0, 0),
    (3, 0, 0, 0, 0),
    (4, 2, 0, 0, 0),
    (4, 2, 0, 0, 0),
    (4, 3, 0, 0, 0),
    (4, 3, 0, 0, 0),
    (4, 3, 2, 0, 0),
    (4, 3, 2, 0, 0),
    (4, 3, 3, 0, 0),
    (4, 3, 3, 0, 0),
    (4, 3, 3, 1, 0),
    (4, 3, 3, 1, 0),
    (4, 3, 3, 2, 0),
    (4, 3, 3, 2, 0),
    (4, 3, 3, 3, 1),
    (4, 3, 3, 3, 1),
    (4, 3, 3, 3, 2),
    (4, 3, 3, 3, 2),
)

# (slot level, slot count) per warlock level.
PACT_SLOTS = (
    (1, 1), (1, 2), (2, 2), (2, 2), (3, 2), (3, 2), (4, 2), (4, 2), (5, 2), (5, 2),
    (5, 3), (5, 3), (5, 3), (5, 3), (5, 3), (5, 3), (5, 4), (5, 4), (5, 4), (5, 4),
)


def is_spellcaster(class_name: str) -> bool:
    return class_name.strip().lower() in FULL_CASTERS | HALF_CASTERS | PACT_CASTERS


def spell_slot_maxima(class_name: str, level: int) -> dict[int, int]:
    """Return ``{spell level: max slots}`` for levels 1-9; empty for non-casters."""
    name = class_name.strip().lower()
    index = min(max(level, 1), 20) - 1
    if name in FULL_CASTERS:
        row = FULL_CASTER_SLOTS[index]
    elif name in HALF_CASTERS:
        row = HALF_CASTER_SLOTS[index] + (0, 0, 0, 0)
    elif name in PACT_CASTERS:
        slot_level, count = PACT_SLOTS[index]
        row = tuple(count if spell_level == slot_level else 0 for spell_level in range(1, 10))
    else:
        return {}
    return {spell_level: row[spell_level - 1] for spell_level in range(1, 10)}


def max_spell_level(class_name: str, level: int) -> int:
    maxima = spell_slot_maxima(class_name, level)
    available = [spell_level for spell_level, count in maxima.items() if count > 0]
    return max(available, default=0)
