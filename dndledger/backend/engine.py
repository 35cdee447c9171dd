"""Reducer applying one character action as a single atomic transition."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any

from dndledger.backend import checks, currency, pools, rest
from dndledger.backend.errors import UntrackedAbility, ValidationError
from dndledger.backend.models import Character, Equipment, Target

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionResult:
    character: Character
    engine_events: list[dict[str, Any]]


def apply_character_action(
    character: Character,
    action: dict[str, Any],
    rng: random.Random | None = None,
    equipment: Equipment | None = None,
    target: Target | None = None,
) -> ActionResult:
    """Apply ``action`` to ``character`` and return the new snapshot plus events.

    ``UntrackedAbility`` is reported as an ``ability_untracked`` event with the
    original snapshot. Every other engine error propagates to the caller.
    """
    action_type = str(action.get("type", "")).upper()
    try:
        if action_type in ("USE_ABILITY", "RESTORE_ABILITY"):
            return _apply_ability(character, action, restoring=action_type == "RESTORE_ABILITY")
        if action_type in ("USE_SPELL_SLOT", "RESTORE_SPELL_SLOT"):
            return _apply_spell_slot(character, action, restoring=action_type == "RESTORE_SPELL_SLOT")
    except UntrackedAbility as exc:
        return ActionResult(
            character=character,
            engine_events=[{"kind": "ability_untracked", "poolKind": exc.kind, "key": exc.key, "action": action}],
        )
    if action_type in ("SHORT_REST", "LONG_REST"):
        return _apply_rest(character, action, action_type)
    if action_type in ("PURCHASE", "REFUND"):
        return _apply_trade(character, action, equipment, refunding=action_type == "REFUND")
    if action_type == "ENTER_STEALTH":
        return _apply_enter_stealth(character, action, rng)
    if action_type == "BREAK_STEALTH":
        return _apply_break_stealth(character, action)
    if action_type == "STEAL":
        return _apply_steal(character, action, target, rng)
    if action_type == "DECLARE_ACTION":
        return _apply_declared_action(character, action)
    logger.debug("ignoring unknown action type %r", action_type)
    return ActionResult(character=character, engine_events=[])


def _apply_ability(character: Character, action: dict[str, Any], restoring: bool) -> ActionResult:
    key = action.get("key")
    kind = str(action.get("poolKind", "feature"))
    if not isinstance(key, str) or key == "":
        raise ValidationError("ability actions require a non-empty 'key'")
    if kind not in pools.NAMED_KINDS:
        raise ValidationError(f"unknown pool kind: {kind!r}")

    if restoring:
        next_character = pools.restore_ability(character, key, kind)
    else:
        next_character = pools.use_ability(character, key, kind)
    pool = next_character.named_pools(kind)[key]
    return ActionResult(
        character=next_character,
        engine_events=[
            {
                "kind": "ability_restored" if restoring else "ability_used",
                "poolKind": kind,
                "key": key,
                "used": pool.used,
                "max": pool.max,
                "action": action,
            }
        ],
    )


def _apply_spell_slot(character: Character, action: dict[str, Any], restoring: bool) -> ActionResult:
    level = action.get("level")
    if isinstance(level, bool) or not isinstance(level, int):
        raise ValidationError("spell slot actions require an integer 'level'")

    if restoring:
        next_character = pools.restore_spell_slot(character, level)
    else:
        next_character = pools.use_spell_slot(character, level)
    slot = next_character.spell_slots[level]
    return ActionResult(
        character=next_character,
        engine_events=[
            {
                "kind": "spell_slot_restored" if restoring else "spell_slot_used",
                "level": level,
                "used": slot.used,
                "max": slot.max,
                "action": action,
            }
        ],
    )


def _apply_rest(character: Character, action: dict[str, Any], action_type: str) -> ActionResult:
    if action_type == "SHORT_REST":
        next_character, summary = rest.short_rest(character)
    else:
        next_character, summary = rest.long_rest(character)
    return ActionResult(
        character=next_character,
        engine_events=[
            {
                "kind": "rest_completed",
                "rest": summary.rest,
                "restoredPoolKeys": summary.restored_pool_keys,
                "action": action,
            }
        ],
    )


def _apply_trade(
    character: Character, action: dict[str, Any], equipment: Equipment | None, refunding: bool
) -> ActionResult:
    if equipment is None:
        raise ValidationError("purchase and refund actions require an equipment record")

    if refunding:
        next_character = currency.refund_equipment(character, equipment)
    else:
        next_character = currency.buy_equipment(character, equipment)
    return ActionResult(
        character=next_character,
        engine_events=[
            {
                "kind": "equipment_refunded" if refunding else "equipment_purchased",
                "equipmentId": equipment.id,
                "cost": currency.format_currency(equipment.cost),
                "balance": currency.format_currency(next_character.currency),
                "action": action,
            }
        ],
    )


def _apply_enter_stealth(character: Character, action: dict[str, Any], rng: random.Random | None) -> ActionResult:
    next_character, breakdown = checks.enter_stealth(character, rng)
    return ActionResult(
        character=next_character,
        engine_events=[
            {
                "kind": "stealth_entered",
                "d20": breakdown.d20,
                "stealthRoll": breakdown.total,
                "action": action,
            }
        ],
    )


def _apply_break_stealth(character: Character, action: dict[str, Any]) -> ActionResult:
    if not checks.is_in_stealth(character):
        return ActionResult(character=character, engine_events=[])
    return ActionResult(
        character=checks.break_stealth(character),
        engine_events=[{"kind": "stealth_broken", "action": action}],
    )


def _apply_steal(
    character: Character, action: dict[str, Any], target: Target | None, rng: random.Random | None
) -> ActionResult:
    if target is None:
        raise ValidationError("steal actions require a target")

    description = str(action.get("description", "an item"))
    next_character, outcome = checks.steal_attempt(character, target, description, rng)
    events: list[dict[str, Any]] = [
        {
            "kind": "steal_resolved",
            "success": outcome.success,
            "stealthBroken": outcome.stealth_broken,
            "total": outcome.total,
            "targetNumber": outcome.target_number,
            "message": outcome.message,
            "action": action,
        }
    ]
    if outcome.stealth_broken and checks.is_in_stealth(character):
        events.append({"kind": "stealth_broken", "action": action})
    return ActionResult(character=next_character, engine_events=events)


def _apply_declared_action(character: Character, action: dict[str, Any]) -> ActionResult:
    description = str(action.get("description", ""))
    tag = action.get("tag")
    if tag is not None and tag not in ("stealthy", "noisy", "neutral"):
        raise ValidationError(f"unknown action tag: {tag!r}")

    next_character, broken = checks.resolve_declared_action(character, description, tag)
    if not broken:
        return ActionResult(character=character, engine_events=[])
    return ActionResult(
        character=next_character,
        engine_events=[{"kind": "stealth_broken", "action": action}],
    )
