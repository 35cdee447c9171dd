"""Contested stealth and pilfering checks against a target's passive perception.

Dice come from an injectable ``random.Random`` so that seeded callers get
reproducible outcomes.
"""

from __future__ import annotations

import logging
import random
from typing import Literal

from dndledger.backend.models import Character, CharacterTarget, CheckOutcome, NpcTarget, RollBreakdown, Target
from dndledger.backend.stats import character_modifier, is_proficient, proficiency_bonus

logger = logging.getLogger(__name__)

ARMOR_STEALTH_PENALTY = -2
STEAL_DC_MARGIN = 5
DEFAULT_PASSIVE_PERCEPTION = 12

NPC_PASSIVE_PERCEPTION = {
    "merchant": 12,
    "guard": 14,
    "innkeeper": 11,
    "noble": 13,
    "commoner": 10,
    "bandit": 12,
    "traveler": 11,
}

STEALTH_MAINTAINING_KEYWORDS = (
    "sneak", "stealth", "hide", "quietly", "silently", "carefully", "stealthily",
    "whisper", "tiptoe", "creep", "lurk", "slink", "skulk",
)

STEALTH_BREAKING_KEYWORDS = (
    "attack", "cast", "spell", "shout", "yell", "scream", "run", "charge", "jump",
    "climb loudly", "knock", "break", "smash", "destroy", "fight", "combat",
    "loud", "noise", "bang", "crash", "slam",
)

ActionTag = Literal["stealthy", "noisy", "neutral"]


def roll_d20(rng: random.Random | None = None) -> int:
    source = rng if rng is not None else random.Random()
    return source.randint(1, 20)


def equipment_penalty(character: Character) -> int:
    if any(item.is_armor and item.stealth_disadvantage for item in character.equipped):
        return ARMOR_STEALTH_PENALTY
    return 0


def stealth_check(character: Character, rng: random.Random | None = None) -> RollBreakdown:
    return _dexterity_check(character, "Stealth", rng)


def sleight_of_hand_check(character: Character, rng: random.Random | None = None) -> RollBreakdown:
    return _dexterity_check(character, "Sleight of Hand", rng)


def passive_perception(target: Target) -> int:
    if isinstance(target, NpcTarget):
        return NPC_PASSIVE_PERCEPTION.get(target.archetype_id.lower(), DEFAULT_PASSIVE_PERCEPTION)
    if isinstance(target, CharacterTarget):
        character = target.character
        bonus = proficiency_bonus(character.level) if is_proficient(character, "Perception") else 0
        return 10 + character_modifier(character, "wisdom") + bonus
    return DEFAULT_PASSIVE_PERCEPTION


def steal_attempt(
    stealer: Character,
    target: Target,
    description: str,
    rng: random.Random | None = None,
) -> tuple[Character, CheckOutcome]:
    """Resolve a pilfering attempt and clear stealth when the stealer is noticed."""
    breakdown = sleight_of_hand_check(stealer, rng)
    perception = passive_perception(target)
    roll = breakdown.total

    success = roll >= perception + STEAL_DC_MARGIN
    # A failed attempt is always noticed; a success clears perception by the margin.
    stealth_broken = not success

    target_name = target.name or "the target"
    scores = f"(Sleight of Hand: {roll} vs Perception: {perception})"
    if not success:
        message = f"{stealer.name} fails to steal {description} from {target_name} and is noticed! {scores}"
    else:
        message = f"{stealer.name} successfully and stealthily steals {description} from {target_name}. {scores}"

    next_character = break_stealth(stealer) if stealth_broken else stealer
    outcome = CheckOutcome(
        breakdown=breakdown,
        target_number=perception + STEAL_DC_MARGIN,
        success=success,
        stealth_broken=stealth_broken,
        message=message,
    )
    logger.info("steal attempt by %s: %s", stealer.id, message)
    return next_character, outcome


def action_breaks_stealth(description: str, tag: ActionTag | None = None) -> bool:
    """Classify a declared action.

    An explicit ``tag`` wins. Otherwise this is a keyword heuristic over free
    text: maintaining keywords short-circuit to False before breaking keywords
    are considered, and matching is by substring.
    """
    if tag == "stealthy" or tag == "neutral":
        return False
    if tag == "noisy":
        return True
    text = description.lower()
    if any(keyword in text for keyword in STEALTH_MAINTAINING_KEYWORDS):
        return False
    return any(keyword in text for keyword in STEALTH_BREAKING_KEYWORDS)


def enter_stealth(character: Character, rng: random.Random | None = None) -> tuple[Character, RollBreakdown]:
    breakdown = stealth_check(character, rng)
    logger.info("character %s hides with stealth %d", character.id, breakdown.total)
    return character.model_copy(update={"stealth_roll": breakdown.total}), breakdown


def break_stealth(character: Character) -> Character:
    if character.stealth_roll == 0:
        return character
    logger.info("character %s is no longer hidden", character.id)
    return character.model_copy(update={"stealth_roll": 0})


def is_in_stealth(character: Character) -> bool:
    return character.stealth_roll > 0


def resolve_declared_action(
    character: Character, description: str, tag: ActionTag | None = None
) -> tuple[Character, bool]:
    """Break stealth when a hidden character declares a stealth-breaking action."""
    if not is_in_stealth(character):
        return character, False
    if action_breaks_stealth(description, tag):
        return break_stealth(character), True
    return character, False


def _dexterity_check(character: Character, skill: str, rng: random.Random | None) -> RollBreakdown:
    breakdown = RollBreakdown(
        d20=roll_d20(rng),
        ability_modifier=character_modifier(character, "dexterity"),
        proficiency_bonus=proficiency_bonus(character.level) if is_proficient(character, skill) else 0,
        equipment_modifier=equipment_penalty(character),
    )
    logger.debug("%s check for %s: %s -> %d", skill, character.id, breakdown, breakdown.total)
    return breakdown
