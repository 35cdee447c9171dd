import random

from dndledger.backend.checks import (
    action_breaks_stealth,
    break_stealth,
    enter_stealth,
    is_in_stealth,
    passive_perception,
    resolve_declared_action,
    roll_d20,
    sleight_of_hand_check,
    stealth_check,
    steal_attempt,
)
from dndledger.backend.models import CharacterTarget, NpcTarget, parse_character


class _FixedRoll:
    def __init__(self, value: int) -> None:
        self.value = value

    def randint(self, low: int, high: int) -> int:
        assert (low, high) == (1, 20)
        return self.value


def _character(**overrides):
    payload = {
        "id": "char-rogue",
        "name": "Nim",
        "level": 5,
        "abilities": {
            "strength": 8,
            "dexterity": 14,
            "constitution": 12,
            "intelligence": 12,
            "wisdom": 10,
            "charisma": 13,
        },
        "skills": ["Stealth"],
    }
    payload.update(overrides)
    return parse_character(payload)


def test_roll_d20_is_reproducible_with_seeded_source() -> None:
    first = [roll_d20(random.Random(7)) for _ in range(3)]
    second = [roll_d20(random.Random(7)) for _ in range(3)]
    rng = random.Random(99)
    rolls = {roll_d20(rng) for _ in range(400)}

    assert first == second
    assert rolls == set(range(1, 21))


def test_stealth_check_scenario_is_d20_plus_five() -> None:
    character = _character()
    rng = random.Random(1234)

    for _ in range(200):
        breakdown = stealth_check(character, rng)
        assert breakdown.total == breakdown.d20 + 5
        assert 6 <= breakdown.total <= 25


def test_stealth_check_applies_armor_penalty_and_floor() -> None:
    armored = _character(
        skills=[],
        abilities={
            "strength": 8,
            "dexterity": 6,
            "constitution": 12,
            "intelligence": 12,
            "wisdom": 10,
            "charisma": 13,
        },
        equipped=[{"id": "plate", "category": "armor", "stealth_disadvantage": True}],
    )

    breakdown = stealth_check(armored, _FixedRoll(1))

    assert breakdown.equipment_modifier == -2
    assert breakdown.ability_modifier == -2
    assert breakdown.proficiency_bonus == 0
    assert breakdown.total == 1


def test_stealth_disadvantage_only_counts_for_armor() -> None:
    character = _character(equipped=[{"id": "bell", "category": "gear", "stealth_disadvantage": True}])

    assert stealth_check(character, _FixedRoll(10)).equipment_modifier == 0


def test_sleight_of_hand_gated_on_its_own_proficiency() -> None:
    character = _character()

    assert sleight_of_hand_check(character, _FixedRoll(10)).total == 12
    proficient = _character(skills=["Sleight of Hand"])
    assert sleight_of_hand_check(proficient, _FixedRoll(10)).total == 15


def test_passive_perception_for_npcs_and_characters() -> None:
    watcher = _character(
        abilities={
            "strength": 10,
            "dexterity": 10,
            "constitution": 10,
            "intelligence": 10,
            "wisdom": 14,
            "charisma": 10,
        },
        skills=["Perception"],
    )

    assert passive_perception(NpcTarget(archetype_id="guard")) == 14
    assert passive_perception(NpcTarget(archetype_id="commoner")) == 10
    assert passive_perception(NpcTarget(archetype_id="dragon")) == 12
    assert passive_perception(CharacterTarget(character=watcher)) == 10 + 2 + 3


def test_steal_attempt_success_without_breaking_stealth() -> None:
    stealer = _character(level=1, skills=["Sleight of Hand"], stealth_roll=15)
    merchant = NpcTarget(archetype_id="merchant", name="Hobb")

    after, outcome = steal_attempt(stealer, merchant, "a coin purse", _FixedRoll(14))

    assert outcome.total == 18
    assert outcome.success is True
    assert outcome.stealth_broken is False
    assert outcome.target_number == 17
    assert after.stealth_roll == 15
    assert "successfully and stealthily" in outcome.message
    assert "Sleight of Hand: 18 vs Perception: 12" in outcome.message


def test_failed_steal_breaks_stealth_even_when_unnoticed_roll() -> None:
    stealer = _character(level=1, skills=["Sleight of Hand"], stealth_roll=15)
    merchant = NpcTarget(archetype_id="merchant", name="Hobb")

    after, outcome = steal_attempt(stealer, merchant, "a ring", _FixedRoll(10))

    assert outcome.total == 14
    assert outcome.success is False
    assert outcome.stealth_broken is True
    assert after.stealth_roll == 0
    assert stealer.stealth_roll == 15
    assert "fails to steal a ring from Hobb" in outcome.message


def test_steal_outcome_hinges_on_the_margin_above_perception() -> None:
    stealer = _character(level=1, skills=["Sleight of Hand"], stealth_roll=15)
    merchant = NpcTarget(archetype_id="merchant", name="Hobb")

    _, at_margin = steal_attempt(stealer, merchant, "a key", _FixedRoll(13))
    _, below_margin = steal_attempt(stealer, merchant, "a key", _FixedRoll(12))

    assert (at_margin.total, at_margin.success, at_margin.stealth_broken) == (17, True, False)
    assert (below_margin.total, below_margin.success, below_margin.stealth_broken) == (16, False, True)
    assert "noticed" not in at_margin.message


def test_action_breaks_stealth_keyword_precedence() -> None:
    assert action_breaks_stealth("I attack the guard") is True
    assert action_breaks_stealth("I sneak up and attack") is False
    assert action_breaks_stealth("I SHOUT for help") is True
    assert action_breaks_stealth("I look around the room") is False


def test_action_tag_overrides_keyword_heuristic() -> None:
    assert action_breaks_stealth("I quietly smash the vase", tag="noisy") is True
    assert action_breaks_stealth("I attack the lock", tag="stealthy") is False
    assert action_breaks_stealth("I attack", tag="neutral") is False


def test_enter_and_break_stealth() -> None:
    character = _character()

    hidden, breakdown = enter_stealth(character, _FixedRoll(12))

    assert hidden.stealth_roll == 17
    assert breakdown.total == 17
    assert is_in_stealth(hidden) is True
    assert is_in_stealth(character) is False
    assert break_stealth(hidden).stealth_roll == 0


def test_resolve_declared_action_only_affects_hidden_characters() -> None:
    visible = _character()
    hidden = _character(stealth_roll=14)

    assert resolve_declared_action(visible, "I charge in") == (visible, False)
    after, broken = resolve_declared_action(hidden, "I charge in")
    assert broken is True
    assert after.stealth_roll == 0
    assert resolve_declared_action(hidden, "I creep closer") == (hidden, False)
