"""Derived character statistics: modifiers, proficiency and attack/AC bonuses."""

from __future__ import annotations

from dndledger.backend.errors import ValidationError
from dndledger.backend.models import ABILITIES, Character, Equipment

# Upper level bound of each proficiency bracket, paired with its bonus.
PROFICIENCY_BRACKETS = ((4, 2), (8, 3), (12, 4), (16, 5), (20, 6))

SKILL_ABILITIES = {
    "Acrobatics": "dexterity",
    "Animal Handling": "wisdom",
    "Arcana": "intelligence",
    "Athletics": "strength",
    "Deception": "charisma",
    "History": "intelligence",
    "Insight": "wisdom",
    "Intimidation": "charisma",
    "Investigation": "intelligence",
    "Medicine": "wisdom",
    "Nature": "intelligence",
    "Perception": "wisdom",
    "Performance": "charisma",
    "Persuasion": "charisma",
    "Religion": "intelligence",
    "Sleight of Hand": "dexterity",
    "Stealth": "dexterity",
    "Survival": "wisdom",
}

UNARMORED_BASE = 10
SHIELD_BONUS = 2


def ability_modifier(score: int) -> int:
    return (score - 10) // 2


def proficiency_bonus(level: int) -> int:
    """Return the bonus for ``level``; out-of-range levels use the nearest bracket."""
    clamped = min(max(level, 1), 20)
    for upper, bonus in PROFICIENCY_BRACKETS:
        if clamped <= upper:
            return bonus
    return PROFICIENCY_BRACKETS[-1][1]


def final_ability_score(base: int, racial_bonus: int = 0) -> int:
    return base + racial_bonus


def final_ability_scores(character: Character) -> dict[str, int]:
    return {
        ability: final_ability_score(character.abilities.get(ability), character.racial_bonuses.get(ability, 0))
        for ability in ABILITIES
    }


def character_modifier(character: Character, ability: str) -> int:
    base = character.abilities.get(ability)
    return ability_modifier(final_ability_score(base, character.racial_bonuses.get(ability, 0)))


def is_proficient(character: Character, skill: str) -> bool:
    return skill in character.skills


def skill_bonus(character: Character, skill: str) -> int:
    ability = SKILL_ABILITIES.get(skill)
    if ability is None:
        raise ValidationError(f"unknown skill: {skill!r}")
    bonus = character_modifier(character, ability)
    if is_proficient(character, skill):
        bonus += proficiency_bonus(character.level)
    return bonus


def attack_bonus(ability_mod: int, proficient: bool, level: int) -> int:
    return ability_mod + (proficiency_bonus(level) if proficient else 0)


def weapon_attack_bonus(character: Character, weapon: Equipment, proficient: bool) -> int:
    str_mod = character_modifier(character, "strength")
    if weapon.is_finesse:
        mod = max(str_mod, character_modifier(character, "dexterity"))
    else:
        mod = str_mod
    return attack_bonus(mod, proficient, character.level)


def armor_class(character: Character) -> int:
    dex_mod = character_modifier(character, "dexterity")
    armor = next(
        (item for item in character.equipped if item.is_armor and item.armor_class is not None),
        None,
    )
    if armor is None or armor.armor_class is None:
        total = UNARMORED_BASE + dex_mod
    else:
        rating = armor.armor_class
        total = rating.base
        if rating.dex_bonus:
            total += dex_mod if rating.max_bonus is None else min(dex_mod, rating.max_bonus)
    shields = sum(1 for item in character.equipped if item.is_shield)
    return total + SHIELD_BONUS * shields
