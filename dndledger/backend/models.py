"""Domain models for character snapshots and engine outcomes.

Snapshots (``Character`` and everything it holds) are validated pydantic
models and are never mutated in place; engine operations return copies.
Outcome objects are plain frozen dataclasses that the engine hands back to
the caller and never persists.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Union

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from dndledger.backend.errors import ValidationError

ABILITIES = ("strength", "dexterity", "constitution", "intelligence", "wisdom", "charisma")
SPELL_LEVELS = range(1, 10)

RestCadence = Literal["short", "long", "none"]
NamedPoolKind = Literal["feature", "trait"]


class AbilityScores(BaseModel):
    model_config = ConfigDict(frozen=True)

    strength: int = Field(ge=1, le=30)
    dexterity: int = Field(ge=1, le=30)
    constitution: int = Field(ge=1, le=30)
    intelligence: int = Field(ge=1, le=30)
    wisdom: int = Field(ge=1, le=30)
    charisma: int = Field(ge=1, le=30)

    def get(self, ability: str) -> int:
        return int(getattr(self, ability))


class Currency(BaseModel):
    model_config = ConfigDict(frozen=True)

    gold: int = Field(default=0, ge=0)
    silver: int = Field(default=0, ge=0)
    copper: int = Field(default=0, ge=0)


class ResourcePool(BaseModel):
    """A capped, replenishable counter. ``used`` counts expended uses."""

    model_config = ConfigDict(frozen=True)

    used: int = Field(default=0, ge=0)
    max: int = Field(ge=0)

    @model_validator(mode="after")
    def _used_within_max(self) -> "ResourcePool":
        if self.used > self.max:
            raise ValueError(f"used ({self.used}) exceeds max ({self.max})")
        return self


class SpellSlot(ResourcePool):
    pass


class AbilityUse(ResourcePool):
    resets_on: RestCadence = "long"


class ArmorClass(BaseModel):
    model_config = ConfigDict(frozen=True)

    base: int = Field(ge=0)
    dex_bonus: bool = False
    max_bonus: int | None = None


class Equipment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str = ""
    category: str = "gear"
    cost: Currency = Field(default_factory=Currency)
    weight: float = Field(default=0, ge=0)
    properties: tuple[str, ...] = ()
    stealth_disadvantage: bool = False
    armor_class: ArmorClass | None = None

    @property
    def is_armor(self) -> bool:
        return self.category.lower() == "armor"

    @property
    def is_shield(self) -> bool:
        return self.category.lower() == "shield"

    @property
    def is_finesse(self) -> bool:
        return any(prop.lower() == "finesse" for prop in self.properties)


class Character(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    level: int = Field(ge=1, le=20)
    class_name: str = ""
    user_id: str | None = None
    abilities: AbilityScores
    racial_bonuses: dict[str, int] = Field(default_factory=dict)
    skills: frozenset[str] = frozenset()
    currency: Currency = Field(default_factory=Currency)
    spell_slots: dict[int, SpellSlot] = Field(default_factory=dict)
    feature_uses: dict[str, AbilityUse] = Field(default_factory=dict)
    trait_uses: dict[str, AbilityUse] = Field(default_factory=dict)
    stealth_roll: int = Field(default=0, ge=0)
    equipped: tuple[Equipment, ...] = ()

    @field_validator("racial_bonuses")
    @classmethod
    def _known_abilities(cls, value: dict[str, int]) -> dict[str, int]:
        unknown = sorted(set(value) - set(ABILITIES))
        if unknown:
            raise ValueError(f"unknown abilities in racial bonuses: {', '.join(unknown)}")
        return value

    @field_validator("spell_slots")
    @classmethod
    def _spell_levels(cls, value: dict[int, SpellSlot]) -> dict[int, SpellSlot]:
        bad = sorted(level for level in value if level not in SPELL_LEVELS)
        if bad:
            raise ValueError(f"spell slot levels must be 1-9, got {bad}")
        return value

    def named_pools(self, kind: NamedPoolKind) -> dict[str, AbilityUse]:
        return self.feature_uses if kind == "feature" else self.trait_uses

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(mode="json")
        payload["skills"] = sorted(self.skills)
        return payload


def parse_character(payload: Mapping[str, Any]) -> Character:
    """Validate a raw snapshot, e.g. a row fetched by the persistence layer."""
    try:
        return Character.model_validate(dict(payload))
    except pydantic.ValidationError as exc:
        raise ValidationError(f"invalid character snapshot: {exc}") from exc


def parse_equipment(payload: Mapping[str, Any]) -> Equipment:
    try:
        return Equipment.model_validate(dict(payload))
    except pydantic.ValidationError as exc:
        raise ValidationError(f"invalid equipment record: {exc}") from exc


@dataclass(frozen=True)
class NpcTarget:
    archetype_id: str
    name: str = ""


@dataclass(frozen=True)
class CharacterTarget:
    character: Character

    @property
    def name(self) -> str:
        return self.character.name


Target = Union[NpcTarget, CharacterTarget]


@dataclass(frozen=True)
class RollBreakdown:
    d20: int
    ability_modifier: int
    proficiency_bonus: int
    equipment_modifier: int

    @property
    def total(self) -> int:
        raw = self.d20 + self.ability_modifier + self.proficiency_bonus + self.equipment_modifier
        return max(1, raw)


@dataclass(frozen=True)
class CheckOutcome:
    breakdown: RollBreakdown
    target_number: int
    success: bool
    stealth_broken: bool
    message: str

    @property
    def total(self) -> int:
        return self.breakdown.total


@dataclass(frozen=True)
class RestoredPool:
    kind: str
    key: str | int
    recovered: int

    @property
    def label(self) -> str:
        if self.kind == "spell_slot":
            return f"spell_slot_{self.key}"
        if self.kind == "trait":
            return f"trait:{self.key}"
        return str(self.key)


@dataclass(frozen=True)
class RestSummary:
    rest: str
    restored: tuple[RestoredPool, ...] = field(default_factory=tuple)

    @property
    def restored_pool_keys(self) -> list[str]:
        return [pool.label for pool in self.restored]

    @property
    def total_recovered(self) -> int:
        return sum(pool.recovered for pool in self.restored)


@dataclass(frozen=True)
class PartyMember:
    player_id: str
    player_name: str | None = None
    character: Character | None = None


@dataclass(frozen=True)
class VersionedCharacter:
    character: Character
    version: int
