"""Deterministic party ordering for turn and display purposes."""

from __future__ import annotations

from typing import Iterable

from dndledger.backend.models import PartyMember
from dndledger.backend.stats import final_ability_scores

ORDER_STATS = ("wisdom", "intelligence", "charisma")


def _sort_key(member: PartyMember) -> tuple:
    if member.character is not None:
        scores = final_ability_scores(member.character)
        ranked = tuple(-scores[stat] for stat in ORDER_STATS)
        return (0, ranked, member.character.id, member.player_id)
    return (1, (), member.player_name or member.player_id, member.player_id)


def order_party(members: Iterable[PartyMember]) -> list[PartyMember]:
    return sorted(members, key=_sort_key)


def next_member(ordered: list[PartyMember], current_character_id: str | None) -> PartyMember | None:
    """Return the member after the current one, wrapping to the start."""
    if not ordered:
        return None
    for index, member in enumerate(ordered):
        if member.character is not None and member.character.id == current_character_id:
            return ordered[(index + 1) % len(ordered)]
    return ordered[0]
