"""Three-denomination currency arithmetic.

All arithmetic happens on the copper-equivalent total ("minor units") and is
decomposed back into the unique minimal-coin representation, so no
operation can lose value.
"""

from __future__ import annotations

import logging

from dndledger.backend.errors import InsufficientFunds, ValidationError
from dndledger.backend.models import Character, Currency, Equipment

logger = logging.getLogger(__name__)

GOLD = 100
SILVER = 10

UNIT_VALUES = {"gp": GOLD, "sp": SILVER, "cp": 1}


def to_minor_units(currency: Currency) -> int:
    return currency.gold * GOLD + currency.silver * SILVER + currency.copper


def from_minor_units(total: int) -> Currency:
    if total < 0:
        raise ValidationError(f"currency total cannot be negative: {total}")
    return Currency(gold=total // GOLD, silver=(total % GOLD) // SILVER, copper=total % SILVER)


def can_afford(holdings: Currency, cost: Currency) -> bool:
    return to_minor_units(holdings) >= to_minor_units(cost)


def purchase(holdings: Currency, cost: Currency) -> Currency:
    available = to_minor_units(holdings)
    needed = to_minor_units(cost)
    if needed > available:
        raise InsufficientFunds(needed=needed, available=available)
    return from_minor_units(available - needed)


def refund(holdings: Currency, cost: Currency) -> Currency:
    return from_minor_units(to_minor_units(holdings) + to_minor_units(cost))


def buy_equipment(character: Character, item: Equipment) -> Character:
    remaining = purchase(character.currency, item.cost)
    logger.info("character %s bought %s for %s", character.id, item.id, format_currency(item.cost))
    return character.model_copy(update={"currency": remaining})


def refund_equipment(character: Character, item: Equipment) -> Character:
    restored = refund(character.currency, item.cost)
    logger.info("character %s refunded %s for %s", character.id, item.id, format_currency(item.cost))
    return character.model_copy(update={"currency": restored})


def cost_from_quantity(quantity: int, unit: str) -> Currency:
    """Convert a reference-data cost such as ``{"quantity": 15, "unit": "gp"}``."""
    multiplier = UNIT_VALUES.get(unit.strip().lower())
    if multiplier is None:
        raise ValidationError(f"unknown currency unit: {unit!r}")
    if quantity < 0:
        raise ValidationError(f"cost quantity cannot be negative: {quantity}")
    return from_minor_units(quantity * multiplier)


def format_currency(currency: Currency) -> str:
    return f"{currency.gold}g {currency.silver}s {currency.copper}c"
