"""Typed errors raised by engine operations.

Every error is recoverable by the caller. Snapshots are immutable, so when an
operation raises, the caller still holds the original snapshot unchanged.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for all engine errors."""


class ValidationError(EngineError, ValueError):
    """Input snapshot or parameter violates the schema or a pool invariant."""


class PoolExhausted(EngineError):
    def __init__(self, kind: str, key: str | int, used: int, maximum: int) -> None:
        super().__init__(f"{kind} pool {key!r} is exhausted ({used}/{maximum} used)")
        self.kind = kind
        self.key = key
        self.used = used
        self.maximum = maximum


class NothingToRestore(EngineError):
    def __init__(self, kind: str, key: str | int) -> None:
        super().__init__(f"{kind} pool {key!r} has no uses to restore")
        self.kind = kind
        self.key = key


class InsufficientFunds(EngineError):
    def __init__(self, needed: int, available: int) -> None:
        super().__init__(f"cost of {needed} minor units exceeds holdings of {available}")
        self.needed = needed
        self.available = available


class UntrackedAbility(EngineError):
    """A use/restore referenced a pool the character does not track.

    Informational: callers probe abilities speculatively, so this is treated
    as a no-op rather than a failure by the action reducer.
    """

    def __init__(self, kind: str, key: str | int) -> None:
        super().__init__(f"{kind} pool {key!r} is not tracked for this character")
        self.kind = kind
        self.key = key


class VersionConflict(EngineError):
    def __init__(self, character_id: str, expected_version: int, current_version: int | None) -> None:
        super().__init__(
            f"character {character_id} moved from version {expected_version} to {current_version}"
        )
        self.character_id = character_id
        self.expected_version = expected_version
        self.current_version = current_version
