"""Character resource and encounter-check engine."""

from .config import EngineSettings, configure_logging, load_settings
from .engine import ActionResult, apply_character_action
from .errors import (
    EngineError,
    InsufficientFunds,
    NothingToRestore,
    PoolExhausted,
    UntrackedAbility,
    ValidationError,
    VersionConflict,
)
from .models import Character, CheckOutcome, Equipment, RestSummary, parse_character, parse_equipment
from .session import CharacterSession, SnapshotSink
from .state import build_initial_character
from .store import CharacterStore, InMemoryCharacterStore, PostgresCharacterStore, create_store

__all__ = [
    "ActionResult",
    "apply_character_action",
    "build_initial_character",
    "Character",
    "CharacterSession",
    "CharacterStore",
    "CheckOutcome",
    "configure_logging",
    "create_store",
    "EngineError",
    "EngineSettings",
    "Equipment",
    "InMemoryCharacterStore",
    "InsufficientFunds",
    "load_settings",
    "NothingToRestore",
    "parse_character",
    "parse_equipment",
    "PoolExhausted",
    "PostgresCharacterStore",
    "RestSummary",
    "SnapshotSink",
    "UntrackedAbility",
    "ValidationError",
    "VersionConflict",
]
