"""Session-scoped handle that runs engine actions against a versioned store.

A session is created and owned by the caller (one per live game session) and
holds its own broadcast sink; nothing here is process-global.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Protocol

from dndledger.backend.config import EngineSettings
from dndledger.backend.engine import ActionResult, apply_character_action
from dndledger.backend.errors import ValidationError, VersionConflict
from dndledger.backend.models import Character, Equipment, Target, VersionedCharacter
from dndledger.backend.store import CharacterStore, create_store

logger = logging.getLogger(__name__)


class SnapshotSink(Protocol):
    def publish(self, character_id: str, message: dict[str, Any]) -> None:
        """Hand an updated snapshot and its events to other participants."""


@dataclass
class CharacterSession:
    store: CharacterStore
    sink: SnapshotSink | None = None
    max_write_attempts: int = 3
    rng: random.Random | None = None

    def __post_init__(self) -> None:
        if self.max_write_attempts < 1:
            raise ValidationError("max_write_attempts must be at least 1")

    @classmethod
    def from_settings(
        cls,
        settings: EngineSettings,
        sink: SnapshotSink | None = None,
        rng: random.Random | None = None,
    ) -> "CharacterSession":
        return cls(
            store=create_store(settings.database_url),
            sink=sink,
            max_write_attempts=settings.max_write_attempts,
            rng=rng,
        )

    def register(self, character: Character) -> VersionedCharacter:
        created = self.store.create(character)
        self._publish(created, [])
        return created

    def apply(
        self,
        character_id: str,
        action: dict[str, Any],
        equipment: Equipment | None = None,
        target: Target | None = None,
    ) -> ActionResult:
        """Read, reduce and conditionally write; on a version conflict start over.

        Each attempt re-reads the latest snapshot and re-runs the whole action,
        so a conflicting write is never merged with partial results.
        """
        last_conflict: VersionConflict | None = None
        for attempt in range(1, self.max_write_attempts + 1):
            current = self.store.get(character_id)
            if current is None:
                raise ValidationError(f"unknown character: {character_id}")

            result = apply_character_action(
                current.character, action, rng=self.rng, equipment=equipment, target=target
            )
            if result.character == current.character:
                if result.engine_events:
                    self._publish(current, result.engine_events)
                return result

            try:
                committed = self.store.commit(result.character, expected_version=current.version)
            except VersionConflict as exc:
                last_conflict = exc
                logger.warning(
                    "attempt %d/%d for %s lost a version race, retrying",
                    attempt,
                    self.max_write_attempts,
                    character_id,
                )
                continue

            self._publish(committed, result.engine_events)
            return result

        raise last_conflict  # type: ignore[misc]

    def _publish(self, versioned: VersionedCharacter, events: list[dict[str, Any]]) -> None:
        if self.sink is None:
            return
        self.sink.publish(
            versioned.character.id,
            {
                "type": "character.updated",
                "version": versioned.version,
                "character": versioned.character.to_payload(),
                "events": events,
            },
        )
