"""Persistence interfaces and implementations for versioned character snapshots.

Writes are conditional on the version the caller read. A stale write raises
``VersionConflict``; there is no last-write-wins path.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol

from dndledger.backend.errors import ValidationError, VersionConflict
from dndledger.backend.models import Character, VersionedCharacter, parse_character

logger = logging.getLogger(__name__)


class CharacterStore(Protocol):
    def create(self, character: Character) -> VersionedCharacter:
        """Persist the first snapshot of a character at version 1."""

    def get(self, character_id: str) -> VersionedCharacter | None:
        """Return the latest snapshot and its version."""

    def commit(self, character: Character, expected_version: int) -> VersionedCharacter:
        """Store a new snapshot if the current version still equals ``expected_version``."""


@dataclass
class InMemoryCharacterStore:
    def __post_init__(self) -> None:
        self._characters: dict[str, dict[str, Any]] = {}

    def create(self, character: Character) -> VersionedCharacter:
        if character.id in self._characters:
            raise ValidationError(f"character {character.id} already exists")
        now = datetime.now(timezone.utc).isoformat()
        self._characters[character.id] = {
            "character": character.model_copy(deep=True),
            "version": 1,
            "createdAt": now,
            "updatedAt": now,
        }
        return VersionedCharacter(character=character, version=1)

    def get(self, character_id: str) -> VersionedCharacter | None:
        payload = self._characters.get(character_id)
        if payload is None:
            return None
        # Stored snapshots hold mutable dicts; hand out copies only.
        return VersionedCharacter(character=payload["character"].model_copy(deep=True), version=payload["version"])

    def commit(self, character: Character, expected_version: int) -> VersionedCharacter:
        payload = self._characters.get(character.id)
        current_version = None if payload is None else payload["version"]
        if current_version != expected_version:
            logger.warning(
                "stale write for %s: expected version %s, found %s",
                character.id,
                expected_version,
                current_version,
            )
            raise VersionConflict(character.id, expected_version, current_version)

        payload["character"] = character.model_copy(deep=True)
        payload["version"] = expected_version + 1
        payload["updatedAt"] = datetime.now(timezone.utc).isoformat()
        return VersionedCharacter(character=character, version=payload["version"])


@dataclass
class PostgresCharacterStore:
    database_url: str

    def _connect(self) -> Any:
        import psycopg

        return psycopg.connect(self.database_url)

    def create(self, character: Character) -> VersionedCharacter:
        now = datetime.now(timezone.utc)
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO characters (id, name, current_version, created_at, updated_at)
                    VALUES (%s, %s, %s, %s, %s)
                    ON CONFLICT (id) DO NOTHING
                    """,
                    (character.id, character.name, 1, now, now),
                )
                if cur.rowcount != 1:
                    conn.rollback()
                    raise ValidationError(f"character {character.id} already exists")
                self._insert_snapshot(cur, character, 1, now)
            conn.commit()
        return VersionedCharacter(character=character, version=1)

    def get(self, character_id: str) -> VersionedCharacter | None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT c.current_version, s.state_json
                    FROM characters c
                    JOIN character_snapshots s
                      ON s.character_id = c.id AND s.version = c.current_version
                    WHERE c.id = %s
                    """,
                    (character_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        version, state_json = row
        state = state_json if isinstance(state_json, dict) else json.loads(state_json)
        return VersionedCharacter(character=parse_character(state), version=int(version))

    def commit(self, character: Character, expected_version: int) -> VersionedCharacter:
        next_version = expected_version + 1
        now = datetime.now(timezone.utc)
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE characters
                    SET current_version = %s, name = %s, updated_at = %s
                    WHERE id = %s AND current_version = %s
                    """,
                    (next_version, character.name, now, character.id, expected_version),
                )
                if cur.rowcount != 1:
                    conn.rollback()
                    logger.warning("stale write for %s at version %s", character.id, expected_version)
                    raise VersionConflict(character.id, expected_version, None)
                self._insert_snapshot(cur, character, next_version, now)
            conn.commit()
        return VersionedCharacter(character=character, version=next_version)

    def _insert_snapshot(self, cur: Any, character: Character, version: int, now: datetime) -> None:
        cur.execute(
            """
            INSERT INTO character_snapshots (id, character_id, version, created_at, state_json)
            VALUES (%s, %s, %s, %s, %s::jsonb)
            """,
            (str(uuid.uuid4()), character.id, version, now, json.dumps(character.to_payload())),
        )


def create_store(database_url: str | None) -> CharacterStore:
    if database_url:
        return PostgresCharacterStore(database_url=database_url)
    return InMemoryCharacterStore()
