import json

import pytest

from dndledger.backend.errors import ValidationError, VersionConflict
from dndledger.backend.models import parse_character
from dndledger.backend.store import InMemoryCharacterStore, PostgresCharacterStore, create_store


def _character(**overrides):
    payload = {
        "id": "char-1",
        "name": "Nim",
        "level": 2,
        "abilities": {
            "strength": 8,
            "dexterity": 14,
            "constitution": 12,
            "intelligence": 10,
            "wisdom": 10,
            "charisma": 16,
        },
        "spell_slots": {1: {"used": 0, "max": 3}},
    }
    payload.update(overrides)
    return parse_character(payload)


def test_create_store_returns_postgres_store_when_database_url_present() -> None:
    store = create_store(database_url="postgresql://local")

    assert isinstance(store, PostgresCharacterStore)


def test_create_store_returns_in_memory_store_when_database_url_missing() -> None:
    store = create_store(database_url=None)

    assert isinstance(store, InMemoryCharacterStore)


def test_in_memory_store_versions_each_commit() -> None:
    store = InMemoryCharacterStore()
    created = store.create(_character())

    committed = store.commit(_character(level=3), expected_version=created.version)

    assert created.version == 1
    assert committed.version == 2
    assert store.get("char-1").character.level == 3
    assert store.get("missing") is None


def test_in_memory_store_rejects_stale_write() -> None:
    store = InMemoryCharacterStore()
    store.create(_character())
    store.commit(_character(level=3), expected_version=1)

    with pytest.raises(VersionConflict) as excinfo:
        store.commit(_character(level=4), expected_version=1)

    assert excinfo.value.current_version == 2
    assert store.get("char-1").character.level == 3


def test_in_memory_store_rejects_duplicate_create() -> None:
    store = InMemoryCharacterStore()
    store.create(_character())

    with pytest.raises(ValidationError):
        store.create(_character())


def test_in_memory_store_hands_out_copies_of_stored_snapshots() -> None:
    store = InMemoryCharacterStore()
    store.create(_character())

    leaked = store.get("char-1").character
    leaked.spell_slots[1] = leaked.spell_slots[1].model_copy(update={"used": 3})

    current = store.get("char-1")
    assert current.character.spell_slots[1].used == 0
    assert current.version == 1


class _FakeCursor:
    def __init__(self, rowcount: int = 1, row: tuple | None = None) -> None:
        self.commands: list[tuple[str, tuple]] = []
        self.rowcount = rowcount
        self.row = row

    def execute(self, sql: str, params: tuple) -> None:
        self.commands.append((sql, params))

    def fetchone(self) -> tuple | None:
        return self.row

    def __enter__(self) -> "_FakeCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None


class _FakeConnection:
    def __init__(self, cursor: _FakeCursor) -> None:
        self.cursor_instance = cursor
        self.committed = False
        self.rolled_back = False

    def cursor(self) -> _FakeCursor:
        return self.cursor_instance

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.rolled_back = True

    def __enter__(self) -> "_FakeConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None


class _PostgresStoreWithFakeConnection(PostgresCharacterStore):
    def __init__(self, cursor: _FakeCursor) -> None:
        super().__init__(database_url="postgresql://local")
        self.fake_connection = _FakeConnection(cursor)

    def _connect(self) -> _FakeConnection:
        return self.fake_connection


def test_postgres_commit_is_conditional_on_version_and_persists_snapshot() -> None:
    store = _PostgresStoreWithFakeConnection(_FakeCursor(rowcount=1))

    committed = store.commit(_character(), expected_version=4)

    commands = store.fake_connection.cursor_instance.commands
    assert committed.version == 5
    assert store.fake_connection.committed is True
    assert "UPDATE characters" in commands[0][0]
    assert "current_version = %s" in commands[0][0]
    assert commands[0][1][-1] == 4
    assert "INSERT INTO character_snapshots" in commands[1][0]
    assert json.loads(commands[1][1][-1])["id"] == "char-1"


def test_postgres_commit_raises_conflict_when_no_row_matches() -> None:
    store = _PostgresStoreWithFakeConnection(_FakeCursor(rowcount=0))

    with pytest.raises(VersionConflict):
        store.commit(_character(), expected_version=4)

    assert store.fake_connection.rolled_back is True
    assert store.fake_connection.committed is False
    assert len(store.fake_connection.cursor_instance.commands) == 1


def test_postgres_get_parses_snapshot_row() -> None:
    payload = _character(stealth_roll=9).to_payload()
    store = _PostgresStoreWithFakeConnection(_FakeCursor(row=(7, json.dumps(payload))))

    current = store.get("char-1")

    assert current is not None
    assert current.version == 7
    assert current.character.stealth_roll == 9
    assert current.character.spell_slots[1].max == 3


def test_postgres_get_returns_none_for_missing_character() -> None:
    store = _PostgresStoreWithFakeConnection(_FakeCursor(row=None))

    assert store.get("char-404") is None


def test_postgres_create_writes_character_and_first_snapshot() -> None:
    store = _PostgresStoreWithFakeConnection(_FakeCursor())

    created = store.create(_character())

    commands = store.fake_connection.cursor_instance.commands
    assert created.version == 1
    assert "INSERT INTO characters" in commands[0][0]
    assert "INSERT INTO character_snapshots" in commands[1][0]
    assert store.fake_connection.committed is True


def test_postgres_create_rejects_existing_character() -> None:
    store = _PostgresStoreWithFakeConnection(_FakeCursor(rowcount=0))

    with pytest.raises(ValidationError):
        store.create(_character())

    commands = store.fake_connection.cursor_instance.commands
    assert "ON CONFLICT (id) DO NOTHING" in commands[0][0]
    assert len(commands) == 1
    assert store.fake_connection.rolled_back is True
    assert store.fake_connection.committed is False
