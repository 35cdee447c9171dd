"""Create the character and snapshot tables in PostgreSQL.

Run as ``python -m dndledger.backend.migrate`` with ``DNDLEDGER_DATABASE_URL``
set. The schema only uses ``CREATE TABLE IF NOT EXISTS``, so reruns are safe.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Callable

from dndledger.backend.config import EngineSettings, configure_logging, load_settings

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("db_schema.sql")
_TABLE_PATTERN = re.compile(r"CREATE TABLE IF NOT EXISTS\s+(\w+)", re.IGNORECASE)


def schema_tables(schema_sql: str) -> list[str]:
    return _TABLE_PATTERN.findall(schema_sql)


def apply_schema(settings: EngineSettings, connect: Callable[[str], Any] | None = None) -> list[str]:
    """Execute the bundled schema against ``settings.database_url``.

    Returns the tables the schema ensures, in creation order.
    """
    if not settings.database_url:
        raise RuntimeError("DNDLEDGER_DATABASE_URL is required for migration")

    if connect is None:
        import psycopg

        connect = psycopg.connect

    schema_sql = SCHEMA_PATH.read_text(encoding="utf-8")
    tables = schema_tables(schema_sql)
    logger.info("applying %s: %s", SCHEMA_PATH.name, ", ".join(tables))

    with connect(settings.database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(schema_sql)
        conn.commit()

    logger.info("schema ready, %d tables ensured", len(tables))
    return tables


def main() -> None:
    settings = load_settings()
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    configure_logging(settings)
    apply_schema(settings)


if __name__ == "__main__":
    main()
