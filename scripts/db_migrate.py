from __future__ import annotations

import argparse
import os
from datetime import datetime, timezone
from pathlib import Path

import psycopg

from hlsflow.config import Settings


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create the documents table used by the postgres document store."
    )
    parser.add_argument(
        "--migrations-dir",
        default="infra/migrations",
        help="Directory containing *.sql migrations (default: infra/migrations)",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="Override database url (otherwise DATABASE_URL or Settings.database_url)",
    )
    parser.add_argument("--dry-run", action="store_true", help="List pending migrations only")
    return parser.parse_args()


def _applied_names(conn: psycopg.Connection) -> set[str]:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
          name TEXT PRIMARY KEY,
          applied_at TIMESTAMPTZ NOT NULL
        )
        """,
    )
    return {str(row[0]) for row in conn.execute("SELECT name FROM schema_migrations").fetchall()}


def _pending(migrations_dir: Path, applied: set[str]) -> list[Path]:
    return [p for p in sorted(migrations_dir.glob("*.sql")) if p.is_file() and p.name not in applied]


def main() -> None:
    args = _parse_args()
    migrations_dir = Path(args.migrations_dir).resolve()
    if not migrations_dir.is_dir():
        raise SystemExit(f"migrations dir not found: {migrations_dir}")

    database_url = args.database_url or os.environ.get("DATABASE_URL") or Settings().database_url
    with psycopg.connect(database_url, autocommit=False) as conn:
        pending = _pending(migrations_dir, _applied_names(conn))
        if not pending:
            print("database is up to date")
            return
        for path in pending:
            if args.dry_run:
                print(f"pending {path.name}")
                continue
            conn.execute(path.read_text(encoding="utf-8"))
            conn.execute(
                "INSERT INTO schema_migrations (name, applied_at) VALUES (%s, %s)",
                (path.name, datetime.now(tz=timezone.utc)),
            )
            conn.commit()
            print(f"applied {path.name}")


if __name__ == "__main__":
    main()
