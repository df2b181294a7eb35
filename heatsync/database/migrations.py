from pathlib import Path

from heatsync.database.connection import get_connection
from heatsync.logging.logger import Log

_MIGRATIONS_DIR = Path(__file__).parent / "sql"


def run_migrations(migrations_dir: Path | None = None) -> list[str]:
    """Apply pending SQL migration files in name order.

    Applied file names are recorded in schema_migrations so each file runs
    once. Returns the names applied by this call.
    """
    directory = migrations_dir if migrations_dir is not None else _MIGRATIONS_DIR
    files = sorted(directory.glob("*.sql"))
    applied_now: list[str] = []

    with get_connection() as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                name varchar(255) PRIMARY KEY,
                applied_at timestamp with time zone NOT NULL DEFAULT now()
            )
            """
        )
        with conn.cursor() as cur:
            cur.execute("SELECT name FROM schema_migrations")
            already_applied = {row[0] for row in cur.fetchall()}
        conn.commit()

        for path in files:
            if path.name in already_applied:
                continue
            Log.info(f"Applying migration {path.name}")
            conn.execute(path.read_text(encoding="utf-8"))
            conn.execute("INSERT INTO schema_migrations (name) VALUES (%s)", (path.name,))
            conn.commit()
            applied_now.append(path.name)

    Log.info(f"Migrations complete: {len(applied_now)} applied")
    return applied_now
