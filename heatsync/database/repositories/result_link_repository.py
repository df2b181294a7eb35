from typing import Any

from psycopg import errors
from psycopg.rows import dict_row

from heatsync.database.connection import get_connection
from heatsync.database.exceptions import ShortCodeTakenError
from heatsync.database.models import ResultLinkRecord


class ResultLinkRepository:
    """Database operations for the result_links table."""

    def find_code_by_extraction(self, extraction_id: str) -> str | None:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT short_code FROM result_links WHERE extraction_id = %s",
                    (extraction_id,),
                )
                row = cur.fetchone()
        return row[0] if row is not None else None

    def insert(self, short_code: str, extraction_id: str) -> str:
        """Link short_code to the extraction and return the extraction's code.

        If the extraction is already linked, the existing code is returned and
        short_code is discarded.

        Raises:
            ShortCodeTakenError: if short_code already belongs to another link.
        """
        with get_connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO result_links (short_code, extraction_id)
                        VALUES (%s, %s)
                        ON CONFLICT (extraction_id) DO NOTHING
                        RETURNING short_code
                        """,
                        (short_code, extraction_id),
                    )
                    row = cur.fetchone()
                    if row is None:
                        cur.execute(
                            "SELECT short_code FROM result_links WHERE extraction_id = %s",
                            (extraction_id,),
                        )
                        row = cur.fetchone()
                conn.commit()
            except errors.UniqueViolation as exc:
                conn.rollback()
                raise ShortCodeTakenError(f"Short code '{short_code}' already in use") from exc

        if row is None:
            raise RuntimeError(f"No result link stored for extraction {extraction_id}")
        return row[0]

    def find_by_code(self, short_code: str) -> ResultLinkRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, short_code, extraction_id, view_count, expires_at, created_at
                    FROM result_links
                    WHERE short_code = %s
                    """,
                    (short_code,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _to_record(row)

    def increment_view_count(self, short_code: str) -> None:
        with get_connection() as conn:
            conn.execute(
                "UPDATE result_links SET view_count = view_count + 1 WHERE short_code = %s",
                (short_code,),
            )
            conn.commit()


def _to_record(row: dict[str, Any]) -> ResultLinkRecord:
    return ResultLinkRecord(
        id=str(row["id"]),
        short_code=row["short_code"],
        extraction_id=str(row["extraction_id"]),
        view_count=row["view_count"],
        expires_at=row["expires_at"],
        created_at=row["created_at"],
    )
