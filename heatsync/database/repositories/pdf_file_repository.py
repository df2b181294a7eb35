from datetime import datetime, timedelta, timezone
from typing import Any

from psycopg.rows import dict_row

from heatsync.database.connection import get_connection
from heatsync.database.models import PdfFileRecord, PdfMetadata

_COLUMNS = """
    id, checksum, source_url, filename, file_size_bytes, provider_file_id,
    provider_file_expires_at, created_at, last_accessed_at
"""

FILENAME_MAX_LENGTH = 255


class PdfFileRepository:
    """Database operations for the pdf_files table, keyed by content checksum."""

    def __init__(self, provider_file_ttl_days: int = 29) -> None:
        self._ttl = timedelta(days=provider_file_ttl_days)

    def get(self, checksum: str) -> PdfFileRecord | None:
        """Find a PDF by checksum, touching last_accessed_at in the same statement."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    UPDATE pdf_files
                    SET last_accessed_at = NOW()
                    WHERE checksum = %s
                    RETURNING {_COLUMNS}
                    """,
                    (checksum,),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            return None
        return _to_record(row)

    def put(
        self,
        checksum: str,
        metadata: PdfMetadata,
        provider_file_id: str | None = None,
    ) -> PdfFileRecord:
        """Insert or update the row for this checksum.

        A new provider_file_id replaces the stored handle and restarts its
        expiry; passing None keeps whatever handle is already stored.
        """
        expires_at = datetime.now(timezone.utc) + self._ttl if provider_file_id else None
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO pdf_files (
                        checksum, source_url, filename, file_size_bytes,
                        provider_file_id, provider_file_expires_at
                    )
                    VALUES (%s, %s, %s, %s, %s, %s)
                    ON CONFLICT (checksum) DO UPDATE
                    SET provider_file_id = COALESCE(
                            EXCLUDED.provider_file_id, pdf_files.provider_file_id
                        ),
                        provider_file_expires_at = CASE
                            WHEN EXCLUDED.provider_file_id IS NOT NULL
                                THEN EXCLUDED.provider_file_expires_at
                            ELSE pdf_files.provider_file_expires_at
                        END,
                        source_url = COALESCE(pdf_files.source_url, EXCLUDED.source_url),
                        filename = COALESCE(pdf_files.filename, EXCLUDED.filename),
                        last_accessed_at = NOW()
                    RETURNING {_COLUMNS}
                    """,
                    (
                        checksum,
                        metadata.source_url,
                        metadata.filename[:FILENAME_MAX_LENGTH] if metadata.filename else None,
                        metadata.file_size_bytes,
                        provider_file_id,
                        expires_at,
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError(f"Upsert of pdf_files returned no row for checksum {checksum}")
        return _to_record(row)


def _to_record(row: dict[str, Any]) -> PdfFileRecord:
    return PdfFileRecord(
        id=str(row["id"]),
        checksum=row["checksum"],
        source_url=row["source_url"],
        filename=row["filename"],
        file_size_bytes=row["file_size_bytes"],
        provider_file_id=row["provider_file_id"],
        provider_file_expires_at=row["provider_file_expires_at"],
        created_at=row["created_at"],
        last_accessed_at=row["last_accessed_at"],
    )
