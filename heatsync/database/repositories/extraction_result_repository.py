from datetime import date
from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from heatsync.database.connection import get_connection
from heatsync.database.models import ExtractionResultRecord
from heatsync.extraction.models import ExtractionResult, MeetDateRange, event_to_payload
from heatsync.extraction.parser import build_event

_COLUMNS = """
    id, pdf_id, swimmer_name_normalized, swimmer_name_display, meet_name,
    session_date, meet_date_start, meet_date_end, venue, events, warnings,
    created_at
"""

# Column widths from the extraction_results table.
MEET_NAME_MAX_LENGTH = 500
VENUE_MAX_LENGTH = 500


class ExtractionResultRepository:
    """Database operations for the extraction_results table.

    Rows are immutable once written: the first writer for a
    (pdf_id, swimmer_name_normalized) pair wins.
    """

    def get(self, pdf_id: str, swimmer_name_normalized: str) -> ExtractionResultRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM extraction_results
                    WHERE pdf_id = %s AND swimmer_name_normalized = %s
                    """,
                    (pdf_id, swimmer_name_normalized),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _to_record(row)

    def find_by_id(self, extraction_id: str) -> ExtractionResultRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM extraction_results WHERE id = %s",
                    (extraction_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _to_record(row)

    def put(
        self,
        pdf_id: str,
        swimmer_name_normalized: str,
        swimmer_name_display: str,
        result: ExtractionResult,
    ) -> ExtractionResultRecord:
        """Store a result, or return the existing row if one was stored first."""
        date_range = result.meet_date_range
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO extraction_results (
                        pdf_id, swimmer_name_normalized, swimmer_name_display,
                        meet_name, session_date, meet_date_start, meet_date_end,
                        venue, events, warnings
                    )
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    ON CONFLICT (pdf_id, swimmer_name_normalized) DO NOTHING
                    RETURNING {_COLUMNS}
                    """,
                    (
                        pdf_id,
                        swimmer_name_normalized,
                        swimmer_name_display,
                        result.meet_name[:MEET_NAME_MAX_LENGTH],
                        date.fromisoformat(result.session_date),
                        date.fromisoformat(date_range.start) if date_range else None,
                        date.fromisoformat(date_range.end) if date_range else None,
                        result.venue[:VENUE_MAX_LENGTH] if result.venue else None,
                        Jsonb([event_to_payload(e) for e in result.events]),
                        Jsonb(list(result.warnings)),
                    ),
                )
                row = cur.fetchone()
                if row is None:
                    cur.execute(
                        f"""
                        SELECT {_COLUMNS}
                        FROM extraction_results
                        WHERE pdf_id = %s AND swimmer_name_normalized = %s
                        """,
                        (pdf_id, swimmer_name_normalized),
                    )
                    row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError(
                f"Extraction result for pdf {pdf_id} / '{swimmer_name_normalized}' not stored"
            )
        return _to_record(row)


def _to_record(row: dict[str, Any]) -> ExtractionResultRecord:
    date_range = None
    if row["meet_date_start"] is not None and row["meet_date_end"] is not None:
        date_range = MeetDateRange(
            start=row["meet_date_start"].isoformat(),
            end=row["meet_date_end"].isoformat(),
        )
    result = ExtractionResult(
        meet_name=row["meet_name"],
        session_date=row["session_date"].isoformat(),
        meet_date_range=date_range,
        venue=row["venue"],
        events=[build_event(e) for e in row["events"] or []],
        warnings=list(row["warnings"] or []),
    )
    return ExtractionResultRecord(
        id=str(row["id"]),
        pdf_id=str(row["pdf_id"]),
        swimmer_name_normalized=row["swimmer_name_normalized"],
        swimmer_name_display=row["swimmer_name_display"],
        result=result,
        created_at=row["created_at"],
    )
