from datetime import date, datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest
from psycopg import errors

from heatsync.database.exceptions import ShortCodeTakenError
from heatsync.database.models import PdfFileRecord, PdfMetadata
from heatsync.database.repositories.extraction_result_repository import (
    ExtractionResultRepository,
)
from heatsync.database.repositories.pdf_file_repository import PdfFileRepository
from heatsync.database.repositories.reservation_repository import ReservationRepository
from heatsync.database.repositories.result_link_repository import ResultLinkRepository
from heatsync.extraction.models import ExtractionResult, MeetDateRange, SwimEvent

NOW = datetime(2025, 1, 11, 12, 0, tzinfo=timezone.utc)


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


def _pdf_row(**overrides: object) -> dict:
    row = {
        "id": "4b1e2a7c-0000-4000-8000-000000000001",
        "checksum": "a" * 32,
        "source_url": None,
        "filename": "heat.pdf",
        "file_size_bytes": 2048,
        "provider_file_id": None,
        "provider_file_expires_at": None,
        "created_at": NOW,
        "last_accessed_at": NOW,
    }
    row.update(overrides)
    return row


def _extraction_row() -> dict:
    return {
        "id": "4b1e2a7c-0000-4000-8000-000000000002",
        "pdf_id": "4b1e2a7c-0000-4000-8000-000000000001",
        "swimmer_name_normalized": "jane doe",
        "swimmer_name_display": "Jane Doe",
        "meet_name": "Winter Invitational",
        "session_date": date(2025, 1, 11),
        "meet_date_start": date(2025, 1, 10),
        "meet_date_end": date(2025, 1, 12),
        "venue": None,
        "events": [
            {
                "eventNumber": 5,
                "eventName": "100 Free",
                "heatNumber": 1,
                "lane": 3,
                "swimmerName": "Jane Doe",
                "seedTime": "NT",
            }
        ],
        "warnings": [],
        "created_at": NOW,
    }


class TestPdfFileRecord:
    def test_usable_handle_with_room_before_expiry(self) -> None:
        record = PdfFileRecord(
            id="1",
            checksum="a" * 32,
            file_size_bytes=1,
            provider_file_id="file-1",
            provider_file_expires_at=NOW + timedelta(hours=2),
        )
        assert record.usable_provider_file_id(NOW, timedelta(minutes=60)) == "file-1"

    def test_handle_inside_refresh_buffer_is_unusable(self) -> None:
        record = PdfFileRecord(
            id="1",
            checksum="a" * 32,
            file_size_bytes=1,
            provider_file_id="file-1",
            provider_file_expires_at=NOW + timedelta(minutes=30),
        )
        assert record.usable_provider_file_id(NOW, timedelta(minutes=60)) is None

    def test_missing_handle(self) -> None:
        record = PdfFileRecord(id="1", checksum="a" * 32, file_size_bytes=1)
        assert record.usable_provider_file_id(NOW, timedelta(minutes=60)) is None


class TestPdfFileRepository:
    @patch("heatsync.database.repositories.pdf_file_repository.get_connection")
    def test_get_returns_record_and_touches_access_time(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _pdf_row()

        record = PdfFileRepository().get("a" * 32)

        assert record is not None
        assert record.checksum == "a" * 32
        assert record.filename == "heat.pdf"
        sql = mock_cursor.execute.call_args.args[0]
        assert "SET last_accessed_at = NOW()" in sql
        mock_conn.commit.assert_called_once()

    @patch("heatsync.database.repositories.pdf_file_repository.get_connection")
    def test_get_returns_none_when_missing(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        assert PdfFileRepository().get("b" * 32) is None

    @patch("heatsync.database.repositories.pdf_file_repository.get_connection")
    def test_put_upserts_on_checksum(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _pdf_row(provider_file_id="file-9")

        record = PdfFileRepository(provider_file_ttl_days=29).put(
            "a" * 32, PdfMetadata(file_size_bytes=2048, filename="heat.pdf"), "file-9"
        )

        assert record.provider_file_id == "file-9"
        sql, params = mock_cursor.execute.call_args.args
        assert "ON CONFLICT (checksum) DO UPDATE" in sql
        assert "COALESCE" in sql
        expires_at = params[5]
        assert timedelta(days=28) < expires_at - datetime.now(timezone.utc) <= timedelta(days=29)
        mock_conn.commit.assert_called_once()

    @patch("heatsync.database.repositories.pdf_file_repository.get_connection")
    def test_put_without_handle_sends_no_expiry(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _pdf_row()

        PdfFileRepository().put("a" * 32, PdfMetadata(file_size_bytes=2048))

        params = mock_cursor.execute.call_args.args[1]
        assert params[4] is None
        assert params[5] is None

    @patch("heatsync.database.repositories.pdf_file_repository.get_connection")
    def test_put_clips_long_filename(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _pdf_row()

        PdfFileRepository().put("a" * 32, PdfMetadata(file_size_bytes=2048, filename="f" * 400))

        params = mock_cursor.execute.call_args.args[1]
        assert params[2] == "f" * 255


class TestExtractionResultRepository:
    @patch("heatsync.database.repositories.extraction_result_repository.get_connection")
    def test_get_rebuilds_result(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _extraction_row()

        record = ExtractionResultRepository().get("pdf-1", "jane doe")

        assert record is not None
        assert record.swimmer_name_display == "Jane Doe"
        assert record.result.session_date == "2025-01-11"
        assert record.result.meet_date_range == MeetDateRange("2025-01-10", "2025-01-12")
        assert record.result.events == [SwimEvent(5, "100 Free", 1, 3, "Jane Doe", seed_time="NT")]

    @patch("heatsync.database.repositories.extraction_result_repository.get_connection")
    def test_put_inserts_once(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _extraction_row()
        result = ExtractionResult(
            meet_name="Winter Invitational",
            session_date="2025-01-11",
            events=[SwimEvent(5, "100 Free", 1, 3, "Jane Doe", seed_time="NT")],
        )

        record = ExtractionResultRepository().put("pdf-1", "jane doe", "Jane Doe", result)

        assert record.id == "4b1e2a7c-0000-4000-8000-000000000002"
        sql, params = mock_cursor.execute.call_args.args
        assert "ON CONFLICT (pdf_id, swimmer_name_normalized) DO NOTHING" in sql
        assert params[4] == date(2025, 1, 11)
        assert params[8].obj == [
            {
                "eventNumber": 5,
                "eventName": "100 Free",
                "heatNumber": 1,
                "lane": 3,
                "swimmerName": "Jane Doe",
                "seedTime": "NT",
            }
        ]
        mock_conn.commit.assert_called_once()

    @patch("heatsync.database.repositories.extraction_result_repository.get_connection")
    def test_put_returns_existing_row_on_conflict(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.side_effect = [None, _extraction_row()]
        result = ExtractionResult(meet_name="Other", session_date="2025-01-11")

        record = ExtractionResultRepository().put("pdf-1", "jane doe", "Jane Doe", result)

        assert record.result.meet_name == "Winter Invitational"
        assert mock_cursor.execute.call_count == 2

    @patch("heatsync.database.repositories.extraction_result_repository.get_connection")
    def test_put_clips_meet_name_and_venue_to_column_width(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _extraction_row()
        result = ExtractionResult(
            meet_name="M" * 800, session_date="2025-01-11", venue="V" * 600
        )

        ExtractionResultRepository().put("pdf-1", "jane doe", "Jane Doe", result)

        params = mock_cursor.execute.call_args.args[1]
        assert params[3] == "M" * 500
        assert params[7] == "V" * 500


class TestResultLinkRepository:
    @patch("heatsync.database.repositories.result_link_repository.get_connection")
    def test_insert_returns_new_code(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = ("abcd1234",)

        assert ResultLinkRepository().insert("abcd1234", "ext-1") == "abcd1234"
        mock_conn.commit.assert_called_once()

    @patch("heatsync.database.repositories.result_link_repository.get_connection")
    def test_insert_returns_existing_code_for_linked_extraction(
        self, mock_get_conn: MagicMock
    ) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.side_effect = [None, ("existing1",)]

        assert ResultLinkRepository().insert("abcd1234", "ext-1") == "existing1"

    @patch("heatsync.database.repositories.result_link_repository.get_connection")
    def test_insert_collision_raises(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.execute.side_effect = errors.UniqueViolation("duplicate key")

        with pytest.raises(ShortCodeTakenError):
            ResultLinkRepository().insert("abcd1234", "ext-1")
        mock_conn.rollback.assert_called_once()

    @patch("heatsync.database.repositories.result_link_repository.get_connection")
    def test_find_by_code(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = {
            "id": "link-1",
            "short_code": "abcd1234",
            "extraction_id": "ext-1",
            "view_count": 4,
            "expires_at": None,
            "created_at": NOW,
        }

        link = ResultLinkRepository().find_by_code("abcd1234")

        assert link is not None
        assert link.extraction_id == "ext-1"
        assert link.view_count == 4

    @patch("heatsync.database.repositories.result_link_repository.get_connection")
    def test_increment_view_count(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        ResultLinkRepository().increment_view_count("abcd1234")

        sql, params = mock_conn.execute.call_args.args
        assert "view_count = view_count + 1" in sql
        assert params == ("abcd1234",)
        mock_conn.commit.assert_called_once()


class TestReservationRepository:
    @patch("heatsync.database.repositories.reservation_repository.get_connection")
    def test_acquire_succeeds_when_row_returned(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = ("token-1",)

        assert ReservationRepository().acquire("pdf-1", "jane doe", "token-1", 600)
        sql = mock_cursor.execute.call_args.args[0]
        assert "WHERE extraction_reservations.expires_at < NOW()" in sql

    @patch("heatsync.database.repositories.reservation_repository.get_connection")
    def test_acquire_fails_when_held(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        assert not ReservationRepository().acquire("pdf-1", "jane doe", "token-1", 600)

    @patch("heatsync.database.repositories.reservation_repository.get_connection")
    def test_release_is_token_guarded(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        ReservationRepository().release("pdf-1", "jane doe", "token-1")

        sql, params = mock_conn.execute.call_args.args
        assert "token = %s" in sql
        assert params == ("pdf-1", "jane doe", "token-1")
