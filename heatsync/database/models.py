from dataclasses import dataclass
from datetime import datetime, timedelta

from heatsync.extraction.models import ExtractionResult


@dataclass(frozen=True)
class PdfMetadata:
    """Caller-supplied facts about a PDF seen for the first time."""

    file_size_bytes: int
    source_url: str | None = None
    filename: str | None = None


@dataclass(frozen=True)
class PdfFileRecord:
    """Represents a row from the pdf_files table."""

    id: str
    checksum: str
    file_size_bytes: int
    source_url: str | None = None
    filename: str | None = None
    provider_file_id: str | None = None
    provider_file_expires_at: datetime | None = None
    created_at: datetime | None = None
    last_accessed_at: datetime | None = None

    def usable_provider_file_id(self, now: datetime, buffer: timedelta) -> str | None:
        """Return the provider handle if it stays valid for at least `buffer`."""
        if self.provider_file_id is None or self.provider_file_expires_at is None:
            return None
        if self.provider_file_expires_at <= now + buffer:
            return None
        return self.provider_file_id


@dataclass(frozen=True)
class ExtractionResultRecord:
    """Represents a row from the extraction_results table."""

    id: str
    pdf_id: str
    swimmer_name_normalized: str
    swimmer_name_display: str
    result: ExtractionResult
    created_at: datetime | None = None


@dataclass(frozen=True)
class ResultLinkRecord:
    """Represents a row from the result_links table."""

    id: str
    short_code: str
    extraction_id: str
    view_count: int = 0
    expires_at: datetime | None = None
    created_at: datetime | None = None
