from dataclasses import dataclass
from enum import Enum

from heatsync.extraction.models import ExtractionResult, result_to_payload


class PipelineStage(str, Enum):
    COMPUTING_CHECKSUM = "computing_checksum"
    CHECKING_PDF_CACHE = "checking_pdf_cache"
    CHECKING_EXTRACTION_CACHE = "checking_extraction_cache"
    CACHE_HIT = "cache_hit"
    EXTRACTING = "extracting"
    NATIVE_FILE_UPLOAD = "native_file_upload"
    RENDER_AND_BATCH_EXTRACT = "render_and_batch_extract"
    FILTERING = "filtering"
    CACHING = "caching"
    LINKING = "linking"


@dataclass(frozen=True)
class ExtractionOutcome:
    """What one extract() call returns to its caller."""

    result: ExtractionResult
    result_code: str
    cached: bool

    def to_payload(self) -> dict[str, object]:
        return {
            "result": result_to_payload(self.result),
            "resultCode": self.result_code,
            "cached": self.cached,
        }


@dataclass(frozen=True)
class SharedResult:
    """A stored result resolved through its short code."""

    result_code: str
    swimmer_name: str
    result: ExtractionResult

    def to_payload(self) -> dict[str, object]:
        payload = result_to_payload(self.result)
        payload["swimmerName"] = self.swimmer_name
        payload["resultCode"] = self.result_code
        return payload
