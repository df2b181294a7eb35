from heatsync.database.repositories.extraction_result_repository import (
    ExtractionResultRepository,
)
from heatsync.database.repositories.result_link_repository import ResultLinkRepository
from heatsync.logging.logger import Log
from heatsync.processor.exceptions import InvalidResultCodeError, ResultNotFoundError
from heatsync.processor.models import SharedResult

MIN_CODE_LENGTH = 4
MAX_CODE_LENGTH = 12


class ResultReader:
    """Resolves a short code back to its stored extraction."""

    def __init__(
        self,
        link_repo: ResultLinkRepository,
        extraction_repo: ExtractionResultRepository,
    ) -> None:
        self._link_repo = link_repo
        self._extraction_repo = extraction_repo

    def get(self, code: str) -> SharedResult:
        """Look up a result by short code and count the view.

        Raises:
            InvalidResultCodeError: if the code is not 4 to 12 characters.
            ResultNotFoundError: if the code or its extraction is unknown.
        """
        code = code.strip()
        if not MIN_CODE_LENGTH <= len(code) <= MAX_CODE_LENGTH:
            raise InvalidResultCodeError(
                f"Result code must be between {MIN_CODE_LENGTH} and {MAX_CODE_LENGTH} characters"
            )

        link = self._link_repo.find_by_code(code)
        if link is None:
            raise ResultNotFoundError(f"No result for code '{code}'")

        record = self._extraction_repo.find_by_id(link.extraction_id)
        if record is None:
            Log.error(f"Result link {code} points at missing extraction {link.extraction_id}")
            raise ResultNotFoundError(f"No result for code '{code}'")

        self._link_repo.increment_view_count(code)
        Log.info(f"Result link accessed: {code} (views: {link.view_count + 1})")
        return SharedResult(
            result_code=code,
            swimmer_name=record.swimmer_name_display,
            result=record.result,
        )
