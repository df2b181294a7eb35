import secrets
import string
from collections.abc import Callable

from heatsync.database.exceptions import ShortCodeTakenError
from heatsync.database.repositories.result_link_repository import ResultLinkRepository
from heatsync.logging.logger import Log
from heatsync.processor.exceptions import LinkMintingError

BASE62_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase


def generate_short_code(length: int = 8) -> str:
    """Random URL-safe base62 code."""
    return "".join(secrets.choice(BASE62_ALPHABET) for _ in range(length))


class ResultLinkMinter:
    """Gives each stored extraction exactly one shareable short code."""

    def __init__(
        self,
        link_repo: ResultLinkRepository,
        *,
        code_length: int = 8,
        max_attempts: int = 5,
        code_factory: Callable[[int], str] = generate_short_code,
    ) -> None:
        self._link_repo = link_repo
        self._code_length = code_length
        self._max_attempts = max_attempts
        self._code_factory = code_factory

    def mint(self, extraction_id: str) -> str:
        """Return the extraction's short code, creating one on first request.

        Raises:
            LinkMintingError: if every generated code collided.
        """
        existing = self._link_repo.find_code_by_extraction(extraction_id)
        if existing is not None:
            Log.info(f"Result link exists for extraction {extraction_id}: {existing}")
            return existing

        for attempt in range(1, self._max_attempts + 1):
            code = self._code_factory(self._code_length)
            try:
                stored = self._link_repo.insert(code, extraction_id)
            except ShortCodeTakenError:
                Log.warning(
                    f"Short code collision on attempt {attempt}/{self._max_attempts}; regenerating"
                )
                continue
            Log.info(f"Result link minted for extraction {extraction_id}: {stored}")
            return stored

        raise LinkMintingError(
            f"Could not mint a unique short code for extraction {extraction_id} "
            f"after {self._max_attempts} attempts"
        )
