"""Reservation around check-cache / extract / write-cache.

Two requests for the same uncached (pdf, swimmer) pair must not both pay for
a model call. The first takes a short-lived reservation row; the others wait
for its result to land in the extraction cache.
"""

import time
import uuid
from collections.abc import Callable

from heatsync.database.models import ExtractionResultRecord
from heatsync.database.repositories.extraction_result_repository import (
    ExtractionResultRepository,
)
from heatsync.database.repositories.reservation_repository import ReservationRepository
from heatsync.logging.logger import Log
from heatsync.processor.exceptions import ExtractionInProgressError


class InFlightGuard:
    def __init__(
        self,
        reservation_repo: ReservationRepository,
        extraction_repo: ExtractionResultRepository,
        *,
        ttl_seconds: int = 600,
        poll_interval_seconds: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        token_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self._reservations = reservation_repo
        self._extractions = extraction_repo
        self._ttl_seconds = ttl_seconds
        self._poll_interval = poll_interval_seconds
        self._sleep = sleep
        self._clock = clock
        self._token_factory = token_factory

    def run_exclusive(
        self,
        pdf_id: str,
        cache_key: str,
        compute: Callable[[], ExtractionResultRecord],
    ) -> tuple[ExtractionResultRecord, bool]:
        """Run compute under the (pdf_id, cache_key) reservation.

        Returns the stored record and whether it came from the cache rather
        than from this call's compute.

        Raises:
            ExtractionInProgressError: if another holder keeps the reservation
                and no result appears before the deadline.
        """
        deadline = self._clock() + self._ttl_seconds
        while True:
            token = self._token_factory()
            if self._reservations.acquire(pdf_id, cache_key, token, self._ttl_seconds):
                return self._run_holding(pdf_id, cache_key, token, compute)

            Log.info(f"Extraction for pdf {pdf_id} / '{cache_key}' in flight elsewhere; waiting")
            while True:
                if self._clock() >= deadline:
                    raise ExtractionInProgressError(
                        f"Extraction for '{cache_key}' is still in progress in another request"
                    )
                self._sleep(self._poll_interval)
                record = self._extractions.get(pdf_id, cache_key)
                if record is not None:
                    Log.info(f"Extraction for pdf {pdf_id} / '{cache_key}' finished elsewhere")
                    return record, True
                if not self._reservations.is_held(pdf_id, cache_key):
                    break

    def _run_holding(
        self,
        pdf_id: str,
        cache_key: str,
        token: str,
        compute: Callable[[], ExtractionResultRecord],
    ) -> tuple[ExtractionResultRecord, bool]:
        try:
            # A previous holder may have finished between our miss and acquire.
            record = self._extractions.get(pdf_id, cache_key)
            if record is not None:
                return record, True
            return compute(), False
        finally:
            self._reservations.release(pdf_id, cache_key, token)
