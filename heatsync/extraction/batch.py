"""Image-path extraction: page batches fanned out concurrently, then merged."""

import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

from heatsync.extraction.aggregator import aggregate_batch_results
from heatsync.extraction.exceptions import (
    EmptyModelResponseError,
    ExtractionError,
    MalformedModelOutputError,
)
from heatsync.extraction.extractor import HeatSheetExtractor
from heatsync.extraction.models import ExtractionResult
from heatsync.extraction.retry import RetryPolicy, with_retry
from heatsync.logging.logger import Log

DEFAULT_BATCH_SIZE = 5
DEFAULT_STAGGER_SECONDS = 0.5

BATCH_RETRYABLE_ERRORS = (EmptyModelResponseError, MalformedModelOutputError)


def split_into_batches(images: list[str], batch_size: int) -> list[list[str]]:
    """Split page images into contiguous batches of at most batch_size pages."""
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    return [images[i : i + batch_size] for i in range(0, len(images), batch_size)]


class RetryingBatchExtractor:
    """Runs one extraction call per page batch with per-batch retries.

    Besides the policy's own errors, empty and malformed model replies are
    retried for each batch. Every batch must succeed: a batch that exhausts its
    retries fails the whole extraction, since a missing batch means silently
    missing events.
    """

    def __init__(
        self,
        extractor: HeatSheetExtractor,
        policy: RetryPolicy,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        stagger_seconds: float = DEFAULT_STAGGER_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._extractor = extractor
        self._policy = policy.also_retrying(*BATCH_RETRYABLE_ERRORS)
        self._batch_size = batch_size
        self._stagger_seconds = stagger_seconds
        self._sleep = sleep

    def extract(self, images: list[str], prompt: str) -> ExtractionResult:
        batches = split_into_batches(images, self._batch_size)
        if not batches:
            raise ExtractionError("PDF has no pages to extract")

        Log.info(
            f"Processing {len(images)} pages in {len(batches)} batch(es) "
            f"(batch_size={self._batch_size})"
        )
        with ThreadPoolExecutor(max_workers=len(batches)) as executor:
            futures = [
                executor.submit(self._run_batch, index, batch, prompt)
                for index, batch in enumerate(batches)
            ]
            # Join on every batch before surfacing the first failure.
            errors = [f.exception() for f in futures]
        for error in errors:
            if error is not None:
                raise error

        return aggregate_batch_results([f.result() for f in futures])

    def _run_batch(self, index: int, images: list[str], prompt: str) -> ExtractionResult:
        if index > 0 and self._stagger_seconds > 0:
            self._sleep(index * self._stagger_seconds)
        Log.info(f"Batch {index + 1}: processing {len(images)} pages")
        result = with_retry(
            self._policy,
            lambda: self._extractor.extract_from_images(images, prompt),
            label=f"Batch {index + 1}",
            sleep=self._sleep,
        )
        Log.info(f"Batch {index + 1}: extracted {len(result.events)} events")
        return result
