from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from heatsync.database.repositories.extraction_result_repository import (
    ExtractionResultRepository,
)
from heatsync.database.repositories.pdf_file_repository import PdfFileRepository
from heatsync.extraction.batch import RetryingBatchExtractor
from heatsync.extraction.dispatcher import InputStrategy, ModelDispatcher
from heatsync.extraction.extractor import HeatSheetExtractor
from heatsync.extraction.post_filter import filter_events_for_swimmer
from heatsync.extraction.prompt_builder import PromptBuilder
from heatsync.extraction.retry import RetryPolicy, with_retry
from heatsync.logging.logger import Log
from heatsync.pdf.base import BasePdfAdapter
from heatsync.pdf.exceptions import PdfProcessingError
from heatsync.processor.link_minter import ResultLinkMinter
from heatsync.processor.models import PipelineStage
from heatsync.processor.pipeline import PipelineContext, PipelineStep
from heatsync.utils.hashing import compute_checksum
from heatsync.utils.names import normalize_swimmer_name

DEFAULT_UPLOAD_FILENAME = "heat-sheet.pdf"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ComputeChecksumStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        context.enter(PipelineStage.COMPUTING_CHECKSUM)
        context.checksum = compute_checksum(context.pdf_bytes)
        context.name = normalize_swimmer_name(context.swimmer_name)
        Log.info(
            f"PDF checksum {context.checksum[:8]}... for swimmer '{context.name.first_last}'"
        )
        return context


class CheckPdfCacheStep(PipelineStep):
    """Looks up the PDF by checksum, registering it on first sight."""

    def __init__(self, pdf_repo: PdfFileRepository) -> None:
        self._pdf_repo = pdf_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        context.enter(PipelineStage.CHECKING_PDF_CACHE)
        record = self._pdf_repo.get(context.checksum)
        if record is not None:
            Log.info(f"PDF cache hit: {context.checksum[:8]}...")
            context.pdf_record = record
            context.pdf_was_cached = True
            return context

        Log.info(f"PDF cache miss: {context.checksum[:8]}...")
        context.pdf_record = self._pdf_repo.put(context.checksum, context.metadata)
        return context


class CheckExtractionCacheStep(PipelineStep):
    def __init__(self, extraction_repo: ExtractionResultRepository) -> None:
        self._extraction_repo = extraction_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        if not context.pdf_was_cached:
            return context
        if context.pdf_record is None or context.name is None:
            raise ValueError("PipelineContext.pdf_record must be set before the extraction lookup")
        context.enter(PipelineStage.CHECKING_EXTRACTION_CACHE)
        record = self._extraction_repo.get(context.pdf_record.id, context.name.cache_key)
        if record is None:
            Log.info(f"Extraction cache miss for '{context.name.first_last}'")
            return context

        Log.info(
            f"Extraction cache hit for '{context.name.first_last}': "
            f"{len(record.result.events)} events"
        )
        context.enter(PipelineStage.CACHE_HIT)
        context.extraction_record = record
        context.cached = True
        return context


class BuildPromptStep(PipelineStep):
    """Pre-scans the PDF text for the name and renders the prompt.

    A failed pre-scan (e.g. a scanned PDF) only drops the expected-count hint.
    """

    def __init__(self, pdf_adapter: BasePdfAdapter, prompt_builder: PromptBuilder) -> None:
        self._pdf_adapter = pdf_adapter
        self._prompt_builder = prompt_builder

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.name is None:
            raise ValueError("PipelineContext.name must be set before building the prompt")
        context.enter(PipelineStage.EXTRACTING)
        try:
            context.occurrences = self._pdf_adapter.count_name_occurrences(
                context.pdf_bytes, context.name
            )
        except PdfProcessingError as exc:
            Log.warning(f"Name pre-scan failed, continuing without a hint: {exc}")
            context.occurrences = None

        count = context.occurrences.count if context.occurrences else None
        pages = context.occurrences.pages if context.occurrences else None
        if count:
            Log.info(f"Pre-scan found '{context.name.first_last}' {count} time(s) on pages {pages}")
        context.prompt = self._prompt_builder.build(
            context.name, expected_event_count=count, pages=pages
        )
        return context


class ExtractStep(PipelineStep):
    """Runs the model through the input strategy the configured model supports."""

    def __init__(
        self,
        extractor: HeatSheetExtractor,
        dispatcher: ModelDispatcher,
        pdf_adapter: BasePdfAdapter,
        batch_extractor: RetryingBatchExtractor,
        pdf_repo: PdfFileRepository,
        retry_policy: RetryPolicy,
        *,
        refresh_buffer: timedelta = timedelta(minutes=60),
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._extractor = extractor
        self._dispatcher = dispatcher
        self._pdf_adapter = pdf_adapter
        self._batch_extractor = batch_extractor
        self._pdf_repo = pdf_repo
        self._retry_policy = retry_policy
        self._refresh_buffer = refresh_buffer
        self._now = now

    def run(self, context: PipelineContext) -> PipelineContext:
        strategy = self._dispatcher.strategy_for(self._extractor.model)
        Log.info(f"Model {self._extractor.model} uses strategy {strategy.value}")
        if strategy is InputStrategy.NATIVE_FILE:
            return self._extract_native(context)
        return self._extract_rendered(context)

    def _extract_native(self, context: PipelineContext) -> PipelineContext:
        if context.pdf_record is None:
            raise ValueError("PipelineContext.pdf_record must be set before extraction")
        context.enter(PipelineStage.NATIVE_FILE_UPLOAD)

        file_id = context.pdf_record.usable_provider_file_id(self._now(), self._refresh_buffer)
        if file_id is None:
            filename = context.metadata.filename or DEFAULT_UPLOAD_FILENAME
            file_id = with_retry(
                self._retry_policy,
                lambda: self._extractor.upload_pdf(context.pdf_bytes, filename),
                label="PDF upload",
            )
            context.pdf_record = self._pdf_repo.put(
                context.checksum, context.metadata, provider_file_id=file_id
            )
        else:
            Log.info(f"Reusing provider file {file_id}")

        prompt = context.prompt
        context.result = with_retry(
            self._retry_policy,
            lambda: self._extractor.extract_from_file(file_id, prompt),
            label="Native file extraction",
        )
        return context

    def _extract_rendered(self, context: PipelineContext) -> PipelineContext:
        context.enter(PipelineStage.RENDER_AND_BATCH_EXTRACT)
        images = self._pdf_adapter.render_pages(context.pdf_bytes)
        Log.info(f"Rendered {len(images)} page(s)")
        context.result = self._batch_extractor.extract(images, context.prompt)
        return context


class FilterStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        if context.result is None or context.name is None:
            raise ValueError("PipelineContext.result must be set before filtering")
        context.enter(PipelineStage.FILTERING)
        context.result = filter_events_for_swimmer(context.result, context.name)

        hint = context.occurrences.count if context.occurrences else 0
        found = len(context.result.events)
        if hint and found < hint:
            Log.warning(
                f"Found {found} event(s) for '{context.name.first_last}', "
                f"below the pre-scan count of {hint}"
            )
        return context


class CacheResultStep(PipelineStep):
    """Stores the filtered result, including an empty one."""

    def __init__(self, extraction_repo: ExtractionResultRepository) -> None:
        self._extraction_repo = extraction_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.result is None or context.name is None or context.pdf_record is None:
            raise ValueError("PipelineContext.result must be set before caching")
        context.enter(PipelineStage.CACHING)
        context.extraction_record = self._extraction_repo.put(
            context.pdf_record.id,
            context.name.cache_key,
            context.name.first_last,
            context.result,
        )
        Log.info(
            f"Extraction cached: swimmer='{context.name.first_last}' "
            f"events={len(context.result.events)}"
        )
        return context


class LinkStep(PipelineStep):
    def __init__(self, link_minter: ResultLinkMinter) -> None:
        self._link_minter = link_minter

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.extraction_record is None:
            raise ValueError("PipelineContext.extraction_record must be set before linking")
        context.enter(PipelineStage.LINKING)
        context.result_code = self._link_minter.mint(context.extraction_record.id)
        return context
