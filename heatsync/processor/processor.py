from datetime import timedelta

from heatsync.config.settings import Settings
from heatsync.database.models import ExtractionResultRecord, PdfMetadata
from heatsync.database.repositories.extraction_result_repository import (
    ExtractionResultRepository,
)
from heatsync.database.repositories.pdf_file_repository import PdfFileRepository
from heatsync.database.repositories.reservation_repository import ReservationRepository
from heatsync.database.repositories.result_link_repository import ResultLinkRepository
from heatsync.extraction.batch import RetryingBatchExtractor
from heatsync.extraction.dispatcher import ModelDispatcher
from heatsync.extraction.extractor import HeatSheetExtractor
from heatsync.extraction.factory import ExtractionClientFactory
from heatsync.extraction.prompt_builder import PromptBuilder
from heatsync.extraction.retry import RetryPolicy
from heatsync.logging.logger import Log
from heatsync.pdf.base import BasePdfAdapter
from heatsync.pdf.factory import PdfAdapterFactory
from heatsync.processor.inflight import InFlightGuard
from heatsync.processor.link_minter import ResultLinkMinter
from heatsync.processor.models import ExtractionOutcome
from heatsync.processor.pipeline import PipelineContext, PipelineStep
from heatsync.processor.steps import (
    BuildPromptStep,
    CacheResultStep,
    CheckExtractionCacheStep,
    CheckPdfCacheStep,
    ComputeChecksumStep,
    ExtractStep,
    FilterStep,
    LinkStep,
)

# Width of the swimmer_name_normalized column.
MAX_SWIMMER_NAME_LENGTH = 255


class Processor:
    """Orchestrates one cached extraction.

    Pipeline: checksum -> pdf cache -> extraction cache -> (hit) link, or
    (miss) prompt -> extract -> filter -> cache -> link. The extraction cache
    is always consulted before any model call, and nothing is cached when
    extraction fails.
    """

    def __init__(
        self,
        *,
        pdf_repo: PdfFileRepository,
        extraction_repo: ExtractionResultRepository,
        link_minter: ResultLinkMinter,
        guard: InFlightGuard,
        extractor: HeatSheetExtractor,
        pdf_adapter: BasePdfAdapter,
        prompt_builder: PromptBuilder,
        batch_extractor: RetryingBatchExtractor,
        retry_policy: RetryPolicy,
        dispatcher: ModelDispatcher | None = None,
        refresh_buffer: timedelta = timedelta(minutes=60),
    ) -> None:
        self._guard = guard
        self._lookup_steps: list[PipelineStep] = [
            ComputeChecksumStep(),
            CheckPdfCacheStep(pdf_repo),
            CheckExtractionCacheStep(extraction_repo),
        ]
        self._extraction_steps: list[PipelineStep] = [
            BuildPromptStep(pdf_adapter, prompt_builder),
            ExtractStep(
                extractor,
                dispatcher or ModelDispatcher(),
                pdf_adapter,
                batch_extractor,
                pdf_repo,
                retry_policy,
                refresh_buffer=refresh_buffer,
            ),
            FilterStep(),
            CacheResultStep(extraction_repo),
        ]
        self._link_step = LinkStep(link_minter)

    def extract(
        self,
        pdf_bytes: bytes,
        swimmer_name: str,
        *,
        source_url: str | None = None,
        filename: str | None = None,
    ) -> ExtractionOutcome:
        """Return the swimmer's events from the heat sheet, from cache when possible.

        Raises:
            ValueError: if the PDF is empty or the swimmer name is blank or too long.
            CacheUnavailableError: if the cache store cannot be reached.
            ExtractionError: if the model call fails for good.
        """
        if not pdf_bytes:
            raise ValueError("PDF is empty")
        if not swimmer_name.strip():
            raise ValueError("Swimmer name is required")
        if len(" ".join(swimmer_name.split())) > MAX_SWIMMER_NAME_LENGTH:
            raise ValueError(
                f"Swimmer name must be at most {MAX_SWIMMER_NAME_LENGTH} characters"
            )

        context = PipelineContext(
            pdf_bytes=pdf_bytes,
            swimmer_name=swimmer_name,
            metadata=PdfMetadata(
                file_size_bytes=len(pdf_bytes),
                source_url=source_url,
                filename=filename,
            ),
        )
        context = self._run(self._lookup_steps, context)

        if context.extraction_record is None:
            if context.pdf_record is None or context.name is None:
                raise ValueError("PipelineContext.pdf_record must be set after the cache lookup")
            record, cached = self._guard.run_exclusive(
                context.pdf_record.id,
                context.name.cache_key,
                lambda: self._extract_and_cache(context),
            )
            context.extraction_record = record
            context.cached = cached

        context = self._link_step.run(context)
        Log.info(
            f"Extraction done for '{context.swimmer_name}': "
            f"{len(context.extraction_record.result.events)} events, "
            f"code={context.result_code}, cached={context.cached}"
        )
        return ExtractionOutcome(
            result=context.extraction_record.result,
            result_code=context.result_code,
            cached=context.cached,
        )

    def _extract_and_cache(self, context: PipelineContext) -> ExtractionResultRecord:
        context = self._run(self._extraction_steps, context)
        if context.extraction_record is None:
            raise ValueError("PipelineContext.extraction_record must be set after caching")
        return context.extraction_record

    @staticmethod
    def _run(steps: list[PipelineStep], context: PipelineContext) -> PipelineContext:
        for step in steps:
            context = step.run(context)
        return context


def build_processor(settings: Settings) -> Processor:
    """Build a Processor with all required adapters.

    Raises:
        ConfigurationError: if the model provider is misconfigured.
    """
    retry_policy = RetryPolicy(
        max_attempts=settings.retry_max_attempts,
        base_delay_seconds=settings.retry_base_delay_seconds,
        backoff_multiplier=settings.retry_backoff_multiplier,
    )
    extractor = ExtractionClientFactory.create_extractor(settings)
    pdf_repo = PdfFileRepository(provider_file_ttl_days=settings.provider_file_ttl_days)
    extraction_repo = ExtractionResultRepository()
    return Processor(
        pdf_repo=pdf_repo,
        extraction_repo=extraction_repo,
        link_minter=ResultLinkMinter(
            ResultLinkRepository(),
            code_length=settings.short_code_length,
            max_attempts=settings.short_code_max_attempts,
        ),
        guard=InFlightGuard(
            ReservationRepository(),
            extraction_repo,
            ttl_seconds=settings.reservation_ttl_seconds,
            poll_interval_seconds=settings.reservation_poll_interval_seconds,
        ),
        extractor=extractor,
        pdf_adapter=PdfAdapterFactory.create(settings),
        prompt_builder=PromptBuilder(),
        batch_extractor=RetryingBatchExtractor(
            extractor,
            retry_policy,
            batch_size=settings.batch_size,
            stagger_seconds=settings.batch_stagger_seconds,
        ),
        retry_policy=retry_policy,
        refresh_buffer=timedelta(minutes=settings.provider_file_refresh_buffer_minutes),
    )
