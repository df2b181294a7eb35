from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from heatsync.database.models import ExtractionResultRecord, PdfFileRecord, PdfMetadata
from heatsync.extraction.models import ExtractionResult
from heatsync.pdf.base import NameOccurrences
from heatsync.processor.models import PipelineStage
from heatsync.utils.names import NormalizedName


@dataclass(slots=True)
class PipelineContext:
    pdf_bytes: bytes
    swimmer_name: str
    metadata: PdfMetadata
    stage: PipelineStage = PipelineStage.COMPUTING_CHECKSUM
    checksum: str = ""
    name: NormalizedName | None = None
    pdf_record: PdfFileRecord | None = None
    pdf_was_cached: bool = False
    occurrences: NameOccurrences | None = None
    prompt: str = ""
    result: ExtractionResult | None = None
    extraction_record: ExtractionResultRecord | None = None
    cached: bool = False
    result_code: str = ""
    stages_seen: list[PipelineStage] = field(default_factory=list)

    def enter(self, stage: PipelineStage) -> None:
        self.stage = stage
        self.stages_seen.append(stage)


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
