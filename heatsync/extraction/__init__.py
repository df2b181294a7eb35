from heatsync.extraction.extractor import HeatSheetExtractor
from heatsync.extraction.factory import ExtractionClientFactory
from heatsync.extraction.models import ExtractionResult, MeetDateRange, SwimEvent

__all__ = [
    "ExtractionClientFactory",
    "ExtractionResult",
    "HeatSheetExtractor",
    "MeetDateRange",
    "SwimEvent",
]
