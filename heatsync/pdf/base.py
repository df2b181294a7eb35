import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from heatsync.utils.names import NormalizedName


@dataclass(frozen=True)
class NameOccurrences:
    """Result of a text pre-scan for a swimmer's name."""

    count: int
    pages: list[int] = field(default_factory=list)


class BasePdfAdapter(ABC):
    """Contract for PDF rendering and text pre-scan adapters."""

    @abstractmethod
    def render_pages(self, pdf_bytes: bytes) -> list[str]:
        """Render every page to a PNG data URL, in page order.

        Raises:
            PdfProcessingError: if the PDF cannot be rendered.
        """

    @abstractmethod
    def count_pages(self, pdf_bytes: bytes) -> int:
        """Return the number of pages.

        Raises:
            PdfProcessingError: if the PDF cannot be opened.
        """

    @abstractmethod
    def page_texts(self, pdf_bytes: bytes) -> list[str]:
        """Return the embedded text of each page, in page order.

        Raises:
            PdfProcessingError: if text extraction fails.
        """

    def count_name_occurrences(self, pdf_bytes: bytes, name: NormalizedName) -> NameOccurrences:
        """Count how often the swimmer's name appears in the embedded text.

        Both "First Last" and "Last, First" spellings are counted. Pages are
        1-based. Scanned PDFs without a text layer yield a zero count.
        """
        patterns = {_name_pattern(name.first_last), _name_pattern(name.last_first)}
        total = 0
        pages: list[int] = []
        for page_number, text in enumerate(self.page_texts(pdf_bytes), start=1):
            found = sum(len(pattern.findall(text)) for pattern in patterns)
            if found:
                total += found
                pages.append(page_number)
        return NameOccurrences(count=total, pages=pages)


def _name_pattern(name: str) -> re.Pattern[str]:
    tokens = [re.escape(token) for token in name.split()]
    return re.compile(r"(?<!\w)" + r"\s+".join(tokens) + r"(?!\w)", re.IGNORECASE)
