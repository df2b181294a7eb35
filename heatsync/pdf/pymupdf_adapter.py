import base64

import pymupdf

from heatsync.pdf.base import BasePdfAdapter
from heatsync.pdf.exceptions import PdfProcessingError

DEFAULT_SCALE = 2.0


class PyMuPdfAdapter(BasePdfAdapter):
    """Renders and reads PDFs using PyMuPDF."""

    def __init__(self, scale: float = DEFAULT_SCALE) -> None:
        self._scale = scale

    def render_pages(self, pdf_bytes: bytes) -> list[str]:
        try:
            matrix = pymupdf.Matrix(self._scale, self._scale)
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                images = [
                    _png_data_url(page.get_pixmap(matrix=matrix).tobytes("png"))
                    for page in doc
                ]
            return images
        except Exception as exc:
            raise PdfProcessingError(f"pymupdf rendering failed: {exc}") from exc

    def count_pages(self, pdf_bytes: bytes) -> int:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                return doc.page_count
        except Exception as exc:
            raise PdfProcessingError(f"pymupdf page count failed: {exc}") from exc

    def page_texts(self, pdf_bytes: bytes) -> list[str]:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                return [page.get_text() for page in doc]
        except Exception as exc:
            raise PdfProcessingError(f"pymupdf text extraction failed: {exc}") from exc


def _png_data_url(png_bytes: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")
