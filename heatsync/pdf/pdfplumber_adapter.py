import base64
import io

import pdfplumber

from heatsync.pdf.base import BasePdfAdapter
from heatsync.pdf.exceptions import PdfProcessingError

DEFAULT_SCALE = 2.0
_POINTS_PER_INCH = 72


class PdfPlumberAdapter(BasePdfAdapter):
    """Renders and reads PDFs using pdfplumber."""

    def __init__(self, scale: float = DEFAULT_SCALE) -> None:
        self._resolution = int(_POINTS_PER_INCH * scale)

    def render_pages(self, pdf_bytes: bytes) -> list[str]:
        try:
            images = []
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                for page in pdf.pages:
                    buf = io.BytesIO()
                    page.to_image(resolution=self._resolution).original.save(buf, format="PNG")
                    images.append(
                        "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")
                    )
            return images
        except Exception as exc:
            raise PdfProcessingError(f"pdfplumber rendering failed: {exc}") from exc

    def count_pages(self, pdf_bytes: bytes) -> int:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                return len(pdf.pages)
        except Exception as exc:
            raise PdfProcessingError(f"pdfplumber page count failed: {exc}") from exc

    def page_texts(self, pdf_bytes: bytes) -> list[str]:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                return [page.extract_text() or "" for page in pdf.pages]
        except Exception as exc:
            raise PdfProcessingError(f"pdfplumber text extraction failed: {exc}") from exc
