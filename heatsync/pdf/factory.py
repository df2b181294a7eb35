from heatsync.config.settings import Settings
from heatsync.pdf.base import BasePdfAdapter
from heatsync.pdf.pdfplumber_adapter import PdfPlumberAdapter
from heatsync.pdf.pymupdf_adapter import PyMuPdfAdapter


class PdfAdapterFactory:
    """Creates the correct PDF adapter based on settings."""

    ADAPTERS: dict[str, type[BasePdfAdapter]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfAdapter:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls(scale=settings.pdf_render_scale)
