class PdfProcessingError(Exception):
    """Raised when a PDF cannot be opened, rendered or read."""


class PdfDownloadError(Exception):
    """Raised when a heat sheet cannot be fetched from a URL."""

    def __init__(self, error: str, details: str) -> None:
        self.error = error
        self.details = details
        super().__init__(f"{error}: {details}")
