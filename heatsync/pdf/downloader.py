from dataclasses import dataclass
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

import httpx

from heatsync.logging.logger import Log
from heatsync.pdf.exceptions import PdfDownloadError

USER_AGENT = "HeatSync/1.0"
PDF_CONTENT_TYPE = "application/pdf"
ALLOWED_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class DownloadedPdf:
    url: str
    content: bytes
    filename: str | None


class PdfDownloader:
    """Fetches a heat sheet PDF over HTTP(S).

    Only http and https URLs are accepted, redirects are followed, and the
    response must be a 2xx with a PDF content type.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 60,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    def download(self, url: str) -> DownloadedPdf:
        """Download the PDF at url.

        Raises:
            PdfDownloadError: if the URL is unusable, the request fails, or the
                response is not a PDF.
        """
        url = url.strip()
        parsed = urlparse(url)
        if parsed.scheme and parsed.scheme.lower() not in ALLOWED_SCHEMES:
            raise PdfDownloadError("Invalid URL protocol", "Only HTTP and HTTPS URLs are supported")
        if not parsed.scheme or not parsed.netloc:
            raise PdfDownloadError("Invalid URL format", "Please provide a valid URL")

        Log.info(f"Downloading PDF from: {url}")
        try:
            with httpx.Client(
                transport=self._transport,
                timeout=self._timeout_seconds,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            ) as client:
                response = client.get(url)
        except httpx.HTTPError as exc:
            raise PdfDownloadError("Failed to download PDF", str(exc)) from exc

        if not response.is_success:
            raise PdfDownloadError(
                "Failed to download PDF",
                f"HTTP {response.status_code}: {response.reason_phrase}",
            )

        content_type = response.headers.get("content-type")
        if content_type is None or PDF_CONTENT_TYPE not in content_type.lower():
            raise PdfDownloadError(
                "URL does not point to a PDF",
                f"Expected {PDF_CONTENT_TYPE}, got {content_type}",
            )

        Log.info(f"Downloaded {len(response.content)} bytes")
        return DownloadedPdf(
            url=url,
            content=response.content,
            filename=PurePosixPath(unquote(parsed.path)).name or None,
        )
