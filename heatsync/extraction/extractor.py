"""AI-powered heat sheet extractor."""

from heatsync.extraction.client_base import BaseExtractionClient
from heatsync.extraction.dispatcher import ModelDispatcher
from heatsync.extraction.exceptions import MalformedModelOutputError
from heatsync.extraction.models import ExtractionResult
from heatsync.extraction.parser import Malformed, parse_model_output
from heatsync.logging.logger import Log


class HeatSheetExtractor:
    """Issues one deterministic completion call and parses it into an ExtractionResult."""

    def __init__(
        self,
        *,
        client: BaseExtractionClient,
        model: str,
        image_detail: str = "low",
        max_output_tokens: int = 16000,
    ) -> None:
        self._client = client
        self._model = model
        # None leaves the provider default in place for reasoning models.
        self._temperature = 0.0 if ModelDispatcher().accepts_temperature(model) else None
        self._image_detail = image_detail
        self._max_output_tokens = max_output_tokens

    @property
    def model(self) -> str:
        return self._model

    def upload_pdf(self, pdf_bytes: bytes, filename: str) -> str:
        """Upload the PDF to the provider and return its file handle."""
        file_id = self._client.upload_file(pdf_bytes=pdf_bytes, filename=filename)
        Log.info(f"Uploaded {len(pdf_bytes)} bytes to provider as {file_id}")
        return file_id

    def extract_from_file(self, provider_file_id: str, prompt: str) -> ExtractionResult:
        attachments: list[dict[str, object]] = [
            {"type": "file", "file": {"file_id": provider_file_id}}
        ]
        return self._complete(prompt, attachments)

    def extract_from_images(self, images: list[str], prompt: str) -> ExtractionResult:
        attachments: list[dict[str, object]] = [
            {"type": "image_url", "image_url": {"url": image, "detail": self._image_detail}}
            for image in images
        ]
        return self._complete(prompt, attachments)

    def _complete(self, prompt: str, attachments: list[dict[str, object]]) -> ExtractionResult:
        Log.debug(f"Extraction prompt:\n{prompt}")
        raw_response = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            prompt=prompt,
            attachments=attachments,
            max_output_tokens=self._max_output_tokens,
        )
        Log.debug(f"AI raw response:\n{raw_response}")

        outcome = parse_model_output(raw_response)
        if isinstance(outcome, Malformed):
            raise MalformedModelOutputError(outcome.raw_text, outcome.reason)

        Log.info(f"Extraction call returned {len(outcome.result.events)} events")
        return outcome.result
