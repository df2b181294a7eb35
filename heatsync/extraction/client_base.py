from abc import ABC, abstractmethod


class BaseExtractionClient(ABC):
    """Contract for provider-specific multimodal chat clients."""

    @abstractmethod
    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float | None,
        prompt: str,
        attachments: list[dict[str, object]],
        max_output_tokens: int,
    ) -> str:
        """Return the assistant message content (JSON text).

        Args:
            model: Provider model identifier.
            temperature: Sampling temperature, or None to omit it.
            prompt: Extraction instructions, sent as the leading text part.
            attachments: Provider content parts (file reference or page images).
            max_output_tokens: Completion token cap.

        Raises:
            TransientUpstreamError: on timeouts, rate limits, network or 5xx failures.
            EmptyModelResponseError: when the provider returns no content.
            ExtractionError: when the provider rejects the request.
        """

    @abstractmethod
    def upload_file(self, *, pdf_bytes: bytes, filename: str) -> str:
        """Upload raw PDF bytes and return the provider's file handle."""
