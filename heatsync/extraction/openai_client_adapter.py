import io

import httpx
import openai

from heatsync.extraction.client_base import BaseExtractionClient
from heatsync.extraction.exceptions import (
    EmptyModelResponseError,
    ExtractionError,
    TransientUpstreamError,
)


class OpenAIClientAdapter(BaseExtractionClient):
    """Extraction client built on the OpenAI-compatible chat completions API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float | None,
        prompt: str,
        attachments: list[dict[str, object]],
        max_output_tokens: int,
    ) -> str:
        content = [{"type": "text", "text": prompt}, *attachments]
        options: dict[str, object] = {}
        if temperature is not None:
            options["temperature"] = temperature
        try:
            response = self._client.chat.completions.create(
                model=model,
                response_format={"type": "json_object"},
                max_completion_tokens=max_output_tokens,
                messages=[{"role": "user", "content": content}],
                **options,
            )
        except (
            openai.APIConnectionError,
            openai.RateLimitError,
            openai.InternalServerError,
            httpx.ConnectError,
            httpx.TimeoutException,
        ) as exc:
            raise TransientUpstreamError(f"AI provider network error: {exc}") from exc
        except openai.APIStatusError as exc:
            raise ExtractionError(f"AI provider rejected request: {exc}") from exc
        except openai.APIError as exc:
            raise TransientUpstreamError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise EmptyModelResponseError(finish_reason=None)
        choice = response.choices[0]
        content_text = choice.message.content
        if not content_text:
            raise EmptyModelResponseError(finish_reason=choice.finish_reason)
        return content_text

    def upload_file(self, *, pdf_bytes: bytes, filename: str) -> str:
        try:
            uploaded = self._client.files.create(
                file=(filename, io.BytesIO(pdf_bytes), "application/pdf"),
                purpose="user_data",
            )
        except (
            openai.APIConnectionError,
            openai.RateLimitError,
            openai.InternalServerError,
            httpx.ConnectError,
            httpx.TimeoutException,
        ) as exc:
            raise TransientUpstreamError(f"AI provider upload network error: {exc}") from exc
        except openai.APIError as exc:
            raise ExtractionError(f"AI provider rejected upload: {exc}") from exc
        return uploaded.id
