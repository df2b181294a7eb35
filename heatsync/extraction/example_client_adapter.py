"""Example extraction client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseExtractionClient and register the provider in ExtractionClientFactory.
"""

import json
from typing import ClassVar

from heatsync.extraction.client_base import BaseExtractionClient


class ExampleClientAdapter(BaseExtractionClient):
    """Example adapter that returns a fixed valid extraction JSON.

    No network calls. Useful for local development, tests, and as a template
    for building real provider adapters.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "meetName": "Example Invitational",
        "sessionDate": "2025-01-11",
        "meetDateRange": {"start": "2025-01-10", "end": "2025-01-12"},
        "venue": None,
        "events": [],
        "warnings": [],
    }

    def __init__(self) -> None:
        self._uploads = 0

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float | None,
        prompt: str,
        attachments: list[dict[str, object]],
        max_output_tokens: int,
    ) -> str:
        _ = model, temperature, prompt, attachments, max_output_tokens
        return json.dumps(self.DEFAULT_RESPONSE)

    def upload_file(self, *, pdf_bytes: bytes, filename: str) -> str:
        _ = pdf_bytes, filename
        self._uploads += 1
        return f"file-example-{self._uploads}"
