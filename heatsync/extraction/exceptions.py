class ExtractionError(Exception):
    """Raised when heat sheet extraction fails."""


class TransientUpstreamError(ExtractionError):
    """Raised when the AI provider call fails in a way worth retrying.

    Covers timeouts, connection failures, rate limiting and 5xx responses.
    """


class EmptyModelResponseError(ExtractionError):
    """Raised when the AI provider returns no content."""

    def __init__(self, finish_reason: str | None) -> None:
        self.finish_reason = finish_reason
        super().__init__(f"AI returned empty response (finish_reason={finish_reason})")


class MalformedModelOutputError(ExtractionError):
    """Raised when the AI response is not a parseable JSON object."""

    def __init__(self, raw_text: str, reason: str) -> None:
        self.raw_text = raw_text
        self.reason = reason
        super().__init__(f"Malformed model output: {reason}")


class RetryExhaustedError(ExtractionError):
    """Raised when an operation keeps failing after every allowed attempt."""

    def __init__(self, label: str, attempts: int, last_error: BaseException | None) -> None:
        self.label = label
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"{label} failed after {attempts} attempts: {last_error}")
