class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class ExtractionInProgressError(ProcessorError):
    """Raised when another request keeps an extraction reserved past the wait deadline."""


class LinkMintingError(ProcessorError):
    """Raised when no unique short code could be generated for a result link."""


class InvalidResultCodeError(ProcessorError):
    """Raised when a result code is malformed."""


class ResultNotFoundError(ProcessorError):
    """Raised when a short code does not resolve to a stored result."""
