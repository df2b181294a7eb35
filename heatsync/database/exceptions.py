class CacheUnavailableError(Exception):
    """Raised when the cache store cannot be read or written."""


class ShortCodeTakenError(Exception):
    """Raised when a generated short code collides with an existing link."""
