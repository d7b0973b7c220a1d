from __future__ import annotations


class FetchError(RuntimeError):
    """Raised when a page or feed cannot be retrieved."""

    def __init__(self, url: str, status: int | None = None, message: str | None = None) -> None:
        self.url = url
        self.status = status
        if message is None:
            message = f"HTTP {status} for {url}" if status is not None else f"fetch failed for {url}"
        super().__init__(message)


class NetworkError(FetchError):
    """Raised on transport failures (DNS, connection reset, invalid URL)."""


class FetchTimeoutError(NetworkError, TimeoutError):
    """Raised when a fetch does not complete within its timeout."""
