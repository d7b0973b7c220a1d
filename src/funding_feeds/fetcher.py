from __future__ import annotations

import logging
import re
import threading
import time
from typing import Any

import requests

from funding_feeds.config import HttpSettings
from funding_feeds.errors import FetchError, FetchTimeoutError, NetworkError

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 8192
_CHARSET = re.compile(r"charset\s*=\s*[\"']?([\w.:-]+)", re.IGNORECASE)


class HttpFetcher:
    """Retrieve raw feed or page bodies with a fixed client identity.

    No retries happen here: a failed fetch raises and the caller decides
    whether that is fatal. A timeout bounds the whole fetch, body included,
    not just each socket read.
    """

    def __init__(self, settings: HttpSettings | None = None) -> None:
        self.settings = settings or HttpSettings()

    @property
    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.settings.user_agent,
            "Accept": self.settings.accept,
            "Accept-Language": self.settings.accept_language,
        }

    def fetch_text(self, url: str, timeout: float | None = None) -> str:
        effective_timeout = timeout if timeout is not None else self.settings.timeout_seconds
        logger.debug("GET %s (timeout=%s)", url, effective_timeout)

        if effective_timeout is None:
            return self._fetch(url, None, None)

        deadline = time.monotonic() + effective_timeout
        outcome: dict[str, Any] = {}
        finished = threading.Event()

        def _worker() -> None:
            try:
                outcome["body"] = self._fetch(url, effective_timeout, deadline)
            except BaseException as exc:
                outcome["error"] = exc
            finally:
                finished.set()

        # daemon so a server that never finishes cannot hold the process open
        threading.Thread(target=_worker, name=f"fetch {url}", daemon=True).start()

        if not finished.wait(effective_timeout):
            raise FetchTimeoutError(
                url, message=f"timed out after {effective_timeout:g}s fetching {url}"
            )
        if "error" in outcome:
            raise outcome["error"]
        return outcome["body"]

    def _fetch(self, url: str, timeout: float | None, deadline: float | None) -> str:
        try:
            response = requests.get(
                url,
                headers=self.headers,
                timeout=timeout,
                allow_redirects=True,
                stream=True,
            )
        except requests.Timeout as exc:
            raise FetchTimeoutError(url, message=f"timed out fetching {url}") from exc
        except requests.RequestException as exc:
            raise NetworkError(url, message=f"network error fetching {url}: {exc}") from exc

        try:
            if response.status_code >= 400:
                raise FetchError(url, status=response.status_code)
            body = _read_body(response, url, deadline)
        finally:
            response.close()

        return _decode_body(body, response.headers.get("Content-Type", ""))


def _read_body(response: requests.Response, url: str, deadline: float | None) -> bytes:
    chunks: list[bytes] = []
    try:
        for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
            chunks.append(chunk)
            if deadline is not None and time.monotonic() >= deadline:
                raise FetchTimeoutError(url, message=f"timed out reading {url}")
    except requests.Timeout as exc:
        raise FetchTimeoutError(url, message=f"timed out reading {url}") from exc
    except requests.RequestException as exc:
        raise NetworkError(url, message=f"network error reading {url}: {exc}") from exc
    return b"".join(chunks)


def declared_charset(content_type: str) -> str | None:
    match = _CHARSET.search(content_type or "")
    return match.group(1) if match else None


def _decode_body(body: bytes, content_type: str) -> str:
    encoding = declared_charset(content_type) or "utf-8"
    try:
        return body.decode(encoding, errors="replace")
    except LookupError:
        logger.debug("Unknown charset %r, decoding as utf-8", encoding)
        return body.decode("utf-8", errors="replace")
