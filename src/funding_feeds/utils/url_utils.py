from __future__ import annotations

import re
from urllib.parse import urljoin

_HTTP_URL = re.compile(r"^https?://\S+", re.IGNORECASE)


def is_http_url(value: str | None) -> bool:
    return bool(_HTTP_URL.match((value or "").strip()))


def ensure_absolute_url(href: str | None, base_url: str) -> str:
    value = (href or "").strip()
    if not value:
        return ""
    if is_http_url(value):
        return value
    return urljoin(base_url, value)
