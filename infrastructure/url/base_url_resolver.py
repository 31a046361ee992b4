# infrastructure/url/base_url_resolver.py
from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit


@dataclass(frozen=True)
class BaseUrlResolver:
    base_url: str

    def resolve_url(self, url: str) -> str:
        if urlsplit(url).scheme or not self.base_url:
            return url
        return self.base_url.rstrip("/") + "/" + url.lstrip("/")
