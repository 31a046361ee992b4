from __future__ import annotations

import pytest

from infrastructure.url.base_url_resolver import BaseUrlResolver


@pytest.mark.parametrize(
    "base, url, expected",
    [
        ("http://api.test", "/time", "http://api.test/time"),
        ("http://api.test/", "/time", "http://api.test/time"),
        ("http://api.test/v1", "users", "http://api.test/v1/users"),
        ("http://api.test", "https://other.test/x", "https://other.test/x"),
        ("", "/time", "/time"),
    ],
)
def test_resolve_url(base: str, url: str, expected: str) -> None:
    assert BaseUrlResolver(base).resolve_url(url) == expected
