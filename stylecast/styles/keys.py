"""Cache key construction.

Keys are colon-joined, percent-quoted parts, so a prefix built from
(theme, page) can never match a different page whose name merely starts
with the same characters.
"""

from urllib.parse import quote


def cache_key(*parts: str) -> str:
    return ":".join(quote(part, safe="") for part in parts)


def key_prefix(*parts: str) -> str:
    return cache_key(*parts) + ":"
