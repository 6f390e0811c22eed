"""Fetching: single vendor steps and the recursive fetch loop."""
from gvt.fetch.fetcher import ALREADY_VENDORED, Fetcher, FetchResult
from gvt.fetch.recursive import fetch, package_roots

__all__ = [
    "ALREADY_VENDORED",
    "FetchResult",
    "Fetcher",
    "fetch",
    "package_roots",
]
