"""HTTP artifact fetcher for ghrelgrab."""

from .client import DEFAULT_TIMEOUT_S, download, fetch_to_temp

__all__ = ["DEFAULT_TIMEOUT_S", "download", "fetch_to_temp"]
