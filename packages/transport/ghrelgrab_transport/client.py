"""HTTP(S) download of release artifacts into a scoped temporary file."""

from __future__ import annotations

import http.client
import os
import ssl
import tempfile
import time
import urllib.error
import urllib.parse
import urllib.request
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

import certifi

from ghrelgrab_core.errors import HttpStatusError, TransportError


DEFAULT_TIMEOUT_S = 60
DEFAULT_USER_AGENT = "ghrelgrab"
CHUNK_SIZE = 1024 * 1024
MAX_ERROR_BODY = 4000


def _build_ssl_context() -> ssl.SSLContext:
    """Create TLS context for asset downloads with explicit CA handling."""
    if os.environ.get("GHRELGRAB_ALLOW_INSECURE_TLS", "").strip() == "1":
        return ssl._create_unverified_context()

    ca_bundle = os.environ.get("GHRELGRAB_CA_BUNDLE", "").strip()
    if ca_bundle:
        return ssl.create_default_context(cafile=ca_bundle)

    return ssl.create_default_context(cafile=certifi.where())


class _RedirectHandler(urllib.request.HTTPRedirectHandler):
    """Follow redirects without forwarding the bearer token to another host."""

    def redirect_request(self, req, fp, code, msg, headers, newurl):
        new = super().redirect_request(req, fp, code, msg, headers, newurl)
        if new is not None:
            old_host = urllib.parse.urlsplit(req.full_url).hostname
            if urllib.parse.urlsplit(newurl).hostname != old_host:
                new.remove_header("Authorization")
        return new


def _urlopen(url: str, timeout: float, token: str | None = None, user_agent: str = DEFAULT_USER_AGENT):
    headers = {"User-Agent": user_agent}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    request = urllib.request.Request(url, headers=headers)
    opener = urllib.request.build_opener(
        urllib.request.HTTPSHandler(context=_build_ssl_context()),
        _RedirectHandler(),
    )
    return opener.open(request, timeout=timeout)


def _error_body(source) -> str:
    try:
        raw = source.read(MAX_ERROR_BODY)
    except (OSError, http.client.HTTPException):
        return ""
    if not raw:
        return ""
    return raw.decode("utf-8", errors="replace").strip()


def _copy_body(url: str, response, out: BinaryIO, deadline: float, timeout_s: float) -> int:
    total = 0
    while True:
        if time.monotonic() > deadline:
            raise TransportError(url, f"timed out after {timeout_s:g}s")
        try:
            chunk = response.read(CHUNK_SIZE)
        except (OSError, http.client.HTTPException) as exc:
            raise TransportError(url, str(exc) or type(exc).__name__) from exc
        if not chunk:
            return total
        out.write(chunk)
        total += len(chunk)


def fetch_to_temp(
    url: str,
    token: str | None = None,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    user_agent: str = DEFAULT_USER_AGENT,
) -> Path:
    """Download ``url`` completely into a new ``ghrelgrab-*`` temp file.

    The caller owns the returned file. On failure nothing is left behind:
    non-2xx answers raise :class:`HttpStatusError`, everything that prevents
    a full response (DNS, TLS, reset, the overall deadline) raises
    :class:`TransportError`.
    """
    deadline = time.monotonic() + timeout_s
    try:
        response = _urlopen(url, timeout=timeout_s, token=token, user_agent=user_agent)
    except urllib.error.HTTPError as exc:
        with exc:
            body = _error_body(exc)
        raise HttpStatusError(url, exc.code, body) from exc
    except urllib.error.URLError as exc:
        raise TransportError(url, str(exc.reason)) from exc
    except (OSError, http.client.HTTPException, ValueError) as exc:
        raise TransportError(url, str(exc) or type(exc).__name__) from exc

    with response:
        status = int(getattr(response, "status", 200))
        if not 200 <= status < 300:
            raise HttpStatusError(url, status, _error_body(response))

        fd, name = tempfile.mkstemp(prefix="ghrelgrab-")
        path = Path(name)
        try:
            with os.fdopen(fd, "wb") as out:
                _copy_body(url, response, out, deadline, timeout_s)
        except BaseException:
            path.unlink(missing_ok=True)
            raise
    return path


@contextmanager
def download(
    url: str,
    token: str | None = None,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    user_agent: str = DEFAULT_USER_AGENT,
) -> Iterator[Path]:
    """Yield the downloaded artifact's path; the file is removed on exit, even on error."""
    path = fetch_to_temp(url, token=token, timeout_s=timeout_s, user_agent=user_agent)
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)
