"""Pure helpers for normalizing URL paths and detecting URI schemes."""

from __future__ import annotations

import posixpath
import re

__all__ = ["clean_path", "has_scheme", "join_path"]

_SCHEME_PATTERN = re.compile(r"^[a-z][a-z0-9+.\-]*://", re.IGNORECASE)


def _lexical_clean(value: str) -> str:
    cleaned = posixpath.normpath(value)
    # POSIX keeps a leading "//"; a URL path never needs it.
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def clean_path(url_path: str, default_path: str) -> str:
    """Return an absolute, lexically clean version of ``url_path``.

    Whitespace is trimmed first. An empty value, or one that cleans down to
    nothing (e.g. ``"dir/.."``), yields ``default_path`` unchanged. The input is
    treated as an opaque path: ``"https://host"`` becomes ``"/https:/host"``.
    """
    trimmed = url_path.strip()
    if not trimmed:
        return default_path
    cleaned = _lexical_clean(trimmed)
    if cleaned == ".":
        return default_path
    if not cleaned.startswith("/"):
        cleaned = "/" + cleaned
    return cleaned


def join_path(*elements: str) -> str:
    """Join path elements with ``/`` and clean the result.

    Empty elements are ignored; an absolute element does not discard the
    elements before it, so ``join_path("/base", "/v1/metrics")`` is
    ``"/base/v1/metrics"``.
    """
    joined = "/".join(element for element in elements if element)
    if not joined:
        return ""
    return _lexical_clean(joined)


def has_scheme(candidate: str) -> bool:
    """Return True if ``candidate`` starts with ``<scheme>://``.

    Only the shape is checked; whether the scheme is supported is up to the
    caller.
    """
    return _SCHEME_PATTERN.match(candidate) is not None
