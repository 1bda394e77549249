from __future__ import annotations

import re
from pathlib import Path
from urllib.parse import SplitResult, unquote, urljoin, urlsplit, uses_relative
from urllib.request import url2pathname

from resource_loader.exceptions import MalformedLocationError

CLASSPATH_URL_PREFIX = "classpath:"
URL_PROTOCOL_FILE = "file"
URL_PROTOCOL_ZIP = "zip"
ZIP_URL_SEPARATOR = "!/"

# Schemes a plain location string may use to address a URL resource.
# Anything else (e.g. "cloud:") is left to protocol resolvers or the
# loader's path strategy.
KNOWN_URL_SCHEMES = frozenset({"http", "https", "ftp", "file"})

# Two characters minimum so that Windows drive letters ("C:") are not schemes.
_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]+):")
_INVALID_URI_CHARS = set(' "<>{}|\\^`') | {chr(c) for c in range(0x20)} | {"\x7f"}


def get_scheme(location: str) -> str | None:
    """Return the lower-cased scheme of ``location`` or None if it has none."""
    m = _SCHEME_RE.match(location)
    if not m:
        return None
    return m.group(1).lower()


def is_url(location: str | None) -> bool:
    """Return True if ``location`` is a ``classpath:`` pseudo URL or a URL with a known scheme."""
    if not location:
        return False
    if location.startswith(CLASSPATH_URL_PREFIX):
        return True
    return get_scheme(location) in KNOWN_URL_SCHEMES


def parse_url(location: str) -> SplitResult:
    """Parse ``location`` as an absolute URL with a known scheme.

    Raises MalformedLocationError for unknown schemes and for URLs whose
    network location is required but missing.
    """
    scheme = get_scheme(location)
    if scheme is None or scheme not in KNOWN_URL_SCHEMES:
        raise MalformedLocationError(f"Unknown protocol in URL [{location}]")
    try:
        parts = urlsplit(location)
        # accessing port validates it
        parts.port
    except ValueError as exc:
        raise MalformedLocationError(f"Malformed URL [{location}]") from exc
    if scheme in ("http", "https", "ftp") and not parts.hostname:
        raise MalformedLocationError(f"Missing host in URL [{location}]")
    return parts


def to_uri(url: str) -> SplitResult:
    """Convert a URL string to a parsed URI, escaping spaces first.

    Raises MalformedLocationError if the result is not a syntactically valid
    absolute URI.
    """
    location = url.replace(" ", "%20")
    bad = [c for c in location if c in _INVALID_URI_CHARS]
    if bad:
        raise MalformedLocationError(f"Invalid URI [{url}]")
    try:
        parts = urlsplit(location)
    except ValueError as exc:
        raise MalformedLocationError(f"Invalid URI [{url}]") from exc
    if not parts.scheme:
        raise MalformedLocationError(f"Invalid URI [{url}]: missing scheme")
    return parts


def file_url_to_path(url: str) -> Path:
    """Return the local filesystem path of a ``file:`` URL."""
    parts = urlsplit(url)
    if parts.scheme.lower() != URL_PROTOCOL_FILE:
        raise MalformedLocationError(f"Not a file URL [{url}]")
    return Path(url2pathname(unquote(parts.path)))


def clean_path(path: str) -> str:
    """Normalize a slash-separated path.

    Backslashes become forward slashes and "." / ".." segments are
    collapsed. A leading prefix such as "file:" and leading or trailing
    slashes are preserved. Leading ".." segments that cannot be collapsed
    are kept.
    """
    if not path:
        return path
    path = path.replace("\\", "/")

    prefix = ""
    colon = path.find(":")
    if colon != -1 and "/" not in path[:colon]:
        prefix = path[: colon + 1]
        path = path[colon + 1 :]
    if path.startswith("/"):
        prefix += "/"
        path = path[1:]

    trailing = path.endswith("/") and len(path) > 1
    elements: list[str] = []
    tops = 0
    for element in reversed(path.split("/")):
        if element in ("", "."):
            continue
        if element == "..":
            tops += 1
        elif tops > 0:
            tops -= 1
        else:
            elements.append(element)
    elements.extend([".."] * tops)
    cleaned = "/".join(reversed(elements))
    if trailing and cleaned:
        cleaned += "/"
    return prefix + cleaned


def apply_relative_path(path: str, relative_path: str) -> str:
    """Resolve ``relative_path`` against the directory that contains ``path``.

    >>> apply_relative_path("a/b.txt", "c.txt")
    'a/c.txt'
    """
    separator = path.rfind("/")
    if separator == -1:
        return relative_path
    new_path = path[:separator]
    if not relative_path.startswith("/"):
        new_path += "/"
    return new_path + relative_path


def join_url(base: str, relative_path: str) -> str:
    """Resolve ``relative_path`` against the URL ``base``.

    Hierarchical schemes known to urllib are joined with urljoin. Archive
    URLs of the form ``<scheme>:<archive url>!/<entry>`` are joined on the
    entry part only, so the archive URL itself is never rewritten.
    """
    scheme = get_scheme(base)
    if scheme in uses_relative:
        return urljoin(base, relative_path)
    if ZIP_URL_SEPARATOR in base:
        archive, entry = base.split(ZIP_URL_SEPARATOR, 1)
        joined = clean_path(apply_relative_path("/" + entry, relative_path)).lstrip("/")
        return f"{archive}{ZIP_URL_SEPARATOR}{joined}"
    return apply_relative_path(base, relative_path)


def get_filename(path: str | None) -> str | None:
    """Return the last segment of a slash-separated path."""
    if path is None:
        return None
    return path[path.rfind("/") + 1 :]
