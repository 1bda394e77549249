from __future__ import annotations

import logging
import os
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import Any, BinaryIO
from urllib.parse import unquote, urlsplit
from urllib.request import urlopen

import requests

from resource_loader.exceptions import (
    MalformedLocationError,
    ResourceNotFoundError,
    UnresolvableResourceError,
)
from resource_loader.utils.locations import (
    URL_PROTOCOL_FILE,
    file_url_to_path,
    get_filename,
    join_url,
    parse_url,
)

from .base import AbstractResource, Resource

logger = logging.getLogger(__name__)

_HTTP_SCHEMES = ("http", "https")


class UrlResource(AbstractResource):
    """Resource addressed by a URL.

    http(s) content is fetched with requests: existence, length and
    modification time come from a HEAD request, the content itself from a
    streamed GET. ``file:`` URLs are answered from the local filesystem.
    Other schemes known to urllib (e.g. ftp) are opened with urlopen.

    The URL is validated on construction (MalformedLocationError) but no
    request is made until content or metadata is asked for.
    """

    def __init__(
        self,
        url: str,
        session: requests.Session | None = None,
        timeout: float | None = 10,
    ) -> None:
        self._parts = parse_url(url)
        self.url = url
        self.scheme = self._parts.scheme.lower()
        self.timeout = timeout
        self.session = session or (requests.Session() if self._is_http() else None)

    @property
    def description(self) -> str:
        return f"URL [{self.url}]"

    @property
    def filename(self) -> str | None:
        return get_filename(unquote(self._parts.path))

    def _is_http(self) -> bool:
        return self.scheme in _HTTP_SCHEMES

    def _head(self) -> Any:
        """Issue a HEAD request; returns the response or None if the request failed."""
        try:
            return self.session.head(self.url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException:
            logger.debug("HEAD request failed for %s", self.url, exc_info=True)
            return None

    def exists(self) -> bool:
        if self.is_file():
            return self.get_file().exists()
        if self._is_http():
            head = self._head()
            return head is not None and head.status_code < 400
        return super().exists()

    def is_readable(self) -> bool:
        if self.is_file():
            file = self.get_file()
            return file.is_file() and os.access(file, os.R_OK)
        return self.exists()

    def is_file(self) -> bool:
        return self.scheme == URL_PROTOCOL_FILE

    def get_input_stream(self) -> BinaryIO:
        if self.is_file():
            try:
                return self.get_file().open("rb")
            except FileNotFoundError as exc:
                raise ResourceNotFoundError(f"{self.description} cannot be opened because it does not exist") from exc
        if self._is_http():
            try:
                r = self.session.get(self.url, stream=True, timeout=self.timeout)
            except requests.RequestException as exc:
                raise ResourceNotFoundError(f"{self.description} cannot be opened") from exc
            if r.status_code >= 400:
                r.close()
                raise ResourceNotFoundError(
                    f"{self.description} cannot be opened: HTTP status {r.status_code}"
                )
            r.raw.decode_content = True
            return r.raw
        return urlopen(self.url, timeout=self.timeout)

    def get_url(self) -> str:
        return self.url

    def get_file(self) -> Path:
        if not self.is_file():
            raise UnresolvableResourceError(
                f"{self.description} cannot be resolved to absolute file path "
                "because it does not reside in the file system"
            )
        return file_url_to_path(self.url)

    def content_length(self) -> int:
        if self.is_file():
            try:
                return self.get_file().stat().st_size
            except FileNotFoundError as exc:
                raise ResourceNotFoundError(
                    f"{self.description} cannot be resolved in the file system for checking its content length"
                ) from exc
        if self._is_http():
            head = self._head()
            if head is not None and head.status_code < 400:
                cl = head.headers.get("Content-Length")
                if cl and cl.isdigit():
                    return int(cl)
        return super().content_length()

    def last_modified(self) -> float:
        if not self._is_http():
            return super().last_modified()
        head = self._head()
        if head is None or head.status_code >= 400:
            raise ResourceNotFoundError(
                f"{self.description} cannot be accessed for checking its last-modified timestamp"
            )
        lm = head.headers.get("Last-Modified")
        if not lm:
            return 0.0
        try:
            return parsedate_to_datetime(lm).timestamp()
        except (TypeError, ValueError):
            logger.debug("unparsable Last-Modified header %r for %s", lm, self.url)
            return 0.0

    def create_relative(self, relative_path: str) -> Resource:
        if relative_path.startswith("/"):
            relative_path = relative_path[1:]
        return UrlResource(join_url(self.url, relative_path), session=self.session, timeout=self.timeout)


class FileUrlResource(UrlResource):
    """UrlResource for ``file:`` URLs, always backed by the local filesystem."""

    def __init__(self, url: str) -> None:
        if not is_file_url(url):
            raise MalformedLocationError(f"Not a file URL [{url}]")
        super().__init__(url)
        self._file = file_url_to_path(url)

    def get_file(self) -> Path:
        return self._file

    def create_relative(self, relative_path: str) -> Resource:
        if relative_path.startswith("/"):
            relative_path = relative_path[1:]
        return FileUrlResource(join_url(self.url, relative_path))


def is_file_url(url: str) -> bool:
    return urlsplit(url).scheme.lower() == URL_PROTOCOL_FILE
