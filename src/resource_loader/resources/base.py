from __future__ import annotations

import logging
from abc import abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Protocol, runtime_checkable
from urllib.parse import SplitResult

from resource_loader.exceptions import ResourceNotFoundError, UnresolvableResourceError
from resource_loader.utils.locations import to_uri

logger = logging.getLogger(__name__)

# Chunk size used when the content length has to be computed by reading the stream.
CONTENT_LENGTH_CHUNK_SIZE = 256


@dataclass
class ResourceInfo:
    locator: str
    size: int | None
    last_modified: datetime | None


@runtime_checkable
class Resource(Protocol):
    """Protocol for handles describing addressable content.

    A resource is a descriptor, not the content itself: constructing one
    performs no I/O and the handle is never mutated afterwards. Content is
    only touched when the caller asks for it, e.g. via get_input_stream(),
    and any stream returned is owned (and must be closed) by the caller.

    Two resources are equal when their ``description`` strings are equal,
    unless an implementation documents otherwise.
    """

    @property
    def description(self) -> str:
        """Human-readable identity used for equality, hashing and diagnostics."""
        ...

    @property
    def filename(self) -> str | None:
        """Last path segment, or None if the backing store has no path concept."""
        ...

    def get_input_stream(self) -> BinaryIO:
        """Return a new readable binary stream over the content."""
        ...

    def exists(self) -> bool: ...

    def is_readable(self) -> bool: ...

    def is_open(self) -> bool: ...

    def is_file(self) -> bool: ...

    def get_url(self) -> str: ...

    def get_uri(self) -> SplitResult: ...

    def get_file(self) -> Path: ...

    def content_length(self) -> int: ...

    def last_modified(self) -> float: ...

    def create_relative(self, relative_path: str) -> Resource: ...


@runtime_checkable
class ContextResource(Protocol):
    """A resource loaded from an enclosing context (e.g. the working directory)."""

    @property
    def path_within_context(self) -> str:
        """Path relative to the context root, without a leading slash."""
        ...


class AbstractResource(Resource):
    """Base class supplying the fallback behaviour shared by all resources.

    Subclasses must implement ``description`` and ``get_input_stream()`` and
    override whatever their backing store can answer more cheaply.
    """

    @property
    @abstractmethod
    def description(self) -> str: ...

    @abstractmethod
    def get_input_stream(self) -> BinaryIO: ...

    @property
    def filename(self) -> str | None:
        return None

    def exists(self) -> bool:
        """Check whether a file can be found, falling back to opening a stream.

        Covers both directories and content resources.
        """
        try:
            return self.get_file().exists()
        except OSError:
            pass
        try:
            stream = self.get_input_stream()
        except Exception:
            return False
        try:
            stream.close()
        except Exception:
            logger.debug("ignoring close failure while probing %s", self.description, exc_info=True)
        return True

    def is_readable(self) -> bool:
        return self.exists()

    def is_open(self) -> bool:
        return False

    def is_file(self) -> bool:
        return False

    def get_url(self) -> str:
        raise UnresolvableResourceError(f"{self.description} cannot be resolved to URL")

    def get_uri(self) -> SplitResult:
        return to_uri(self.get_url())

    def get_file(self) -> Path:
        raise UnresolvableResourceError(
            f"{self.description} cannot be resolved to absolute file path"
        )

    def content_length(self) -> int:
        """Read the whole stream to compute its length in bytes.

        Subclasses can almost always do better, e.g. by checking a file size.
        """
        stream = self.get_input_stream()
        try:
            size = 0
            while True:
                chunk = stream.read(CONTENT_LENGTH_CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
            return size
        finally:
            try:
                stream.close()
            except Exception:
                logger.debug("failed to close stream of %s", self.description, exc_info=True)

    def last_modified(self) -> float:
        """Return the modification time (seconds since the epoch) of the underlying file."""
        file_to_check = self.get_file_for_last_modified_check()
        try:
            last_modified = file_to_check.stat().st_mtime
        except FileNotFoundError:
            last_modified = 0.0
        if not last_modified and not file_to_check.exists():
            raise ResourceNotFoundError(
                f"{self.description} cannot be resolved in the file system "
                "for checking its last-modified timestamp"
            )
        return last_modified

    def get_file_for_last_modified_check(self) -> Path:
        return self.get_file()

    def create_relative(self, relative_path: str) -> Resource:
        raise UnresolvableResourceError(
            f"Cannot create a relative resource for {self.description}"
        )

    def get_content_as_bytes(self) -> bytes:
        with self.get_input_stream() as stream:
            return stream.read()

    def get_content_as_string(self, encoding: str = "utf-8") -> str:
        return self.get_content_as_bytes().decode(encoding)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Resource):
            return NotImplemented
        return other.description == self.description

    def __hash__(self) -> int:
        return hash(self.description)

    def __str__(self) -> str:
        return self.description

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.description!r})"


def describe_resource(resource: Resource, locator: str | None = None) -> ResourceInfo:
    """Return a ResourceInfo snapshot of ``resource``.

    Size and modification time are best-effort: they are None when the
    backing store cannot provide them. Single-use resources are never read.
    """
    size: int | None = None
    if not resource.is_open():
        try:
            size = resource.content_length()
        except OSError:
            size = None
    try:
        mtime: datetime | None = datetime.fromtimestamp(resource.last_modified())
    except (OSError, ValueError, OverflowError):
        mtime = None
    return ResourceInfo(locator=locator or resource.description, size=size, last_modified=mtime)
