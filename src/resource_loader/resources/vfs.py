from __future__ import annotations

import io
import logging
import zipfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, BinaryIO, Protocol, runtime_checkable
from urllib.parse import SplitResult

from resource_loader.exceptions import (
    AdapterFailureError,
    MalformedLocationError,
    ResourceNotFoundError,
    UnresolvableResourceError,
)
from resource_loader.utils.locations import (
    URL_PROTOCOL_ZIP,
    ZIP_URL_SEPARATOR,
    clean_path,
    file_url_to_path,
    join_url,
    to_uri,
)

from .base import AbstractResource, Resource

if TYPE_CHECKING:
    from resource_loader.loader import DefaultResourceLoader

logger = logging.getLogger(__name__)


@runtime_checkable
class VfsAdapter(Protocol):
    """Protocol for virtual-filesystem providers.

    This is the whole surface VfsResource needs from a provider. Handles are
    opaque to the resource: they are passed back to the adapter unchanged
    and compared with ``==`` to decide resource equality, so implementations
    should use hashable handles with value semantics.
    """

    def get_input_stream(self, handle: Any) -> BinaryIO: ...

    def exists(self, handle: Any) -> bool: ...

    def is_readable(self, handle: Any) -> bool: ...

    def get_url(self, handle: Any) -> str: ...

    def get_uri(self, handle: Any) -> SplitResult: ...

    def get_file(self, handle: Any) -> Path: ...

    def get_size(self, handle: Any) -> int: ...

    def get_last_modified(self, handle: Any) -> float: ...

    def get_child(self, handle: Any, path: str) -> Any:
        """Return the handle of ``path`` below ``handle``.

        Raises an OSError (typically ResourceNotFoundError) if there is no such child.
        """
        ...

    def get_name(self, handle: Any) -> str: ...

    def get_relative(self, url: str) -> Any:
        """Return the handle addressed by ``url``, a URL as produced by get_url()."""
        ...


class VfsResource(AbstractResource):
    """Resource over a node of an external virtual filesystem.

    All operations are delegated to ``adapter``. Equality follows the wrapped
    handle instead of the description.
    """

    def __init__(self, handle: Any, adapter: VfsAdapter):
        if handle is None:
            raise ValueError("VFS handle must not be None")
        self.handle = handle
        self.adapter = adapter

    @property
    def description(self) -> str:
        return f"VFS resource [{self.handle}]"

    @property
    def filename(self) -> str | None:
        return self.adapter.get_name(self.handle)

    def get_input_stream(self) -> BinaryIO:
        return self.adapter.get_input_stream(self.handle)

    def exists(self) -> bool:
        return self.adapter.exists(self.handle)

    def is_readable(self) -> bool:
        return self.adapter.is_readable(self.handle)

    def get_url(self) -> str:
        try:
            return self.adapter.get_url(self.handle)
        except Exception as exc:
            raise AdapterFailureError(f"Failed to obtain URL for file {self.handle}") from exc

    def get_uri(self) -> SplitResult:
        try:
            return self.adapter.get_uri(self.handle)
        except Exception as exc:
            raise AdapterFailureError(f"Failed to obtain URI for {self.handle}") from exc

    def get_file(self) -> Path:
        return self.adapter.get_file(self.handle)

    def content_length(self) -> int:
        return self.adapter.get_size(self.handle)

    def last_modified(self) -> float:
        return self.adapter.get_last_modified(self.handle)

    def create_relative(self, relative_path: str) -> Resource:
        if not relative_path.startswith(".") and "/" in relative_path:
            try:
                return VfsResource(self.adapter.get_child(self.handle, relative_path), self.adapter)
            except OSError:
                logger.debug(
                    "child lookup of %r below %s failed, resolving relative to URL",
                    relative_path,
                    self.handle,
                )
        return VfsResource(
            self.adapter.get_relative(join_url(self.get_url(), relative_path)), self.adapter
        )

    def __eq__(self, other: object) -> bool:
        return self is other or (isinstance(other, VfsResource) and self.handle == other.handle)

    def __hash__(self) -> int:
        return hash(self.handle)


@dataclass(frozen=True)
class ZipEntry:
    """Handle of a node inside a zip archive; ``name`` is empty for the archive root."""

    archive: Path
    name: str = ""

    def __str__(self) -> str:
        return f"{self.archive.as_posix()}{ZIP_URL_SEPARATOR}{self.name}"


class ZipArchiveAdapter(VfsAdapter):
    """
    VfsAdapter exposing zip archives as a virtual filesystem.

    Behavior:
        - Directories are implicit: a name exists as a directory when any
          archive member lives below it.
        - URLs have the form ``zip:<archive file URL>!/<entry>``.
        - Entries have no physical path, so get_file only succeeds for the
          archive root (returning the archive itself).
        - Every call opens the archive afresh; nothing is cached.
    """

    def root(self, archive: str | Path) -> ZipEntry:
        return ZipEntry(Path(archive).absolute(), "")

    def _info(self, handle: ZipEntry) -> zipfile.ZipInfo:
        try:
            with zipfile.ZipFile(handle.archive) as zf:
                return zf.getinfo(handle.name)
        except (KeyError, FileNotFoundError) as exc:
            raise ResourceNotFoundError(f"No entry {handle.name!r} in archive {handle.archive}") from exc
        except zipfile.BadZipFile as exc:
            raise AdapterFailureError(f"Cannot read archive {handle.archive}") from exc

    def _names(self, handle: ZipEntry) -> list[str]:
        try:
            with zipfile.ZipFile(handle.archive) as zf:
                return zf.namelist()
        except (FileNotFoundError, zipfile.BadZipFile):
            return []

    def get_input_stream(self, handle: ZipEntry) -> BinaryIO:
        try:
            with zipfile.ZipFile(handle.archive) as zf:
                with zf.open(handle.name, "r") as f:
                    return io.BytesIO(f.read())
        except (KeyError, FileNotFoundError) as exc:
            raise ResourceNotFoundError(f"No entry {handle.name!r} in archive {handle.archive}") from exc
        except zipfile.BadZipFile as exc:
            raise AdapterFailureError(f"Cannot read archive {handle.archive}") from exc

    def exists(self, handle: ZipEntry) -> bool:
        if not handle.name:
            return zipfile.is_zipfile(handle.archive)
        names = self._names(handle)
        prefix = handle.name.rstrip("/") + "/"
        return handle.name in names or any(n.startswith(prefix) for n in names)

    def is_readable(self, handle: ZipEntry) -> bool:
        if not handle.name or handle.name.endswith("/"):
            return False
        return handle.name in self._names(handle)

    def get_url(self, handle: ZipEntry) -> str:
        return f"{URL_PROTOCOL_ZIP}:{handle.archive.as_uri()}{ZIP_URL_SEPARATOR}{handle.name}"

    def get_uri(self, handle: ZipEntry) -> SplitResult:
        return to_uri(self.get_url(handle))

    def get_file(self, handle: ZipEntry) -> Path:
        if handle.name:
            raise UnresolvableResourceError(f"Zip entry {handle} does not reside in the file system")
        return handle.archive

    def get_size(self, handle: ZipEntry) -> int:
        if not handle.name:
            return handle.archive.stat().st_size
        return self._info(handle).file_size

    def get_last_modified(self, handle: ZipEntry) -> float:
        if not handle.name:
            return handle.archive.stat().st_mtime
        return datetime(*self._info(handle).date_time).timestamp()

    def get_child(self, handle: ZipEntry, path: str) -> ZipEntry:
        base = handle.name.rstrip("/")
        name = clean_path(f"{base}/{path}" if base else path).lstrip("/")
        child = ZipEntry(handle.archive, name)
        if not self.exists(child):
            raise ResourceNotFoundError(f"No entry {name!r} in archive {handle.archive}")
        return child

    def get_name(self, handle: ZipEntry) -> str:
        if not handle.name:
            return handle.archive.name
        return handle.name.rstrip("/").rsplit("/", 1)[-1]

    def get_relative(self, url: str) -> ZipEntry:
        prefix = f"{URL_PROTOCOL_ZIP}:"
        if not url.startswith(prefix) or ZIP_URL_SEPARATOR not in url:
            raise MalformedLocationError(f"Not a zip archive URL [{url}]")
        archive_url, entry = url[len(prefix):].split(ZIP_URL_SEPARATOR, 1)
        return ZipEntry(file_url_to_path(archive_url).absolute(), clean_path(entry).lstrip("/"))


class VfsProtocolResolver:
    """Protocol resolver handing locations with ``prefix`` to a VfsAdapter.

    Example: ``loader.add_protocol_resolver(VfsProtocolResolver(ZipArchiveAdapter()))``
    makes ``zip:file:///data/site.zip!/index.html`` resolvable.
    """

    def __init__(self, adapter: VfsAdapter, prefix: str = f"{URL_PROTOCOL_ZIP}:"):
        self.adapter = adapter
        self.prefix = prefix

    def resolve(self, location: str, loader: DefaultResourceLoader) -> Resource | None:
        if not location.startswith(self.prefix):
            return None
        return VfsResource(self.adapter.get_relative(location), self.adapter)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(prefix={self.prefix!r})"
