from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO

from resource_loader.exceptions import ResourceNotFoundError
from resource_loader.utils.locations import apply_relative_path, clean_path, get_filename

from .base import AbstractResource, Resource


class FileSystemResource(AbstractResource):
    """
    Resource backed by a path in the local filesystem.

    Args:
        path: Absolute or relative path. Relative paths are interpreted against
            the process working directory. Accepts either a str or pathlib.Path.
    Behavior:
        - The path is kept in a normalized, forward-slash form (see ``path``);
          relative resources are computed against it.
        - exists/is_readable/content_length/last_modified query the filesystem
          directly instead of going through a stream.
        - Nothing is touched on construction.
    """

    def __init__(self, path: str | Path):
        if isinstance(path, Path):
            path = path.as_posix()
        # store the cleaned path string, the Path is derived from it
        self.path: str = clean_path(str(path))
        self._file: Path = Path(self.path)

    @property
    def description(self) -> str:
        return f"file [{self._file.absolute()}]"

    @property
    def filename(self) -> str | None:
        return get_filename(self.path)

    def exists(self) -> bool:
        return self._file.exists()

    def is_readable(self) -> bool:
        return self._file.is_file() and os.access(self._file, os.R_OK)

    def is_file(self) -> bool:
        return True

    def get_input_stream(self) -> BinaryIO:
        try:
            return self._file.open("rb")
        except FileNotFoundError as exc:
            raise ResourceNotFoundError(f"{self.description} cannot be opened because it does not exist") from exc

    def get_url(self) -> str:
        return self._file.absolute().as_uri()

    def get_file(self) -> Path:
        return self._file

    def content_length(self) -> int:
        try:
            return self._file.stat().st_size
        except FileNotFoundError as exc:
            raise ResourceNotFoundError(
                f"{self.description} cannot be resolved in the file system for checking its content length"
            ) from exc

    def create_relative(self, relative_path: str) -> Resource:
        return FileSystemResource(apply_relative_path(self.path, relative_path))
