from __future__ import annotations

from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from types import ModuleType
from typing import BinaryIO

from resource_loader.exceptions import ResourceNotFoundError, UnresolvableResourceError
from resource_loader.utils.locations import apply_relative_path, clean_path, get_filename

from .base import AbstractResource, Resource


class ClassPathResource(AbstractResource):
    """Resource shipped inside an importable package.

    The path is interpreted relative to ``package`` and read through
    importlib.resources, so it works for packages on disk as well as for
    zipped or otherwise virtual packages. Only on-disk resources can be
    turned into a file path or a ``file:`` URL.
    """

    def __init__(self, path: str, package: str | ModuleType):
        path = clean_path(path)
        if path.startswith("/"):
            path = path[1:]
        self.path = path
        self.package = package

    @property
    def description(self) -> str:
        return f"class path resource [{self.path}]"

    @property
    def filename(self) -> str | None:
        return get_filename(self.path)

    def _traversable(self) -> Traversable:
        root = resources.files(self.package)
        parts = [p for p in self.path.split("/") if p]
        return root.joinpath(*parts) if parts else root

    def _resolve(self) -> Traversable | None:
        """Return the traversable if the package imports and the entry exists."""
        try:
            candidate = self._traversable()
        except (ImportError, TypeError):
            return None
        if candidate.is_file() or candidate.is_dir():
            return candidate
        return None

    def exists(self) -> bool:
        return self._resolve() is not None

    def is_readable(self) -> bool:
        candidate = self._resolve()
        return candidate is not None and candidate.is_file()

    def is_file(self) -> bool:
        return isinstance(self._resolve(), Path)

    def get_input_stream(self) -> BinaryIO:
        candidate = self._resolve()
        if candidate is None or not candidate.is_file():
            raise ResourceNotFoundError(f"{self.description} cannot be opened because it does not exist")
        return candidate.open("rb")

    def get_url(self) -> str:
        candidate = self._resolve()
        if candidate is None:
            raise ResourceNotFoundError(f"{self.description} cannot be resolved to URL because it does not exist")
        if not isinstance(candidate, Path):
            raise UnresolvableResourceError(f"{self.description} cannot be resolved to URL")
        return candidate.absolute().as_uri()

    def get_file(self) -> Path:
        candidate = self._resolve()
        if candidate is None:
            raise ResourceNotFoundError(
                f"{self.description} cannot be resolved to absolute file path because it does not exist"
            )
        if not isinstance(candidate, Path):
            raise UnresolvableResourceError(
                f"{self.description} cannot be resolved to absolute file path "
                "because it does not reside in the file system"
            )
        return candidate

    def content_length(self) -> int:
        candidate = self._resolve()
        if isinstance(candidate, Path):
            return candidate.stat().st_size
        return super().content_length()

    def create_relative(self, relative_path: str) -> Resource:
        return ClassPathResource(apply_relative_path(self.path, relative_path), self.package)
