from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from types import ModuleType
from typing import Protocol, Union, runtime_checkable

import requests

from resource_loader.config import Settings
from resource_loader.exceptions import MalformedLocationError
from resource_loader.resources.base import Resource
from resource_loader.resources.classpath import ClassPathResource
from resource_loader.resources.filesystem import FileSystemResource
from resource_loader.resources.url import FileUrlResource, UrlResource
from resource_loader.utils.locations import (
    CLASSPATH_URL_PREFIX,
    URL_PROTOCOL_FILE,
    apply_relative_path,
    is_url,
    parse_url,
)

settings = Settings()

logger = logging.getLogger(__name__)


@runtime_checkable
class ProtocolResolver(Protocol):
    """Strategy resolving locations that follow a resolver-specific convention.

    resolve() returns None when the location is not handled, which lets the
    loader try the next resolver and finally its own default strategy.
    """

    def resolve(self, location: str, loader: DefaultResourceLoader) -> Resource | None: ...


# Plain callables with the resolve() signature are accepted as resolvers too.
ResolverLike = Union[ProtocolResolver, Callable[[str, "DefaultResourceLoader"], Union[Resource, None]]]


class ClassPathContextResource(ClassPathResource):
    """ClassPathResource that also exposes its path as context-relative."""

    @property
    def path_within_context(self) -> str:
        return self.path

    def create_relative(self, relative_path: str) -> Resource:
        return ClassPathContextResource(apply_relative_path(self.path, relative_path), self.package)


class DefaultResourceLoader:
    """Turns location strings into Resource handles.

    Resolution order for get_resource():
        1. registered protocol resolvers, in registration order (first hit wins);
        2. a leading "/" goes to get_resource_by_path();
        3. "classpath:" locations become ClassPathResource anchored on ``package``;
        4. URLs with a known scheme become FileUrlResource / UrlResource, an
           unparsable URL falls back to get_resource_by_path();
        5. anything else goes to get_resource_by_path(), which by default
           returns a package resource.

    The resolver chain is owned by the loader instance: it starts empty,
    only grows, and appends are visible to every later resolution. Resolved
    resources are never cached.
    """

    def __init__(
        self,
        package: str | ModuleType | None = None,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ) -> None:
        self.package = package or settings.classpath_package
        # one pooled session shared by every http(s) resource this loader hands out
        self.session = session or requests.Session()
        self.timeout = settings.http_timeout if timeout is None else timeout
        # append-only; resolution iterates over a tuple snapshot
        self._protocol_resolvers: list[ResolverLike] = []
        self._lock = threading.Lock()

    def add_protocol_resolver(self, resolver: ResolverLike) -> None:
        """Register a resolver; it is consulted after all previously registered ones."""
        if resolver is None:
            raise ValueError("ProtocolResolver must not be None")
        with self._lock:
            self._protocol_resolvers.append(resolver)

    @property
    def protocol_resolvers(self) -> tuple[ResolverLike, ...]:
        """Snapshot of the registered resolvers, in resolution order."""
        return tuple(self._protocol_resolvers)

    def _invoke(self, resolver: ResolverLike, location: str) -> Resource | None:
        if isinstance(resolver, ProtocolResolver):
            return resolver.resolve(location, self)
        return resolver(location, self)

    def get_resource(self, location: str) -> Resource:
        if location is None:
            raise ValueError("Location must not be None")

        for resolver in self.protocol_resolvers:
            resource = self._invoke(resolver, location)
            if resource is not None:
                logger.debug("location %r resolved by %r", location, resolver)
                return resource

        if location.startswith("/"):
            return self.get_resource_by_path(location)
        if location.startswith(CLASSPATH_URL_PREFIX):
            return ClassPathResource(location[len(CLASSPATH_URL_PREFIX):], self.package)
        if not is_url(location):
            return self.get_resource_by_path(location)

        try:
            parts = parse_url(location)
        except MalformedLocationError:
            logger.debug("location %r is not a URL, resolving as path", location)
            return self.get_resource_by_path(location)
        if parts.scheme.lower() == URL_PROTOCOL_FILE:
            return FileUrlResource(location)
        return UrlResource(location, session=self.session, timeout=self.timeout)

    def get_resource_by_path(self, path: str) -> Resource:
        """Return a Resource for a path that is neither a URL nor handled by a resolver."""
        return ClassPathContextResource(path, self.package)


class FileSystemContextResource(FileSystemResource):
    """FileSystemResource that also exposes its path as context-relative."""

    @property
    def path_within_context(self) -> str:
        return self.path


class FileSystemResourceLoader(DefaultResourceLoader):
    """DefaultResourceLoader resolving plain paths as filesystem paths.

    Even a path starting with a slash is interpreted relative to the current
    working directory.
    """

    def get_resource_by_path(self, path: str) -> Resource:
        if path.startswith("/"):
            path = path[1:]
        return FileSystemContextResource(path)
