from __future__ import annotations


class ResourceError(OSError):
    """Base class for every error raised by resource handles and loaders."""


class ResourceNotFoundError(ResourceError, FileNotFoundError):
    """Content is absent where its presence was required."""


class UnresolvableResourceError(ResourceError, FileNotFoundError):
    """The operation is not supported by this kind of resource.

    Raised e.g. when a stream-only resource is asked for a URL or a file path.
    Callers are expected to catch it and try an alternate resolution path.
    """


class MalformedLocationError(ResourceError, ValueError):
    """A URL or URI string is syntactically invalid."""


class AdapterFailureError(ResourceError):
    """An external virtual-filesystem provider failed.

    The provider's original exception is always attached as ``__cause__``.
    """


class IllegalResourceStateError(ResourceError):
    """A single-use resource was consumed more than once."""
