import asyncio
import logging
from types import SimpleNamespace
from typing import Any

from mcp.server.fastmcp import Context, FastMCP

from resource_loader.config import Settings
from resource_loader.loader import DefaultResourceLoader, FileSystemResourceLoader, settings
from resource_loader.resources.azure_blob import AzureBlobProtocolResolver
from resource_loader.resources.base import Resource, describe_resource
from resource_loader.resources.vfs import VfsProtocolResolver, ZipArchiveAdapter

logger = logging.getLogger(__name__)

# ----- Initialization: settings, loader, protocol resolvers ------------------


def build_loader(settings: Settings) -> DefaultResourceLoader:
    """Create the loader selected by ``settings`` and register the configured resolvers."""
    kind = (settings.loader or "").lower()
    loader: DefaultResourceLoader
    if kind == "filesystem":
        loader = FileSystemResourceLoader(timeout=settings.http_timeout)
    elif kind == "default":
        loader = DefaultResourceLoader(package=settings.classpath_package, timeout=settings.http_timeout)
    else:
        raise RuntimeError("RESOURCE_LOADER_LOADER must be 'default' or 'filesystem'")

    if settings.enable_zip_resolver:
        loader.add_protocol_resolver(VfsProtocolResolver(ZipArchiveAdapter()))

    if settings.azure_connection_string or settings.azure_container:
        if not settings.azure_connection_string or not settings.azure_container:
            raise RuntimeError(
                "Azure blob locations require RESOURCE_LOADER_AZURE_CONNECTION_STRING "
                "and RESOURCE_LOADER_AZURE_CONTAINER"
            )
        loader.add_protocol_resolver(
            AzureBlobProtocolResolver.from_connection_string(
                settings.azure_connection_string.get_secret_value(),
                settings.azure_container,
                prefix=settings.azure_prefix,
            )
        )
    return loader


loader = build_loader(settings)

logger.info("Using loader %s with resolvers %s", type(loader).__name__, loader.protocol_resolvers)

# ----- FastMCP app and tools ------------------------------------------------

mcp = FastMCP(name="resource-loader")

# attach state container for tools to access
mcp.state = SimpleNamespace()
mcp.state.settings = settings
mcp.state.loader = loader


def describe(resource: Resource) -> dict[str, Any]:
    """Return a JSON-serializable summary of ``resource``."""
    info = describe_resource(resource)
    return {
        "description": resource.description,
        "exists": resource.exists(),
        "readable": resource.is_readable(),
        "is_file": resource.is_file(),
        "is_open": resource.is_open(),
        "filename": resource.filename,
        "size": info.size,
        "last_modified": info.last_modified.isoformat() if info.last_modified else None,
    }


@mcp.tool()
async def resolve_resource(location: str, ctx: Context | None = None) -> dict[str, Any]:
    """Resolve a location string and report what the resulting resource points at."""
    resource = mcp.state.loader.get_resource(location)
    return await asyncio.to_thread(describe, resource)


def _read_preview(resource: Resource, limit: int) -> bytes:
    with resource.get_input_stream() as stream:
        return stream.read(limit + 1)


@mcp.tool()
async def read_resource(
    location: str,
    max_bytes: int | None = None,
    encoding: str = "utf-8",
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Return (a prefix of) the content behind a location, decoded as text."""
    settings_local = mcp.state.settings
    hard_cap = max(1, int(settings_local.max_read_bytes))
    try:
        requested = max(1, int(max_bytes)) if max_bytes is not None else hard_cap
    except (TypeError, ValueError):
        requested = hard_cap
    limit = min(requested, hard_cap)

    resource = mcp.state.loader.get_resource(location)
    try:
        data = await asyncio.to_thread(_read_preview, resource, limit)
    except OSError as e:
        return {"description": resource.description, "error": str(e)}

    truncated = len(data) > limit
    return {
        "description": resource.description,
        "content": data[:limit].decode(encoding, errors="replace"),
        "truncated": truncated,
        "meta": {"requested_limit": requested, "effective_limit": limit},
    }


@mcp.tool()
async def list_protocol_resolvers(ctx: Context | None = None) -> dict[str, Any]:
    """List the protocol resolvers of the configured loader, in resolution order."""
    resolvers = [repr(r) for r in mcp.state.loader.protocol_resolvers]
    return {"count": len(resolvers), "resolvers": resolvers}


if __name__ == "__main__":
    mcp.run()
