from __future__ import annotations

import io
from typing import TYPE_CHECKING, BinaryIO

from azure.core.exceptions import ResourceNotFoundError as BlobNotFoundError
from azure.storage.blob import ContainerClient

from resource_loader.exceptions import ResourceNotFoundError
from resource_loader.utils.locations import apply_relative_path, clean_path, get_filename

from .base import AbstractResource, Resource

if TYPE_CHECKING:
    from resource_loader.loader import DefaultResourceLoader


class AzureBlobResource(AbstractResource):
    """Resource over a single blob of an Azure storage container."""

    def __init__(self, client: ContainerClient, blob_name: str):
        self.client = client
        self.blob_name = clean_path(blob_name).lstrip("/")

    @property
    def description(self) -> str:
        return f"Azure blob [{self.client.container_name}/{self.blob_name}]"

    @property
    def filename(self) -> str | None:
        return get_filename(self.blob_name)

    def exists(self) -> bool:
        return self.client.get_blob_client(self.blob_name).exists()

    def get_input_stream(self) -> BinaryIO:
        blob_client = self.client.get_blob_client(self.blob_name)
        stream = io.BytesIO()
        try:
            downloader = blob_client.download_blob()
        except BlobNotFoundError as exc:
            raise ResourceNotFoundError(f"{self.description} cannot be opened because it does not exist") from exc
        downloader.readinto(stream)
        stream.seek(0)
        return stream

    def get_url(self) -> str:
        return self.client.get_blob_client(self.blob_name).url

    def _properties(self):
        try:
            return self.client.get_blob_client(self.blob_name).get_blob_properties()
        except BlobNotFoundError as exc:
            raise ResourceNotFoundError(f"{self.description} does not exist") from exc

    def content_length(self) -> int:
        return self._properties().size

    def last_modified(self) -> float:
        lm = self._properties().last_modified
        return lm.timestamp() if lm else 0.0

    def create_relative(self, relative_path: str) -> Resource:
        return AzureBlobResource(self.client, apply_relative_path(self.blob_name, relative_path))


class AzureBlobProtocolResolver:
    """Resolve ``azure:<blob name>`` locations against one container."""

    def __init__(self, client: ContainerClient, prefix: str = "azure:"):
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_connection_string(
        cls, connection_string: str, container: str, prefix: str = "azure:"
    ) -> AzureBlobProtocolResolver:
        client = ContainerClient.from_connection_string(connection_string, container_name=container)
        return cls(client, prefix=prefix)

    def resolve(self, location: str, loader: DefaultResourceLoader) -> Resource | None:
        if not location.startswith(self.prefix):
            return None
        return AzureBlobResource(self.client, location[len(self.prefix):])

    def __repr__(self) -> str:
        return f"{type(self).__name__}(container={self.client.container_name!r}, prefix={self.prefix!r})"
