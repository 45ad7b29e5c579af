from datetime import datetime
from pathlib import Path
from typing import Protocol

from .blob_path import BlobPath, BlobPathLike
from .handles import (
    AppendBlobHandle,
    BlobHandle,
    BlockBlobHandle,
    ContainerHandle,
    PrefixHandle,
)
from .models import (
    AppendBlobResult,
    BlobContents,
    BlobProperties,
    ContainerAccessPolicy,
    CreateBlobResult,
    SetBlobContentsResult,
)


class BlobStorage(Protocol):
    """
    Protocol for a blob storage backend.

    Backends subclass this explicitly so they inherit the handle factories
    below. Every path argument accepts "container/blob/name" or a BlobPath.
    """

    def get_container(self, container_name: str) -> ContainerHandle:
        """Return a handle to a container. Nothing is created."""
        return ContainerHandle(self, container_name)

    def get_prefix(self, prefix: BlobPathLike) -> PrefixHandle:
        """Return a handle for operations relative to a path prefix."""
        return PrefixHandle(self, BlobPath.parse(prefix))

    def get_blob(self, blob_path: BlobPathLike) -> BlobHandle:
        """Return a handle to a blob of any type."""
        return BlobHandle(self, BlobPath.parse(blob_path))

    def get_block_blob(self, blob_path: BlobPathLike) -> BlockBlobHandle:
        """Return a handle to a block blob."""
        return BlockBlobHandle(self, BlobPath.parse(blob_path))

    def get_append_blob(self, blob_path: BlobPathLike) -> AppendBlobHandle:
        """Return a handle to an append blob."""
        return AppendBlobHandle(self, BlobPath.parse(blob_path))

    async def set_block_blob_contents_from_file(
        self,
        blob_path: BlobPathLike,
        file_path: str | Path,
        content_type: str | None = None,
        etag: str | None = None,
    ) -> SetBlobContentsResult:
        """Upload a UTF-8 text file as the contents of a block blob."""
        contents = Path(file_path).read_text(encoding="utf-8")
        return await self.set_block_blob_contents(
            blob_path, contents, content_type=content_type, etag=etag
        )

    def get_url(
        self,
        include_sas: bool = False,
        sas_expiry: datetime | None = None,
        sas_start: datetime | None = None,
    ) -> str:
        """Return the URL of the storage account."""
        ...

    def get_container_url(
        self,
        container_name: str,
        include_sas: bool = False,
        sas_expiry: datetime | None = None,
        sas_start: datetime | None = None,
    ) -> str:
        """Return the URL of a container."""
        ...

    def get_blob_url(
        self,
        blob_path: BlobPathLike,
        include_sas: bool = False,
        encode_blob_name: bool = False,
        sas_expiry: datetime | None = None,
        sas_start: datetime | None = None,
    ) -> str:
        """Return the URL of a blob."""
        ...

    async def container_exists(self, container_name: str) -> bool:
        """Return whether the container exists."""
        ...

    async def create_container(
        self,
        container_name: str,
        access_policy: ContainerAccessPolicy | None = None,
    ) -> bool:
        """Create a container. Return False if it already existed."""
        ...

    async def delete_container(self, container_name: str) -> bool:
        """Delete a container and its blobs. Return False if it did not exist."""
        ...

    async def list_containers(self) -> list[ContainerHandle]:
        """List all containers in the account."""
        ...

    async def get_container_access_policy(
        self, container_name: str
    ) -> ContainerAccessPolicy:
        """Return the anonymous access policy of a container."""
        ...

    async def set_container_access_policy(
        self, container_name: str, access_policy: ContainerAccessPolicy
    ) -> None:
        """Change the anonymous access policy of a container."""
        ...

    async def blob_exists(self, blob_path: BlobPathLike) -> bool:
        """Return whether the blob exists."""
        ...

    async def get_blob_properties(self, blob_path: BlobPathLike) -> BlobProperties:
        """Return the blob's ETag, content type, type and size."""
        ...

    async def get_blob_contents_as_string(
        self, blob_path: BlobPathLike
    ) -> BlobContents:
        """Download blob contents decoded as UTF-8, with the matching ETag."""
        ...

    async def create_block_blob(
        self, blob_path: BlobPathLike, content_type: str | None = None
    ) -> CreateBlobResult:
        """Create an empty block blob. Never overwrites an existing blob."""
        ...

    async def create_append_blob(
        self, blob_path: BlobPathLike, content_type: str | None = None
    ) -> CreateBlobResult:
        """Create an empty append blob. Never overwrites an existing blob."""
        ...

    async def set_block_blob_contents(
        self,
        blob_path: BlobPathLike,
        contents: str,
        content_type: str | None = None,
        etag: str | None = None,
    ) -> SetBlobContentsResult:
        """Replace the blob's contents, optionally only if its ETag matches."""
        ...

    async def append_to_blob_contents(
        self,
        blob_path: BlobPathLike,
        contents: str,
        etag: str | None = None,
    ) -> AppendBlobResult:
        """Append to an existing append blob, optionally only if its ETag matches."""
        ...

    async def get_blob_content_type(self, blob_path: BlobPathLike) -> str | None:
        """Return the blob's content type."""
        ...

    async def set_blob_content_type(
        self, blob_path: BlobPathLike, content_type: str
    ) -> None:
        """Change the blob's content type."""
        ...

    async def delete_blob(self, blob_path: BlobPathLike) -> bool:
        """Delete a blob. Return False if it did not exist."""
        ...

    async def close(self) -> None:
        """Close any resources/connections."""
        ...
