"""
Handles to containers, prefixes and blobs.

A handle is a stateless (storage, path) pair: it forwards every call to the
backend it was obtained from and compares equal to any handle of the same
kind bound to the same backend and path. Creating one never touches storage.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .blob_path import BlobPath
from .models import (
    AppendBlobResult,
    BlobContents,
    BlobProperties,
    ContainerAccessPolicy,
    CreateBlobResult,
    SetBlobContentsResult,
)

if TYPE_CHECKING:
    from .storage_protocols import BlobStorage


@dataclass(frozen=True)
class ContainerHandle:
    storage: "BlobStorage"
    name: str

    def _path(self, blob_name: str) -> BlobPath:
        return BlobPath(self.name, blob_name)

    def get_url(self, **options: Any) -> str:
        """Return this container's URL. Accepts the backend's URL keyword options."""
        return self.storage.get_container_url(self.name, **options)

    def get_blob(self, blob_name: str) -> "BlobHandle":
        return BlobHandle(self.storage, self._path(blob_name))

    def get_block_blob(self, blob_name: str) -> "BlockBlobHandle":
        return BlockBlobHandle(self.storage, self._path(blob_name))

    def get_append_blob(self, blob_name: str) -> "AppendBlobHandle":
        return AppendBlobHandle(self.storage, self._path(blob_name))

    def get_prefix(self, prefix: str) -> "PrefixHandle":
        return PrefixHandle(self.storage, self._path(prefix))

    async def create(self, access_policy: ContainerAccessPolicy | None = None) -> bool:
        return await self.storage.create_container(self.name, access_policy)

    async def exists(self) -> bool:
        return await self.storage.container_exists(self.name)

    async def delete(self) -> bool:
        return await self.storage.delete_container(self.name)

    async def get_access_policy(self) -> ContainerAccessPolicy:
        return await self.storage.get_container_access_policy(self.name)

    async def set_access_policy(self, access_policy: ContainerAccessPolicy) -> None:
        await self.storage.set_container_access_policy(self.name, access_policy)

    async def blob_exists(self, blob_name: str) -> bool:
        return await self.storage.blob_exists(self._path(blob_name))

    async def create_block_blob(
        self, blob_name: str, content_type: str | None = None
    ) -> CreateBlobResult:
        return await self.storage.create_block_blob(self._path(blob_name), content_type)

    async def create_append_blob(
        self, blob_name: str, content_type: str | None = None
    ) -> CreateBlobResult:
        return await self.storage.create_append_blob(self._path(blob_name), content_type)

    async def get_blob_contents_as_string(self, blob_name: str) -> BlobContents:
        return await self.storage.get_blob_contents_as_string(self._path(blob_name))

    async def set_block_blob_contents(
        self,
        blob_name: str,
        contents: str,
        content_type: str | None = None,
        etag: str | None = None,
    ) -> SetBlobContentsResult:
        return await self.storage.set_block_blob_contents(
            self._path(blob_name), contents, content_type=content_type, etag=etag
        )

    async def append_to_blob_contents(
        self, blob_name: str, contents: str, etag: str | None = None
    ) -> AppendBlobResult:
        return await self.storage.append_to_blob_contents(
            self._path(blob_name), contents, etag=etag
        )

    async def get_blob_content_type(self, blob_name: str) -> str | None:
        return await self.storage.get_blob_content_type(self._path(blob_name))

    async def set_blob_content_type(self, blob_name: str, content_type: str) -> None:
        await self.storage.set_blob_content_type(self._path(blob_name), content_type)

    async def delete_blob(self, blob_name: str) -> bool:
        return await self.storage.delete_blob(self._path(blob_name))


@dataclass(frozen=True)
class PrefixHandle:
    """
    A path that other blob paths are derived from. Names passed to its
    methods are appended to the prefix as is, so "logs/" + "a.txt" gives
    "logs/a.txt" but "logs" + "a.txt" gives "logsa.txt".
    """

    storage: "BlobStorage"
    path: BlobPath

    def get_url(self, **options: Any) -> str:
        return self.storage.get_blob_url(self.path, **options)

    def get_container(self) -> ContainerHandle:
        return ContainerHandle(self.storage, self.path.container_name)

    def get_blob(self, blob_name: str) -> "BlobHandle":
        return BlobHandle(self.storage, self.path.concatenate(blob_name))

    def get_block_blob(self, blob_name: str) -> "BlockBlobHandle":
        return BlockBlobHandle(self.storage, self.path.concatenate(blob_name))

    def get_append_blob(self, blob_name: str) -> "AppendBlobHandle":
        return AppendBlobHandle(self.storage, self.path.concatenate(blob_name))

    def get_prefix(self, prefix: str) -> "PrefixHandle":
        return PrefixHandle(self.storage, self.path.concatenate(prefix))

    async def blob_exists(self, blob_name: str) -> bool:
        return await self.storage.blob_exists(self.path.concatenate(blob_name))

    async def create_block_blob(
        self, blob_name: str, content_type: str | None = None
    ) -> CreateBlobResult:
        return await self.storage.create_block_blob(
            self.path.concatenate(blob_name), content_type
        )

    async def create_append_blob(
        self, blob_name: str, content_type: str | None = None
    ) -> CreateBlobResult:
        return await self.storage.create_append_blob(
            self.path.concatenate(blob_name), content_type
        )

    async def get_blob_contents_as_string(self, blob_name: str) -> BlobContents:
        return await self.storage.get_blob_contents_as_string(
            self.path.concatenate(blob_name)
        )

    async def set_block_blob_contents(
        self,
        blob_name: str,
        contents: str,
        content_type: str | None = None,
        etag: str | None = None,
    ) -> SetBlobContentsResult:
        return await self.storage.set_block_blob_contents(
            self.path.concatenate(blob_name),
            contents,
            content_type=content_type,
            etag=etag,
        )

    async def append_to_blob_contents(
        self, blob_name: str, contents: str, etag: str | None = None
    ) -> AppendBlobResult:
        return await self.storage.append_to_blob_contents(
            self.path.concatenate(blob_name), contents, etag=etag
        )

    async def delete_blob(self, blob_name: str) -> bool:
        return await self.storage.delete_blob(self.path.concatenate(blob_name))


@dataclass(frozen=True)
class BlobHandle:
    """A blob of unknown type. Supports the operations common to every blob."""

    storage: "BlobStorage"
    path: BlobPath

    def get_url(self, **options: Any) -> str:
        return self.storage.get_blob_url(self.path, **options)

    async def exists(self) -> bool:
        return await self.storage.blob_exists(self.path)

    async def delete(self) -> bool:
        return await self.storage.delete_blob(self.path)

    async def get_properties(self) -> BlobProperties:
        return await self.storage.get_blob_properties(self.path)

    async def get_contents_as_string(self) -> BlobContents:
        return await self.storage.get_blob_contents_as_string(self.path)

    async def get_content_type(self) -> str | None:
        return await self.storage.get_blob_content_type(self.path)

    async def set_content_type(self, content_type: str) -> None:
        await self.storage.set_blob_content_type(self.path, content_type)


@dataclass(frozen=True)
class BlockBlobHandle:
    """A blob whose writes replace its whole contents."""

    storage: "BlobStorage"
    path: BlobPath

    def get_url(self, **options: Any) -> str:
        return self.storage.get_blob_url(self.path, **options)

    async def exists(self) -> bool:
        return await self.storage.blob_exists(self.path)

    async def delete(self) -> bool:
        return await self.storage.delete_blob(self.path)

    async def get_properties(self) -> BlobProperties:
        return await self.storage.get_blob_properties(self.path)

    async def get_contents_as_string(self) -> BlobContents:
        return await self.storage.get_blob_contents_as_string(self.path)

    async def get_content_type(self) -> str | None:
        return await self.storage.get_blob_content_type(self.path)

    async def set_content_type(self, content_type: str) -> None:
        await self.storage.set_blob_content_type(self.path, content_type)

    async def create(self, content_type: str | None = None) -> CreateBlobResult:
        """Create this block blob empty. Returns created=False if it already exists."""
        return await self.storage.create_block_blob(self.path, content_type)

    async def set_contents(
        self,
        contents: str,
        content_type: str | None = None,
        etag: str | None = None,
    ) -> SetBlobContentsResult:
        return await self.storage.set_block_blob_contents(
            self.path, contents, content_type=content_type, etag=etag
        )

    async def set_contents_from_file(
        self,
        file_path: str | Path,
        content_type: str | None = None,
        etag: str | None = None,
    ) -> SetBlobContentsResult:
        return await self.storage.set_block_blob_contents_from_file(
            self.path, file_path, content_type=content_type, etag=etag
        )


@dataclass(frozen=True)
class AppendBlobHandle:
    """A blob whose writes are concatenated onto its existing contents."""

    storage: "BlobStorage"
    path: BlobPath

    def get_url(self, **options: Any) -> str:
        return self.storage.get_blob_url(self.path, **options)

    async def exists(self) -> bool:
        return await self.storage.blob_exists(self.path)

    async def delete(self) -> bool:
        return await self.storage.delete_blob(self.path)

    async def get_properties(self) -> BlobProperties:
        return await self.storage.get_blob_properties(self.path)

    async def get_contents_as_string(self) -> BlobContents:
        return await self.storage.get_blob_contents_as_string(self.path)

    async def get_content_type(self) -> str | None:
        return await self.storage.get_blob_content_type(self.path)

    async def set_content_type(self, content_type: str) -> None:
        await self.storage.set_blob_content_type(self.path, content_type)

    async def create(self, content_type: str | None = None) -> CreateBlobResult:
        """Create this append blob empty. Returns created=False if it already exists."""
        return await self.storage.create_append_blob(self.path, content_type)

    async def append_contents(
        self, contents: str, etag: str | None = None
    ) -> AppendBlobResult:
        return await self.storage.append_to_blob_contents(self.path, contents, etag=etag)
