"""
asyncblobstorage
================

Async container/blob storage abstraction with two interchangeable backends:
Azure Blob Storage and an in-memory stand-in that reproduces the service's
error kinds and ETag preconditions.

Main entry points:
- AzureBlobStorage, InMemoryBlobStorage: storage backends
- BlobPath: "container/blob/name" addresses
- ContainerHandle, PrefixHandle, BlobHandle, BlockBlobHandle, AppendBlobHandle: handles
- BlobNotFoundError, ConditionNotMetError, ...: error kinds shared by the backends

Example:
    from asyncblobstorage import InMemoryBlobStorage

    async with InMemoryBlobStorage() as storage:
        container = storage.get_container("demo")
        await container.create()
        blob = container.get_block_blob("x.txt")
        result = await blob.set_contents("hello")
        await blob.set_contents("hello again", etag=result.etag)
"""

from .blob_path import BlobPath, BlobPathLike

from .errors import (
    BlobAlreadyExistsError,
    BlobNotFoundError,
    BlobStorageError,
    ConditionNotMetError,
    ConfigurationError,
    ContainerAlreadyExistsError,
    ContainerNotFoundError,
    InvalidBlobTypeError,
    InvalidResourceNameError,
    InvalidUriError,
    TransportError,
)

from .models import (
    AppendBlobResult,
    BlobContents,
    BlobProperties,
    BlobType,
    ContainerAccessPolicy,
    CreateBlobResult,
    SetBlobContentsResult,
)

from .handles import (
    AppendBlobHandle,
    BlobHandle,
    BlockBlobHandle,
    ContainerHandle,
    PrefixHandle,
)

from .storage_protocols import BlobStorage
from .in_memory_adapter import InMemoryBlobStorage
from .azure_blob_adapter import AzureBlobStorage
from .settings import Settings, create_settings_from_env

import importlib.metadata

try:
    __version__ = importlib.metadata.version(__name__)
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "BlobPath",
    "BlobPathLike",
    "BlobStorageError",
    "InvalidResourceNameError",
    "InvalidUriError",
    "ContainerNotFoundError",
    "ContainerAlreadyExistsError",
    "BlobNotFoundError",
    "BlobAlreadyExistsError",
    "ConditionNotMetError",
    "InvalidBlobTypeError",
    "ConfigurationError",
    "TransportError",
    "AppendBlobResult",
    "BlobContents",
    "BlobProperties",
    "BlobType",
    "ContainerAccessPolicy",
    "CreateBlobResult",
    "SetBlobContentsResult",
    "AppendBlobHandle",
    "BlobHandle",
    "BlockBlobHandle",
    "ContainerHandle",
    "PrefixHandle",
    "BlobStorage",
    "InMemoryBlobStorage",
    "AzureBlobStorage",
    "Settings",
    "create_settings_from_env",
]
