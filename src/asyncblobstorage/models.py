from dataclasses import dataclass
from enum import Enum

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class ContainerAccessPolicy(Enum):
    PRIVATE = "private"  # No anonymous access
    BLOB = "blob"  # Anonymous reads of individual blobs
    CONTAINER = "container"  # Anonymous reads of blobs and container listings


class BlobType(Enum):
    BLOCK = "BlockBlob"  # Writes replace the whole content
    APPEND = "AppendBlob"  # Writes are concatenated onto the content
    PAGE = "PageBlob"  # Never created here, but reported for existing blobs


@dataclass(frozen=True)
class BlobProperties:
    etag: str
    content_type: str | None
    blob_type: BlobType
    size: int


@dataclass(frozen=True)
class BlobContents:
    contents: str
    etag: str


@dataclass(frozen=True)
class CreateBlobResult:
    created: bool
    etag: str | None = None


@dataclass(frozen=True)
class SetBlobContentsResult:
    created: bool
    etag: str


@dataclass(frozen=True)
class AppendBlobResult:
    etag: str
