from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .blob_path import BlobPath, BlobPathLike, validate_blob_name, validate_container_name
from .errors import (
    BlobNotFoundError,
    ConditionNotMetError,
    ContainerNotFoundError,
    InvalidBlobTypeError,
)
from .handles import ContainerHandle
from .models import (
    DEFAULT_CONTENT_TYPE,
    AppendBlobResult,
    BlobContents,
    BlobProperties,
    BlobType,
    ContainerAccessPolicy,
    CreateBlobResult,
    SetBlobContentsResult,
)
from .signing import DEFAULT_SAS_LIFETIME, sign_url
from .storage_protocols import BlobStorage
from .urls import (
    account_name_from_url,
    get_query,
    join_url,
    normalize_account_url,
    strip_query,
)

FAKE_STORAGE_URL = "https://fake.storage.example/"


@dataclass
class _InMemoryBlob:
    contents: str
    content_type: str
    blob_type: BlobType
    etag: str


@dataclass
class _InMemoryContainer:
    name: str
    access_policy: ContainerAccessPolicy
    blobs: dict[str, _InMemoryBlob] = field(default_factory=dict)


class InMemoryBlobStorage(BlobStorage):
    """
    Process-local stand-in for Azure Blob Storage.

    Reproduces the service's error kinds and ETag preconditions so code
    tested against it behaves the same against AzureBlobStorage. ETags are
    decimal strings from a counter shared by the whole instance, so a blob
    that is deleted and recreated never gets an ETag it had before.
    """

    def __init__(
        self,
        url: str | None = None,
        account_key: str | None = None,
        sas_lifetime: timedelta = DEFAULT_SAS_LIFETIME,
    ):
        self._url = normalize_account_url(url) if url else FAKE_STORAGE_URL
        self._account_key = account_key
        self._sas_lifetime = sas_lifetime
        self._containers: dict[str, _InMemoryContainer] = {}
        self._etag_counter = 0

    def _next_etag(self) -> str:
        self._etag_counter += 1
        return str(self._etag_counter)

    def _get_container(self, container_name: str) -> _InMemoryContainer:
        validate_container_name(container_name)
        container = self._containers.get(container_name)
        if container is None:
            raise ContainerNotFoundError()
        return container

    def _get_blob(self, blob_path: BlobPath) -> _InMemoryBlob:
        container = self._get_container(blob_path.container_name)
        validate_blob_name(blob_path)
        blob = container.blobs.get(blob_path.blob_name)
        if blob is None:
            raise BlobNotFoundError()
        return blob

    def _get_blob_for_read(self, blob_path: BlobPath) -> _InMemoryBlob:
        # The blob endpoint reports a missing container as a missing blob.
        try:
            return self._get_blob(blob_path)
        except ContainerNotFoundError:
            raise BlobNotFoundError() from None

    def _sign(
        self,
        url: str,
        container_name: str | None = None,
        blob_name: str | None = None,
        expiry: datetime | None = None,
        start: datetime | None = None,
    ) -> str:
        return sign_url(
            url,
            account_name=account_name_from_url(self._url),
            account_key=self._account_key,
            existing_sas=get_query(self._url),
            container_name=container_name,
            blob_name=blob_name,
            expiry=expiry,
            start=start,
            lifetime=self._sas_lifetime,
        )

    def get_url(
        self,
        include_sas: bool = False,
        sas_expiry: datetime | None = None,
        sas_start: datetime | None = None,
    ) -> str:
        url = strip_query(self._url)
        if include_sas:
            url = self._sign(url, expiry=sas_expiry, start=sas_start)
        return url

    def get_container_url(
        self,
        container_name: str,
        include_sas: bool = False,
        sas_expiry: datetime | None = None,
        sas_start: datetime | None = None,
    ) -> str:
        url = join_url(self._url, container_name)
        if include_sas:
            url = self._sign(url, container_name, expiry=sas_expiry, start=sas_start)
        return url

    def get_blob_url(
        self,
        blob_path: BlobPathLike,
        include_sas: bool = False,
        encode_blob_name: bool = False,
        sas_expiry: datetime | None = None,
        sas_start: datetime | None = None,
    ) -> str:
        path = BlobPath.parse(blob_path)
        url = join_url(
            self._url, path.container_name, path.blob_name, encode_blob_name
        )
        if include_sas:
            url = self._sign(
                url,
                path.container_name,
                path.blob_name,
                expiry=sas_expiry,
                start=sas_start,
            )
        return url

    async def container_exists(self, container_name: str) -> bool:
        validate_container_name(container_name)
        return container_name in self._containers

    async def create_container(
        self,
        container_name: str,
        access_policy: ContainerAccessPolicy | None = None,
    ) -> bool:
        validate_container_name(container_name)
        if container_name in self._containers:
            return False
        self._containers[container_name] = _InMemoryContainer(
            name=container_name,
            access_policy=access_policy or ContainerAccessPolicy.PRIVATE,
        )
        return True

    async def delete_container(self, container_name: str) -> bool:
        validate_container_name(container_name)
        return self._containers.pop(container_name, None) is not None

    async def list_containers(self) -> list[ContainerHandle]:
        # The service lists containers in name order.
        return [self.get_container(name) for name in sorted(self._containers)]

    async def get_container_access_policy(
        self, container_name: str
    ) -> ContainerAccessPolicy:
        return self._get_container(container_name).access_policy

    async def set_container_access_policy(
        self, container_name: str, access_policy: ContainerAccessPolicy
    ) -> None:
        self._get_container(container_name).access_policy = access_policy

    async def blob_exists(self, blob_path: BlobPathLike) -> bool:
        path = BlobPath.parse(blob_path)
        validate_container_name(path.container_name)
        validate_blob_name(path)
        container = self._containers.get(path.container_name)
        return container is not None and path.blob_name in container.blobs

    async def get_blob_properties(self, blob_path: BlobPathLike) -> BlobProperties:
        blob = self._get_blob_for_read(BlobPath.parse(blob_path))
        return BlobProperties(
            etag=blob.etag,
            content_type=blob.content_type,
            blob_type=blob.blob_type,
            size=len(blob.contents.encode("utf-8")),
        )

    async def get_blob_contents_as_string(
        self, blob_path: BlobPathLike
    ) -> BlobContents:
        blob = self._get_blob_for_read(BlobPath.parse(blob_path))
        return BlobContents(contents=blob.contents, etag=blob.etag)

    def _create_blob(
        self, blob_path: BlobPathLike, blob_type: BlobType, content_type: str | None
    ) -> CreateBlobResult:
        path = BlobPath.parse(blob_path)
        container = self._get_container(path.container_name)
        validate_blob_name(path)
        if path.blob_name in container.blobs:
            return CreateBlobResult(created=False)
        blob = _InMemoryBlob(
            contents="",
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            blob_type=blob_type,
            etag=self._next_etag(),
        )
        container.blobs[path.blob_name] = blob
        return CreateBlobResult(created=True, etag=blob.etag)

    async def create_block_blob(
        self, blob_path: BlobPathLike, content_type: str | None = None
    ) -> CreateBlobResult:
        return self._create_blob(blob_path, BlobType.BLOCK, content_type)

    async def create_append_blob(
        self, blob_path: BlobPathLike, content_type: str | None = None
    ) -> CreateBlobResult:
        return self._create_blob(blob_path, BlobType.APPEND, content_type)

    async def set_block_blob_contents(
        self,
        blob_path: BlobPathLike,
        contents: str,
        content_type: str | None = None,
        etag: str | None = None,
    ) -> SetBlobContentsResult:
        path = BlobPath.parse(blob_path)
        container = self._get_container(path.container_name)
        validate_blob_name(path)
        existing = container.blobs.get(path.blob_name)
        if etag is not None and (existing is None or existing.etag != etag):
            raise ConditionNotMetError()
        # A whole-content write turns any existing blob into a block blob.
        blob = _InMemoryBlob(
            contents=contents,
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            blob_type=BlobType.BLOCK,
            etag=self._next_etag(),
        )
        container.blobs[path.blob_name] = blob
        return SetBlobContentsResult(created=existing is None, etag=blob.etag)

    async def append_to_blob_contents(
        self,
        blob_path: BlobPathLike,
        contents: str,
        etag: str | None = None,
    ) -> AppendBlobResult:
        blob = self._get_blob(BlobPath.parse(blob_path))
        if blob.blob_type is not BlobType.APPEND:
            raise InvalidBlobTypeError()
        if etag is not None and blob.etag != etag:
            raise ConditionNotMetError()
        blob.contents += contents
        blob.etag = self._next_etag()
        return AppendBlobResult(etag=blob.etag)

    async def get_blob_content_type(self, blob_path: BlobPathLike) -> str | None:
        return self._get_blob_for_read(BlobPath.parse(blob_path)).content_type

    async def set_blob_content_type(
        self, blob_path: BlobPathLike, content_type: str
    ) -> None:
        blob = self._get_blob_for_read(BlobPath.parse(blob_path))
        blob.content_type = content_type
        blob.etag = self._next_etag()

    async def delete_blob(self, blob_path: BlobPathLike) -> bool:
        path = BlobPath.parse(blob_path)
        validate_container_name(path.container_name)
        validate_blob_name(path)
        container = self._containers.get(path.container_name)
        if container is None:
            return False
        return container.blobs.pop(path.blob_name, None) is not None

    async def __aenter__(self) -> "InMemoryBlobStorage":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        pass
