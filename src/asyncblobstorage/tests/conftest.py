import base64
import itertools
import os
import uuid
from types import SimpleNamespace

import pytest
import pytest_asyncio
from azure.core import MatchConditions
from azure.core.exceptions import (
    HttpResponseError,
    ResourceExistsError,
    ResourceModifiedError,
    ResourceNotFoundError,
)
from dotenv import load_dotenv

from asyncblobstorage import AzureBlobStorage, InMemoryBlobStorage

load_dotenv()

# Azure config
CONN_STR = os.environ.get("AZURE_STORAGE_CONNECTION_STRING")

FAKE_ACCOUNT_URL = "https://fakeaccount.blob.core.windows.net/"
FAKE_ACCOUNT_KEY = base64.b64encode(b"not-a-real-account-key").decode()


def unique_container_name() -> str:
    return f"test{uuid.uuid4().hex[:20]}"


def service_error(error_class, status_code: int, error_code: str) -> HttpResponseError:
    """Build an SDK error the way azure-storage-blob raises it for a failed request."""
    error = error_class(message=f"{error_code}: simulated service error")
    error.status_code = status_code
    error.error_code = error_code
    return error


# ---------------------------
# Fake BlobServiceClient
# ---------------------------
# Stands in for azure.storage.blob.aio.BlobServiceClient at the SDK boundary,
# covering only the calls AzureBlobStorage makes.


class _FakeDownloader:
    def __init__(self, blob):
        self.properties = SimpleNamespace(etag=blob.etag)
        self._data = blob.data

    async def readall(self) -> bytes:
        return self._data


class _FakeContainerPages:
    def __init__(self, service, names):
        self._service = service
        self._names = names
        self.continuation_token = None

    def __aiter__(self):
        return self._pages()

    async def _pages(self):
        size = self._service.page_size
        for offset in range(0, max(len(self._names), 1), size):
            self._service.page_requests += 1
            end = offset + size
            self.continuation_token = str(end) if end < len(self._names) else None
            yield _async_items(self._names[offset:end])


async def _async_items(names):
    for name in names:
        yield SimpleNamespace(name=name)


class _FakeContainerPaged:
    def __init__(self, service, names):
        self._service = service
        self._names = names

    def by_page(self):
        return _FakeContainerPages(self._service, self._names)


class FakeContainerClient:
    def __init__(self, service, name):
        self._service = service
        self.container_name = name

    def _container(self):
        container = self._service.containers.get(self.container_name)
        if container is None:
            raise service_error(ResourceNotFoundError, 404, "ContainerNotFound")
        return container

    async def exists(self) -> bool:
        return self.container_name in self._service.containers

    async def create_container(self, public_access=None):
        if self.container_name in self._service.containers:
            raise service_error(ResourceExistsError, 409, "ContainerAlreadyExists")
        self._service.containers[self.container_name] = SimpleNamespace(
            public_access=public_access, signed_identifiers=[], blobs={}
        )
        return {"etag": self._service.new_etag()}

    async def delete_container(self):
        self._container()
        del self._service.containers[self.container_name]

    async def get_container_access_policy(self):
        container = self._container()
        return {
            "public_access": container.public_access,
            "signed_identifiers": list(container.signed_identifiers),
        }

    async def set_container_access_policy(self, signed_identifiers, public_access=None):
        container = self._container()
        container.public_access = public_access
        container.signed_identifiers = [
            SimpleNamespace(id=key, access_policy=value)
            for key, value in signed_identifiers.items()
        ]
        return {"etag": self._service.new_etag()}


class FakeBlobClient:
    def __init__(self, service, container_name, blob_name):
        self._service = service
        self.container_name = container_name
        self.blob_name = blob_name

    def _container(self):
        container = self._service.containers.get(self.container_name)
        if container is None:
            raise service_error(ResourceNotFoundError, 404, "ContainerNotFound")
        return container

    def _blob(self):
        blob = self._container().blobs.get(self.blob_name)
        if blob is None:
            raise service_error(ResourceNotFoundError, 404, "BlobNotFound")
        return blob

    def _check_etag(self, blob, etag, match_condition):
        if match_condition == MatchConditions.IfNotModified:
            if blob is None or blob.etag != etag:
                raise service_error(ResourceModifiedError, 412, "ConditionNotMet")

    def _store(self, data: bytes, content_settings, blob_type: str):
        blob = SimpleNamespace(
            data=data,
            content_type=content_settings.content_type if content_settings else None,
            blob_type=blob_type,
            etag=self._service.new_etag(),
        )
        self._container().blobs[self.blob_name] = blob
        return {"etag": blob.etag}

    async def exists(self) -> bool:
        container = self._service.containers.get(self.container_name)
        return container is not None and self.blob_name in container.blobs

    async def get_blob_properties(self):
        blob = self._blob()
        return SimpleNamespace(
            etag=blob.etag,
            size=len(blob.data),
            blob_type=blob.blob_type,
            content_settings=SimpleNamespace(content_type=blob.content_type),
        )

    async def download_blob(self):
        return _FakeDownloader(self._blob())

    async def upload_blob(
        self,
        data,
        overwrite=False,
        content_settings=None,
        etag=None,
        match_condition=None,
    ):
        existing = self._container().blobs.get(self.blob_name)
        if existing is not None and not overwrite:
            raise service_error(ResourceExistsError, 409, "BlobAlreadyExists")
        self._check_etag(existing, etag, match_condition)
        return self._store(bytes(data), content_settings, "BlockBlob")

    async def create_append_blob(self, content_settings=None, match_condition=None):
        existing = self._container().blobs.get(self.blob_name)
        if existing is not None and match_condition == MatchConditions.IfMissing:
            raise service_error(ResourceExistsError, 409, "BlobAlreadyExists")
        return self._store(b"", content_settings, "AppendBlob")

    async def append_block(self, data, etag=None, match_condition=None):
        blob = self._blob()
        if blob.blob_type != "AppendBlob":
            raise service_error(HttpResponseError, 409, "InvalidBlobType")
        self._check_etag(blob, etag, match_condition)
        blob.data += bytes(data)
        blob.etag = self._service.new_etag()
        return {"etag": blob.etag}

    async def set_http_headers(self, content_settings=None):
        blob = self._blob()
        blob.content_type = content_settings.content_type if content_settings else None
        blob.etag = self._service.new_etag()
        return {"etag": blob.etag}

    async def delete_blob(self):
        self._blob()
        del self._container().blobs[self.blob_name]


class FakeBlobServiceClient:
    def __init__(
        self,
        url: str = FAKE_ACCOUNT_URL,
        account_key: str | None = None,
        page_size: int = 2,
    ):
        self.url = url
        self.account_name = "fakeaccount"
        self.credential = (
            SimpleNamespace(account_name=self.account_name, account_key=account_key)
            if account_key
            else None
        )
        self.page_size = page_size
        self.page_requests = 0
        self.containers: dict[str, SimpleNamespace] = {}
        self.closed = False
        self._etags = itertools.count(1)

    def new_etag(self) -> str:
        return f'"0x{next(self._etags):X}"'

    def get_container_client(self, container_name: str) -> FakeContainerClient:
        return FakeContainerClient(self, container_name)

    def get_blob_client(self, container: str, blob: str) -> FakeBlobClient:
        return FakeBlobClient(self, container, blob)

    def list_containers(self) -> _FakeContainerPaged:
        return _FakeContainerPaged(self, sorted(self.containers))

    async def close(self) -> None:
        self.closed = True


# ---------------------------
# Parametrize backends
# ---------------------------
@pytest_asyncio.fixture(
    params=[
        pytest.param("memory", marks=pytest.mark.memory),
        pytest.param("fake_azure", marks=pytest.mark.fake_azure),
        pytest.param("azure", marks=pytest.mark.azure),
    ]
)
async def storage(request):
    """Fixture that provides each backend in turn."""
    if request.param == "memory":
        backend = InMemoryBlobStorage()
    elif request.param == "fake_azure":
        backend = AzureBlobStorage(FakeBlobServiceClient())
    else:
        if not CONN_STR:
            pytest.skip("Azure backend not configured (AZURE_STORAGE_CONNECTION_STRING missing)")
        backend = AzureBlobStorage.from_connection_string(CONN_STR)
    async with backend:
        yield backend


@pytest_asyncio.fixture
async def container(storage):
    """A freshly created container, deleted again after the test."""
    handle = storage.get_container(unique_container_name())
    await handle.create()
    yield handle
    await handle.delete()


@pytest.fixture
def fake_service():
    """A fake service client holding a shared key, so it can mint signed URLs."""
    return FakeBlobServiceClient(account_key=FAKE_ACCOUNT_KEY)
