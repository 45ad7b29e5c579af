import logging
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Any, Iterator

from azure.core import MatchConditions
from azure.core.credentials import AzureNamedKeyCredential
from azure.core.exceptions import (
    HttpResponseError,
    ResourceExistsError,
    ResourceModifiedError,
    ResourceNotFoundError,
)
from azure.storage.blob import ContentSettings
from azure.storage.blob.aio import BlobServiceClient

from .blob_path import BlobPath, BlobPathLike, validate_blob_name, validate_container_name
from .errors import (
    BlobAlreadyExistsError,
    BlobNotFoundError,
    BlobStorageError,
    ConditionNotMetError,
    ContainerAlreadyExistsError,
    ContainerNotFoundError,
    InvalidBlobTypeError,
    InvalidResourceNameError,
    InvalidUriError,
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
from .settings import Settings
from .signing import DEFAULT_SAS_LIFETIME, sign_url
from .storage_protocols import BlobStorage
from .urls import (
    account_name_from_url,
    get_query,
    join_url,
    normalize_account_url,
    strip_query,
)

logger = logging.getLogger(__name__)

_ERRORS_BY_CODE: dict[str, type[BlobStorageError]] = {
    error_class.code: error_class
    for error_class in (
        InvalidResourceNameError,
        InvalidUriError,
        ContainerNotFoundError,
        ContainerAlreadyExistsError,
        BlobNotFoundError,
        BlobAlreadyExistsError,
        ConditionNotMetError,
        InvalidBlobTypeError,
    )
}


def _classify_error(
    error: HttpResponseError,
    not_found: type[BlobStorageError],
    already_exists: type[BlobStorageError],
    read: bool,
) -> type[BlobStorageError] | None:
    """
    Pick the storage error kind for an SDK error, or None to let it propagate.
    The service's error code wins; the exception class and status code are
    only consulted when the response carried no code.
    """
    error_code = getattr(error, "error_code", None)
    status_code = getattr(error, "status_code", None)
    if error_code:
        error_class = _ERRORS_BY_CODE.get(str(error_code))
    elif isinstance(error, ResourceModifiedError) or status_code == 412:
        error_class = ConditionNotMetError
    elif isinstance(error, ResourceNotFoundError) or status_code == 404:
        error_class = not_found
    elif isinstance(error, ResourceExistsError) or status_code == 409:
        error_class = already_exists
    else:
        error_class = None
    # Blob reads report a missing container as a missing blob.
    if read and error_class is ContainerNotFoundError:
        error_class = BlobNotFoundError
    return error_class


@contextmanager
def _translated_errors(
    not_found: type[BlobStorageError] = BlobNotFoundError,
    already_exists: type[BlobStorageError] = BlobAlreadyExistsError,
    read: bool = False,
) -> Iterator[None]:
    try:
        yield
    except HttpResponseError as error:
        error_class = _classify_error(error, not_found, already_exists, read)
        if error_class is None:
            raise
        raise error_class() from error


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _public_access(access_policy: ContainerAccessPolicy | None) -> str | None:
    if access_policy is None or access_policy is ContainerAccessPolicy.PRIVATE:
        return None
    return access_policy.value


def _content_settings(content_type: str | None) -> ContentSettings:
    return ContentSettings(content_type=content_type or DEFAULT_CONTENT_TYPE)


def _etag_conditions(etag: str | None) -> dict[str, Any]:
    if etag is None:
        return {}
    return {"etag": etag, "match_condition": MatchConditions.IfNotModified}


def _describe_credential(credential: Any) -> str:
    if credential is None:
        return "anonymous access"
    if isinstance(credential, str):
        return "a SAS token"
    if hasattr(credential, "get_token"):
        return "a bearer token provider"
    return "a shared key"


class AzureBlobStorage(BlobStorage):
    """Azure Blob Storage backend."""

    def __init__(
        self,
        blob_service_client: BlobServiceClient,
        sas_lifetime: timedelta = DEFAULT_SAS_LIFETIME,
    ):
        """
        Create a backend from an existing BlobServiceClient.
        This allows custom authentication and configuration.
        """
        self._client = blob_service_client
        self._account_url = normalize_account_url(blob_service_client.url)
        self._sas_lifetime = sas_lifetime

    @classmethod
    def from_account_url(
        cls,
        account: str,
        credential: Any = None,
        sas_lifetime: timedelta = DEFAULT_SAS_LIFETIME,
    ) -> "AzureBlobStorage":
        """
        Build a backend from a storage account name or URL.

        The credential may be None (anonymous), a shared key
        (AzureNamedKeyCredential or {"account_name", "account_key"}), a SAS
        string, or an async bearer token provider. Only a shared key lets
        the backend mint signed URLs.
        """
        account_url = normalize_account_url(account)
        logger.debug(
            f"Azure storage using {_describe_credential(credential)} "
            f"for {strip_query(account_url)}"
        )
        client = BlobServiceClient(account_url, credential=credential)
        return cls(client, sas_lifetime)

    @classmethod
    def from_connection_string(
        cls,
        connection_string: str,
        sas_lifetime: timedelta = DEFAULT_SAS_LIFETIME,
    ) -> "AzureBlobStorage":
        """
        Convenience builder: create backend from a connection string.
        """
        logger.debug("Azure storage using connection string auth")
        client = BlobServiceClient.from_connection_string(connection_string)
        return cls(client, sas_lifetime)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AzureBlobStorage":
        sas_lifetime = timedelta(seconds=settings.sas_lifetime_s)
        if settings.connection_string:
            return cls.from_connection_string(settings.connection_string, sas_lifetime)
        credential = None
        if settings.account_key:
            account_name = account_name_from_url(normalize_account_url(settings.account))
            credential = AzureNamedKeyCredential(account_name, settings.account_key)
        return cls.from_account_url(settings.account, credential, sas_lifetime)

    @property
    def _account_key(self) -> str | None:
        return getattr(self._client.credential, "account_key", None)

    def _container_client(self, container_name: str):
        validate_container_name(container_name)
        return self._client.get_container_client(container_name)

    def _blob_client(self, blob_path: BlobPath):
        validate_container_name(blob_path.container_name)
        validate_blob_name(blob_path)
        return self._client.get_blob_client(blob_path.container_name, blob_path.blob_name)

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
            account_name=self._client.account_name,
            account_key=self._account_key,
            existing_sas=get_query(self._account_url),
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
        url = strip_query(self._account_url)
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
        url = join_url(self._account_url, container_name)
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
            self._account_url, path.container_name, path.blob_name, encode_blob_name
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
        container_client = self._container_client(container_name)
        with _translated_errors(not_found=ContainerNotFoundError):
            return await container_client.exists()

    async def create_container(
        self,
        container_name: str,
        access_policy: ContainerAccessPolicy | None = None,
    ) -> bool:
        container_client = self._container_client(container_name)
        try:
            with _translated_errors(
                not_found=ContainerNotFoundError,
                already_exists=ContainerAlreadyExistsError,
            ):
                await container_client.create_container(
                    public_access=_public_access(access_policy)
                )
        except ContainerAlreadyExistsError:
            return False
        return True

    async def delete_container(self, container_name: str) -> bool:
        container_client = self._container_client(container_name)
        try:
            with _translated_errors(not_found=ContainerNotFoundError):
                await container_client.delete_container()
        except ContainerNotFoundError:
            return False
        return True

    async def list_containers(self) -> list[ContainerHandle]:
        containers: list[ContainerHandle] = []
        pages = self._client.list_containers().by_page()
        with _translated_errors(not_found=ContainerNotFoundError):
            async for page in pages:
                async for item in page:
                    containers.append(self.get_container(item.name))
                logger.debug(
                    f"Listed {len(containers)} containers so far, "
                    f"continuation: {pages.continuation_token!r}"
                )
        return containers

    async def get_container_access_policy(
        self, container_name: str
    ) -> ContainerAccessPolicy:
        container_client = self._container_client(container_name)
        with _translated_errors(not_found=ContainerNotFoundError):
            policy = await container_client.get_container_access_policy()
        public_access = _enum_value(policy.get("public_access"))
        return ContainerAccessPolicy(public_access or ContainerAccessPolicy.PRIVATE.value)

    async def set_container_access_policy(
        self, container_name: str, access_policy: ContainerAccessPolicy
    ) -> None:
        container_client = self._container_client(container_name)
        with _translated_errors(not_found=ContainerNotFoundError):
            # Setting public access replaces the stored access policies too, so resend them.
            current = await container_client.get_container_access_policy()
            signed_identifiers = {
                identifier.id: identifier.access_policy
                for identifier in current.get("signed_identifiers") or []
            }
            await container_client.set_container_access_policy(
                signed_identifiers=signed_identifiers,
                public_access=_public_access(access_policy),
            )

    async def blob_exists(self, blob_path: BlobPathLike) -> bool:
        blob_client = self._blob_client(BlobPath.parse(blob_path))
        with _translated_errors():
            return await blob_client.exists()

    async def get_blob_properties(self, blob_path: BlobPathLike) -> BlobProperties:
        blob_client = self._blob_client(BlobPath.parse(blob_path))
        with _translated_errors(read=True):
            props = await blob_client.get_blob_properties()
        return BlobProperties(
            etag=props.etag,
            content_type=props.content_settings.content_type,
            blob_type=BlobType(_enum_value(props.blob_type)),
            size=props.size,
        )

    async def get_blob_contents_as_string(
        self, blob_path: BlobPathLike
    ) -> BlobContents:
        blob_client = self._blob_client(BlobPath.parse(blob_path))
        with _translated_errors(read=True):
            stream = await blob_client.download_blob()
            data = await stream.readall()
        return BlobContents(contents=data.decode("utf-8"), etag=stream.properties.etag)

    async def create_block_blob(
        self, blob_path: BlobPathLike, content_type: str | None = None
    ) -> CreateBlobResult:
        blob_client = self._blob_client(BlobPath.parse(blob_path))
        try:
            with _translated_errors(not_found=ContainerNotFoundError):
                response = await blob_client.upload_blob(
                    b"",
                    overwrite=False,
                    content_settings=_content_settings(content_type),
                )
        except BlobAlreadyExistsError:
            return CreateBlobResult(created=False)
        return CreateBlobResult(created=True, etag=response["etag"])

    async def create_append_blob(
        self, blob_path: BlobPathLike, content_type: str | None = None
    ) -> CreateBlobResult:
        blob_client = self._blob_client(BlobPath.parse(blob_path))
        try:
            with _translated_errors(not_found=ContainerNotFoundError):
                response = await blob_client.create_append_blob(
                    content_settings=_content_settings(content_type),
                    match_condition=MatchConditions.IfMissing,
                )
        except BlobAlreadyExistsError:
            return CreateBlobResult(created=False)
        return CreateBlobResult(created=True, etag=response["etag"])

    async def set_block_blob_contents(
        self,
        blob_path: BlobPathLike,
        contents: str,
        content_type: str | None = None,
        etag: str | None = None,
    ) -> SetBlobContentsResult:
        blob_client = self._blob_client(BlobPath.parse(blob_path))
        data = contents.encode("utf-8")
        content_settings = _content_settings(content_type)
        if etag is None:
            # Try a create first so the result can say whether the blob is new.
            try:
                with _translated_errors(not_found=ContainerNotFoundError):
                    response = await blob_client.upload_blob(
                        data, overwrite=False, content_settings=content_settings
                    )
                return SetBlobContentsResult(created=True, etag=response["etag"])
            except BlobAlreadyExistsError:
                pass
        with _translated_errors(not_found=ContainerNotFoundError):
            response = await blob_client.upload_blob(
                data,
                overwrite=True,
                content_settings=content_settings,
                **_etag_conditions(etag),
            )
        return SetBlobContentsResult(created=False, etag=response["etag"])

    async def append_to_blob_contents(
        self,
        blob_path: BlobPathLike,
        contents: str,
        etag: str | None = None,
    ) -> AppendBlobResult:
        blob_client = self._blob_client(BlobPath.parse(blob_path))
        with _translated_errors():
            response = await blob_client.append_block(
                contents.encode("utf-8"), **_etag_conditions(etag)
            )
        return AppendBlobResult(etag=response["etag"])

    async def get_blob_content_type(self, blob_path: BlobPathLike) -> str | None:
        return (await self.get_blob_properties(blob_path)).content_type

    async def set_blob_content_type(
        self, blob_path: BlobPathLike, content_type: str
    ) -> None:
        blob_client = self._blob_client(BlobPath.parse(blob_path))
        with _translated_errors(read=True):
            await blob_client.set_http_headers(
                content_settings=ContentSettings(content_type=content_type)
            )

    async def delete_blob(self, blob_path: BlobPathLike) -> bool:
        blob_client = self._blob_client(BlobPath.parse(blob_path))
        try:
            with _translated_errors():
                await blob_client.delete_blob()
        except (BlobNotFoundError, ContainerNotFoundError):
            return False
        return True

    async def __aenter__(self) -> "AzureBlobStorage":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.close()
