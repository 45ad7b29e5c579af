import logging
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qsl

from azure.storage.blob import (
    AccountSasPermissions,
    BlobSasPermissions,
    ContainerSasPermissions,
    ResourceTypes,
    generate_account_sas,
    generate_blob_sas,
    generate_container_sas,
)

from .errors import ConfigurationError
from .urls import add_query_parameters

logger = logging.getLogger(__name__)

DEFAULT_SAS_LIFETIME = timedelta(hours=1)


def generate_read_sas_parameters(
    account_name: str,
    account_key: str,
    container_name: str | None = None,
    blob_name: str | None = None,
    *,
    expiry: datetime,
    start: datetime | None = None,
) -> list[tuple[str, str]]:
    """
    Mint a read-only shared access signature scoped to the account, a
    container or a single blob, returned as separate (name, value) pairs
    (sv, se, st, sp, sr, sig, ...).
    """
    if container_name is None:
        token = generate_account_sas(
            account_name,
            account_key,
            resource_types=ResourceTypes(service=True, container=True, object=True),
            permission=AccountSasPermissions(read=True),
            expiry=expiry,
            start=start,
        )
    elif blob_name is None:
        token = generate_container_sas(
            account_name,
            container_name,
            account_key=account_key,
            permission=ContainerSasPermissions(read=True),
            expiry=expiry,
            start=start,
        )
    else:
        token = generate_blob_sas(
            account_name,
            container_name,
            blob_name,
            account_key=account_key,
            permission=BlobSasPermissions(read=True),
            expiry=expiry,
            start=start,
        )
    return parse_qsl(token, keep_blank_values=True)


def sign_url(
    url: str,
    *,
    account_name: str,
    account_key: str | None,
    existing_sas: str = "",
    container_name: str | None = None,
    blob_name: str | None = None,
    expiry: datetime | None = None,
    start: datetime | None = None,
    lifetime: timedelta = DEFAULT_SAS_LIFETIME,
) -> str:
    """
    Append SAS parameters to a query-less url.

    A SAS the backend was configured with is reused as is. Otherwise a new
    read-only one is minted, which needs the account's shared key.
    """
    if existing_sas:
        return add_query_parameters(url, parse_qsl(existing_sas, keep_blank_values=True))
    if not account_key:
        raise ConfigurationError(
            "A signed URL requires a shared key credential; this backend has none"
        )
    if expiry is None:
        expiry = datetime.now(timezone.utc) + lifetime
    logger.debug(f"Minting read SAS for {url} expiring at {expiry.isoformat()}")
    parameters = generate_read_sas_parameters(
        account_name,
        account_key,
        container_name,
        blob_name,
        expiry=expiry,
        start=start,
    )
    return add_query_parameters(url, parameters)
