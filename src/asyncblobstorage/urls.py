"""
URL helpers shared by the storage backends.

All functions are pure string manipulation; nothing here talks to the network.
"""

import re
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

from .errors import ConfigurationError

ACCOUNT_HOST_SUFFIX = "blob.core.windows.net"

_BARE_ACCOUNT_NAME = re.compile(r"^[a-z0-9]+$")
_LOCAL_HOST = re.compile(r"^(localhost|\d+\.\d+\.\d+\.\d+)$")
_PATH_DELIMITER_ESCAPES = str.maketrans({"%": "%25", "?": "%3F", "#": "%23"})


def normalize_account_url(account: str) -> str:
    """
    Turn a storage account name or URL into a base URL ending in "/".

    "myaccount" becomes "https://myaccount.blob.core.windows.net/", a host
    without a scheme gets "https://", and a full URL keeps its query (a SAS
    token supplied at construction time, for instance).
    """
    if not account:
        raise ConfigurationError("A storage account name or URL is required")
    if "://" not in account:
        if _BARE_ACCOUNT_NAME.match(account):
            account = f"{account}.{ACCOUNT_HOST_SUFFIX}"
        account = f"https://{account}"
    scheme, netloc, path, query, _ = urlsplit(account)
    if not path.endswith("/"):
        path += "/"
    return urlunsplit((scheme, netloc, path, query, ""))


def account_name_from_url(url: str) -> str:
    """
    Production URLs carry the account as the first host label, emulators
    (Azurite on localhost) as the first path segment.
    """
    parts = urlsplit(url)
    host = parts.hostname or ""
    if _LOCAL_HOST.match(host):
        return parts.path.strip("/").split("/")[0]
    return host.split(".")[0]


def strip_query(url: str) -> str:
    scheme, netloc, path, _, _ = urlsplit(url)
    return urlunsplit((scheme, netloc, path, "", ""))


def get_query(url: str) -> str:
    return urlsplit(url).query


def join_url(
    account_url: str,
    container_name: str,
    blob_name: str | None = None,
    encode_blob_name: bool = False,
) -> str:
    """
    Build a container URL, or a blob URL when blob_name is given, under
    account_url. The result never carries a query. Only the blob segment is
    ever percent-encoded; "/" inside blob names stays literal. Without
    encode_blob_name, only "%", "?" and "#" are escaped, since they would
    otherwise end the path.
    """
    scheme, netloc, path, _, _ = urlsplit(account_url)
    if not path.endswith("/"):
        path += "/"
    path += container_name
    if blob_name is not None:
        if encode_blob_name:
            path += "/" + quote(blob_name, safe="/~")
        else:
            path += "/" + blob_name.translate(_PATH_DELIMITER_ESCAPES)
    return urlunsplit((scheme, netloc, path, "", ""))


def add_query_parameters(url: str, parameters: list[tuple[str, str]]) -> str:
    """Append individually named query parameters, keeping any existing ones."""
    scheme, netloc, path, query, fragment = urlsplit(url)
    pairs = parse_qsl(query, keep_blank_values=True) + list(parameters)
    return urlunsplit((scheme, netloc, path, urlencode(pairs), fragment))
