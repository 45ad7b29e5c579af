"""
Settings for building an AzureBlobStorage backend.

Loaded from environment variables only when the caller asks for it; no
backend is ever selected implicitly.
"""

import os
from dataclasses import dataclass

__all__ = ["Settings", "create_settings_from_env"]


@dataclass(frozen=True)
class Settings:
    """
    Connection settings for Azure Blob Storage.

    Attributes:
        account: Storage account name ("myaccount") or account URL
        account_key: Shared key of the account; enables signed URLs
        connection_string: Full connection string, instead of account/key
        sas_lifetime_s: Lifetime of minted signed URLs, in seconds
    """

    account: str | None = None
    account_key: str | None = None
    connection_string: str | None = None
    sas_lifetime_s: float = 3600.0

    def __post_init__(self):
        """Validate settings on construction."""
        if self.connection_string and (self.account or self.account_key):
            raise ValueError(
                "Specify either connection_string OR (account + account_key), not both"
            )
        if not self.connection_string and not self.account:
            raise ValueError("Either connection_string or account is required")
        if self.account_key and not self.account:
            raise ValueError("account_key specified but account is missing")
        if self.sas_lifetime_s <= 0:
            raise ValueError(f"sas_lifetime_s must be positive, got {self.sas_lifetime_s}")


def create_settings_from_env() -> Settings:
    """
    Load settings from environment variables.

    Environment Variables:
        - AZURE_STORAGE_CONNECTION_STRING (optional)
        - AZURE_STORAGE_ACCOUNT (optional, name or URL)
        - AZURE_STORAGE_KEY (optional)
        - BLOB_STORAGE_SAS_LIFETIME (default: 3600 seconds)

    Raises:
        ValueError: If configuration is invalid or required values missing
    """
    sas_lifetime = os.getenv("BLOB_STORAGE_SAS_LIFETIME")
    return Settings(
        account=os.getenv("AZURE_STORAGE_ACCOUNT") or None,
        account_key=os.getenv("AZURE_STORAGE_KEY") or None,
        connection_string=os.getenv("AZURE_STORAGE_CONNECTION_STRING") or None,
        sas_lifetime_s=float(sas_lifetime) if sas_lifetime else 3600.0,
    )
