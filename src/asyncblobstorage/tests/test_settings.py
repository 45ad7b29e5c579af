import pytest

from asyncblobstorage import Settings, create_settings_from_env

ENV_VARS = [
    "AZURE_STORAGE_CONNECTION_STRING",
    "AZURE_STORAGE_ACCOUNT",
    "AZURE_STORAGE_KEY",
    "BLOB_STORAGE_SAS_LIFETIME",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_account_settings():
    settings = Settings(account="myaccount", account_key="c2VjcmV0")
    assert settings.connection_string is None
    assert settings.sas_lifetime_s == 3600.0


def test_connection_string_settings():
    settings = Settings(connection_string="UseDevelopmentStorage=true")
    assert settings.account is None


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({}, "Either connection_string or account is required"),
        ({"connection_string": "x", "account": "a"}, "not both"),
        ({"connection_string": "x", "account_key": "k"}, "not both"),
        ({"account_key": "k"}, "is required"),
        ({"account": "a", "sas_lifetime_s": 0}, "must be positive"),
    ],
)
def test_invalid_settings(kwargs, message):
    with pytest.raises(ValueError, match=message):
        Settings(**kwargs)


def test_settings_are_immutable():
    settings = Settings(account="myaccount")
    with pytest.raises(AttributeError):
        settings.account = "other"


def test_settings_from_env(clean_env):
    clean_env.setenv("AZURE_STORAGE_ACCOUNT", "myaccount")
    clean_env.setenv("AZURE_STORAGE_KEY", "c2VjcmV0")
    clean_env.setenv("BLOB_STORAGE_SAS_LIFETIME", "120")

    settings = create_settings_from_env()

    assert settings == Settings(account="myaccount", account_key="c2VjcmV0", sas_lifetime_s=120.0)


def test_settings_from_env_with_connection_string(clean_env):
    clean_env.setenv("AZURE_STORAGE_CONNECTION_STRING", "UseDevelopmentStorage=true")

    settings = create_settings_from_env()

    assert settings.connection_string == "UseDevelopmentStorage=true"
    assert settings.sas_lifetime_s == 3600.0


def test_settings_from_empty_env_fails(clean_env):
    with pytest.raises(ValueError):
        create_settings_from_env()
