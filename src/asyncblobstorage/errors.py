from azure.core.exceptions import AzureError

# Anything the Azure SDK raises that is not translated below propagates unchanged.
TransportError = AzureError


class BlobStorageError(Exception):
    """Base class for the storage error kinds shared by every backend."""

    code = "BlobStorageError"
    description = "The storage operation failed."

    def __init__(self, message: str | None = None):
        super().__init__(f"{self.code}: {message or self.description}")


class InvalidResourceNameError(BlobStorageError):
    """Raised when a container name is empty or not entirely lower-case."""

    code = "InvalidResourceName"
    description = "The specifed resource name contains invalid characters."


class InvalidUriError(BlobStorageError):
    """Raised when an operation that needs a blob name gets an empty one."""

    code = "InvalidUri"
    description = "The requested URI does not represent any resource on the server."


class ContainerNotFoundError(BlobStorageError):
    code = "ContainerNotFound"
    description = "The specified container does not exist."


class ContainerAlreadyExistsError(BlobStorageError):
    code = "ContainerAlreadyExists"
    description = "The specified container already exists."


class BlobNotFoundError(BlobStorageError):
    """Raised when a requested blob does not exist."""

    code = "BlobNotFound"
    description = "The specified blob does not exist."


class BlobAlreadyExistsError(BlobStorageError):
    code = "BlobAlreadyExists"
    description = "The specified blob already exists."


class ConditionNotMetError(BlobStorageError):
    """Raised when an ETag precondition on a write does not match the blob."""

    code = "ConditionNotMet"
    description = "The condition specified using HTTP conditional header(s) is not met."


class InvalidBlobTypeError(BlobStorageError):
    """Raised when appending to a blob that is not an append blob."""

    code = "InvalidBlobType"
    description = "The blob type is invalid for this operation."


class ConfigurationError(Exception):
    """Raised when a backend is missing what an operation needs, such as a shared key."""

    pass
