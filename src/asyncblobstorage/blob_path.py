from dataclasses import dataclass

from .errors import InvalidResourceNameError, InvalidUriError

SEPARATOR = "/"


@dataclass(frozen=True)
class BlobPath:
    """
    Address of a blob: the container name plus the blob name inside it.
    An empty blob name addresses only the container.
    """

    container_name: str
    blob_name: str = ""

    def __str__(self) -> str:
        return f"{self.container_name}{SEPARATOR}{self.blob_name}"

    @classmethod
    def parse(cls, value: "str | BlobPath") -> "BlobPath":
        """
        Split "container/blob/name" on the first separator after an optional
        leading one. The blob name is not segmented any further.
        """
        if isinstance(value, BlobPath):
            return value
        if value.startswith(SEPARATOR):
            value = value[len(SEPARATOR) :]
        container_name, _, blob_name = value.partition(SEPARATOR)
        return cls(container_name, blob_name)

    def concatenate(self, suffix: str) -> "BlobPath":
        """Append suffix directly to the blob name. No separator is inserted."""
        if not suffix:
            return self
        return BlobPath(self.container_name, self.blob_name + suffix)


BlobPathLike = str | BlobPath


def validate_container_name(container_name: str) -> None:
    """Container names must be non-empty and entirely lower-case."""
    if not container_name or container_name != container_name.lower():
        raise InvalidResourceNameError()


def validate_blob_name(blob_path: BlobPath) -> None:
    if not blob_path.blob_name:
        raise InvalidUriError()
