"""Abstract contract for uploaded file storage."""

from abc import ABC, abstractmethod
from typing import BinaryIO


class FileStorageRepository(ABC):
    """Contract for storing and retrieving uploaded files.

    Implementations could be local disk, S3, in-memory, etc.
    Services depend on this interface, not the implementation.
    """

    @abstractmethod
    def save(self, *, file: BinaryIO, filename: str, ext: str) -> str:
        """Store the content of `file` under a name unique in its directory.

        Args:
            file: Readable stream positioned at the start of the content
            filename: Name the client uploaded the file with
            ext: Normalized extension part of `filename`

        Returns:
            Locator of the stored file, prefixed by the base URL when configured

        Raises:
            StorageError: If the file cannot be stored
        """

    @abstractmethod
    def open(self, name: str) -> BinaryIO:
        """Open a stored file for reading.

        Args:
            name: Locator returned by `save`, without the base URL

        Raises:
            NotFoundError: If no such file exists
        """


class DeletableFileStorage(FileStorageRepository):
    """Storage that can also remove what it stored."""

    @abstractmethod
    def delete(self, locator: str) -> None:
        """Delete a stored file.

        Args:
            locator: Value returned by `save`

        Raises:
            NotFoundError: If no such file exists
            StorageError: If deletion fails
        """
