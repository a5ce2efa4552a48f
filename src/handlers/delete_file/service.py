"""Business logic for removing stored files.

Only backends implementing `DeletableFileStorage` support deletion; the
service reports the others as unsupported instead of guessing.
"""

from functools import lru_cache
from typing import Any

from aws_lambda_powertools import Logger

from uploader.infrastructure.storage_factory import build_storage
from uploader.models.errors import UploadServiceError
from uploader.models.settings import UploadSettings
from uploader.repositories.storage_repository import (
    DeletableFileStorage,
    FileStorageRepository,
)
from uploader.utils.constants import ERROR_CODE_DELETE_NOT_SUPPORTED
from uploader.utils.time import utc_now_iso

logger = Logger(UTC=True)


class DeleteNotSupportedError(UploadServiceError):
    """Raised when the configured storage cannot delete files."""

    def __init__(self) -> None:
        super().__init__(
            message="Configured storage does not support deletion",
            error_code=ERROR_CODE_DELETE_NOT_SUPPORTED,
        )


class DeleteService:
    """Application service responsible for deleting stored files."""

    def __init__(self, storage: FileStorageRepository) -> None:
        self.storage = storage

    @classmethod
    def from_settings(cls, settings: UploadSettings | None = None) -> "DeleteService":
        return cls(build_storage(settings or UploadSettings.from_env()))

    def delete_file(self, locator: str) -> dict[str, Any]:
        """Delete a stored file.

        Args:
            locator: Locator returned when the file was uploaded

        Returns:
            Deletion confirmation details

        Raises:
            DeleteNotSupportedError: If the storage cannot delete files
            ValidationError: If the locator escapes the storage root
            NotFoundError: If no such file exists
            StorageError: If deletion fails
        """
        if not isinstance(self.storage, DeletableFileStorage):
            logger.warning(
                "Delete requested on read/write-only storage",
                extra={"storage": type(self.storage).__name__},
            )
            raise DeleteNotSupportedError()

        logger.debug("Starting file deletion", extra={"locator": locator})
        self.storage.delete(locator)

        return {
            "locator": locator,
            "deleted_at": utc_now_iso(),
        }


@lru_cache(maxsize=1)
def get_delete_service() -> DeleteService:
    return DeleteService.from_settings()
