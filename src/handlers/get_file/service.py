"""Business logic for reading stored files back."""

from functools import lru_cache
from typing import NamedTuple

from aws_lambda_powertools import Logger

from uploader.infrastructure.storage_factory import build_storage
from uploader.models.settings import UploadSettings
from uploader.repositories.storage_repository import FileStorageRepository
from uploader.utils.filenames import base_filename
from uploader.utils.mime import guess_content_type

logger = Logger(UTC=True)


class StoredFile(NamedTuple):
    filename: str
    content: bytes
    content_type: str


class GetService:
    """Application service responsible for retrieving stored files."""

    def __init__(self, storage: FileStorageRepository) -> None:
        self.storage = storage

    @classmethod
    def from_settings(cls, settings: UploadSettings | None = None) -> "GetService":
        return cls(build_storage(settings or UploadSettings.from_env()))

    def read_file(self, name: str) -> StoredFile:
        """Read a stored file fully into memory.

        Raises:
            ValidationError: If `name` escapes the storage root
            NotFoundError: If no such file exists
            StorageError: If the file cannot be read
        """
        logger.debug("Reading stored file", extra={"name": name})

        with self.storage.open(name) as stream:
            content = stream.read()

        return StoredFile(
            filename=base_filename(name),
            content=content,
            content_type=guess_content_type(name, content),
        )


@lru_cache(maxsize=1)
def get_file_service() -> GetService:
    return GetService.from_settings()
