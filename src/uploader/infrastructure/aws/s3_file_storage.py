"""S3-backed implementation of DeletableFileStorage."""

import io
import threading
from collections.abc import Callable
from datetime import datetime
from typing import BinaryIO

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from uploader.infrastructure.adapters.s3_adapter import S3Adapter, S3AdapterProtocol
from uploader.models.errors import NotFoundError, StorageError
from uploader.repositories.storage_repository import DeletableFileStorage
from uploader.utils.constants import DEFAULT_S3_KEY_PREFIX
from uploader.utils.filenames import FilenamePolicy, base_filename, unique_filename
from uploader.utils.mime import guess_content_type
from uploader.utils.time import SubdirFormat, shard_path, utc_now

logger = Logger(UTC=True)

_MISSING_KEY_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def _is_missing(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") in _MISSING_KEY_CODES


class S3FileStorage(DeletableFileStorage):
    """Upload storage backed by an S3 bucket.

    Objects are keyed `{key_prefix}{shard}{name}`; the locator handed back to
    callers omits the key prefix and carries the base URL instead, exactly as
    `LocalFileStorage` does.
    """

    def __init__(
        self,
        adapter: S3AdapterProtocol | None = None,
        *,
        key_prefix: str = DEFAULT_S3_KEY_PREFIX,
        base_url: str = "",
        subdir_format: SubdirFormat = SubdirFormat.NONE,
        filename_policy: FilenamePolicy | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Create storage using the provided S3 adapter."""
        self._s3 = adapter or S3Adapter()

        if key_prefix and not key_prefix.endswith("/"):
            key_prefix += "/"
        if base_url and not base_url.endswith("/"):
            base_url += "/"

        self._key_prefix = key_prefix
        self._base_url = base_url
        self._subdir_format = SubdirFormat(subdir_format)
        self._filename_policy = filename_policy or unique_filename
        self._clock = clock or utc_now
        # S3 has no exclusive create, so allocation and upload share the lock.
        self._create_lock = threading.Lock()

    def save(self, *, file: BinaryIO, filename: str, ext: str) -> str:
        """Upload `file` under a collision-free key and return its locator."""
        relative_dir = shard_path(self._subdir_format, self._clock())
        prefix = self._key_prefix + relative_dir

        with self._create_lock:
            name = self._filename_policy(
                lambda candidate: self._exists(prefix + candidate),
                base_filename(filename),
                ext,
            )
            key = prefix + name

            logger.debug("Uploading file", extra={"key": key})

            try:
                self._s3.upload_fileobj(
                    key=key,
                    fileobj=file,
                    content_type=guess_content_type(name),
                )
            except ClientError as exc:
                logger.error("S3 upload failed", extra={"key": key})
                raise StorageError(
                    message="Unable to store uploaded file",
                    details={"key": key},
                ) from exc

        locator = self._base_url + relative_dir + name
        logger.info("File stored", extra={"key": key, "locator": locator})
        return locator

    def open(self, name: str) -> BinaryIO:
        key = self._key_prefix + name

        try:
            response = self._s3.get_object(key=key)
            return io.BytesIO(response["Body"].read())
        except ClientError as exc:
            if _is_missing(exc):
                raise NotFoundError(
                    message="File not found",
                    details={"name": name},
                ) from exc

            logger.error("S3 download failed", extra={"key": key})
            raise StorageError(
                message="Unable to open stored file",
                details={"name": name},
            ) from exc

    def delete(self, locator: str) -> None:
        key = self._key_prefix + locator.removeprefix(self._base_url)

        try:
            if not self._exists(key):
                logger.warning("File to delete not found", extra={"key": key})
                raise NotFoundError(
                    message="File not found",
                    details={"locator": locator},
                )

            self._s3.delete_object(key=key)
        except ClientError as exc:
            logger.error("S3 deletion failed", extra={"key": key})
            raise StorageError(
                message="Unable to delete file",
                details={"locator": locator},
            ) from exc

        logger.info("File deleted", extra={"key": key})

    def _exists(self, key: str) -> bool:
        try:
            self._s3.head_object(key=key)
        except ClientError as exc:
            if _is_missing(exc):
                return False

            raise StorageError(
                message="Unable to inspect stored file",
                details={"key": key},
            ) from exc

        return True
