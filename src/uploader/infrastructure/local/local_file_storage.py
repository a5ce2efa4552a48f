"""Local filesystem implementation of DeletableFileStorage."""

import os
import shutil
import threading
from collections.abc import Callable
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import BinaryIO

from aws_lambda_powertools import Logger

from uploader.models.errors import NotFoundError, StorageError, ValidationError
from uploader.repositories.storage_repository import DeletableFileStorage
from uploader.utils.constants import DEFAULT_DIR_MODE
from uploader.utils.filenames import FilenamePolicy, base_filename, unique_filename
from uploader.utils.time import SubdirFormat, shard_path, utc_now

logger = Logger(UTC=True)


class LocalFileStorage(DeletableFileStorage):
    """Stores uploads below a root directory on the local disk.

    Files land in time-based shard directories (see `SubdirFormat`) and are
    named by the filename policy so that no two files in one directory share
    a name. Returned locators are `{base_url}{shard}{name}`.
    """

    def __init__(
        self,
        root_dir: str | os.PathLike[str],
        *,
        base_url: str = "",
        subdir_format: SubdirFormat = SubdirFormat.NONE,
        filename_policy: FilenamePolicy | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Create the storage, creating `root_dir` when it does not exist.

        Raises:
            StorageError: If the root cannot be created or is not a directory
        """
        self._root = Path(root_dir)

        try:
            self._root.mkdir(mode=DEFAULT_DIR_MODE, parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Unable to create upload root", extra={"root": str(self._root)})
            raise StorageError(
                message="Unable to create upload directory",
                details={"root": str(self._root)},
            ) from exc

        if base_url and not base_url.endswith("/"):
            base_url += "/"

        self._base_url = base_url
        self._subdir_format = SubdirFormat(subdir_format)
        self._filename_policy = filename_policy or unique_filename
        self._clock = clock or utc_now
        # Guards name allocation + file creation only; the copy runs unlocked.
        self._create_lock = threading.Lock()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def base_url(self) -> str:
        return self._base_url

    def save(self, *, file: BinaryIO, filename: str, ext: str) -> str:
        """Copy `file` into the current shard directory and return its locator."""
        relative_dir = shard_path(self._subdir_format, self._clock())
        directory = self._root / relative_dir

        try:
            directory.mkdir(mode=DEFAULT_DIR_MODE, parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Unable to create shard directory", extra={"directory": str(directory)})
            raise StorageError(
                message="Unable to create upload directory",
                details={"directory": relative_dir},
            ) from exc

        name, dest = self._create_file(directory, base_filename(filename), ext)
        path = directory / name

        try:
            with dest:
                shutil.copyfileobj(file, dest)
        except OSError as exc:
            logger.exception("Failed to write uploaded file", extra={"path": str(path)})
            self._discard(path)
            raise StorageError(
                message="Unable to store uploaded file",
                details={"filename": filename},
            ) from exc

        locator = self._base_url + relative_dir + name
        logger.info("File stored", extra={"locator": locator})
        return locator

    def open(self, name: str) -> BinaryIO:
        path = self._resolve(name)

        try:
            return path.open("rb")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise NotFoundError(
                message="File not found",
                details={"name": name},
            ) from exc
        except OSError as exc:
            raise StorageError(
                message="Unable to open stored file",
                details={"name": name},
            ) from exc

    def delete(self, locator: str) -> None:
        name = locator.removeprefix(self._base_url)
        path = self._resolve(name)

        try:
            path.unlink()
        except FileNotFoundError as exc:
            logger.warning("File to delete not found", extra={"locator": locator})
            raise NotFoundError(
                message="File not found",
                details={"locator": locator},
            ) from exc
        except OSError as exc:
            logger.error("File deletion failed", extra={"locator": locator})
            raise StorageError(
                message="Unable to delete file",
                details={"locator": locator},
            ) from exc

        logger.info("File deleted", extra={"locator": locator})

    def _create_file(self, directory: Path, filename: str, ext: str) -> tuple[str, BinaryIO]:
        with self._create_lock:
            name = self._filename_policy(
                lambda candidate: (directory / candidate).exists(),
                filename,
                ext,
            )

            try:
                dest = (directory / name).open("xb")
            except OSError as exc:
                logger.error("Unable to create file", extra={"name": name})
                raise StorageError(
                    message="Unable to create file",
                    details={"filename": name},
                ) from exc

        return name, dest

    def _resolve(self, name: str) -> Path:
        relative = PurePosixPath(name)
        if not relative.parts or relative.is_absolute() or ".." in relative.parts:
            raise ValidationError(
                message="Invalid file name",
                details={"name": name},
            )

        return self._root.joinpath(*relative.parts)

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.warning("Failed to clean up partial file", extra={"path": str(path)})
