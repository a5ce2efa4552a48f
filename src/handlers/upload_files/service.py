"""Business logic for file uploads.

This module validates each file of an upload batch, applies the configured
watermark to eligible images and hands accepted files to the storage backend.
A batch stops at the first failing file; files stored before it stay stored
and are reported on the raised error.
"""

import io
import os
from collections.abc import Iterable
from functools import lru_cache
from typing import BinaryIO

from aws_lambda_powertools import Logger

from uploader.infrastructure.storage_factory import build_storage, build_watermark
from uploader.models.errors import (
    NoUploadFileError,
    NotAllowExtError,
    NotAllowSizeError,
    StorageError,
    UnknownFileSizeError,
    UploadFailedError,
    UploadServiceError,
    ValidationError,
)
from uploader.models.settings import UploadSettings
from uploader.models.upload import UploadedFile, UploadForm
from uploader.repositories.storage_repository import FileStorageRepository
from uploader.utils.constants import format_file_size
from uploader.utils.filenames import normalize_extension, split_extension
from uploader.watermark.formats import is_supported_extension
from uploader.watermark.watermark import Position, Watermark

logger = Logger(UTC=True)


class UploadService:
    """Application service responsible for file uploads.

    This service orchestrates:
    - Size and extension validation
    - Optional watermarking of images
    - Persisting accepted files to storage

    Configuration is read-only while requests are served; the storage and the
    watermark are swapped by reference, never mutated.
    """

    def __init__(
        self,
        *,
        storage: FileStorageRepository,
        max_size: int,
        allowed_extensions: Iterable[str],
        watermark: Watermark | None = None,
    ) -> None:
        """Initialize the upload service.

        Args:
            storage: Backend accepted files are saved to
            max_size: Maximum file size in bytes (inclusive)
            allowed_extensions: Extensions accepted, case-insensitive, dot optional
            watermark: Watermark applied to eligible images

        Raises:
            ValidationError: If max_size is not positive or an extension is empty
        """
        if max_size <= 0:
            raise ValidationError(
                message="Maximum file size must be positive",
                details={"max_size": max_size},
            )

        try:
            exts = frozenset(normalize_extension(ext) for ext in allowed_extensions)
        except ValueError as exc:
            raise ValidationError(message="Allowed extensions must not be empty") from exc

        self._storage = storage
        self._max_size = max_size
        self._allowed_extensions = exts
        self._watermark = watermark

    @classmethod
    def from_settings(cls, settings: UploadSettings | None = None) -> "UploadService":
        """Build the service and its infrastructure from settings (env by default)."""
        settings = settings or UploadSettings.from_env()
        return cls(
            storage=build_storage(settings),
            max_size=settings.max_size,
            allowed_extensions=settings.allowed_extensions,
            watermark=build_watermark(settings),
        )

    @property
    def storage(self) -> FileStorageRepository:
        return self._storage

    @property
    def watermark(self) -> Watermark | None:
        return self._watermark

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def allowed_extensions(self) -> frozenset[str]:
        return self._allowed_extensions

    def set_storage(self, storage: FileStorageRepository) -> None:
        self._storage = storage

    def set_watermark(self, watermark: Watermark | None) -> None:
        """Replace the watermark; None disables watermarking."""
        self._watermark = watermark

    def set_watermark_file(
        self,
        path: str | os.PathLike[str],
        padding: int,
        position: Position | str,
    ) -> None:
        self.set_watermark(Watermark.from_file(path, padding, position))

    def is_allowed_extension(self, ext: str) -> bool:
        try:
            return normalize_extension(ext) in self._allowed_extensions
        except ValueError:
            return False

    def is_allowed_size(self, size: int) -> bool:
        return 0 < size <= self._max_size

    def upload_files(self, field: str, form: UploadForm | None) -> list[str]:
        """Validate and store every file uploaded under `field`.

        Files are processed in order. The first failing file aborts the
        batch: its error is raised with `saved` holding the locators of the
        files stored before it. Stored files are never rolled back.

        Args:
            field: Form field carrying the files
            form: Parsed form; None when the request had no multipart body

        Returns:
            Locators of the stored files, in input order

        Raises:
            NoUploadFileError: If no file was sent under `field`
            NotAllowSizeError: If a file is empty or too large
            NotAllowExtError: If a file extension is not allowed
            UnsupportedFormatError: If an image cannot be watermarked
            WatermarkSizeError: If the watermark does not fit an image
            StorageError: If storing a file fails
            UploadFailedError: If a file fails for any other reason
        """
        files = form.get(field) if form is not None else None
        if not files:
            logger.info("No files uploaded", extra={"field": field})
            raise NoUploadFileError(details={"field": field})

        logger.debug("Starting upload", extra={"field": field, "count": len(files)})

        saved: list[str] = []
        for index, uploaded in enumerate(files):
            try:
                saved.append(self._save_file(uploaded))
            except UploadServiceError as exc:
                self._abort(exc, field, uploaded.filename, index, saved)
                raise
            except Exception as exc:
                # Foreign errors are wrapped so the stored locators travel with them.
                logger.exception(
                    "Unexpected error while processing file",
                    extra={"field": field, "filename": uploaded.filename},
                )
                error = UploadFailedError(details={"error_type": type(exc).__name__})
                self._abort(error, field, uploaded.filename, index, saved)
                raise error from exc

        logger.info("Upload completed", extra={"field": field, "count": len(saved)})
        return saved

    @staticmethod
    def _abort(
        exc: UploadServiceError,
        field: str,
        filename: str,
        index: int,
        saved: list[str],
    ) -> None:
        exc.saved = list(saved)
        exc.details.setdefault("filename", filename)
        exc.details.setdefault("index", index)
        logger.warning(
            "Upload aborted",
            extra={
                "field": field,
                "filename": filename,
                "error_code": exc.error_code,
                "saved": len(saved),
            },
        )

    def _save_file(self, uploaded: UploadedFile) -> str:
        watermark = self._watermark
        declared_size = uploaded.size

        if declared_size is not None:
            self._check_size(declared_size)

        ext = split_extension(uploaded.filename)
        if not self.is_allowed_extension(ext):
            raise NotAllowExtError(
                details={"ext": ext, "allowed": sorted(self._allowed_extensions)},
            )

        try:
            source = uploaded.open()
        except OSError as exc:
            raise StorageError(
                message="Unable to read uploaded file",
                details={"filename": uploaded.filename},
            ) from exc

        with source:
            if declared_size is None:
                self._check_size(self._measure(source))

            stream: BinaryIO = source
            if watermark is not None and is_supported_extension(ext):
                stream = self._writable(source)
                watermark.mark(stream, ext)

            return self._storage.save(file=stream, filename=uploaded.filename, ext=ext)

    def _check_size(self, size: int) -> None:
        if not self.is_allowed_size(size):
            raise NotAllowSizeError(
                message=(
                    "File is empty"
                    if size <= 0
                    else f"File size exceeds {format_file_size(self._max_size)} limit"
                ),
                details={"size": size, "max_size": self._max_size},
            )

    @staticmethod
    def _measure(stream: BinaryIO) -> int:
        if not stream.seekable():
            raise UnknownFileSizeError()

        position = stream.tell()
        size = stream.seek(0, io.SEEK_END)
        stream.seek(position)
        return size - position

    @staticmethod
    def _writable(stream: BinaryIO) -> BinaryIO:
        """Return a stream the watermark can rewrite in place."""
        if stream.seekable() and stream.writable():
            return stream

        return io.BytesIO(stream.read())


@lru_cache(maxsize=1)
def get_upload_service() -> UploadService:
    """Process-wide service built from environment settings."""
    return UploadService.from_settings()
