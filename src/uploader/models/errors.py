"""Custom exception classes for the upload service."""

from typing import Any

from uploader.utils.constants import (
    ERROR_CODE_INVALID_POSITION,
    ERROR_CODE_NO_UPLOAD_FILE,
    ERROR_CODE_NOT_ALLOW_EXT,
    ERROR_CODE_NOT_ALLOW_SIZE,
    ERROR_CODE_RESOURCE_NOT_FOUND,
    ERROR_CODE_STORAGE,
    ERROR_CODE_UNKNOWN_FILE_SIZE,
    ERROR_CODE_UNSUPPORTED_WATERMARK_TYPE,
    ERROR_CODE_UPLOAD_FAILED,
    ERROR_CODE_VALIDATION_FAILED,
    ERROR_CODE_WATERMARK_SIZE_MISMATCH,
)


class UploadServiceError(Exception):
    """
    Base exception for all upload service errors.

    All custom errors must inherit from this class.
    Callers must explicitly provide a message and error code.
    Optional contextual information can be supplied via `details`.

    `saved` holds the locators of files stored earlier in the same batch
    when the error aborts a multi-file upload.
    """

    message: str
    error_code: str
    details: dict[str, Any]
    saved: list[str]

    def __init__(
        self,
        *,
        message: str,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.saved = []

        super().__init__(self.message)


class ValidationError(UploadServiceError):
    """Raised when an upload or configuration value is rejected."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_VALIDATION_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class NotAllowExtError(ValidationError):
    """Raised when a file extension is missing or not in the allow-list."""

    def __init__(
        self,
        *,
        message: str = "File type is not allowed",
        error_code: str = ERROR_CODE_NOT_ALLOW_EXT,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class NotAllowSizeError(ValidationError):
    """Raised when a file is empty or larger than the configured maximum."""

    def __init__(
        self,
        *,
        message: str = "File size exceeds the maximum or the file is empty",
        error_code: str = ERROR_CODE_NOT_ALLOW_SIZE,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class UnknownFileSizeError(ValidationError):
    """Raised when the size of an uploaded file cannot be determined."""

    def __init__(
        self,
        *,
        message: str = "Unknown file size",
        error_code: str = ERROR_CODE_UNKNOWN_FILE_SIZE,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class NoUploadFileError(ValidationError):
    """Raised when the request carries no files for the upload field."""

    def __init__(
        self,
        *,
        message: str = "No file was uploaded",
        error_code: str = ERROR_CODE_NO_UPLOAD_FILE,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class InvalidPositionError(ValidationError):
    """Raised when a watermark position is not one of the known anchors."""

    def __init__(
        self,
        *,
        message: str = "Invalid watermark position",
        error_code: str = ERROR_CODE_INVALID_POSITION,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class UnsupportedFormatError(UploadServiceError):
    """Raised when an image format has no registered codec."""

    def __init__(
        self,
        *,
        message: str = "Unsupported watermark type",
        error_code: str = ERROR_CODE_UNSUPPORTED_WATERMARK_TYPE,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class WatermarkSizeError(UploadServiceError):
    """Raised when the watermark does not fit inside the target image."""

    def __init__(
        self,
        *,
        message: str = "Watermark does not fit inside the image",
        error_code: str = ERROR_CODE_WATERMARK_SIZE_MISMATCH,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class StorageError(UploadServiceError):
    """Raised when a storage backend operation fails."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_STORAGE,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class NotFoundError(UploadServiceError):
    """Raised when a requested file is not found."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_RESOURCE_NOT_FOUND,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class UploadFailedError(UploadServiceError):
    """Raised when a file fails for a reason outside the domain errors.

    The original exception is chained as `__cause__`.
    """

    def __init__(
        self,
        *,
        message: str = "Unexpected error while processing file",
        error_code: str = ERROR_CODE_UPLOAD_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )
