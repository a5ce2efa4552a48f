"""Global constants used throughout the application.

This module centralizes all magic numbers, string literals, and configuration
values that are used across multiple modules. Using constants prevents hardcoding
values and makes it easy to change them globally.
"""

from typing import Final

# ============================================================================
# Error Codes
# ============================================================================


# Validation Errors
ERROR_CODE_VALIDATION_FAILED = "VALIDATION_FAILED"
ERROR_CODE_NOT_ALLOW_EXT = "NOT_ALLOW_EXT"
ERROR_CODE_NOT_ALLOW_SIZE = "NOT_ALLOW_SIZE"
ERROR_CODE_UNKNOWN_FILE_SIZE = "UNKNOWN_FILE_SIZE"
ERROR_CODE_NO_UPLOAD_FILE = "NO_UPLOAD_FILE"
ERROR_CODE_INVALID_POSITION = "INVALID_POSITION"

# Watermark Errors
ERROR_CODE_UNSUPPORTED_WATERMARK_TYPE = "UNSUPPORTED_WATERMARK_TYPE"
ERROR_CODE_WATERMARK_SIZE_MISMATCH = "WATERMARK_SIZE_MISMATCH"

# Not Found Errors
ERROR_CODE_RESOURCE_NOT_FOUND = "NOT_FOUND"

# Storage Errors
ERROR_CODE_STORAGE = "STORAGE_ERROR"
ERROR_CODE_DELETE_NOT_SUPPORTED = "DELETE_NOT_SUPPORTED"
ERROR_CODE_UPLOAD_FAILED = "UPLOAD_FAILED"

# ============================================================================
# File Upload Constraints
# ============================================================================

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB in bytes

DEFAULT_UPLOAD_FIELD = "files"

DEFAULT_ALLOWED_EXTENSIONS: Final[tuple[str, ...]] = (
    ".gif",
    ".jpg",
    ".jpeg",
    ".png",
    ".txt",
)

MIME_TYPE_EXTENSION_MAP: Final[dict[str, tuple[str, ...]]] = {
    "image/jpeg": ("jpg", "jpeg"),
    "image/png": ("png",),
    "image/gif": ("gif",),
    "image/webp": ("webp",),
    "image/svg+xml": ("svg",),
    "text/plain": ("txt",),
    "application/xml": ("xml",),
    "application/pdf": ("pdf",),
}

EXTENSION_MIME_TYPE_MAP: Final[dict[str, str]] = {
    ext: mime
    for mime, extensions in MIME_TYPE_EXTENSION_MAP.items()
    for ext in extensions
}

DEFAULT_BINARY_CONTENT_TYPE = "application/octet-stream"

# Permission bits for directories created by local storage.
DEFAULT_DIR_MODE = 0o777


# ============================================================================
# Storage Layout
# ============================================================================

STORAGE_BACKEND_LOCAL = "local"
STORAGE_BACKEND_S3 = "s3"

DEFAULT_UPLOAD_ROOT_DIR = "./uploads"
DEFAULT_S3_KEY_PREFIX = "uploads/"


# ============================================================================
# Watermark Defaults
# ============================================================================

DEFAULT_WATERMARK_PADDING = 10
DEFAULT_JPEG_QUALITY = 90


# ============================================================================
# API Gateway Configuration
# ============================================================================

CORS_ORIGIN = "*"
CORS_METHODS = "GET,POST,PUT,DELETE,OPTIONS"
CORS_HEADERS = "Content-Type,Authorization,X-Api-Key"
EXPOSE_HEADERS = "Content-Type,Content-Length,Content-Disposition"
DEFAULT_CONTENT_TYPE = "application/json"

# ============================================================================
# Environment Variable Names
# ============================================================================

ENV_AWS_ENDPOINT_URL = "AWS_ENDPOINT_URL"
ENV_AWS_REGION = "AWS_REGION"
ENV_UPLOAD_S3_BUCKET_NAME = "UPLOAD_S3_BUCKET_NAME"
ENV_UPLOAD_S3_KEY_PREFIX = "UPLOAD_S3_KEY_PREFIX"
ENV_STORAGE_BACKEND = "UPLOAD_STORAGE_BACKEND"
ENV_UPLOAD_ROOT_DIR = "UPLOAD_ROOT_DIR"
ENV_UPLOAD_BASE_URL = "UPLOAD_BASE_URL"
ENV_UPLOAD_SUBDIR_FORMAT = "UPLOAD_SUBDIR_FORMAT"
ENV_UPLOAD_MAX_SIZE = "UPLOAD_MAX_SIZE"
ENV_UPLOAD_ALLOWED_EXTENSIONS = "UPLOAD_ALLOWED_EXTENSIONS"
ENV_WATERMARK_PATH = "WATERMARK_PATH"
ENV_WATERMARK_PADDING = "WATERMARK_PADDING"
ENV_WATERMARK_POSITION = "WATERMARK_POSITION"

# ============================================================================
# Helper Functions
# ============================================================================


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted file size string
    """
    size: float = float(size_bytes)

    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0

    return f"{size:.1f} TB"
