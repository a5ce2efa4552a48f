"""Service configuration loaded from environment variables."""

import os
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

from uploader.utils.constants import (
    DEFAULT_ALLOWED_EXTENSIONS,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_S3_KEY_PREFIX,
    DEFAULT_UPLOAD_ROOT_DIR,
    DEFAULT_WATERMARK_PADDING,
    ENV_STORAGE_BACKEND,
    ENV_UPLOAD_ALLOWED_EXTENSIONS,
    ENV_UPLOAD_BASE_URL,
    ENV_UPLOAD_MAX_SIZE,
    ENV_UPLOAD_ROOT_DIR,
    ENV_UPLOAD_S3_BUCKET_NAME,
    ENV_UPLOAD_S3_KEY_PREFIX,
    ENV_UPLOAD_SUBDIR_FORMAT,
    ENV_WATERMARK_PADDING,
    ENV_WATERMARK_PATH,
    ENV_WATERMARK_POSITION,
    STORAGE_BACKEND_LOCAL,
    STORAGE_BACKEND_S3,
)
from uploader.utils.filenames import normalize_extension
from uploader.utils.time import SubdirFormat
from uploader.watermark.watermark import Position

_ENV_FIELDS: dict[str, str] = {
    "storage_backend": ENV_STORAGE_BACKEND,
    "root_dir": ENV_UPLOAD_ROOT_DIR,
    "base_url": ENV_UPLOAD_BASE_URL,
    "subdir_format": ENV_UPLOAD_SUBDIR_FORMAT,
    "max_size": ENV_UPLOAD_MAX_SIZE,
    "allowed_extensions": ENV_UPLOAD_ALLOWED_EXTENSIONS,
    "s3_bucket_name": ENV_UPLOAD_S3_BUCKET_NAME,
    "s3_key_prefix": ENV_UPLOAD_S3_KEY_PREFIX,
    "watermark_path": ENV_WATERMARK_PATH,
    "watermark_padding": ENV_WATERMARK_PADDING,
    "watermark_position": ENV_WATERMARK_POSITION,
}


class UploadSettings(BaseModel):
    """Validated configuration of the upload service."""

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    storage_backend: Literal["local", "s3"] = Field(
        STORAGE_BACKEND_LOCAL, description="Storage backend used for uploads"
    )
    root_dir: StrictStr = Field(
        DEFAULT_UPLOAD_ROOT_DIR, min_length=1, description="Root directory of local storage"
    )
    base_url: StrictStr = Field("", description="Prefix of returned file locators")
    subdir_format: SubdirFormat = Field(
        SubdirFormat.NONE, description="Time-based sub-directory granularity"
    )
    max_size: int = Field(DEFAULT_MAX_FILE_SIZE, gt=0, description="Maximum file size in bytes")
    allowed_extensions: tuple[str, ...] = Field(
        DEFAULT_ALLOWED_EXTENSIONS, description="Allowed file extensions"
    )

    s3_bucket_name: StrictStr | None = Field(None, description="Bucket used by the s3 backend")
    s3_key_prefix: StrictStr = Field(DEFAULT_S3_KEY_PREFIX, description="Key prefix in the bucket")

    watermark_path: StrictStr | None = Field(None, description="Watermark image file")
    watermark_padding: int = Field(DEFAULT_WATERMARK_PADDING, ge=0, description="Watermark padding")
    watermark_position: Position = Field(Position.BOTTOM_RIGHT, description="Watermark anchor")

    @field_validator("allowed_extensions", mode="before")
    @classmethod
    def validate_allowed_extensions(cls, value: Any) -> tuple[str, ...]:
        """
        Normalize allowed extensions.

        Accepts:
        - comma-separated string
        - list of strings

        Returns:
        - tuple of lower-case, dot-prefixed extensions without duplicates
        """
        if isinstance(value, str):
            raw = [e.strip() for e in value.split(",") if e.strip()]
        elif isinstance(value, (list, tuple, set, frozenset)):
            raw = [str(e) for e in value]
        else:
            raise ValueError("allowed_extensions must be a string or list of strings")

        return tuple(dict.fromkeys(normalize_extension(e) for e in raw))

    @field_validator("subdir_format", "watermark_position", "storage_backend", mode="before")
    @classmethod
    def lower_case_choice(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("watermark_path", "s3_bucket_name", mode="before")
    @classmethod
    def blank_as_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def uses_s3(self) -> bool:
        return self.storage_backend == STORAGE_BACKEND_S3

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "UploadSettings":
        """Build settings from environment variables; unset ones keep defaults."""
        env = os.environ if environ is None else environ
        values = {field: env[name] for field, name in _ENV_FIELDS.items() if env.get(name)}
        return cls.model_validate(values)
