"""Builds infrastructure objects from `UploadSettings`."""

from aws_lambda_powertools import Logger

from uploader.infrastructure.adapters.s3_adapter import S3Adapter
from uploader.infrastructure.aws.s3_file_storage import S3FileStorage
from uploader.infrastructure.local.local_file_storage import LocalFileStorage
from uploader.models.settings import UploadSettings
from uploader.repositories.storage_repository import FileStorageRepository
from uploader.watermark.watermark import Watermark

logger = Logger(UTC=True)


def build_storage(settings: UploadSettings) -> FileStorageRepository:
    """Create the storage backend selected by `settings.storage_backend`."""
    if settings.uses_s3:
        logger.debug("Using S3 storage", extra={"bucket": settings.s3_bucket_name})
        return S3FileStorage(
            S3Adapter(settings.s3_bucket_name),
            key_prefix=settings.s3_key_prefix,
            base_url=settings.base_url,
            subdir_format=settings.subdir_format,
        )

    logger.debug("Using local storage", extra={"root": settings.root_dir})
    return LocalFileStorage(
        settings.root_dir,
        base_url=settings.base_url,
        subdir_format=settings.subdir_format,
    )


def build_watermark(settings: UploadSettings) -> Watermark | None:
    """Load the configured watermark, or return None when none is configured."""
    if not settings.watermark_path:
        return None

    return Watermark.from_file(
        settings.watermark_path,
        padding=settings.watermark_padding,
        position=settings.watermark_position,
    )
