"""
Pytest configuration and fixtures for upload service tests.
Provides AWS mocking, S3 bucket, local storage and image fixtures.
"""

import io
import os
from collections.abc import Callable
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any

os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("UPLOAD_S3_BUCKET_NAME", "test-upload-bucket")
os.environ.setdefault("POWERTOOLS_METRICS_NAMESPACE", "FileUploadService")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "file-upload-service")
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "true")

import boto3  # noqa: E402
import pytest  # noqa: E402
from botocore.exceptions import ClientError  # noqa: E402
from moto import mock_aws  # noqa: E402
from PIL import Image  # noqa: E402

from uploader.infrastructure.local.local_file_storage import LocalFileStorage  # noqa: E402


@pytest.fixture(scope="function")
def aws_mock():
    with mock_aws():
        yield


@pytest.fixture(scope="function")
def s3_client(aws_mock):
    """S3 client for bucket operations."""
    return boto3.client("s3", region_name=os.getenv("AWS_REGION"))


@pytest.fixture(scope="function")
def s3_bucket(s3_client) -> str:
    """Create the upload bucket inside the moto mock and return its name."""
    bucket_name = os.environ["UPLOAD_S3_BUCKET_NAME"]

    try:
        s3_client.create_bucket(Bucket=bucket_name)
    except ClientError as e:
        if e.response["Error"]["Code"] != "BucketAlreadyOwnedByYou":
            raise

    return bucket_name


@pytest.fixture
def s3_get_object(s3_client, s3_bucket) -> Callable[[str], bytes]:
    """
    Helper to read an object body from the upload bucket.

    Usage:
        content = s3_get_object("uploads/a.png")
    """

    def _get(key: str) -> bytes:
        response: dict[str, Any] = s3_client.get_object(Bucket=s3_bucket, Key=key)
        data: bytes = response["Body"].read()
        return data

    return _get


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: datetime(2024, 5, 17, 8, 30, tzinfo=timezone.utc)


@pytest.fixture
def local_storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path / "uploads")


def make_image_bytes(
    fmt: str,
    size: tuple[int, int] = (500, 500),
    color: tuple[int, int, int, int] = (255, 255, 255, 255),
) -> bytes:
    """Encode a solid-color image in the given Pillow format."""
    image = Image.new("RGBA", size, color)
    if fmt in ("JPEG", "GIF"):
        image = image.convert("RGB")

    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def image_bytes() -> Callable[..., bytes]:
    """Factory fixture: image_bytes("PNG", (100, 80)) -> encoded bytes."""
    return make_image_bytes


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes("JPEG")


@pytest.fixture
def gif_bytes() -> bytes:
    return make_image_bytes("GIF")


@pytest.fixture
def watermark_image() -> Image.Image:
    """Opaque 50x50 red square."""
    return Image.new("RGBA", (50, 50), (255, 0, 0, 255))


@pytest.fixture
def watermark_file(tmp_path, watermark_image) -> str:
    path = tmp_path / "mark.png"
    watermark_image.save(path, format="PNG")
    return str(path)


@pytest.fixture
def lambda_context():
    return SimpleNamespace(
        aws_request_id="test-request-id",
        function_name="test-function",
        memory_limit_in_mb=256,
        invoked_function_arn="arn:aws:lambda:us-east-1:000000000000:function:test",
        log_group_name="/aws/lambda/test-function",
        log_stream_name="2024/01/01/[$LATEST]test",
    )
