import pytest
from pydantic import ValidationError

from uploader.models.settings import UploadSettings
from uploader.utils.time import SubdirFormat
from uploader.watermark.watermark import Position


class TestUploadSettings:
    def test_defaults(self) -> None:
        settings = UploadSettings()

        assert settings.storage_backend == "local"
        assert settings.subdir_format is SubdirFormat.NONE
        assert settings.max_size == 10 * 1024 * 1024
        assert ".png" in settings.allowed_extensions
        assert settings.watermark_path is None
        assert settings.watermark_position is Position.BOTTOM_RIGHT
        assert not settings.uses_s3

    def test_from_env(self) -> None:
        settings = UploadSettings.from_env(
            {
                "UPLOAD_STORAGE_BACKEND": "S3",
                "UPLOAD_S3_BUCKET_NAME": "bucket",
                "UPLOAD_SUBDIR_FORMAT": "Day",
                "UPLOAD_MAX_SIZE": "2048",
                "UPLOAD_ALLOWED_EXTENSIONS": "PNG, .jpg,png",
                "WATERMARK_POSITION": "Center",
                "WATERMARK_PADDING": "5",
            }
        )

        assert settings.uses_s3
        assert settings.s3_bucket_name == "bucket"
        assert settings.subdir_format is SubdirFormat.DAY
        assert settings.max_size == 2048
        assert settings.allowed_extensions == (".png", ".jpg")
        assert settings.watermark_position is Position.CENTER
        assert settings.watermark_padding == 5

    def test_blank_env_values_keep_defaults(self) -> None:
        settings = UploadSettings.from_env({"UPLOAD_MAX_SIZE": "", "WATERMARK_PATH": ""})

        assert settings.max_size == 10 * 1024 * 1024
        assert settings.watermark_path is None

    @pytest.mark.parametrize(
        "values",
        [
            {"max_size": 0},
            {"watermark_padding": -1},
            {"storage_backend": "ftp"},
            {"subdir_format": "hour"},
            {"watermark_position": "middle"},
            {"allowed_extensions": ["."]},
            {"allowed_extensions": 42},
        ],
    )
    def test_invalid_values_rejected(self, values) -> None:
        with pytest.raises(ValidationError):
            UploadSettings(**values)

    def test_frozen(self) -> None:
        settings = UploadSettings()
        with pytest.raises(ValidationError):
            settings.max_size = 1  # type: ignore[misc]
