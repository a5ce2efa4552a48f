import io
import os
from typing import BinaryIO

import pytest
from PIL import Image

from handlers.upload_files.service import UploadService
from uploader.infrastructure.local.local_file_storage import LocalFileStorage
from uploader.models.errors import (
    NoUploadFileError,
    NotAllowExtError,
    NotAllowSizeError,
    StorageError,
    UnknownFileSizeError,
    UnsupportedFormatError,
    UploadFailedError,
    ValidationError,
    WatermarkSizeError,
)
from uploader.models.settings import UploadSettings
from uploader.models.upload import UploadedBytes
from uploader.watermark.watermark import Position, Watermark


class StreamedFile:
    """Uploaded file that does not declare its size."""

    def __init__(self, filename: str, content: bytes, *, seekable: bool = True) -> None:
        self.filename = filename
        self.size = None
        self._content = content
        self._seekable = seekable
        self.opened = 0

    def open(self) -> BinaryIO:
        self.opened += 1
        stream = io.BytesIO(self._content)
        if not self._seekable:
            stream.seekable = lambda: False  # type: ignore[method-assign]
        return stream


class UnreadableFile:
    filename = "a.txt"
    size = 3

    def open(self) -> BinaryIO:
        raise OSError("temp file vanished")


@pytest.fixture
def service(local_storage: LocalFileStorage) -> UploadService:
    return UploadService(
        storage=local_storage,
        max_size=1024 * 1024,
        allowed_extensions=[".txt", "PNG", ".jpg", "gif"],
    )


def files(*pairs: tuple[str, bytes]) -> dict[str, list[UploadedBytes]]:
    return {"files": [UploadedBytes(filename=n, content=c) for n, c in pairs]}


class TestUploadServiceConfig:
    def test_invalid_max_size(self, local_storage) -> None:
        with pytest.raises(ValidationError):
            UploadService(storage=local_storage, max_size=0, allowed_extensions=[".txt"])

    def test_empty_extension(self, local_storage) -> None:
        with pytest.raises(ValidationError):
            UploadService(storage=local_storage, max_size=10, allowed_extensions=[""])

    def test_extensions_are_normalized(self, service: UploadService) -> None:
        assert service.allowed_extensions == {".txt", ".png", ".jpg", ".gif"}

    @pytest.mark.parametrize(("ext", "allowed"), [(".PNG", True), ("txt", True), ("", False), (".exe", False)])
    def test_is_allowed_extension(self, service: UploadService, ext: str, allowed: bool) -> None:
        assert service.is_allowed_extension(ext) is allowed

    @pytest.mark.parametrize(("size", "allowed"), [(0, False), (1, True), (1024 * 1024, True), (1024 * 1024 + 1, False)])
    def test_is_allowed_size(self, service: UploadService, size: int, allowed: bool) -> None:
        assert service.is_allowed_size(size) is allowed

    def test_from_settings(self, tmp_path, watermark_file: str) -> None:
        service = UploadService.from_settings(
            UploadSettings(
                root_dir=str(tmp_path),
                max_size=100,
                allowed_extensions=".png",
                watermark_path=watermark_file,
            )
        )

        assert isinstance(service.storage, LocalFileStorage)
        assert service.max_size == 100
        assert service.allowed_extensions == {".png"}
        assert service.watermark is not None

    def test_swap_watermark(self, service: UploadService, watermark_file: str) -> None:
        service.set_watermark_file(watermark_file, 0, "center")
        assert service.watermark.position is Position.CENTER

        service.set_watermark(None)
        assert service.watermark is None

    def test_swap_storage(self, service: UploadService, tmp_path) -> None:
        other = LocalFileStorage(tmp_path / "other")
        service.set_storage(other)

        service.upload_files("files", files(("a.txt", b"x")))

        assert (tmp_path / "other" / "a.txt").exists()


class TestUploadFiles:
    def test_single_file(self, service: UploadService, local_storage) -> None:
        saved = service.upload_files("files", files(("notes.txt", b"hello")))

        assert saved == ["notes.txt"]
        assert (local_storage.root / "notes.txt").read_bytes() == b"hello"

    def test_order_is_preserved_and_names_deduplicated(self, service: UploadService) -> None:
        saved = service.upload_files(
            "files", files(("a.txt", b"1"), ("b.txt", b"2"), ("a.txt", b"3"))
        )

        assert saved == ["a.txt", "b.txt", "a_1.txt"]

    def test_extension_is_case_insensitive(self, service: UploadService) -> None:
        assert service.upload_files("files", files(("SHOUT.TXT", b"x"))) == ["SHOUT.TXT"]

    @pytest.mark.parametrize("form", [None, {}, {"files": []}, {"other": [UploadedBytes(filename="a.txt", content=b"x")]}])
    def test_no_files(self, service: UploadService, form) -> None:
        with pytest.raises(NoUploadFileError) as exc_info:
            service.upload_files("files", form)

        assert exc_info.value.saved == []

    def test_partial_failure_keeps_earlier_files(self, service: UploadService, local_storage) -> None:
        form = files(("one.txt", b"1"), ("two.exe", b"2"), ("three.txt", b"3"))

        with pytest.raises(NotAllowExtError) as exc_info:
            service.upload_files("files", form)

        exc = exc_info.value
        assert exc.saved == ["one.txt"]
        assert exc.details["filename"] == "two.exe"
        assert exc.details["index"] == 1
        assert sorted(os.listdir(local_storage.root)) == ["one.txt"]

    def test_missing_extension(self, service: UploadService) -> None:
        with pytest.raises(NotAllowExtError):
            service.upload_files("files", files(("Makefile", b"all:")))

    def test_empty_file(self, service: UploadService) -> None:
        with pytest.raises(NotAllowSizeError) as exc_info:
            service.upload_files("files", files(("empty.txt", b"")))

        assert exc_info.value.message == "File is empty"

    def test_file_too_large(self, local_storage) -> None:
        service = UploadService(storage=local_storage, max_size=4, allowed_extensions=[".txt"])

        assert service.upload_files("files", files(("ok.txt", b"1234"))) == ["ok.txt"]
        with pytest.raises(NotAllowSizeError) as exc_info:
            service.upload_files("files", files(("big.txt", b"12345")))

        assert exc_info.value.details == {
            "size": 5,
            "max_size": 4,
            "filename": "big.txt",
            "index": 0,
        }

    def test_size_checked_before_extension(self, service: UploadService) -> None:
        with pytest.raises(NotAllowSizeError):
            service.upload_files("files", files(("bad.exe", b"")))

    def test_undeclared_size_is_measured(self, local_storage) -> None:
        service = UploadService(storage=local_storage, max_size=4, allowed_extensions=[".txt"])
        big = StreamedFile("big.txt", b"12345")

        with pytest.raises(NotAllowSizeError):
            service.upload_files("files", {"files": [big]})

        assert service.upload_files("files", {"files": [StreamedFile("ok.txt", b"1234")]}) == ["ok.txt"]

    def test_unknown_size(self, service: UploadService) -> None:
        with pytest.raises(UnknownFileSizeError):
            service.upload_files("files", {"files": [StreamedFile("a.txt", b"x", seekable=False)]})

    def test_rejected_file_is_never_opened(self, service: UploadService) -> None:
        rejected = StreamedFile("a.exe", b"x")

        with pytest.raises(NotAllowExtError):
            service.upload_files("files", {"files": [rejected]})

        assert rejected.opened == 0

    def test_unreadable_upload(self, service: UploadService) -> None:
        with pytest.raises(StorageError):
            service.upload_files("files", {"files": [UnreadableFile()]})


class TestUploadWithWatermark:
    @pytest.fixture
    def marked_service(self, service: UploadService, watermark_image) -> UploadService:
        service.set_watermark(Watermark(watermark_image, padding=10))
        return service

    def test_image_is_watermarked(self, marked_service, local_storage, png_bytes: bytes) -> None:
        saved = marked_service.upload_files("files", files(("photo.png", png_bytes)))

        with Image.open(local_storage.root / saved[0]) as img:
            assert img.convert("RGB").getpixel((465, 465)) == (255, 0, 0)
            assert img.convert("RGB").getpixel((5, 5)) == (255, 255, 255)

    def test_non_image_is_stored_unchanged(self, marked_service, local_storage) -> None:
        saved = marked_service.upload_files("files", files(("notes.txt", b"plain")))

        assert (local_storage.root / saved[0]).read_bytes() == b"plain"

    def test_upper_case_image_extension_is_watermarked(
        self, marked_service, local_storage, jpeg_bytes: bytes
    ) -> None:
        saved = marked_service.upload_files("files", files(("PHOTO.JPG", jpeg_bytes)))

        assert (local_storage.root / saved[0]).read_bytes() != jpeg_bytes

    def test_too_small_image_aborts(self, marked_service, local_storage, image_bytes) -> None:
        form = files(("a.txt", b"x"), ("tiny.png", image_bytes("PNG", (20, 20))))

        with pytest.raises(WatermarkSizeError) as exc_info:
            marked_service.upload_files("files", form)

        assert exc_info.value.saved == ["a.txt"]
        assert sorted(os.listdir(local_storage.root)) == ["a.txt"]

    def test_oversized_image_aborts_with_saved(
        self, marked_service, local_storage, png_bytes: bytes, monkeypatch
    ) -> None:
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
        form = files(("a.txt", b"x"), ("big.png", png_bytes))

        with pytest.raises(UnsupportedFormatError) as exc_info:
            marked_service.upload_files("files", form)

        assert exc_info.value.saved == ["a.txt"]
        assert isinstance(exc_info.value.__cause__, Image.DecompressionBombError)
        assert sorted(os.listdir(local_storage.root)) == ["a.txt"]


class FlakyStorage(LocalFileStorage):
    """Local storage that fails with a foreign error on its second save."""

    def __init__(self, root) -> None:
        super().__init__(root)
        self.calls = 0

    def save(self, *, file: BinaryIO, filename: str, ext: str) -> str:
        self.calls += 1
        if self.calls == 2:
            raise RuntimeError("backend exploded")
        return super().save(file=file, filename=filename, ext=ext)


class TestUnexpectedErrors:
    def test_foreign_storage_error_keeps_saved(self, tmp_path) -> None:
        storage = FlakyStorage(tmp_path)
        service = UploadService(storage=storage, max_size=1024, allowed_extensions=[".txt"])

        with pytest.raises(UploadFailedError) as exc_info:
            service.upload_files("files", files(("a.txt", b"1"), ("b.txt", b"2"), ("c.txt", b"3")))

        exc = exc_info.value
        assert exc.saved == ["a.txt"]
        assert exc.details["filename"] == "b.txt"
        assert exc.details["error_type"] == "RuntimeError"
        assert isinstance(exc.__cause__, RuntimeError)
        assert storage.calls == 2
