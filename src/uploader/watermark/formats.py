"""Registry of image formats the watermark can be applied to.

Each extension maps to one `ImageCodec`, so decoding the watermark source,
decoding an upload and re-encoding the result all resolve the format through
a single lookup. Adding a format is one `register_format` call.
"""

from collections.abc import Callable, Iterable
from typing import BinaryIO, NamedTuple

from PIL import Image

from uploader.models.errors import UnsupportedFormatError
from uploader.utils.constants import DEFAULT_JPEG_QUALITY


class ImageCodec(NamedTuple):
    """Decode/encode pair for one Pillow image format."""

    format: str
    decode: Callable[[BinaryIO], Image.Image]
    encode: Callable[[Image.Image, BinaryIO], None]


def _decoder(fmt: str) -> Callable[[BinaryIO], Image.Image]:
    def decode(stream: BinaryIO) -> Image.Image:
        try:
            with Image.open(stream, formats=[fmt]) as img:
                # Multi-frame images (GIF) contribute their first frame only.
                img.seek(0)
                return img.convert("RGBA")
        except Image.DecompressionBombError as exc:
            raise UnsupportedFormatError(
                message=f"{fmt} image exceeds the decoder pixel limit",
                details={"format": fmt, "max_pixels": Image.MAX_IMAGE_PIXELS},
            ) from exc
        except (OSError, SyntaxError, ValueError) as exc:
            raise UnsupportedFormatError(
                message=f"Unable to decode {fmt} image",
                details={"format": fmt},
            ) from exc

    return decode


def _encode_jpeg(image: Image.Image, stream: BinaryIO) -> None:
    image.convert("RGB").save(stream, format="JPEG", quality=DEFAULT_JPEG_QUALITY)


def _encode_png(image: Image.Image, stream: BinaryIO) -> None:
    image.save(stream, format="PNG")


def _encode_gif(image: Image.Image, stream: BinaryIO) -> None:
    image.convert("RGB").save(stream, format="GIF")


JPEG = ImageCodec("JPEG", _decoder("JPEG"), _encode_jpeg)
PNG = ImageCodec("PNG", _decoder("PNG"), _encode_png)
GIF = ImageCodec("GIF", _decoder("GIF"), _encode_gif)

_registry: dict[str, ImageCodec] = {}


def register_format(extensions: Iterable[str], codec: ImageCodec) -> None:
    """Register `codec` for each extension (case-insensitive, dot optional)."""
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext.startswith("."):
            ext = "." + ext
        _registry[ext] = codec


def get_codec(ext: str) -> ImageCodec:
    """Return the codec registered for `ext`.

    Raises:
        UnsupportedFormatError: If no codec is registered for the extension
    """
    codec = _registry.get(ext.lower())
    if codec is None:
        raise UnsupportedFormatError(
            details={"ext": ext, "supported": sorted(supported_extensions())},
        )

    return codec


def is_supported_extension(ext: str) -> bool:
    """Whether images with this extension are watermark-eligible."""
    return ext.lower() in _registry


def supported_extensions() -> frozenset[str]:
    return frozenset(_registry)


register_format((".jpg", ".jpeg"), JPEG)
register_format((".png",), PNG)
register_format((".gif",), GIF)
