"""Image watermarking.

A `Watermark` holds one decoded image together with the padding and the
anchor position used to place it. Supported formats are those registered in
`uploader.watermark.formats` (gif, jpeg and png by default); a gif contributes
its first frame only and png transparency is honoured.
"""

import os
from enum import Enum
from pathlib import Path
from typing import BinaryIO

from aws_lambda_powertools import Logger
from PIL import Image

from uploader.models.errors import (
    InvalidPositionError,
    StorageError,
    ValidationError,
    WatermarkSizeError,
)
from uploader.utils.constants import DEFAULT_WATERMARK_PADDING
from uploader.utils.filenames import split_extension
from uploader.watermark.formats import get_codec

logger = Logger(UTC=True)


class Position(str, Enum):
    """Where the watermark is anchored on the target image."""

    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"
    CENTER = "center"

    @classmethod
    def parse(cls, value: "Position | str") -> "Position":
        try:
            return cls(value.strip().lower() if isinstance(value, str) else value)
        except ValueError as exc:
            raise InvalidPositionError(
                details={
                    "position": str(value),
                    "allowed": [pos.value for pos in cls],
                },
            ) from exc


def compute_anchor(
    source_size: tuple[int, int],
    mark_size: tuple[int, int],
    padding: int,
    position: Position,
) -> tuple[int, int]:
    """Top-left pixel at which the watermark is drawn onto the source.

    Raises:
        WatermarkSizeError: If any part of the watermark would fall outside
            the source image
    """
    srcw, srch = source_size
    ww, wh = mark_size

    if position is Position.TOP_LEFT:
        x, y = padding, padding
    elif position is Position.TOP_RIGHT:
        x, y = srcw - padding - ww, padding
    elif position is Position.BOTTOM_LEFT:
        x, y = padding, srch - padding - wh
    elif position is Position.BOTTOM_RIGHT:
        x, y = srcw - padding - ww, srch - padding - wh
    else:
        x, y = (srcw - padding - ww) // 2, (srch - padding - wh) // 2

    # Overflow past the far edge is rejected too, never clipped.
    if x < 0 or x + ww > srcw:
        raise WatermarkSizeError(
            message="Watermark is wider than the image",
            details={"image_width": srcw, "watermark_width": ww, "padding": padding},
        )

    if y < 0 or y + wh > srch:
        raise WatermarkSizeError(
            message="Watermark is taller than the image",
            details={"image_height": srch, "watermark_height": wh, "padding": padding},
        )

    return x, y


class Watermark:
    """Composites a fixed watermark image onto uploaded images.

    Instances are immutable; reconfiguring means building a new one.
    """

    def __init__(
        self,
        image: Image.Image,
        padding: int = DEFAULT_WATERMARK_PADDING,
        position: Position | str = Position.BOTTOM_RIGHT,
    ) -> None:
        if padding < 0:
            raise ValidationError(
                message="Watermark padding must not be negative",
                details={"padding": padding},
            )

        self._position = Position.parse(position)
        self._padding = padding
        self._image = image.convert("RGBA")

    @classmethod
    def from_file(
        cls,
        path: str | os.PathLike[str],
        padding: int = DEFAULT_WATERMARK_PADDING,
        position: Position | str = Position.BOTTOM_RIGHT,
    ) -> "Watermark":
        """Load the watermark image from `path`; its extension picks the codec.

        Raises:
            UnsupportedFormatError: If the file type has no registered codec
            InvalidPositionError: If `position` is not a known anchor
        """
        path = Path(path)
        codec = get_codec(split_extension(path.name))
        position = Position.parse(position)

        with path.open("rb") as f:
            image = codec.decode(f)

        logger.info(
            "Watermark loaded",
            extra={"path": str(path), "size": image.size, "position": position.value},
        )
        return cls(image, padding, position)

    @property
    def size(self) -> tuple[int, int]:
        return self._image.size

    @property
    def padding(self) -> int:
        return self._padding

    @property
    def position(self) -> Position:
        return self._position

    def anchor_for(self, source_size: tuple[int, int]) -> tuple[int, int]:
        return compute_anchor(source_size, self._image.size, self._padding, self._position)

    def mark(self, stream: BinaryIO, ext: str) -> None:
        """Watermark the image in `stream` in place.

        The stream is decoded from its start, composited, re-encoded in the
        same format and written back from offset zero. It is left truncated
        to the new content and rewound.

        Raises:
            UnsupportedFormatError: If `ext` has no registered codec
            WatermarkSizeError: If the watermark does not fit the image
            StorageError: If the result cannot be written back to `stream`
        """
        codec = get_codec(ext)

        stream.seek(0)
        canvas = codec.decode(stream)
        anchor = self.anchor_for(canvas.size)

        canvas.alpha_composite(self._image, dest=anchor)

        try:
            stream.seek(0)
            codec.encode(canvas, stream)
            stream.truncate()
            stream.seek(0)
        except OSError as exc:
            logger.error("Failed to write watermarked image", extra={"format": codec.format})
            raise StorageError(
                message="Unable to write watermarked image",
                details={"format": codec.format},
            ) from exc

        logger.debug(
            "Watermark applied",
            extra={"format": codec.format, "size": canvas.size, "anchor": anchor},
        )

    def mark_file(self, path: str | os.PathLike[str]) -> None:
        """Watermark the image file at `path` in place."""
        path = Path(path)
        with path.open("r+b") as f:
            self.mark(f, split_extension(path.name))
