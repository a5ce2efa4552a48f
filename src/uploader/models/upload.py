"""Shared upload models."""

import io
from collections.abc import Mapping, Sequence
from typing import BinaryIO, Protocol

from pydantic import BaseModel, ConfigDict, Field, StrictBytes, StrictStr


class UploadedFile(Protocol):
    """One file entry of an already-parsed multipart form."""

    @property
    def filename(self) -> str: ...

    @property
    def size(self) -> int | None: ...

    def open(self) -> BinaryIO: ...


# Parsed form: field name -> files submitted under that field.
UploadForm = Mapping[str, Sequence[UploadedFile]]


class UploadedBytes(BaseModel):
    """An uploaded file whose content is already held in memory."""

    model_config = ConfigDict(frozen=True)

    filename: StrictStr = Field(..., description="Original file name sent by the client")
    content: StrictBytes = Field(..., description="Raw file content")

    @property
    def size(self) -> int:
        return len(self.content)

    def open(self) -> BinaryIO:
        return io.BytesIO(self.content)
