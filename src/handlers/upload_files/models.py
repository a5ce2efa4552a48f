"""Pydantic models for the multi-file upload request/response."""

import base64
import binascii

from pydantic import BaseModel, ConfigDict, Field, field_validator

from uploader.models.upload import UploadedBytes
from uploader.utils.constants import DEFAULT_UPLOAD_FIELD
from uploader.utils.filenames import base_filename


class FilePart(BaseModel):
    """One file of the upload form, content sent as Base64."""

    model_config = ConfigDict(str_strip_whitespace=True)

    filename: str = Field(..., min_length=1, max_length=255, description="Client file name")
    content: str = Field(..., description="Base64 encoded file content")

    @field_validator("filename")
    @classmethod
    def validate_filename(cls, value: str) -> str:
        # Clients may send a full path; only the last component is kept.
        name = base_filename(value)
        if not name or name in (".", ".."):
            raise ValueError("Invalid file name")
        return name

    @field_validator("content")
    @classmethod
    def validate_content(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Invalid base64 encoded file") from exc
        return value

    def to_uploaded(self) -> UploadedBytes:
        return UploadedBytes(
            filename=self.filename,
            content=base64.b64decode(self.content, validate=True),
        )


class UploadFilesRequest(BaseModel):
    """Validation model for the upload request."""

    field: str = Field(
        DEFAULT_UPLOAD_FIELD, min_length=1, max_length=100, description="Form field name"
    )
    form: dict[str, list[FilePart]] = Field(
        default_factory=dict, description="Form field name -> files sent under it"
    )

    def to_form(self) -> dict[str, list[UploadedBytes]]:
        return {name: [part.to_uploaded() for part in parts] for name, parts in self.form.items()}


class UploadFilesResponse(BaseModel):
    """Response model for a successful upload."""

    files: list[str] = Field(..., description="Locators of the stored files, in input order")
    count: int = Field(..., description="Number of stored files")
    message: str = Field(..., description="Success message")
