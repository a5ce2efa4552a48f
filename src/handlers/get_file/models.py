"""Pydantic models for the stored file download request."""

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_validator


class GetFileRequest(BaseModel):
    """Validation model for get file request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: StrictStr = Field(
        ...,
        min_length=1,
        description="Stored file name relative to the storage root, e.g. 2024/05/01/a.png",
    )

    download: StrictBool = Field(
        default=False,
        description=(
            "If true, forces download (Content-Disposition: attachment). "
            "If false, the file is displayed inline."
        ),
    )

    @field_validator("name")
    @classmethod
    def strip_leading_slash(cls, value: str) -> str:
        name = value.lstrip("/")
        if not name:
            raise ValueError("name must not be blank")
        return name
