"""Pydantic models for delete file request/response."""

from pydantic import BaseModel, ConfigDict, Field


class DeleteFileRequest(BaseModel):
    """Validation model for delete file request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    locator: str = Field(
        ...,
        min_length=1,
        description="Locator returned by the upload, base URL included",
    )


class DeleteFileResponse(BaseModel):
    """Response model for successful file deletion."""

    locator: str = Field(..., description="Deleted file locator")
    message: str = Field(..., description="Success message")
    deleted_at: str = Field(..., description="Deletion timestamp")
