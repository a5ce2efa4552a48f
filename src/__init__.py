"""File Upload Service Package."""

__version__ = "1.0.0"
__author__ = "Bharat kumar"
__description__ = (
    "File upload service with pluggable storage and image watermarking"
)

__all__ = ["handlers", "uploader"]
