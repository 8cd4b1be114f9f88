"""
File Upload Utility - validate uploaded files per category.

Categories:
- profilePic: JPEG / PNG / GIF, max 5MB
- resume:     PDF / DOC / DOCX, max 5MB
- document:   PDF / DOC / DOCX / JPEG / PNG, max 10MB
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import UploadFile

from app.core.errors import ValidationError

MB = 1024 * 1024

MAX_FILE_SIZES = {
    "profilePic": 5 * MB,
    "document": 10 * MB,
    "resume": 5 * MB,
}

PDF = "application/pdf"
DOC = "application/msword"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

ALLOWED_TYPES = {
    "profilePic": ["image/jpeg", "image/jpg", "image/png", "image/gif"],
    "document": [PDF, DOC, DOCX, "image/jpeg", "image/jpg", "image/png"],
    "resume": [PDF, DOC, DOCX],
}


@dataclass
class IncomingFile:
    """An uploaded file read fully into memory."""
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


async def read_upload(file: Optional[UploadFile]) -> Optional[IncomingFile]:
    """Read an UploadFile into memory; None when nothing was sent."""
    if file is None or not file.filename:
        return None
    content = await file.read()
    return IncomingFile(
        filename=file.filename,
        content_type=(file.content_type or "application/octet-stream").lower(),
        content=content,
    )


def validate_file(file: Optional[IncomingFile], category: str) -> None:
    """
    Check presence, size and MIME type for a category.

    Raises:
        ValidationError with a descriptive message
    """
    if file is None:
        raise ValidationError("No file provided", code="NO_FILE")

    max_size = MAX_FILE_SIZES[category]
    if file.size > max_size:
        raise ValidationError(
            f"File size exceeds maximum allowed size of {max_size // MB}MB"
        )

    if file.content_type not in ALLOWED_TYPES[category]:
        raise ValidationError(
            f"File type {file.content_type} is not allowed for {category}"
        )

    if category == "profilePic" and not file.content:
        raise ValidationError("Invalid image file")


def get_upload_limits() -> dict:
    """Get info about accepted uploads."""
    return {
        category: {
            "maxSizeMb": MAX_FILE_SIZES[category] // MB,
            "allowedTypes": ALLOWED_TYPES[category],
        }
        for category in MAX_FILE_SIZES
    }
