"""
File Metadata Codec - packs file records into the legacy files table.

The files table only has (file_id, file_data VARCHAR(255), file_path),
so everything else about a file is stored in file_data as compact JSON:

    u   user id
    t   file type (profile_pic, resume, or a document type)
    s   size in bytes
    m   MIME subtype ("jpeg", "pdf", ...)
    c   created date, YYYY-MM-DD
    th  1 when a thumbnail exists (key omitted otherwise)
    o   original filename, truncated to keep the blob inside the column

Decoding rebuilds the full MIME type from the subtype and the thumbnail
path from the thumb_ filename convention.
"""

import json
import posixpath
from dataclasses import dataclass
from datetime import date
from typing import Optional

MAX_FILE_DATA_LENGTH = 255
THUMBNAIL_PREFIX = "thumb_"
IMAGE_SUBTYPES = {"jpeg", "jpg", "png", "gif"}


@dataclass
class FileRecord:
    file_id: str
    user_id: Optional[str]
    file_type: Optional[str]
    file_size: int
    mime_type: Optional[str]
    file_path: Optional[str]
    created_at: Optional[str] = None
    original_name: Optional[str] = None
    thumbnail_path: Optional[str] = None

    @property
    def file_name(self) -> Optional[str]:
        return posixpath.basename(self.file_path) if self.file_path else None

    def to_dict(self) -> dict:
        return {
            "fileId": self.file_id,
            "userId": self.user_id,
            "fileName": self.file_name,
            "originalName": self.original_name,
            "filePath": self.file_path,
            "thumbnailPath": self.thumbnail_path,
            "fileType": self.file_type,
            "fileSize": self.file_size,
            "mimeType": self.mime_type,
            "createdAt": self.created_at,
        }


def mime_subtype(mime_type: str) -> str:
    """'image/jpeg' -> 'jpeg'."""
    return mime_type.split("/", 1)[-1].lower()


def mime_from_subtype(subtype: Optional[str]) -> Optional[str]:
    if not subtype:
        return None
    prefix = "image" if subtype in IMAGE_SUBTYPES else "application"
    return f"{prefix}/{subtype}"


def thumbnail_path_for(file_path: str) -> str:
    directory, name = posixpath.split(file_path)
    return posixpath.join(directory, THUMBNAIL_PREFIX + name)


def _dumps(metadata: dict) -> str:
    return json.dumps(metadata, separators=(",", ":"))


def encode_file_metadata(
    user_id: str,
    file_type: str,
    file_size: int,
    mime_type: str,
    has_thumbnail: bool = False,
    original_name: Optional[str] = None,
    created: Optional[date] = None,
) -> str:
    """
    Serialize a file record to the compact file_data JSON.

    The original name is the only free-length field, so it is shortened
    until the encoded text fits MAX_FILE_DATA_LENGTH.

    Raises:
        ValueError if the fixed fields alone do not fit
    """
    metadata = {
        "u": user_id,
        "t": file_type,
        "s": int(file_size),
        "m": mime_subtype(mime_type),
        "c": (created or date.today()).isoformat(),
    }
    if has_thumbnail:
        metadata["th"] = 1

    encoded = _dumps(metadata)
    if len(encoded) > MAX_FILE_DATA_LENGTH:
        raise ValueError("File metadata exceeds storage column size")

    if original_name:
        name = original_name
        while name:
            candidate = _dumps({**metadata, "o": name})
            overflow = len(candidate) - MAX_FILE_DATA_LENGTH
            if overflow <= 0:
                return candidate
            name = name[:-overflow]

    return encoded


def user_filter_pattern(user_id: str) -> str:
    """LIKE pattern matching the encoded user key (the codec always writes u first)."""
    return '{"u":' + json.dumps(user_id) + ',%'


def decode_file_metadata(file_id: str, file_data: Optional[str], file_path: Optional[str]) -> FileRecord:
    """
    Rebuild a FileRecord from a files row.

    Missing keys default to None (size to 0). Malformed JSON raises
    json.JSONDecodeError to the caller.
    """
    metadata = json.loads(file_data or "{}")
    thumbnail = thumbnail_path_for(file_path) if metadata.get("th") and file_path else None
    return FileRecord(
        file_id=file_id,
        user_id=metadata.get("u"),
        file_type=metadata.get("t"),
        file_size=metadata.get("s", 0),
        mime_type=mime_from_subtype(metadata.get("m")),
        file_path=file_path,
        created_at=metadata.get("c"),
        original_name=metadata.get("o"),
        thumbnail_path=thumbnail,
    )
