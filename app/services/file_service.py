"""
File Service - stores uploads on disk and records them in the files table.

Layout under settings.upload_dir:
    profile-pics/profile_<uuid>.jpg   (+ thumb_profile_<uuid>.jpg)
    documents/doc_<uuid><ext>
    resumes/resume_<uuid><ext>

The files table has no user column: ownership lives in the packed
file_data JSON (see app.utils.file_metadata). Rows are pre-filtered with a
LIKE on the encoded user key and then checked after decoding.

Disk cleanup is best-effort: failures are logged as warnings and the
database operation still goes ahead.
"""

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from sqlalchemy import text

from app.core.config import DEFAULT_PROFILE_PICTURE, get_settings
from app.core.errors import NotFoundError, ValidationError
from app.db.postgres import get_db_session
from app.utils.file_metadata import (
    FileRecord, decode_file_metadata, encode_file_metadata, thumbnail_path_for, user_filter_pattern,
)
from app.utils.file_upload import IncomingFile, get_file_extension, validate_file
from app.utils.image_processing import generate_profile_variants
from app.utils.records import new_id

logger = logging.getLogger(__name__)

PROFILE_PIC = "profile_pic"
RESUME = "resume"
MAX_DOCUMENT_TYPE_LENGTH = 50
PUBLIC_PREFIX = "/uploads"

# category -> (sub-directory, filename prefix)
STORAGE = {
    "profilePic": ("profile-pics", "profile"),
    "document": ("documents", "doc"),
    "resume": ("resumes", "resume"),
}


class FileService:
    """Upload, list, serve and delete user files."""

    def __init__(self, upload_dir: Optional[str] = None):
        self.upload_root = Path(upload_dir or get_settings().upload_dir)

    # ============================================================
    # PATHS
    # ============================================================

    def ensure_directories(self) -> None:
        for subdir, _ in STORAGE.values():
            (self.upload_root / subdir).mkdir(parents=True, exist_ok=True)

    def disk_path(self, public_path: str) -> Path:
        """Map '/uploads/documents/x.pdf' to <upload_dir>/documents/x.pdf."""
        relative = public_path
        if relative.startswith(PUBLIC_PREFIX + "/"):
            relative = relative[len(PUBLIC_PREFIX) + 1:]
        return self.upload_root / relative.lstrip("/")

    def _write(self, category: str, extension: str, content: bytes, thumbnail: Optional[bytes] = None) -> str:
        subdir, prefix = STORAGE[category]
        file_name = f"{prefix}_{new_id()}{extension}"
        target = self.upload_root / subdir / file_name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        if thumbnail is not None:
            target.with_name("thumb_" + file_name).write_bytes(thumbnail)
        return f"{PUBLIC_PREFIX}/{subdir}/{file_name}"

    def remove_from_disk(self, record: FileRecord) -> None:
        """Best-effort delete of a file and its thumbnail."""
        for public_path in (record.file_path, record.thumbnail_path):
            if not public_path:
                continue
            try:
                os.remove(self.disk_path(public_path))
            except FileNotFoundError:
                logger.warning("File already missing from disk: %s", public_path)
            except OSError as e:
                logger.warning("Could not delete %s from disk: %s", public_path, e)

    # ============================================================
    # RECORDS
    # ============================================================

    def _insert_record(self, file_id: str, file_data: str, file_path: str) -> None:
        with get_db_session() as db:
            db.execute(
                text("INSERT INTO files (file_id, file_data, file_path) VALUES (:id, :data, :path)"),
                {"id": file_id, "data": file_data, "path": file_path}
            )

    def _store(
        self,
        user_id: str,
        category: str,
        file_type: str,
        incoming: IncomingFile,
        content: bytes,
        mime_type: str,
        extension: str,
        thumbnail: Optional[bytes] = None,
    ) -> FileRecord:
        try:
            file_data = encode_file_metadata(
                user_id=user_id,
                file_type=file_type,
                file_size=len(content),
                mime_type=mime_type,
                has_thumbnail=thumbnail is not None,
                original_name=incoming.filename,
            )
        except ValueError:
            raise ValidationError("File details are too long to store")
        file_path = self._write(category, extension, content, thumbnail)
        file_id = new_id()
        try:
            self._insert_record(file_id, file_data, file_path)
        except Exception:
            logger.error("Failed to save file record for %s, removing orphaned upload", file_path)
            self.remove_from_disk(decode_file_metadata(file_id, file_data, file_path))
            raise
        logger.info("Stored %s for user %s at %s", file_type, user_id, file_path)
        return decode_file_metadata(file_id, file_data, file_path)

    def get_user_files(self, user_id: str, file_type: Optional[str] = None) -> List[FileRecord]:
        """All files owned by a user, newest first."""
        with get_db_session() as db:
            result = db.execute(
                text("SELECT file_id, file_data, file_path FROM files WHERE file_data LIKE :pattern"),
                {"pattern": user_filter_pattern(user_id)}
            )
            rows = result.fetchall()

        files = []
        for file_id, file_data, file_path in rows:
            try:
                record = decode_file_metadata(file_id, file_data, file_path)
            except json.JSONDecodeError:
                logger.warning("Skipping file %s with unreadable metadata", file_id)
                continue
            if record.user_id != user_id:
                continue
            if file_type and record.file_type != file_type:
                continue
            files.append(record)

        files.sort(key=lambda f: f.created_at or "", reverse=True)
        return files

    def get_file(self, file_id: str, user_id: str) -> FileRecord:
        with get_db_session() as db:
            result = db.execute(
                text("SELECT file_id, file_data, file_path FROM files WHERE file_id = :id"),
                {"id": file_id}
            )
            row = result.fetchone()

        if not row:
            raise NotFoundError("File not found")
        record = decode_file_metadata(row[0], row[1], row[2])
        if record.user_id != user_id:
            raise NotFoundError("File not found")
        return record

    def _delete_record(self, file_id: str) -> None:
        with get_db_session() as db:
            db.execute(text("DELETE FROM files WHERE file_id = :id"), {"id": file_id})

    # ============================================================
    # PROFILE PICTURE LINK
    # ============================================================

    def set_profile_picture_link(self, user_id: str, link: str) -> None:
        """Point the profile at a picture, creating a bare profile if needed."""
        with get_db_session() as db:
            result = db.execute(
                text("UPDATE profiles SET pfp_link = :link WHERE user_id = :uid"),
                {"link": link, "uid": user_id}
            )
            if result.rowcount == 0:
                db.execute(
                    text("INSERT INTO profiles (user_id, pfp_link) VALUES (:uid, :link)"),
                    {"uid": user_id, "link": link}
                )

    # ============================================================
    # UPLOADS
    # ============================================================

    def upload_profile_picture(self, user_id: str, incoming: Optional[IncomingFile]) -> dict:
        """
        Store a new profile picture and replace the previous one.

        With Pillow the stored image is a 300x300 JPEG plus a 150x150
        thumbnail; without it both are the uploaded bytes.
        """
        validate_file(incoming, "profilePic")
        try:
            variants = generate_profile_variants(incoming.content)
        except ValueError:
            raise ValidationError("Invalid image file")

        if variants.processed:
            mime_type, extension = "image/jpeg", ".jpg"
        else:
            mime_type = incoming.content_type
            extension = get_file_extension(incoming.filename) or ".jpg"

        previous = self.get_user_files(user_id, PROFILE_PIC)

        record = self._store(
            user_id, "profilePic", PROFILE_PIC, incoming,
            content=variants.primary,
            mime_type=mime_type,
            extension=extension,
            thumbnail=variants.thumbnail,
        )
        self.set_profile_picture_link(user_id, record.file_path)

        for old in previous:
            self._delete_record(old.file_id)
            self.remove_from_disk(old)

        return {**record.to_dict(), "message": "Profile picture uploaded successfully"}

    def upload_document(self, user_id: str, incoming: Optional[IncomingFile], document_type: str = "general") -> dict:
        validate_file(incoming, "document")
        document_type = (document_type or "general").strip() or "general"
        if len(document_type) > MAX_DOCUMENT_TYPE_LENGTH:
            raise ValidationError(f"Invalid document type: must be at most {MAX_DOCUMENT_TYPE_LENGTH} characters")
        if document_type in (PROFILE_PIC, RESUME):
            raise ValidationError(f"Invalid document type: {document_type}")
        record = self._store(
            user_id, "document", document_type, incoming,
            content=incoming.content,
            mime_type=incoming.content_type,
            extension=get_file_extension(incoming.filename),
        )
        return {**record.to_dict(), "documentType": record.file_type, "message": "Document uploaded successfully"}

    def upload_resume(self, user_id: str, incoming: Optional[IncomingFile]) -> dict:
        validate_file(incoming, "resume")
        record = self._store(
            user_id, "resume", RESUME, incoming,
            content=incoming.content,
            mime_type=incoming.content_type,
            extension=get_file_extension(incoming.filename),
        )
        return {**record.to_dict(), "message": "Resume uploaded successfully"}

    # ============================================================
    # QUERIES
    # ============================================================

    def get_profile_picture(self, user_id: str) -> dict:
        pictures = self.get_user_files(user_id, PROFILE_PIC)
        if pictures:
            return {**pictures[0].to_dict(), "isDefault": False}
        return {"filePath": DEFAULT_PROFILE_PICTURE, "thumbnailPath": None, "isDefault": True}

    def get_documents(self, user_id: str, document_type: Optional[str] = None) -> List[FileRecord]:
        if document_type:
            return self.get_user_files(user_id, document_type)
        return [f for f in self.get_user_files(user_id) if f.file_type not in (PROFILE_PIC, RESUME)]

    def get_statistics(self, user_id: str) -> dict:
        files = self.get_user_files(user_id)
        profile_pics = sum(1 for f in files if f.file_type == PROFILE_PIC)
        resumes = sum(1 for f in files if f.file_type == RESUME)
        return {
            "totalFiles": len(files),
            "profilePics": profile_pics,
            "resumes": resumes,
            "documents": len(files) - profile_pics - resumes,
            "totalSize": sum(f.file_size or 0 for f in files),
        }

    def read_content(self, file_id: str, user_id: str):
        """Return (record, bytes) for the content endpoint."""
        record = self.get_file(file_id, user_id)
        path = self.disk_path(record.file_path or "")
        if not record.file_path or not path.is_file():
            raise NotFoundError("File not found on disk")
        return record, path.read_bytes()

    # ============================================================
    # DELETES
    # ============================================================

    def delete_file(self, file_id: str, user_id: str) -> dict:
        record = self.get_file(file_id, user_id)
        self.remove_from_disk(record)
        self._delete_record(file_id)

        if record.file_type == PROFILE_PIC:
            with get_db_session() as db:
                db.execute(
                    text("UPDATE profiles SET pfp_link = :link WHERE user_id = :uid AND pfp_link = :old"),
                    {"link": DEFAULT_PROFILE_PICTURE, "uid": user_id, "old": record.file_path}
                )

        return {"message": "File deleted successfully", "fileId": file_id}

    def delete_user_files(self, user_id: str) -> int:
        """Remove every file record of a user and best-effort their disk files."""
        files = self.get_user_files(user_id)
        for record in files:
            self._delete_record(record.file_id)
            self.remove_from_disk(record)
        return len(files)


def get_file_service() -> FileService:
    return FileService()
