"""Resolve a (file id, bearer token) pair into the right kind of access.

Per request: look the record up, check the bearer token against the record's
secure token, then dispatch on the record's access mode:

    external       -> redirect to fileUrl (not counted)
    local_pdf      -> inline application/pdf stream from the static root
    server_upload  -> attachment download from the upload dir

Byte-serving accesses are counted before the response is produced, so a
client disconnecting mid-stream still counts once and leaves the record intact.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import Request

from pitchvault.errors import NotFoundError, Unauthorized
from pitchvault.models.file_record import AccessMode, FileRecord
from pitchvault.services.file_storage import FileStorageService
from pitchvault.services.registry import FileRegistry
from pitchvault.services.tokens import extract_bearer, verify_token

logger = logging.getLogger(__name__)


@dataclass
class ResolvedAccess:
    mode: AccessMode
    record: FileRecord
    redirect_url: Optional[str] = None
    path: Optional[Path] = None
    media_type: str = "application/octet-stream"
    disposition: str = "attachment"


class AccessResolver:
    def __init__(self, registry: FileRegistry, storage: FileStorageService):
        self.registry = registry
        self.storage = storage

    def authorize(self, file_id: str, authorization: Optional[str]) -> FileRecord:
        """Lookup then bearer check. Raises NotFoundError or Unauthorized."""
        record = self.registry.get(file_id)
        if record is None:
            raise NotFoundError("File not found")

        token = extract_bearer(authorization)
        if token is None:
            raise Unauthorized("Invalid authorization")
        if not verify_token(record.secure_token, token):
            logger.warning(f"Invalid token presented for file {file_id}")
            raise Unauthorized("Invalid token")
        return record

    def describe(self, file_id: str, authorization: Optional[str]) -> dict:
        """Metadata view. Never touches access statistics."""
        record = self.authorize(file_id, authorization)
        return {
            "name": record.name,
            "type": record.content_type,
            "serverPath": record.server_path,
            "fileUrl": record.file_url,
            "isLocalFile": bool(record.is_local_file),
            "size": record.size,
        }

    async def resolve(self, file_id: str, authorization: Optional[str]) -> ResolvedAccess:
        record = self.authorize(file_id, authorization)
        mode = record.mode

        if mode == AccessMode.EXTERNAL:
            return ResolvedAccess(mode=mode, record=record, redirect_url=record.file_url)

        if mode == AccessMode.LOCAL_PDF:
            path = self.storage.static_path(record.file_url)
            if path is None:
                raise NotFoundError("File not found on server")
            record = await self.registry.record_access(record.id)
            return ResolvedAccess(
                mode=mode,
                record=record,
                path=path,
                media_type="application/pdf",
                disposition="inline",
            )

        if not record.server_path:
            raise NotFoundError("File not available for download")
        path = self.storage.upload_path(record.server_path)
        if path is None:
            raise NotFoundError("File not found on server")
        record = await self.registry.record_access(record.id)
        logger.info(f"Serving upload {record.id} (access #{record.access_count})")
        return ResolvedAccess(mode=mode, record=record, path=path)


def get_resolver(request: Request) -> AccessResolver:
    """FastAPI dependency wiring the resolver to the app's registry and storage."""
    return AccessResolver(request.app.state.registry, request.app.state.file_storage)
