"""Local file storage: server-uploaded blobs and the public static root."""
import logging
import os
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
from fastapi import Request

logger = logging.getLogger(__name__)


class FileStorageService:
    """Handles blob read/write under the upload dir and lookups under the static root."""

    def __init__(self, upload_dir: str, static_root: str):
        self.base_path = Path(upload_dir)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.static_root = Path(static_root)

    async def save(self, file_bytes: bytes, original_name: str) -> str:
        """Save blob bytes. Returns the server path (a name relative to the upload dir)."""
        ext = Path(original_name).suffix
        filename = f"{uuid.uuid4()}{ext}"
        async with aiofiles.open(self.base_path / filename, "wb") as f:
            await f.write(file_bytes)
        return filename

    def upload_path(self, server_path: Optional[str]) -> Optional[Path]:
        """Existing blob for a server path, or None."""
        if not server_path:
            return None
        return self._existing_under(self.base_path, server_path)

    def static_path(self, file_url: Optional[str]) -> Optional[Path]:
        """Existing file under the static root for a site-relative URL, or None."""
        if not file_url:
            return None
        return self._existing_under(self.static_root, file_url.lstrip("/"))

    async def delete(self, server_path: str) -> bool:
        """Delete a blob. A blob that is already gone is not an error."""
        path = self._resolve_under(self.base_path, server_path)
        if path is None or not path.exists():
            logger.info(f"Blob already missing, nothing to delete: {server_path}")
            return False
        os.remove(path)
        return True

    @staticmethod
    def _resolve_under(root: Path, relative: str) -> Optional[Path]:
        root = root.resolve()
        candidate = (root / relative).resolve()
        # Anything escaping the root counts as missing
        if candidate != root and root not in candidate.parents:
            return None
        return candidate

    def _existing_under(self, root: Path, relative: str) -> Optional[Path]:
        candidate = self._resolve_under(root, relative)
        if candidate is None or not candidate.is_file():
            return None
        return candidate


def get_file_storage(request: Request) -> FileStorageService:
    """FastAPI dependency that returns the storage service built at startup."""
    return request.app.state.file_storage
