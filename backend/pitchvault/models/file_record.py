"""FileRecord model - pitch deck metadata (bytes live at a URL, in the static root or in uploads)."""
from enum import Enum
from typing import Optional

from pydantic import Field

from pitchvault.schemas.base import CamelModel


class AccessMode(str, Enum):
    EXTERNAL = "external"
    LOCAL_PDF = "local_pdf"
    SERVER_UPLOAD = "server_upload"


class FileRecord(CamelModel):
    """One registered file.

    Stored and listed with camelCase keys. Only fields that were explicitly
    set are serialized, so records written through a bulk replace list back
    exactly as they were supplied.
    """

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    size: int = 0
    upload_date: Optional[str] = None
    created_at: Optional[str] = None
    access_count: int = Field(default=0, ge=0)
    last_accessed: Optional[str] = None
    secure_token: Optional[str] = None
    file_url: Optional[str] = None
    is_local_file: Optional[bool] = None
    server_path: Optional[str] = None

    @property
    def mode(self) -> AccessMode:
        if self.file_url:
            return AccessMode.LOCAL_PDF if self.is_local_file else AccessMode.EXTERNAL
        return AccessMode.SERVER_UPLOAD

    @property
    def content_type(self) -> str:
        mode = self.mode
        if mode == AccessMode.LOCAL_PDF:
            return "application/pdf"
        if mode == AccessMode.EXTERNAL:
            return "external"
        return "application/octet-stream"

    def to_view(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)
