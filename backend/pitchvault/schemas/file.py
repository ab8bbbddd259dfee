"""File registry request/response schemas."""
from typing import Any, Optional

from pitchvault.schemas.base import CamelModel


class FileCreate(CamelModel):
    name: Optional[str] = None
    file_url: Optional[str] = None
    is_local_file: bool = False
    admin_token: Optional[str] = None


class FileRename(CamelModel):
    # Location fields are fixed at creation; anything but a name is rejected
    model_config = {**CamelModel.model_config, "extra": "forbid"}

    name: str
    admin_token: Optional[str] = None


class BulkReplace(CamelModel):
    # Left untyped so a non-array gets the registry's own 400
    files: Any = None
    admin_token: Optional[str] = None


class FileCreatedResponse(CamelModel):
    success: bool = True
    file_id: str
    secure_token: str
    share_url: str
    message: str


class FileMetadataResponse(CamelModel):
    name: str
    type: str
    server_path: Optional[str] = None
    file_url: Optional[str] = None
    is_local_file: bool = False
    size: int = 0
