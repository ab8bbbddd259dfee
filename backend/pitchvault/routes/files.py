"""File registry API routes."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File as FastAPIFile, Form, UploadFile

from pitchvault.config import Settings, get_settings
from pitchvault.database import get_registry
from pitchvault.errors import InternalError, NotFoundError, ValidationError
from pitchvault.models.file_record import AccessMode, FileRecord
from pitchvault.schemas.common import SuccessResponse
from pitchvault.schemas.file import BulkReplace, FileCreate, FileCreatedResponse, FileRename
from pitchvault.services.auth import require_admin
from pitchvault.services.file_storage import FileStorageService, get_file_storage
from pitchvault.services.registry import FileRegistry, utc_now_iso
from pitchvault.services.tokens import generate_secure_token, new_file_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["files"])

# Paths the earlier admin client still calls
legacy_router = APIRouter(tags=["files"])


@router.get("")
async def list_files(registry: FileRegistry = Depends(get_registry)):
    """List every registered file. Open to anyone; tokens gate the content."""
    return [r.to_view() for r in registry.list()]


@router.post("", response_model=FileCreatedResponse, dependencies=[Depends(require_admin)])
async def create_file(
    body: FileCreate,
    registry: FileRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
):
    """Register an external URL or a PDF in the static root."""
    name = (body.name or "").strip()
    file_url = (body.file_url or "").strip()
    if not name or not file_url:
        raise ValidationError("File name and URL are required")

    record = _new_record(name=name, file_url=file_url, is_local_file=body.is_local_file)
    await registry.append(record)
    logger.info(f"Registered {record.mode.value} file {record.id} ({record.name})")

    message = "Local PDF added successfully" if body.is_local_file else "External file added successfully"
    return _created(record, message, settings)


@router.post("/upload", response_model=FileCreatedResponse, dependencies=[Depends(require_admin)])
async def upload_file(
    file: UploadFile = FastAPIFile(...),
    name: Optional[str] = Form(None),
    registry: FileRegistry = Depends(get_registry),
    storage: FileStorageService = Depends(get_file_storage),
    settings: Settings = Depends(get_settings),
):
    """Store an uploaded file on the server and register it for counted download."""
    contents = await file.read()
    if not contents:
        raise ValidationError("Uploaded file is empty")
    if len(contents) > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise ValidationError(f"File too large. Maximum size is {limit_mb}MB.")

    display_name = (name or "").strip() or file.filename or "unnamed"
    server_path = await storage.save(contents, file.filename or "unnamed")

    record = _new_record(name=display_name, server_path=server_path, size=len(contents))
    await registry.append(record)
    logger.info(f"Stored upload {record.id} as {server_path} ({record.size} bytes)")
    return _created(record, "File uploaded successfully", settings)


@router.post("/bulk", response_model=SuccessResponse, dependencies=[Depends(require_admin)])
async def replace_files(
    body: BulkReplace,
    registry: FileRegistry = Depends(get_registry),
):
    """Replace the whole files list with the one supplied."""
    await registry.replace_all(body.files)
    return SuccessResponse(message="Files list updated")


legacy_router.add_api_route(
    "/pitch-deck/files",
    replace_files,
    methods=["POST"],
    response_model=SuccessResponse,
    dependencies=[Depends(require_admin)],
)


@router.patch("/{file_id}", dependencies=[Depends(require_admin)])
async def rename_file(
    file_id: str,
    body: FileRename,
    registry: FileRegistry = Depends(get_registry),
):
    """Rename a file. Its location and access mode never change after creation."""
    record = await registry.rename(file_id, body.name)
    return record.to_view()


@router.delete("/{file_id}", response_model=SuccessResponse, dependencies=[Depends(require_admin)])
async def delete_file(
    file_id: str,
    registry: FileRegistry = Depends(get_registry),
    storage: FileStorageService = Depends(get_file_storage),
):
    """Delete a file record, and its blob when the server owns one."""
    record = registry.get(file_id)
    if record is None:
        raise NotFoundError("File not found")

    # External URLs and static-root PDFs are never removed from storage
    if record.mode == AccessMode.SERVER_UPLOAD and record.server_path:
        try:
            await storage.delete(record.server_path)
        except OSError as e:
            logger.error(f"Error deleting blob for {file_id}: {e}")
            raise InternalError("Delete failed") from e

    await registry.remove_by_id(file_id)
    logger.info(f"Deleted file {file_id}")
    return SuccessResponse(message="File deleted")


def _new_record(name: str, **fields) -> FileRecord:
    file_id = new_file_id()
    now = utc_now_iso()
    values = {
        "id": file_id,
        "name": name,
        "size": 0,
        "upload_date": now,
        "access_count": 0,
        "secure_token": generate_secure_token(file_id),
    }
    values.update(fields)
    return FileRecord(**values)


def _created(record: FileRecord, message: str, settings: Settings) -> FileCreatedResponse:
    return FileCreatedResponse(
        file_id=record.id,
        secure_token=record.secure_token,
        share_url=share_url(record, settings.PUBLIC_BASE_URL),
        message=message,
    )


def share_url(record: FileRecord, base_url: str) -> str:
    """The client-side access link the admin hands out."""
    base = base_url.rstrip("/")
    return f"{base}/#/pitch-deck-access/{record.secure_token}/{record.id}"
