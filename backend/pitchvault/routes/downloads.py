"""Token-gated access routes used by shared pitch deck links."""
from typing import Optional

from fastapi import APIRouter, Depends, Header
from fastapi.responses import FileResponse, RedirectResponse

from pitchvault.models.file_record import AccessMode
from pitchvault.schemas.file import FileMetadataResponse
from pitchvault.services.access_resolver import AccessResolver, get_resolver

router = APIRouter(prefix="/download", tags=["downloads"])


@router.get("/{file_id}", response_model=FileMetadataResponse)
async def get_file_metadata(
    file_id: str,
    authorization: Optional[str] = Header(None),
    resolver: AccessResolver = Depends(get_resolver),
):
    """Describe a file to a token holder without counting an access."""
    return resolver.describe(file_id, authorization)


@router.get("/{file_id}/download")
async def download_file(
    file_id: str,
    authorization: Optional[str] = Header(None),
    resolver: AccessResolver = Depends(get_resolver),
):
    """Redirect to, view inline, or download the file depending on how it is stored."""
    access = await resolver.resolve(file_id, authorization)

    if access.mode == AccessMode.EXTERNAL:
        return RedirectResponse(access.redirect_url, status_code=302)

    return FileResponse(
        path=access.path,
        filename=access.record.name,
        media_type=access.media_type,
        content_disposition_type=access.disposition,
    )
