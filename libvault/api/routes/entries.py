from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from libvault.api.deps import get_current_user, get_entry_service
from libvault.api.errors import DOMAIN_ERRORS, http_error_for, missing_parameter
from libvault.api.schemas.entries import FileInfoResponse, file_info_to_response
from libvault.core.config import get_settings
from libvault.entries.service import EntryService
from libvault.users.types import UserSnapshot

router = APIRouter(prefix="/libraries/{library_id}/entries", tags=["entries"])


def content_disposition(filename: str) -> str:
    # Control characters would split the header; only filename* carries them.
    printable = "".join("_" if ord(char) < 0x20 or ord(char) == 0x7F else char for char in filename)
    fallback = printable.encode("ascii", "replace").decode("ascii")
    escaped = fallback.replace("\\", "\\\\").replace('"', '\\"')
    if fallback == filename:
        return f'attachment; filename="{escaped}"'
    return f"attachment; filename=\"{escaped}\"; filename*=UTF-8''{quote(filename)}"


@router.get("", response_model=list[FileInfoResponse])
def list_entries(
    library_id: int,
    parent: str | None = Query(default=None, description="Directory whose children are listed"),
    path: str | None = Query(default=None, description="Exact entry to describe"),
    user: UserSnapshot = Depends(get_current_user),
    service: EntryService = Depends(get_entry_service),
) -> list[FileInfoResponse]:
    if parent is not None and path is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Use either parent or path, not both")

    try:
        items = service.list_entries(user, library_id, parent=parent, path=path)
    except DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc

    return [file_info_to_response(item) for item in items]


@router.get("/download")
def download_entry(
    library_id: int,
    path: str | None = None,
    user: UserSnapshot = Depends(get_current_user),
    service: EntryService = Depends(get_entry_service),
) -> StreamingResponse:
    if not path:
        raise missing_parameter("path")

    try:
        download = service.open_entry(user, library_id, path)
    except DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc

    # content-type goes in explicitly so Starlette does not append a charset.
    headers = {
        "Content-Type": download.content_type,
        "Content-Disposition": content_disposition(download.filename),
    }
    return StreamingResponse(
        download.iter_chunks(get_settings().download_chunk_bytes),
        headers=headers,
        background=BackgroundTask(download.close),
    )


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(
    library_id: int,
    path: str | None = None,
    user: UserSnapshot = Depends(get_current_user),
    service: EntryService = Depends(get_entry_service),
) -> Response:
    if not path:
        raise missing_parameter("path")

    try:
        service.delete_entry(user, library_id, path)
    except DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc

    return Response(status_code=status.HTTP_204_NO_CONTENT)
