"""Mood entry endpoints, including photo upload."""

import asyncio
import logging
import tempfile
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile

from mood_journal.api.dependencies import get_container, rate_limited, require_user
from mood_journal.api.schemas import MoodEntryRequest
from mood_journal.domain.errors import InvalidMedia, MediaTooLarge, ValidationError
from mood_journal.services.rate_limit import (
    CREATE_ENTRY_POLICY,
    EDIT_ENTRY_POLICY,
    UPLOAD_POLICY,
)
from mood_journal.services.sniffer import is_allowed_declared_type
from mood_journal.services.tokens import TokenClaims

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mood-entry", tags=["mood-entry"])

_CHUNK_SIZE = 64 * 1024
# Room for multipart boundaries and the small form fields around the file.
_MULTIPART_OVERHEAD = 64 * 1024


@router.post("")
def create_entry(
    payload: MoodEntryRequest,
    request: Request,
    claims: TokenClaims = Depends(rate_limited(CREATE_ENTRY_POLICY)),
) -> dict[str, object]:
    """Create a new mood entry for the caller."""
    entry = get_container(request).entry_service.create(
        user_id=claims.user_id,
        description=payload.description,
        mood=payload.mood,
        photo_url=payload.photo_url,
    )
    return {"entry": entry.to_payload()}


@router.get("/user")
def current_entry(
    request: Request, claims: TokenClaims = Depends(require_user)
) -> dict[str, object]:
    """Return the caller's most recent entry, or null."""
    entry = get_container(request).entry_service.get_current(claims.user_id)
    return {"entry": entry.to_payload() if entry else None}


@router.post("/upload")
async def upload_photo(
    request: Request,
    claims: TokenClaims = Depends(rate_limited(UPLOAD_POLICY)),
) -> dict[str, object]:
    """Accept a photo, verify it and attach it to the caller's entry."""
    container = get_container(request)
    limit = container.settings.max_upload_bytes
    _reject_oversized_request(request, limit)

    async with request.form(max_files=1, max_fields=4) as form:
        upload = form.get("photo")
        if not isinstance(upload, UploadFile):
            raise ValidationError("No file uploaded")
        if not is_allowed_declared_type(upload.content_type):
            raise InvalidMedia("Invalid file type")
        entry_id = _parse_entry_id(form.get("entry_id"))
        temp_path = await _spool_to_temp(upload, container.settings.temp_dir, limit)

    try:
        result = await asyncio.to_thread(
            container.upload_reconciler.reconcile,
            claims.user_id,
            temp_path,
            entry_id,
        )
    finally:
        temp_path.unlink(missing_ok=True)
    return {"photo_url": result.filename, "entry_id": result.entry_id}


@router.put("/{entry_id}")
def update_entry(
    entry_id: int,
    payload: MoodEntryRequest,
    request: Request,
    claims: TokenClaims = Depends(rate_limited(EDIT_ENTRY_POLICY)),
) -> dict[str, object]:
    """Edit one of the caller's entries."""
    entry = get_container(request).entry_service.update(
        user_id=claims.user_id,
        entry_id=entry_id,
        description=payload.description,
        mood=payload.mood,
        photo_url=payload.photo_url,
    )
    return {"entry": entry.to_payload()}


def _reject_oversized_request(request: Request, limit: int) -> None:
    """Refuse uploads whose declared length already exceeds the cap."""
    declared = request.headers.get("content-length")
    if declared is None:
        return
    try:
        length = int(declared)
    except ValueError as exc:
        raise ValidationError("Invalid Content-Length") from exc
    if length > limit + _MULTIPART_OVERHEAD:
        raise MediaTooLarge("File too large")


def _parse_entry_id(raw: object) -> int | None:
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str) or not raw.isdigit():
        raise ValidationError("Invalid entry id")
    return int(raw)


async def _spool_to_temp(upload: UploadFile, temp_dir: Path, limit: int) -> Path:
    """Copy an upload to a private temp file, enforcing the size cap."""
    temp_dir.mkdir(parents=True, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(dir=temp_dir, prefix="upload-", delete=False)
    path = Path(handle.name)
    written = 0
    try:
        with handle:
            while chunk := await upload.read(_CHUNK_SIZE):
                written += len(chunk)
                if written > limit:
                    logger.info("Rejected oversized upload", extra={"bytes": written})
                    raise MediaTooLarge("File too large")
                handle.write(chunk)
    except BaseException:
        path.unlink(missing_ok=True)
        raise
    return path
