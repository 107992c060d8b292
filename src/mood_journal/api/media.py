"""Private media endpoint."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse

from mood_journal.api.dependencies import get_container, require_user
from mood_journal.domain.errors import NotFound
from mood_journal.services.media import media_type_for
from mood_journal.services.tokens import TokenClaims

router = APIRouter(tags=["media"])

_MEDIA_HEADERS = {
    "Content-Disposition": "inline",
    "X-Content-Type-Options": "nosniff",
    "Content-Security-Policy": "default-src 'self'",
}


@router.get("/uploads/{filename}")
def get_upload(
    filename: str, request: Request, claims: TokenClaims = Depends(require_user)
) -> FileResponse:
    """Serve a stored photo to its owner."""
    container = get_container(request)
    # Prefix first so non-owners cannot probe which files exist.
    container.access_guard.ensure_allowed(claims.user_id, filename)
    if not container.media_storage.exists(filename):
        raise NotFound("File not found")
    return FileResponse(
        container.media_storage.path_for(filename),
        media_type=media_type_for(filename),
        headers=_MEDIA_HEADERS,
    )
