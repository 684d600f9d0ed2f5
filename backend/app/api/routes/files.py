"""Generated file retrieval - GET /files/{ref}."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from backend.app.api.deps import get_artifact_store
from backend.app.db.repositories import ArtifactStore

router = APIRouter(prefix="/files", tags=["files"])


@router.get("/{ref}")
async def download_file(
    ref: str,
    artifacts: Annotated[ArtifactStore, Depends(get_artifact_store)],
) -> Response:
    """Serve a generated file as an attachment.

    Returns:
        Binary payload with the stored Content-Type; 404 for unknown or
        expired references
    """
    artifact = await artifacts.fetch(ref)

    if artifact is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    return Response(
        content=artifact.data,
        media_type=artifact.content_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )
