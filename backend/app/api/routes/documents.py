"""Client document endpoints - generate a versioned DOCX, list version history."""

import uuid
from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from backend.app.api.auth import get_current_context, require_admin
from backend.app.api.deps import enforce_rate_limit, get_document_stores
from backend.app.config import Settings, get_settings
from backend.app.db.context import RequestContext
from backend.app.documents.service import DocumentStores, generate_document
from backend.app.documents.versioning import base_title

router = APIRouter(prefix="/clients/{client_id}/documents", tags=["documents"])

_ERROR_STATUS = {
    "input_validation": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "client_not_found": status.HTTP_404_NOT_FOUND,
    "encoding": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "persistence": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class HistoryEntryResponse(BaseModel):
    """One entry of a client's document history."""

    name: str
    base_title: str
    type: str
    storage_ref: str | None
    created_at: datetime
    version: int
    content_snippet: str | None


class HistoryResponse(BaseModel):
    """Response for GET /clients/{client_id}/documents."""

    client_id: str
    documents: list[HistoryEntryResponse]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(enforce_rate_limit)],
)
async def create_document(
    client_id: uuid.UUID,
    ctx: Annotated[RequestContext, Depends(require_admin)],
    stores: Annotated[DocumentStores, Depends(get_document_stores)],
    settings: Annotated[Settings, Depends(get_settings)],
    payload: Annotated[dict[str, Any], Body()],
) -> JSONResponse:
    """Generate the next version of a business-plan document for a client.

    Body: title, sections[{title, content, level}], optional primaryColor,
    secondaryColor and logo overrides. The body is validated by the
    generation service so that every failure has the same
    {success: false, error} shape.

    Returns:
        201 with {success, downloadRef, filename, version, message}, or the
        failure payload with 422/404/500
    """
    result = await generate_document(
        {**payload, "clientId": str(client_id)},
        ctx=ctx,
        stores=stores,
        settings=settings,
    )

    if result.success:
        status_code = status.HTTP_201_CREATED
    else:
        status_code = _ERROR_STATUS.get(
            result.error_kind or "", status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return JSONResponse(content=result.to_payload(), status_code=status_code)


@router.get("", response_model=HistoryResponse)
async def list_documents(
    client_id: uuid.UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    stores: Annotated[DocumentStores, Depends(get_document_stores)],
) -> HistoryResponse:
    """List a client's generated documents, newest first."""
    client = await stores.clients.get_client(client_id)
    if client is None or (not ctx.is_admin and client.user_id != ctx.user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")

    entries = await stores.history.list_history(client_id)

    return HistoryResponse(
        client_id=str(client_id),
        documents=[
            HistoryEntryResponse(
                name=entry.name,
                base_title=base_title(entry.name),
                type=entry.type.value,
                storage_ref=entry.storage_ref,
                created_at=entry.created_at,
                version=entry.version or 1,
                content_snippet=entry.content_snippet,
            )
            for entry in reversed(entries)
        ],
    )
