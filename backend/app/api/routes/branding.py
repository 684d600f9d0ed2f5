"""Branding endpoints - read and merge-update user or client branding."""

import uuid
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from backend.app.api.auth import get_current_context
from backend.app.api.deps import get_branding_repository, get_document_stores
from backend.app.db.context import RequestContext
from backend.app.db.repositories import BrandingOwner, BrandingRepository
from backend.app.documents.service import DocumentStores
from backend.app.models.branding import BrandingProfile, BrandingUpdate
from backend.app.models.common import BrandingOwnerKind

router = APIRouter(prefix="/branding", tags=["branding"])


class BrandingResponse(BaseModel):
    """Stored branding; absent fields are null."""

    model_config = ConfigDict(populate_by_name=True)

    logo: str | None = None
    primary_color: str | None = Field(None, alias="primaryColor")
    secondary_color: str | None = Field(None, alias="secondaryColor")
    extra: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_profile(cls, profile: BrandingProfile | None) -> "BrandingResponse":
        """Build response from a stored profile (or nothing stored)."""
        if profile is None:
            return cls()
        return cls(
            logo=profile.logo,
            primary_color=profile.primary_color,
            secondary_color=profile.secondary_color,
            extra=dict(profile.extra),
        )


async def _authorize_owner(
    kind: BrandingOwnerKind,
    owner_id: uuid.UUID,
    ctx: RequestContext,
    stores: DocumentStores,
) -> BrandingOwner:
    """Admins reach any owner; users reach themselves and their own clients."""
    if not ctx.is_admin:
        if kind == BrandingOwnerKind.user and owner_id != ctx.user_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        if kind == BrandingOwnerKind.client:
            client = await stores.clients.get_client(owner_id)
            if client is None or client.user_id != ctx.user_id:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND, detail="Client not found"
                )

    return BrandingOwner(kind=kind, owner_id=owner_id)


@router.get("/{kind}/{owner_id}", response_model=BrandingResponse)
async def get_branding(
    kind: BrandingOwnerKind,
    owner_id: uuid.UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    stores: Annotated[DocumentStores, Depends(get_document_stores)],
    repo: Annotated[BrandingRepository, Depends(get_branding_repository)],
) -> BrandingResponse:
    """Read stored branding for a user or client."""
    owner = await _authorize_owner(kind, owner_id, ctx, stores)
    return BrandingResponse.from_profile(await repo.get_branding(owner))


@router.patch("/{kind}/{owner_id}", response_model=BrandingResponse)
async def update_branding(
    kind: BrandingOwnerKind,
    owner_id: uuid.UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    stores: Annotated[DocumentStores, Depends(get_document_stores)],
    repo: Annotated[BrandingRepository, Depends(get_branding_repository)],
    payload: Annotated[dict[str, Any], Body()],
) -> BrandingResponse:
    """Merge a partial branding update; omitted fields stay unchanged."""
    try:
        update = BrandingUpdate.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=[{"loc": err["loc"], "msg": err["msg"]} for err in e.errors()],
        ) from e

    owner = await _authorize_owner(kind, owner_id, ctx, stores)
    return BrandingResponse.from_profile(await repo.update_branding(owner, update))
