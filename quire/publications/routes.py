"""
Publication routes.

Anyone can list publications (the submission form needs them before
login). Only admins add new ones.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from quire.api.deps import Page, get_page, get_storage
from quire.auth.access import AuthTier
from quire.auth.policies import require
from quire.core.models import Identity, Publication
from quire.storage.base import Collections, StorageProvider

router = APIRouter(prefix="/api/publications", tags=["publications"])


class CreatePublicationRequest(BaseModel):
    title: str = Field(min_length=1)


@router.get("")
async def list_publications(
    page: Page = Depends(get_page),
    storage: StorageProvider = Depends(get_storage),
):
    docs = await storage.documents.query(Collections.PUBLICATIONS, limit=page.limit, offset=page.offset)
    return [Publication.model_validate(doc).serialize() for doc in docs]


@router.post("", status_code=201)
async def create_publication(
    request: CreatePublicationRequest,
    identity: Identity = Depends(require(AuthTier.ADMIN_ONLY)),
    storage: StorageProvider = Depends(get_storage),
):
    publication = Publication(title=request.title.strip())
    await storage.documents.save(Collections.PUBLICATIONS, publication.id, publication.model_dump())
    return {"id": publication.id, "title": publication.title}
