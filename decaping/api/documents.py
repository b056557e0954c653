"""Reference document listing. Files themselves live elsewhere; only their URLs are kept."""

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends

from decaping.api.dependencies import get_current_user, get_store
from decaping.api.schemas import CamelModel
from decaping.core.errors import NotFoundError
from decaping.core.security import AuthUser
from decaping.store.entity_store import EntityStore

router = APIRouter(prefix="/documents", tags=["documents"])


class DocumentResponse(CamelModel):
    id: int
    title: str
    description: str
    file_type: str
    file_size: float
    last_updated: datetime
    download_url: str
    category: str


@router.get("", response_model=List[DocumentResponse])
def list_documents(
    user: AuthUser = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    return store.documents.list()


@router.get("/{document_id}", response_model=DocumentResponse)
def get_document(
    document_id: int,
    user: AuthUser = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    document = store.documents.get(document_id)
    if not document:
        raise NotFoundError("Document")
    return document
