"""Endpoints for saving, listing and deleting pages."""

import logging

from fastapi import APIRouter, Depends, status

from .....core.services.ingestion_service import IngestionService
from ..deps import get_current_user, get_ingestion_service
from ..models import DeleteResponse, DocumentInfo, ErrorResponse, IngestRequest, IngestResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["documents"])


@router.post(
    "/ingest",
    response_model=IngestResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid URL"},
        401: {"model": ErrorResponse, "description": "Unauthenticated"},
        500: {"model": ErrorResponse, "description": "Scraping, embedding or storage failure"},
    },
)
def ingest(
    body: IngestRequest,
    owner_id: str = Depends(get_current_user),
    service: IngestionService = Depends(get_ingestion_service),
) -> IngestResponse:
    """Scrape a URL and add it to the caller's corpus."""
    result = service.ingest(body.url, owner_id)
    return IngestResponse(
        document=DocumentInfo.from_domain(result.document),
        chunk_count=result.chunk_count,
    )


@router.get("/documents", response_model=list[DocumentInfo])
def list_documents(
    owner_id: str = Depends(get_current_user),
    service: IngestionService = Depends(get_ingestion_service),
) -> list[DocumentInfo]:
    """The caller's saved pages, newest first."""
    return [DocumentInfo.from_domain(doc) for doc in service.list_documents(owner_id)]


@router.delete(
    "/documents/{document_id}",
    response_model=DeleteResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Unauthenticated"},
        404: {"model": ErrorResponse, "description": "No such document for this user"},
    },
)
def delete_document(
    document_id: str,
    owner_id: str = Depends(get_current_user),
    service: IngestionService = Depends(get_ingestion_service),
) -> DeleteResponse:
    """Delete a saved page and all of its chunks."""
    service.delete(document_id, owner_id)
    return DeleteResponse()
