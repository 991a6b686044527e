"""Health check endpoints."""

from fastapi import APIRouter, Depends

from ..... import __version__
from .....core.ports import VectorStorePort
from ..deps import get_vector_store
from ..models import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic liveness check."""
    return HealthResponse(status="healthy", version=__version__, vector_store="not_checked")


@router.get("/ready", response_model=HealthResponse)
def readiness_check(vector_store: VectorStorePort = Depends(get_vector_store)) -> HealthResponse:
    """Readiness probe: checks that the vector store answers.

    Returns:
        HealthResponse with document and chunk counts, or the failure reason.
    """
    try:
        stats = vector_store.get_stats()
        vs_status = (
            f"connected ({stats.get('backend')}: {stats.get('documents', 0)} documents, "
            f"{stats.get('chunks', 0)} chunks)"
        )
        status = "ready"
    except Exception as e:
        vs_status = f"error: {type(e).__name__}"
        status = "degraded"

    return HealthResponse(status=status, version=__version__, vector_store=vs_status)
