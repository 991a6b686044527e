"""Similarity graph endpoint."""

from fastapi import APIRouter, Depends, Query

from .....config import settings
from .....core.services.graph_service import GraphService
from ..deps import get_current_user, get_graph_service
from ..models import ErrorResponse, GraphResponse

router = APIRouter(prefix="/api/v1", tags=["graph"])


@router.get(
    "/graph",
    response_model=GraphResponse,
    responses={401: {"model": ErrorResponse, "description": "Unauthenticated"}},
)
def graph_data(
    threshold: float = Query(
        default=settings.graph_threshold,
        description="Only link documents whose similarity is strictly above this value",
    ),
    owner_id: str = Depends(get_current_user),
    service: GraphService = Depends(get_graph_service),
) -> GraphResponse:
    """Nodes for the caller's documents and links between similar ones."""
    graph = service.build_graph(owner_id, threshold=threshold)
    return GraphResponse.model_validate(graph.to_dict())
