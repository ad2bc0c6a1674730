"""
Visualization API endpoints.

Routes:
- POST /api/visualize/generate - Generate and store a new visualization set
- GET /api/visualize - List visualization set summaries
- GET /api/visualize/{set_id} - Full visualization set
- DELETE /api/visualize/{set_id} - Delete a visualization set

Dependencies: kb_backend.application.services.visualization_service
System role: Visualization HTTP API
"""

from fastapi import APIRouter, Depends

from kb_backend.api.deps import get_visualization_service, verify_api_key
from kb_backend.application.services.visualization_service import VisualizationService

router = APIRouter(prefix="/api/visualize", tags=["visualization"], dependencies=[Depends(verify_api_key)])


@router.post("/generate")
async def generate_visualizations(
    service: VisualizationService = Depends(get_visualization_service),
) -> dict:
    """Generate four charts from the knowledge base and return the set summary."""
    response = await service.generate()
    return response.to_json_dict()


@router.get("")
async def list_visualization_sets(
    service: VisualizationService = Depends(get_visualization_service),
) -> dict:
    return await service.list_sets()


@router.get("/{set_id}")
async def get_visualization_set(
    set_id: str,
    service: VisualizationService = Depends(get_visualization_service),
) -> dict:
    """
    Raises:
        VisualizationNotFoundError(404): Unknown id
    """
    return await service.get_set(set_id)


@router.delete("/{set_id}")
async def delete_visualization_set(
    set_id: str,
    service: VisualizationService = Depends(get_visualization_service),
) -> dict:
    return await service.delete_set(set_id)
