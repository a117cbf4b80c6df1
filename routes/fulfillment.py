"""
Fulfillment API routes.

Branch-to-branch comparison for an order: ranked suggestions with
reason codes, best branch first.
"""

from typing import Optional
from fastapi import APIRouter, Query
import structlog

from models.cutoff_rules import Division
from models.fulfillment import (
    FulfillmentSuggestion,
    RankBranchesRequest,
    RankBranchesResponse,
)
from routes.cutoff_rules import handle_error
from services.fulfillment_service import get_fulfillment_service

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/compare", response_model=RankBranchesResponse)
async def compare_branches(request: RankBranchesRequest):
    """
    Rank every branch for fulfilling an order.

    Scores each branch on inventory, time to cutoff, processing
    capability and distance to the ship-to point. Returns the full
    ordered list so alternatives stay visible.
    """
    try:
        service = get_fulfillment_service()
        result = await service.rank(request)
        return RankBranchesResponse(
            request_id=result.context.request_id,
            evaluated_at=result.context.now.isoformat(),
            suggestions=result.suggestions,
        )
    except Exception as e:
        return handle_error(e)


@router.get("/branches/{location_id}", response_model=FulfillmentSuggestion)
async def get_branch_suitability(
    location_id: str,
    division: Division = Query(Division.METALS),
    required_processing: Optional[list[str]] = Query(None, description="Operations the order needs")
):
    """
    One branch's fulfillment suitability.

    Raises:
        404: Branch not in the directory
    """
    try:
        service = get_fulfillment_service()
        request = RankBranchesRequest(division=division, required_processing=required_processing or [])
        return await service.get_branch_suitability(location_id, request)
    except Exception as e:
        return handle_error(e)
