"""
Cutoff rules API routes.

Admin read/write of per-location cutoff rules, plus the live cutoff
status used by the header countdown and the ship date promise check.
"""

from typing import Optional
from datetime import date, datetime
from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
import structlog

from models.cutoff_rules import (
    CutoffDisplay,
    Division,
    LocationCutoffRuleSet,
    LocationCutoffRuleSetList,
    LocationCutoffRuleSetUpdate,
    PromiseEvaluation,
)
from services.cutoff_rules_service import get_cutoff_rules_service
from services.cutoff_service import get_cutoff_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# READ
# ===================

@router.get("", response_model=LocationCutoffRuleSetList)
async def list_cutoff_rules():
    """Get cutoff rules for all locations."""
    try:
        service = get_cutoff_rules_service()
        return LocationCutoffRuleSetList(data=service.list_all())
    except Exception as e:
        return handle_error(e)


@router.get("/{location_id}", response_model=LocationCutoffRuleSet)
async def get_cutoff_rules(location_id: str):
    """
    Get cutoff rules for one location.

    Raises:
        404: No rules configured for the location
    """
    try:
        service = get_cutoff_rules_service()
        return service.get(location_id)
    except Exception as e:
        return handle_error(e)


@router.get("/{location_id}/status", response_model=CutoffDisplay)
async def get_cutoff_status(
    location_id: str,
    division: Division = Query(Division.METALS, description="Division to evaluate"),
    at: Optional[datetime] = Query(None, description="Evaluate at this instant instead of now")
):
    """
    Current next-day cutoff status for a location/division.

    A location without rules returns the YELLOW "unavailable" display
    rather than an error.
    """
    try:
        service = get_cutoff_service()
        return service.get_display(location_id, division, at)
    except Exception as e:
        return handle_error(e)


@router.get("/{location_id}/promise", response_model=PromiseEvaluation)
async def get_ship_date_promise(
    location_id: str,
    division: Division = Query(Division.METALS, description="Division to evaluate"),
    ship_date: Optional[date] = Query(None, description="Requested local ship date (default tomorrow)"),
    at: Optional[datetime] = Query(None, description="Evaluate at this instant instead of now")
):
    """
    Can the location ship on the requested date?

    Returns the reasons it cannot, the earliest valid ship date and up
    to three suggested dates. A location without rules returns YELLOW
    with reason NO_RULES.
    """
    try:
        service = get_cutoff_service()
        return service.evaluate_promise(location_id, division, ship_date, at)
    except Exception as e:
        return handle_error(e)


# ===================
# WRITE
# ===================

@router.put("/{location_id}", response_model=LocationCutoffRuleSet)
async def update_cutoff_rules(location_id: str, data: LocationCutoffRuleSetUpdate):
    """
    Create or update cutoff rules for a location.

    Last write wins.

    Raises:
        422: Malformed cutoff time, unknown time zone or bad blackout window
    """
    try:
        service = get_cutoff_rules_service()
        return service.update(location_id, data)
    except Exception as e:
        return handle_error(e)
