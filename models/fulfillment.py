"""
Fulfillment ranking schemas.

BranchFacts is the snapshot a candidate branch is scored from.
FulfillmentSuggestion is one ranked row of the comparison result.
"""

from pydantic import Field, field_validator
from typing import Optional
from enum import Enum

from models.base import BaseSchema
from models.cutoff_rules import Division


class ReasonImpact(str, Enum):
    """How a reason code moves the suggestion."""
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class ReasonCode(str, Enum):
    """Explanations attached to each score component."""
    # Inventory
    INV_OK = "INV_OK"
    INV_NONE = "INV_NONE"
    INV_UNKNOWN = "INV_UNKNOWN"
    # Cutoff
    CUTOFF_OK = "CUTOFF_OK"
    CUTOFF_SOON = "CUTOFF_SOON"
    CUTOFF_PASSED = "CUTOFF_PASSED"
    CUTOFF_BLACKOUT = "CUTOFF_BLACKOUT"
    CUTOFF_NON_SHIP_DAY = "CUTOFF_NON_SHIP_DAY"
    CUTOFF_UNKNOWN = "CUTOFF_UNKNOWN"
    # Processing
    PROC_OK = "PROC_OK"
    PROC_MISSING = "PROC_MISSING"
    # Distance
    DIST = "DIST"
    DIST_UNKNOWN = "DIST_UNKNOWN"


class GeoCoordinate(BaseSchema):
    """Latitude/longitude in decimal degrees."""
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class DivisionInventory(BaseSchema):
    """On-hand snapshot for one division at one branch."""
    qty_on_hand: int = Field(0, ge=0, description="On-hand pieces")
    weight_lbs: float = Field(0, ge=0, description="On-hand weight")
    sku_count: int = Field(0, ge=0)


class BranchProfile(BaseSchema):
    """Directory entry for a branch: where it is and what it can process."""
    location_id: str
    name: str
    csr_key: Optional[str] = Field(None, description="Location key used by order intake")
    state: Optional[str] = None
    coordinate: Optional[GeoCoordinate] = None
    capabilities: list[str] = Field(default_factory=list, description="Processing operations, e.g. SAW")

    @field_validator("capabilities")
    @classmethod
    def capabilities_uppercase(cls, v: list[str]) -> list[str]:
        """Capabilities compare case-insensitively."""
        return [c.strip().upper() for c in v if c and c.strip()]


class BranchFacts(BaseSchema):
    """
    Everything the scorers need about one candidate.

    inventory is None when the snapshot could not be fetched.
    """
    profile: BranchProfile
    inventory: Optional[dict[Division, DivisionInventory]] = None

    @property
    def location_id(self) -> str:
        return self.profile.location_id


class Reason(BaseSchema):
    """Human-readable explanation of a score component."""
    code: ReasonCode
    label: str
    impact: ReasonImpact


class ComponentScores(BaseSchema):
    """Per-component points; the total is their sum."""
    inventory: int = 0
    cutoff: int = 0
    processing: int = 0
    distance: int = 0

    @property
    def total(self) -> int:
        return self.inventory + self.cutoff + self.processing + self.distance


class InventoryDetail(BaseSchema):
    available: bool
    known: bool = True
    total_qty: int = 0
    total_weight: float = 0


class CutoffDetail(BaseSchema):
    cutoff_local: Optional[str] = None
    minutes_left: Optional[int] = None
    cutoff_met: bool = False
    is_valid_ship_day: bool = False
    is_blacked_out: bool = False


class ProcessingDetail(BaseSchema):
    capable: bool
    missing_ops: list[str] = Field(default_factory=list)


class DistanceDetail(BaseSchema):
    miles: Optional[int] = None
    estimate_label: str = "Unknown"


class FulfillmentSuggestion(BaseSchema):
    """One ranked candidate branch."""

    location_id: str
    location_name: str
    csr_key: Optional[str] = None
    rank: int = Field(..., ge=1, description="1-based dense rank")
    total_score: int
    is_recommended: bool
    reasons: list[Reason]
    component_scores: ComponentScores
    inventory: InventoryDetail
    cutoff: CutoffDetail
    processing: ProcessingDetail
    distance: DistanceDetail


class RankBranchesRequest(BaseSchema):
    """Compare-branches request body."""

    division: Division = Field(Division.METALS, description="Division being ordered")
    required_processing: list[str] = Field(default_factory=list, description="Operations the order needs")
    ship_to: Optional[GeoCoordinate] = Field(None, description="Destination coordinate")
    exclude_location_id: Optional[str] = None


class RankBranchesResponse(BaseSchema):
    """Compare-branches response."""

    request_id: str
    evaluated_at: str
    suggestions: list[FulfillmentSuggestion]
