"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.cutoff_rules import (
    Division,
    CutoffIndicator,
    DivisionCutoffRule,
    BlackoutWindow,
    LocationCutoffRuleSet,
    LocationCutoffRuleSetUpdate,
    LocationCutoffRuleSetList,
    CutoffStatus,
    CutoffDisplay,
)
from models.fulfillment import (
    ReasonImpact,
    ReasonCode,
    GeoCoordinate,
    DivisionInventory,
    BranchProfile,
    BranchFacts,
    Reason,
    ComponentScores,
    InventoryDetail,
    CutoffDetail,
    ProcessingDetail,
    DistanceDetail,
    FulfillmentSuggestion,
    RankBranchesRequest,
    RankBranchesResponse,
)

__all__ = [
    # Base
    "BaseSchema",

    # Cutoff rules
    "Division",
    "CutoffIndicator",
    "DivisionCutoffRule",
    "BlackoutWindow",
    "LocationCutoffRuleSet",
    "LocationCutoffRuleSetUpdate",
    "LocationCutoffRuleSetList",
    "CutoffStatus",
    "CutoffDisplay",

    # Fulfillment
    "ReasonImpact",
    "ReasonCode",
    "GeoCoordinate",
    "DivisionInventory",
    "BranchProfile",
    "BranchFacts",
    "Reason",
    "ComponentScores",
    "InventoryDetail",
    "CutoffDetail",
    "ProcessingDetail",
    "DistanceDetail",
    "FulfillmentSuggestion",
    "RankBranchesRequest",
    "RankBranchesResponse",
]
