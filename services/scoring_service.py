"""
Scoring service — converts raw branch facts into bounded points.

Four independent pure scorers, each returning its points, the facts
behind them and one reason code:

    Inventory   0-30  linear in on-hand pieces, saturating at 100
    Cutoff      0-30  linear in minutes to cutoff, saturating at 240
    Processing  0-25  share of required operations the branch can run
    Distance    0-15  step function of great-circle miles

Points are rounded half-up to whole numbers.
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from math import atan2, cos, radians, sin, sqrt
from typing import Iterable, Optional

from config import Settings
from models.cutoff_rules import CutoffStatus, Division
from models.fulfillment import (
    DivisionInventory,
    GeoCoordinate,
    Reason,
    ReasonCode,
    ReasonImpact,
)

EARTH_RADIUS_MILES = 3959


@dataclass(frozen=True)
class ScoringConfig:
    """Weight ceilings and saturation thresholds."""

    weight_inventory: int = 30
    weight_cutoff: int = 30
    weight_processing: int = 25
    weight_distance: int = 15
    inventory_saturation_qty: int = 100
    cutoff_saturation_minutes: int = 240
    cutoff_passed_score: int = 2
    cutoff_soon_minutes: int = 60
    distance_full_miles: float = 30
    distance_near_miles: float = 100
    distance_far_miles: float = 250

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScoringConfig":
        return cls(
            weight_inventory=settings.weight_inventory,
            weight_cutoff=settings.weight_cutoff,
            weight_processing=settings.weight_processing,
            weight_distance=settings.weight_distance,
            inventory_saturation_qty=settings.inventory_saturation_qty,
            cutoff_saturation_minutes=settings.cutoff_saturation_minutes,
            cutoff_passed_score=settings.cutoff_passed_score,
            cutoff_soon_minutes=settings.cutoff_soon_minutes,
            distance_full_miles=settings.distance_full_miles,
            distance_near_miles=settings.distance_near_miles,
            distance_far_miles=settings.distance_far_miles,
        )


def round_half_up(value: float) -> int:
    """Round .5 away from zero (Python's round() is banker's rounding)."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def clamp(points: int, ceiling: int) -> int:
    return max(0, min(ceiling, points))


# ===================
# RESULTS
# ===================

@dataclass
class InventoryScore:
    score: int
    reason: Reason
    available: bool = False
    known: bool = True
    total_qty: int = 0
    total_weight: float = 0


@dataclass
class CutoffScore:
    score: int
    reason: Reason
    cutoff_local: Optional[str] = None
    minutes_left: Optional[int] = None
    cutoff_met: bool = False


@dataclass
class ProcessingScore:
    score: int
    reason: Reason
    capable: bool = True
    missing_ops: list[str] = field(default_factory=list)


@dataclass
class DistanceScore:
    score: int
    reason: Reason
    miles: Optional[int] = None
    estimate_label: str = "Unknown"


# ===================
# INVENTORY
# ===================

def score_inventory(
    inventory: Optional[dict[Division, DivisionInventory]],
    division: Division,
    config: ScoringConfig = ScoringConfig()
) -> InventoryScore:
    """
    Score on-hand inventory for the division.

    Args:
        inventory: Per-division snapshot, None when it could not be fetched
        division: Division being ordered
        config: Weights and thresholds

    Returns:
        InventoryScore, 0 when nothing is on hand or the snapshot is unknown
    """
    if inventory is None:
        return InventoryScore(
            score=0,
            known=False,
            reason=Reason(
                code=ReasonCode.INV_UNKNOWN,
                label="Inventory snapshot unavailable",
                impact=ReasonImpact.NEUTRAL,
            ),
        )

    on_hand = inventory.get(division)
    if on_hand is None or on_hand.qty_on_hand == 0:
        return InventoryScore(
            score=0,
            reason=Reason(
                code=ReasonCode.INV_NONE,
                label="No inventory at this branch",
                impact=ReasonImpact.NEGATIVE,
            ),
        )

    ceiling = config.weight_inventory
    raw = min(ceiling, (on_hand.qty_on_hand / config.inventory_saturation_qty) * ceiling)

    return InventoryScore(
        score=clamp(round_half_up(raw), ceiling),
        available=True,
        total_qty=on_hand.qty_on_hand,
        total_weight=on_hand.weight_lbs,
        reason=Reason(
            code=ReasonCode.INV_OK,
            label=f"{on_hand.qty_on_hand} pcs in stock",
            impact=ReasonImpact.POSITIVE,
        ),
    )


# ===================
# CUTOFF
# ===================

def score_cutoff(status: CutoffStatus, config: ScoringConfig = ScoringConfig()) -> CutoffScore:
    """
    Score time remaining before the division's cutoff.

    0 when rules are unknown, the day is blacked out or not a ship day.
    A small floor when the day is valid but the cutoff has passed.
    """
    if not status.rules_found or status.minutes_remaining is None:
        return CutoffScore(
            score=0,
            reason=Reason(
                code=ReasonCode.CUTOFF_UNKNOWN,
                label="Cutoff rules unavailable",
                impact=ReasonImpact.NEGATIVE,
            ),
        )

    minutes = status.minutes_remaining
    base = {"cutoff_local": status.cutoff_local, "minutes_left": minutes}

    if status.is_blacked_out:
        label = f"Blackout today ({status.blackout_reason})" if status.blackout_reason else "Blackout today"
        return CutoffScore(
            score=0,
            reason=Reason(code=ReasonCode.CUTOFF_BLACKOUT, label=label, impact=ReasonImpact.NEGATIVE),
            **base,
        )

    if not status.is_valid_ship_day:
        return CutoffScore(
            score=0,
            reason=Reason(
                code=ReasonCode.CUTOFF_NON_SHIP_DAY,
                label="Not a ship day",
                impact=ReasonImpact.NEGATIVE,
            ),
            **base,
        )

    ceiling = config.weight_cutoff
    if minutes <= 0:
        return CutoffScore(
            score=clamp(config.cutoff_passed_score, ceiling),
            reason=Reason(
                code=ReasonCode.CUTOFF_PASSED,
                label="Cutoff has passed for today",
                impact=ReasonImpact.NEGATIVE,
            ),
            **base,
        )

    raw = min(ceiling, (minutes / config.cutoff_saturation_minutes) * ceiling)
    if minutes > config.cutoff_soon_minutes:
        reason = Reason(
            code=ReasonCode.CUTOFF_OK,
            label=f"{minutes // 60}h {minutes % 60}m until cutoff",
            impact=ReasonImpact.POSITIVE,
        )
    else:
        reason = Reason(
            code=ReasonCode.CUTOFF_SOON,
            label=f"Only {minutes}m until cutoff",
            impact=ReasonImpact.NEUTRAL,
        )

    return CutoffScore(score=clamp(round_half_up(raw), ceiling), reason=reason, cutoff_met=True, **base)


# ===================
# PROCESSING
# ===================

def normalize_ops(ops: Optional[Iterable[str]]) -> list[str]:
    """Uppercase, trimmed, empty entries dropped."""
    return [op.strip().upper() for op in ops or [] if op and op.strip()]


def score_processing(
    capabilities: Iterable[str],
    required_ops: Optional[Iterable[str]],
    config: ScoringConfig = ScoringConfig()
) -> ProcessingScore:
    """
    Score how many required operations the branch can perform.

    Operations match case-insensitively. Full weight when nothing is
    required or everything is available.
    """
    ceiling = config.weight_processing
    required = normalize_ops(required_ops)
    available = set(normalize_ops(capabilities))
    missing = [op for op in required if op not in available]

    if not missing:
        return ProcessingScore(
            score=ceiling,
            reason=Reason(
                code=ReasonCode.PROC_OK,
                label="All processing available",
                impact=ReasonImpact.POSITIVE,
            ),
        )

    ratio = 1 - (len(missing) / len(required))
    return ProcessingScore(
        score=clamp(round_half_up(ratio * ceiling), ceiling),
        capable=False,
        missing_ops=missing,
        reason=Reason(
            code=ReasonCode.PROC_MISSING,
            label=f"Missing: {', '.join(missing)}",
            impact=ReasonImpact.NEGATIVE,
        ),
    )


# ===================
# DISTANCE
# ===================

def haversine_miles(origin: GeoCoordinate, destination: GeoCoordinate) -> int:
    """Great-circle distance in whole miles."""
    d_lat = radians(destination.lat - origin.lat)
    d_lng = radians(destination.lng - origin.lng)
    a = (
        sin(d_lat / 2) ** 2
        + cos(radians(origin.lat)) * cos(radians(destination.lat)) * sin(d_lng / 2) ** 2
    )
    return round_half_up(EARTH_RADIUS_MILES * 2 * atan2(sqrt(a), sqrt(1 - a)))


def distance_label(miles: Optional[int]) -> str:
    """Coarse distance class."""
    if miles is None:
        return "Unknown"
    if miles < 50:
        return "Local"
    if miles < 150:
        return "Regional"
    return "Long haul"


def score_distance(
    branch: Optional[GeoCoordinate],
    destination: Optional[GeoCoordinate],
    config: ScoringConfig = ScoringConfig()
) -> DistanceScore:
    """
    Score proximity of the branch to the ship-to point.

    Missing coordinates get half weight rather than zero.
    """
    ceiling = config.weight_distance
    if branch is None or destination is None:
        return DistanceScore(
            score=round_half_up(ceiling * 0.5),
            reason=Reason(
                code=ReasonCode.DIST_UNKNOWN,
                label="Distance unknown",
                impact=ReasonImpact.NEUTRAL,
            ),
        )

    miles = haversine_miles(branch, destination)
    if miles <= config.distance_full_miles:
        raw = ceiling
    elif miles <= config.distance_near_miles:
        raw = ceiling * 0.7
    elif miles <= config.distance_far_miles:
        raw = ceiling * 0.4
    else:
        raw = ceiling * 0.1

    label = distance_label(miles)
    return DistanceScore(
        score=clamp(round_half_up(raw), ceiling),
        miles=miles,
        estimate_label=label,
        reason=Reason(
            code=ReasonCode.DIST,
            label=f"~{miles} mi ({label})",
            impact=ReasonImpact.POSITIVE if miles < 100 else ReasonImpact.NEUTRAL,
        ),
    )
