"""
Cutoff rule schemas.

A LocationCutoffRuleSet holds, per division, the local cutoff time and
ship days for the next-day promise, plus the location's blackout windows.
CutoffStatus is the ephemeral evaluation of those rules at one instant.
"""

from pydantic import Field, field_validator
from typing import Optional
from enum import Enum

from models.base import BaseSchema, DateKey, LocalTime


class Division(str, Enum):
    """Product divisions served by a branch."""
    METALS = "METALS"
    PLASTICS = "PLASTICS"
    SUPPLIES = "SUPPLIES"
    OUTLET = "OUTLET"


class CutoffIndicator(str, Enum):
    """Tri-state shown on the live cutoff display."""
    GREEN = "GREEN"    # Promise available with time to spare
    YELLOW = "YELLOW"  # Cutoff soon, or no rule configured
    RED = "RED"        # Promise not available today


class DivisionCutoffRule(BaseSchema):
    """Next-day cutoff rule for one division at one location."""

    cutoff_local: LocalTime = Field(..., description="Local cutoff time, 24-hour HH:MM")
    next_day_enabled: bool = Field(True, description="Next-day promise offered at all")
    ship_days: set[int] = Field(
        default_factory=lambda: {1, 2, 3, 4, 5},
        description="Days of week with next-day fulfillment (0=Sunday)"
    )
    pickup_same_day_enabled: bool = Field(False, description="Same-day will-call pickup offered")

    @field_validator("ship_days")
    @classmethod
    def ship_days_in_week(cls, v: set[int]) -> set[int]:
        """Ship days must be 0..6."""
        invalid = [day for day in v if day < 0 or day > 6]
        if invalid:
            raise ValueError(f"Ship days must be between 0 (Sunday) and 6 (Saturday): {sorted(invalid)}")
        return v


class BlackoutWindow(BaseSchema):
    """Inclusive date range during which the promise is suspended."""

    start: DateKey = Field(..., description="First blacked-out date")
    end: DateKey = Field(..., description="Last blacked-out date")
    reason: str = Field("", max_length=200, description="Why the promise is suspended")

    def contains(self, date_key: str) -> bool:
        """YYYY-MM-DD keys order lexicographically."""
        return self.start <= date_key <= self.end


class LocationCutoffRuleSet(BaseSchema):
    """All cutoff rules for one location."""

    location_id: str = Field(..., min_length=1, description="Location identifier")
    location_name: Optional[str] = Field(None, description="Display name")
    timezone: str = Field(..., min_length=1, description="IANA time zone", examples=["America/Detroit"])
    division_rules: dict[Division, DivisionCutoffRule] = Field(default_factory=dict)
    blackout_windows: list[BlackoutWindow] = Field(default_factory=list)
    notes: Optional[str] = None

    def rule_for(self, division: Division) -> Optional[DivisionCutoffRule]:
        return self.division_rules.get(division)

    def blackout_on(self, date_key: str) -> Optional[BlackoutWindow]:
        """First blackout window covering the date, if any."""
        for window in self.blackout_windows:
            if window.contains(date_key):
                return window
        return None


class LocationCutoffRuleSetUpdate(BaseSchema):
    """
    Admin write payload.

    Omitted fields keep their stored value.
    """

    location_name: Optional[str] = None
    timezone: Optional[str] = None
    division_rules: Optional[dict[Division, DivisionCutoffRule]] = None
    blackout_windows: Optional[list[BlackoutWindow]] = None
    notes: Optional[str] = None


class LocationCutoffRuleSetList(BaseSchema):
    """Bulk read response."""
    data: list[LocationCutoffRuleSet]


class CutoffStatus(BaseSchema):
    """Evaluation of one location/division cutoff rule at one instant."""

    location_id: Optional[str] = None
    division: Division
    rules_found: bool = Field(..., description="False when no rule set or division rule exists")
    cutoff_local: Optional[str] = None
    timezone: Optional[str] = None
    minutes_remaining: Optional[int] = Field(None, description="Negative once cutoff has passed")
    is_valid_ship_day: bool = False
    is_blacked_out: bool = False
    blackout_reason: Optional[str] = None
    next_day_enabled: bool = False
    promise_available: bool = False
    local_date: Optional[str] = None
    local_time: Optional[str] = None

    @property
    def cutoff_passed(self) -> bool:
        return self.minutes_remaining is not None and self.minutes_remaining <= 0


class CutoffDisplay(BaseSchema):
    """Indicator and label for the live cutoff widget."""

    indicator: CutoffIndicator
    label: str
    countdown: str = ""
    status: CutoffStatus
    upcoming_blackouts: list[BlackoutWindow] = Field(default_factory=list)
    ship_days_label: Optional[str] = None


class PromiseReason(str, Enum):
    """Why a requested ship date cannot be promised as asked."""
    NO_RULES = "NO_RULES"
    NEXT_DAY_DISABLED = "NEXT_DAY_DISABLED"
    NON_SHIP_DAY = "NON_SHIP_DAY"
    BLACKOUT_WINDOW = "BLACKOUT_WINDOW"
    CUTOFF_PASSED = "CUTOFF_PASSED"
    SAME_DAY_NOT_AVAILABLE = "SAME_DAY_NOT_AVAILABLE"
    DATE_IN_PAST = "DATE_IN_PAST"


class PromiseEvaluation(BaseSchema):
    """
    Can the location ship on the requested date?

    Dates are local to the location. The requested date defaults to
    tomorrow (the next-day promise).
    """

    location_id: Optional[str] = None
    division: Division
    status: CutoffIndicator
    message: str
    reasons: list[PromiseReason] = Field(default_factory=list)
    cutoff_local: Optional[str] = None
    cutoff_met: Optional[bool] = Field(None, description="None when no rule applies")
    local_date: Optional[DateKey] = None
    local_time: Optional[str] = None
    requested_ship_date: Optional[DateKey] = None
    earliest_ship_date: Optional[DateKey] = None
    suggested_dates: list[DateKey] = Field(default_factory=list)
    blackout_reason: Optional[str] = None
    pickup_same_day_enabled: bool = False
