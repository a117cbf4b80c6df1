"""
Test data factories.

Builds rule sets, branch profiles and candidate facts with sensible
defaults so each test only spells out what it cares about.
"""

from typing import Optional

from models.cutoff_rules import Division, LocationCutoffRuleSet
from models.fulfillment import BranchFacts, BranchProfile, DivisionInventory, GeoCoordinate

JACKSON = {"lat": 42.2458, "lng": -84.4013}


class RuleSetFactory:
    """
    Factory for LocationCutoffRuleSet.

    Usage:
        # Detroit zone, METALS cutoff 15:30 on weekdays
        rules = RuleSetFactory.create()

        # Blackout today
        rules = RuleSetFactory.create(blackout_windows=[
            {"start": "2026-06-17", "end": "2026-06-17", "reason": "Inventory count"}
        ])
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def row(
        cls,
        location_id: Optional[str] = None,
        timezone: str = "America/Detroit",
        division: Division = Division.METALS,
        cutoff_local: str = "15:30",
        next_day_enabled: bool = True,
        ship_days: Optional[list[int]] = None,
        blackout_windows: Optional[list[dict]] = None,
        location_name: Optional[str] = None,
        pickup_same_day_enabled: bool = False
    ) -> dict:
        """Rule set as a plain dict, shaped like a stored row."""
        counter = cls._next_counter()
        return {
            "location_id": location_id or f"loc-test-{counter}",
            "location_name": location_name or f"Test Branch {counter}",
            "timezone": timezone,
            "division_rules": {
                division.value: {
                    "cutoff_local": cutoff_local,
                    "next_day_enabled": next_day_enabled,
                    "ship_days": ship_days if ship_days is not None else [1, 2, 3, 4, 5],
                    "pickup_same_day_enabled": pickup_same_day_enabled,
                }
            },
            "blackout_windows": blackout_windows or [],
            "notes": None,
        }

    @classmethod
    def create(cls, **overrides) -> LocationCutoffRuleSet:
        """Validated rule set."""
        return LocationCutoffRuleSet.model_validate(cls.row(**overrides))

    @classmethod
    def reset_counter(cls):
        """Reset the counter."""
        cls._counter = 0


class BranchFactory:
    """
    Factory for branch profiles and candidate facts.

    Usage:
        candidate = BranchFactory.facts("loc-a", qty=150)
        no_stock = BranchFactory.facts("loc-b", qty=0)
        unknown = BranchFactory.facts("loc-c", inventory=None)
    """

    _counter = 0
    _unset = object()

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def profile(
        cls,
        location_id: Optional[str] = None,
        name: Optional[str] = None,
        capabilities: Optional[list[str]] = None,
        coordinate: Optional[dict] = JACKSON,
        csr_key: Optional[str] = None
    ) -> BranchProfile:
        """Branch directory entry."""
        counter = cls._next_counter()
        return BranchProfile(
            location_id=location_id or f"loc-test-{counter}",
            name=name or f"Test Branch {counter}",
            csr_key=csr_key,
            state="MI",
            coordinate=GeoCoordinate(**coordinate) if coordinate else None,
            capabilities=capabilities if capabilities is not None else ["SAW", "SHEAR"],
        )

    @classmethod
    def facts(
        cls,
        location_id: Optional[str] = None,
        qty: int = 100,
        division: Division = Division.METALS,
        inventory=_unset,
        **profile_overrides
    ) -> BranchFacts:
        """Candidate facts with one division of on-hand stock."""
        if inventory is cls._unset:
            inventory = {division: DivisionInventory(qty_on_hand=qty, weight_lbs=qty * 10.0, sku_count=1)}
        return BranchFacts(
            profile=cls.profile(location_id=location_id, **profile_overrides),
            inventory=inventory,
        )

    @classmethod
    def reset_counter(cls):
        """Reset the counter."""
        cls._counter = 0
