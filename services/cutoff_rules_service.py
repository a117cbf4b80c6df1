"""
Cutoff rules service — admin reads and writes of location rule sets.

Validates every write so a malformed cutoff time or unknown zone is
reported to the editor instead of being stored.
"""

from datetime import date
from typing import Optional
import structlog

from pydantic import ValidationError as PydanticValidationError

from exceptions import (
    ConfigurationError,
    CutoffRulesNotFoundError,
    InvalidBlackoutWindowError,
    InvalidRuleSetError,
    InvalidTimeZoneError,
    field_errors,
)
from models.cutoff_rules import LocationCutoffRuleSet, LocationCutoffRuleSetUpdate
from services.cutoff_rule_store import CutoffRuleStore, build_rule_store
from utils.time_utils import parse_hhmm, resolve_timezone

logger = structlog.get_logger(__name__)


def validate_rule_set(rule_set: LocationCutoffRuleSet) -> None:
    """
    Check a rule set before it is stored.

    Raises:
        InvalidTimeZoneError: Unknown IANA zone
        InvalidCutoffTimeError: Cutoff time outside 00:00-23:59
        InvalidBlackoutWindowError: Unparseable or reversed window
    """
    resolve_timezone(rule_set.timezone)

    for division, rule in rule_set.division_rules.items():
        parse_hhmm(rule.cutoff_local, division.value)

    for window in rule_set.blackout_windows:
        try:
            start = date.fromisoformat(window.start)
            end = date.fromisoformat(window.end)
        except ValueError as e:
            raise InvalidBlackoutWindowError(window.start, window.end) from e
        if start > end:
            raise InvalidBlackoutWindowError(window.start, window.end)


def _build_rule_set(location_id: str, merged: dict) -> LocationCutoffRuleSet:
    try:
        return LocationCutoffRuleSet.model_validate(merged)
    except PydanticValidationError as e:
        raise InvalidRuleSetError(location_id, field_errors(e.errors())) from e


class CutoffRulesService:
    """
    Cutoff rule set management.

    The store is injected; the default comes from settings.rules_store.
    """

    def __init__(self, store: Optional[CutoffRuleStore] = None):
        self.store = store or build_rule_store()

    def get(self, location_id: str) -> LocationCutoffRuleSet:
        """
        Get the rule set for a location.

        Raises:
            CutoffRulesNotFoundError: If the location has no rule set
        """
        rule_set = self.store.get(location_id)
        if rule_set is None:
            raise CutoffRulesNotFoundError(location_id)
        return rule_set

    def find(self, location_id: str) -> Optional[LocationCutoffRuleSet]:
        """Get the rule set for a location, or None."""
        return self.store.get(location_id)

    def list_all(self) -> list[LocationCutoffRuleSet]:
        """All configured rule sets."""
        return self.store.get_all()

    def update(
        self,
        location_id: str,
        data: LocationCutoffRuleSetUpdate
    ) -> LocationCutoffRuleSet:
        """
        Create or update a location's rule set.

        Provided fields replace the stored ones; omitted fields are kept.
        The last write wins.

        Args:
            location_id: Location identifier
            data: Fields to write

        Returns:
            Stored rule set

        Raises:
            InvalidTimeZoneError: If the zone is blank, unknown or missing on create
            ConfigurationError: If the merged rule set is invalid
        """
        try:
            existing = self.store.get(location_id)
        except InvalidRuleSetError:
            # Unreadable stored row: the write replaces it whole
            logger.warning("cutoff_rules_overwriting_invalid", location_id=location_id)
            existing = None
        updates = data.model_dump(exclude_none=True)

        try:
            if "timezone" in updates:
                resolve_timezone(updates["timezone"])
            elif existing is None:
                raise InvalidTimeZoneError(None)

            if existing is None:
                merged = {"location_id": location_id, **updates}
            else:
                merged = {**existing.model_dump(), **updates, "location_id": location_id}

            rule_set = _build_rule_set(location_id, merged)
            validate_rule_set(rule_set)
        except ConfigurationError as e:
            logger.warning("cutoff_rules_rejected", location_id=location_id, code=e.code)
            raise

        stored = self.store.put(rule_set)
        logger.info(
            "cutoff_rules_updated",
            location_id=location_id,
            created=existing is None,
            divisions=len(stored.division_rules),
            blackouts=len(stored.blackout_windows)
        )
        return stored


# Singleton
_cutoff_rules_service: Optional[CutoffRulesService] = None


def get_cutoff_rules_service() -> CutoffRulesService:
    global _cutoff_rules_service
    if _cutoff_rules_service is None:
        _cutoff_rules_service = CutoffRulesService()
    return _cutoff_rules_service
