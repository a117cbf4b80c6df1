"""
Cutoff rule stores.

The rule store is an injected read/write collaborator. Two backends:
    - InMemoryCutoffRuleStore: seeded dict, used in development and tests
    - SupabaseCutoffRuleStore: `location_cutoff_rules` table

Writes are last-write-wins; there is no concurrency token.
"""

from typing import Iterable, Optional, Protocol
import threading
from pydantic import ValidationError as PydanticValidationError
import structlog

from config import settings, get_supabase_client
from config.branch_defaults import DEFAULT_CUTOFF_RULES
from exceptions import DatabaseError, InvalidRuleSetError, field_errors
from models.cutoff_rules import LocationCutoffRuleSet

logger = structlog.get_logger(__name__)


class CutoffRuleStore(Protocol):
    """Read/write access to location cutoff rule sets."""

    def get(self, location_id: str) -> Optional[LocationCutoffRuleSet]: ...

    def get_all(self) -> list[LocationCutoffRuleSet]: ...

    def put(self, rule_set: LocationCutoffRuleSet) -> LocationCutoffRuleSet: ...

    def put_all(self, rule_sets: Iterable[LocationCutoffRuleSet]) -> None: ...


class InMemoryCutoffRuleStore:
    """
    Dict-backed rule store.

    Returns deep copies so callers editing a rule set never touch the
    stored one until they put it back.
    """

    def __init__(self, rule_sets: Optional[Iterable[LocationCutoffRuleSet]] = None):
        self._rules: dict[str, LocationCutoffRuleSet] = {}
        self._lock = threading.Lock()
        if rule_sets:
            self.put_all(rule_sets)

    @classmethod
    def with_defaults(cls) -> "InMemoryCutoffRuleStore":
        """Store seeded with the default branches."""
        return cls(LocationCutoffRuleSet.model_validate(row) for row in DEFAULT_CUTOFF_RULES)

    def get(self, location_id: str) -> Optional[LocationCutoffRuleSet]:
        with self._lock:
            rule_set = self._rules.get(location_id)
            return rule_set.model_copy(deep=True) if rule_set else None

    def get_all(self) -> list[LocationCutoffRuleSet]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._rules.values()]

    def put(self, rule_set: LocationCutoffRuleSet) -> LocationCutoffRuleSet:
        with self._lock:
            self._rules[rule_set.location_id] = rule_set.model_copy(deep=True)
        return rule_set.model_copy(deep=True)

    def put_all(self, rule_sets: Iterable[LocationCutoffRuleSet]) -> None:
        for rule_set in rule_sets:
            self.put(rule_set)


class SupabaseCutoffRuleStore:
    """
    Rule store backed by the `location_cutoff_rules` table.

    division_rules and blackout_windows are jsonb columns.
    """

    def __init__(self, client=None):
        self.db = client or get_supabase_client()
        self.table = "location_cutoff_rules"

    def get(self, location_id: str) -> Optional[LocationCutoffRuleSet]:
        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("location_id", location_id)
                .execute()
            )
        except Exception as e:
            logger.error("get_cutoff_rules_failed", location_id=location_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            return None
        return self._row_to_rule_set(result.data[0])

    def get_all(self) -> list[LocationCutoffRuleSet]:
        try:
            result = self.db.table(self.table).select("*").order("location_id").execute()
        except Exception as e:
            logger.error("list_cutoff_rules_failed", error=str(e))
            raise DatabaseError("select", str(e))

        rule_sets = []
        for row in result.data or []:
            try:
                rule_sets.append(self._row_to_rule_set(row))
            except InvalidRuleSetError:
                continue
        return rule_sets

    def put(self, rule_set: LocationCutoffRuleSet) -> LocationCutoffRuleSet:
        row = rule_set.model_dump(mode="json")
        try:
            result = self.db.table(self.table).upsert(row, on_conflict="location_id").execute()
        except Exception as e:
            logger.error("put_cutoff_rules_failed", location_id=rule_set.location_id, error=str(e))
            raise DatabaseError("upsert", str(e))

        return self._row_to_rule_set(result.data[0]) if result.data else rule_set

    def put_all(self, rule_sets: Iterable[LocationCutoffRuleSet]) -> None:
        rows = [r.model_dump(mode="json") for r in rule_sets]
        if not rows:
            return
        try:
            self.db.table(self.table).upsert(rows, on_conflict="location_id").execute()
        except Exception as e:
            logger.error("put_all_cutoff_rules_failed", count=len(rows), error=str(e))
            raise DatabaseError("upsert", str(e))

    def _row_to_rule_set(self, row: dict) -> LocationCutoffRuleSet:
        """
        Build a rule set from a stored row.

        Raises:
            InvalidRuleSetError: If the row does not validate
        """
        try:
            return LocationCutoffRuleSet(
                location_id=row["location_id"],
                location_name=row.get("location_name"),
                timezone=row["timezone"],
                division_rules=row.get("division_rules") or {},
                blackout_windows=row.get("blackout_windows") or [],
                notes=row.get("notes"),
            )
        except PydanticValidationError as e:
            errors = field_errors(e.errors())
        except KeyError as e:
            errors = [{"field": str(e.args[0]), "message": "Field required"}]

        logger.warning("cutoff_rules_row_invalid", location_id=row.get("location_id"), errors=errors)
        raise InvalidRuleSetError(row.get("location_id"), errors)


def build_rule_store() -> CutoffRuleStore:
    """Rule store for the configured backend."""
    if settings.rules_store == "supabase":
        return SupabaseCutoffRuleStore()
    return InMemoryCutoffRuleStore.with_defaults()
