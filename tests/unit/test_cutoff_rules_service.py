"""
Unit tests for cutoff rule management.

Tests admin writes (validation, merge, last-write-wins) and both rule
store backends.
"""

from unittest.mock import MagicMock
import json
import pytest

from services.cutoff_rules_service import CutoffRulesService, get_cutoff_rules_service, validate_rule_set
from services.cutoff_rule_store import InMemoryCutoffRuleStore, SupabaseCutoffRuleStore
from models.cutoff_rules import Division, LocationCutoffRuleSetUpdate
from exceptions import (
    ConfigurationError,
    CutoffRulesNotFoundError,
    DatabaseError,
    InvalidBlackoutWindowError,
    InvalidCutoffTimeError,
    InvalidRuleSetError,
    InvalidTimeZoneError,
)
from tests.factories import RuleSetFactory


# ===================
# FIXTURES
# ===================

@pytest.fixture
def rules_service():
    """CutoffRulesService over the default in-memory rules."""
    return CutoffRulesService(InMemoryCutoffRuleStore.with_defaults())


def metals_rule(cutoff_local: str = "15:00") -> dict:
    return {"METALS": {"cutoff_local": cutoff_local, "ship_days": [1, 2, 3, 4, 5]}}


# ===================
# READ TESTS
# ===================

class TestRead:
    """Tests for get, find and list_all."""

    def test_list_all_defaults(self, rules_service):
        rule_sets = rules_service.list_all()

        assert [r.location_id for r in rule_sets] == ["loc-1", "loc-2", "loc-3", "loc-4"]

    def test_get_existing(self, rules_service):
        rule_set = rules_service.get("loc-1")

        assert rule_set.timezone == "America/Detroit"
        assert rule_set.rule_for(Division.METALS).cutoff_local == "15:30"
        assert rule_set.rule_for(Division.METALS).ship_days == {1, 2, 3, 4, 5}

    def test_get_missing_raises(self, rules_service):
        with pytest.raises(CutoffRulesNotFoundError) as exc_info:
            rules_service.get("loc-99")

        assert exc_info.value.status_code == 404
        assert exc_info.value.code == "CUTOFF_RULES_NOT_FOUND"

    def test_find_missing_returns_none(self, rules_service):
        assert rules_service.find("loc-99") is None

    def test_reads_are_copies(self, rules_service):
        """Editing a returned rule set does not change the store."""
        rule_set = rules_service.get("loc-1")
        rule_set.timezone = "America/Chicago"

        assert rules_service.get("loc-1").timezone == "America/Detroit"

    def test_singleton(self):
        assert get_cutoff_rules_service() is get_cutoff_rules_service()


# ===================
# WRITE TESTS
# ===================

class TestUpdate:
    """Tests for update."""

    def test_partial_update_keeps_other_fields(self, rules_service):
        """Only provided fields replace stored ones."""
        stored = rules_service.update("loc-1", LocationCutoffRuleSetUpdate(notes="Moved dock"))

        assert stored.notes == "Moved dock"
        assert stored.timezone == "America/Detroit"
        assert len(stored.division_rules) == 4

    def test_create_new_location(self, rules_service):
        data = LocationCutoffRuleSetUpdate(
            location_name="Toledo",
            timezone="America/New_York",
            division_rules=metals_rule("14:45"),
        )

        stored = rules_service.update("loc-5", data)

        assert stored.location_id == "loc-5"
        assert rules_service.get("loc-5").rule_for(Division.METALS).cutoff_local == "14:45"

    def test_create_without_timezone_raises(self, rules_service):
        with pytest.raises(InvalidTimeZoneError):
            rules_service.update("loc-5", LocationCutoffRuleSetUpdate(division_rules=metals_rule()))

    def test_last_write_wins(self, rules_service):
        rules_service.update("loc-2", LocationCutoffRuleSetUpdate(division_rules=metals_rule("13:00")))
        rules_service.update("loc-2", LocationCutoffRuleSetUpdate(division_rules=metals_rule("16:15")))

        assert rules_service.get("loc-2").rule_for(Division.METALS).cutoff_local == "16:15"

    def test_unknown_timezone_rejected(self, rules_service):
        with pytest.raises(InvalidTimeZoneError) as exc_info:
            rules_service.update("loc-1", LocationCutoffRuleSetUpdate(timezone="Eastern"))

        assert exc_info.value.status_code == 422
        assert rules_service.get("loc-1").timezone == "America/Detroit"

    def test_out_of_range_cutoff_rejected(self, rules_service):
        with pytest.raises(InvalidCutoffTimeError) as exc_info:
            rules_service.update("loc-1", LocationCutoffRuleSetUpdate(division_rules=metals_rule("24:30")))

        assert exc_info.value.details["division"] == "METALS"
        assert rules_service.get("loc-1").rule_for(Division.METALS).cutoff_local == "15:30"

    def test_reversed_blackout_rejected(self, rules_service):
        data = LocationCutoffRuleSetUpdate(
            blackout_windows=[{"start": "2026-12-26", "end": "2026-12-24", "reason": "Holiday"}],
        )

        with pytest.raises(InvalidBlackoutWindowError):
            rules_service.update("loc-4", data)

    def test_impossible_blackout_date_rejected(self, rules_service):
        data = LocationCutoffRuleSetUpdate(
            blackout_windows=[{"start": "2026-02-30", "end": "2026-03-01", "reason": "Typo"}],
        )

        with pytest.raises(ConfigurationError):
            rules_service.update("loc-4", data)

    @pytest.mark.parametrize("timezone", ["   ", ""])
    def test_blank_timezone_rejected(self, rules_service, timezone):
        """A whitespace zone is trimmed to empty and rejected as a zone error."""
        with pytest.raises(InvalidTimeZoneError) as exc_info:
            rules_service.update("loc-1", LocationCutoffRuleSetUpdate(timezone=timezone))

        assert exc_info.value.code == "INVALID_TIME_ZONE"
        assert rules_service.get("loc-1").timezone == "America/Detroit"

    def test_schema_failure_after_merge_is_configuration_error(self):
        """A merged rule set that fails the schema raises InvalidRuleSetError, not a raw pydantic error."""
        store = MagicMock()
        store.get.return_value = None
        service = CutoffRulesService(store)
        data = LocationCutoffRuleSetUpdate(timezone="America/Detroit", division_rules=metals_rule())

        with pytest.raises(InvalidRuleSetError) as exc_info:
            service.update("", data)

        assert exc_info.value.status_code == 422
        assert exc_info.value.details["errors"][0]["field"] == "location_id"
        store.put.assert_not_called()

    def test_write_replaces_malformed_stored_row(self, mock_supabase):
        row = RuleSetFactory.row(location_id="loc-bad")
        row["division_rules"]["METALS"]["cutoff_local"] = "3:30"
        mock_supabase.set_table_data("location_cutoff_rules", [row])
        service = CutoffRulesService(SupabaseCutoffRuleStore(mock_supabase))
        data = LocationCutoffRuleSetUpdate(timezone="America/Detroit", division_rules=metals_rule("15:30"))

        stored = service.update("loc-bad", data)

        assert stored.rule_for(Division.METALS).cutoff_local == "15:30"
        assert mock_supabase.calls[0]["data"]["division_rules"]["METALS"]["cutoff_local"] == "15:30"


class TestValidateRuleSet:
    """Tests for validate_rule_set."""

    def test_valid_defaults(self, rules_service):
        for rule_set in rules_service.list_all():
            validate_rule_set(rule_set)

    def test_bad_zone(self):
        with pytest.raises(InvalidTimeZoneError):
            validate_rule_set(RuleSetFactory.create(timezone="Detroit"))


# ===================
# SUPABASE STORE
# ===================

class TestSupabaseCutoffRuleStore:
    """Tests for SupabaseCutoffRuleStore against a mock client."""

    def test_get_maps_row(self, mock_supabase):
        mock_supabase.set_table_data("location_cutoff_rules", [RuleSetFactory.row(location_id="loc-7")])
        store = SupabaseCutoffRuleStore(mock_supabase)

        rule_set = store.get("loc-7")

        assert rule_set.location_id == "loc-7"
        assert rule_set.rule_for(Division.METALS).cutoff_local == "15:30"

    def test_get_missing_returns_none(self, mock_supabase):
        store = SupabaseCutoffRuleStore(mock_supabase)

        assert store.get("loc-7") is None

    def test_put_upserts_on_location(self, mock_supabase):
        store = SupabaseCutoffRuleStore(mock_supabase)

        stored = store.put(RuleSetFactory.create(location_id="loc-8"))

        assert stored.location_id == "loc-8"
        call = mock_supabase.calls[0]
        assert call["table"] == "location_cutoff_rules"
        assert call["on_conflict"] == "location_id"
        assert call["data"]["division_rules"]["METALS"]["ship_days"] == [1, 2, 3, 4, 5]

    def test_put_all_single_request(self, mock_supabase):
        store = SupabaseCutoffRuleStore(mock_supabase)

        store.put_all([RuleSetFactory.create(), RuleSetFactory.create()])

        assert len(mock_supabase.calls) == 1
        assert len(mock_supabase.calls[0]["data"]) == 2

    def test_query_failure_raises_database_error(self):
        client = MagicMock()
        client.table.side_effect = Exception("connection refused")
        store = SupabaseCutoffRuleStore(client)

        with pytest.raises(DatabaseError):
            store.get("loc-1")

    def test_built_from_configured_client(self, mock_db):
        mock_db.set_table_data("location_cutoff_rules", [RuleSetFactory.row(location_id="loc-9")])

        store = SupabaseCutoffRuleStore()

        assert [r.location_id for r in store.get_all()] == ["loc-9"]


def malformed_row(kind: str) -> dict:
    """Stored row broken in one way."""
    row = RuleSetFactory.row(location_id="loc-bad")
    if kind == "cutoff":
        row["division_rules"]["METALS"]["cutoff_local"] = "3:30"
    elif kind == "timezone":
        row["timezone"] = None
    elif kind == "division":
        row["division_rules"]["LUMBER"] = row["division_rules"].pop("METALS")
    return row


class TestSupabaseMalformedRows:
    """Rows that no longer validate surface as InvalidRuleSetError."""

    @pytest.mark.parametrize("kind", ["cutoff", "timezone", "division"])
    def test_get_malformed_row_raises(self, mock_supabase, kind):
        mock_supabase.set_table_data("location_cutoff_rules", [malformed_row(kind)])
        store = SupabaseCutoffRuleStore(mock_supabase)

        with pytest.raises(InvalidRuleSetError) as exc_info:
            store.get("loc-bad")

        assert exc_info.value.code == "INVALID_RULE_SET"
        assert exc_info.value.status_code == 422
        assert exc_info.value.details["location_id"] == "loc-bad"
        assert exc_info.value.details["errors"]

    def test_missing_column_raises(self, mock_supabase):
        row = RuleSetFactory.row(location_id="loc-bad")
        del row["timezone"]
        mock_supabase.set_table_data("location_cutoff_rules", [row])

        with pytest.raises(InvalidRuleSetError) as exc_info:
            SupabaseCutoffRuleStore(mock_supabase).get("loc-bad")

        assert exc_info.value.details["errors"] == [{"field": "timezone", "message": "Field required"}]

    def test_get_all_skips_malformed_rows(self, mock_supabase):
        mock_supabase.set_table_data("location_cutoff_rules", [
            RuleSetFactory.row(location_id="loc-a"),
            malformed_row("cutoff"),
            RuleSetFactory.row(location_id="loc-b"),
        ])

        rule_sets = SupabaseCutoffRuleStore(mock_supabase).get_all()

        assert [r.location_id for r in rule_sets] == ["loc-a", "loc-b"]

    def test_errors_are_json_safe(self, mock_supabase):
        mock_supabase.set_table_data("location_cutoff_rules", [malformed_row("cutoff")])

        with pytest.raises(InvalidRuleSetError) as exc_info:
            SupabaseCutoffRuleStore(mock_supabase).get("loc-bad")

        field = exc_info.value.details["errors"][0]["field"]
        assert field == "division_rules.METALS.cutoff_local"
        assert json.dumps(exc_info.value.to_dict())
