"""
Branch facts sources.

Supplies the branch directory (location, coordinates, processing
capabilities) and per-division inventory snapshots that ranking
scores from. Both come from external record stores; this module only
reads them.
"""

from typing import Optional, Protocol
import structlog

from config import settings, get_supabase_client
from config.branch_defaults import DEFAULT_BRANCHES, DEFAULT_BRANCH_INVENTORY
from exceptions import DatabaseError, TransientFetchError
from models.cutoff_rules import Division
from models.fulfillment import BranchProfile, DivisionInventory

logger = structlog.get_logger(__name__)

InventorySnapshot = dict[Division, DivisionInventory]


class BranchFactsSource(Protocol):
    """Read access to the branch directory and inventory snapshots."""

    def list_branches(self) -> list[BranchProfile]: ...

    def get_inventory(self, location_id: str) -> Optional[InventorySnapshot]: ...


class InMemoryBranchFactsSource:
    """Branch facts held in dicts."""

    def __init__(
        self,
        branches: list[BranchProfile],
        inventory: Optional[dict[str, InventorySnapshot]] = None
    ):
        self._branches = list(branches)
        self._inventory = dict(inventory or {})

    @classmethod
    def with_defaults(cls) -> "InMemoryBranchFactsSource":
        """Source seeded with the default branches and snapshot."""
        return cls(
            branches=[BranchProfile.model_validate(row) for row in DEFAULT_BRANCHES],
            inventory={
                location_id: {
                    Division(division): DivisionInventory.model_validate(values)
                    for division, values in by_division.items()
                }
                for location_id, by_division in DEFAULT_BRANCH_INVENTORY.items()
            },
        )

    def list_branches(self) -> list[BranchProfile]:
        return [b.model_copy(deep=True) for b in self._branches]

    def get_inventory(self, location_id: str) -> Optional[InventorySnapshot]:
        snapshot = self._inventory.get(location_id)
        if snapshot is None:
            return None
        return {division: inv.model_copy() for division, inv in snapshot.items()}


class SupabaseBranchFactsSource:
    """
    Branch facts from the `branches` and `branch_inventory` tables.

    branch_inventory has one row per (location_id, division).
    """

    def __init__(self, client=None):
        self.db = client or get_supabase_client()

    def list_branches(self) -> list[BranchProfile]:
        try:
            result = self.db.table("branches").select("*").eq("active", True).order("location_id").execute()
        except Exception as e:
            logger.error("list_branches_failed", error=str(e))
            raise DatabaseError("select", str(e))

        return [self._row_to_profile(row) for row in result.data or []]

    def get_inventory(self, location_id: str) -> Optional[InventorySnapshot]:
        try:
            result = (
                self.db.table("branch_inventory")
                .select("division, qty_on_hand, weight_lbs, sku_count")
                .eq("location_id", location_id)
                .execute()
            )
        except Exception as e:
            logger.warning("branch_inventory_fetch_failed", location_id=location_id, error=str(e))
            raise TransientFetchError("branch_inventory", location_id, str(e)) from e

        snapshot: InventorySnapshot = {}
        for row in result.data or []:
            try:
                division = Division(row["division"])
            except ValueError:
                logger.debug("branch_inventory_unknown_division", location_id=location_id, division=row["division"])
                continue
            snapshot[division] = DivisionInventory(
                qty_on_hand=int(row.get("qty_on_hand") or 0),
                weight_lbs=float(row.get("weight_lbs") or 0),
                sku_count=int(row.get("sku_count") or 0),
            )
        return snapshot

    def _row_to_profile(self, row: dict) -> BranchProfile:
        coordinate = None
        if row.get("lat") is not None and row.get("lng") is not None:
            coordinate = {"lat": row["lat"], "lng": row["lng"]}
        return BranchProfile(
            location_id=row["location_id"],
            name=row["name"],
            csr_key=row.get("csr_key"),
            state=row.get("state"),
            coordinate=coordinate,
            capabilities=row.get("capabilities") or [],
        )


def build_branch_facts_source() -> BranchFactsSource:
    """Branch facts source for the configured backend."""
    if settings.rules_store == "supabase":
        return SupabaseBranchFactsSource()
    return InMemoryBranchFactsSource.with_defaults()
