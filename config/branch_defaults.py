"""
Default branch data for the in-memory stores.

Four Michigan branches, all on Eastern time. Used when
RULES_STORE=memory and as the seed for the supabase tables.
"""

# =============================================================================
# CUTOFF RULES
# =============================================================================
# Cutoff times are local to the branch. Ship days: 0=Sun .. 6=Sat.

WEEKDAYS = [1, 2, 3, 4, 5]
WEEKDAYS_AND_SATURDAY = [1, 2, 3, 4, 5, 6]

DEFAULT_CUTOFF_RULES = [
    {
        "location_id": "loc-1",
        "location_name": "Jackson",
        "timezone": "America/Detroit",
        "division_rules": {
            "METALS": {"cutoff_local": "15:30", "next_day_enabled": True, "ship_days": WEEKDAYS, "pickup_same_day_enabled": True},
            "PLASTICS": {"cutoff_local": "14:30", "next_day_enabled": True, "ship_days": WEEKDAYS, "pickup_same_day_enabled": False},
            "SUPPLIES": {"cutoff_local": "16:00", "next_day_enabled": True, "ship_days": WEEKDAYS_AND_SATURDAY, "pickup_same_day_enabled": True},
            "OUTLET": {"cutoff_local": "17:00", "next_day_enabled": True, "ship_days": WEEKDAYS_AND_SATURDAY, "pickup_same_day_enabled": True},
        },
        "blackout_windows": [
            {"start": "2026-02-15", "end": "2026-02-16", "reason": "President's Day Maintenance"},
            {"start": "2026-07-03", "end": "2026-07-04", "reason": "Independence Day"},
        ],
        "notes": "Cutoff times are local to branch (Eastern)",
    },
    {
        "location_id": "loc-2",
        "location_name": "Detroit",
        "timezone": "America/Detroit",
        "division_rules": {
            "METALS": {"cutoff_local": "14:00", "next_day_enabled": True, "ship_days": WEEKDAYS, "pickup_same_day_enabled": True},
            "PLASTICS": {"cutoff_local": "13:30", "next_day_enabled": True, "ship_days": WEEKDAYS, "pickup_same_day_enabled": False},
            "SUPPLIES": {"cutoff_local": "15:00", "next_day_enabled": True, "ship_days": WEEKDAYS, "pickup_same_day_enabled": True},
            "OUTLET": {"cutoff_local": "15:00", "next_day_enabled": True, "ship_days": WEEKDAYS, "pickup_same_day_enabled": True},
        },
        "blackout_windows": [
            {"start": "2026-02-15", "end": "2026-02-16", "reason": "President's Day Maintenance"},
        ],
        "notes": "Detroit branch, Eastern time",
    },
    {
        "location_id": "loc-3",
        "location_name": "Kalamazoo",
        "timezone": "America/Detroit",
        "division_rules": {
            "METALS": {"cutoff_local": "15:00", "next_day_enabled": True, "ship_days": WEEKDAYS, "pickup_same_day_enabled": False},
            "PLASTICS": {"cutoff_local": "14:00", "next_day_enabled": False, "ship_days": WEEKDAYS, "pickup_same_day_enabled": False},
            "SUPPLIES": {"cutoff_local": "15:30", "next_day_enabled": True, "ship_days": WEEKDAYS, "pickup_same_day_enabled": True},
            "OUTLET": {"cutoff_local": "16:00", "next_day_enabled": True, "ship_days": WEEKDAYS, "pickup_same_day_enabled": False},
        },
        "blackout_windows": [],
        "notes": "Kalamazoo branch, Eastern time",
    },
    {
        "location_id": "loc-4",
        "location_name": "Grand Rapids",
        "timezone": "America/Detroit",
        "division_rules": {
            "METALS": {"cutoff_local": "14:30", "next_day_enabled": True, "ship_days": WEEKDAYS, "pickup_same_day_enabled": True},
            "PLASTICS": {"cutoff_local": "13:00", "next_day_enabled": True, "ship_days": WEEKDAYS, "pickup_same_day_enabled": False},
            "SUPPLIES": {"cutoff_local": "15:00", "next_day_enabled": True, "ship_days": WEEKDAYS_AND_SATURDAY, "pickup_same_day_enabled": True},
            "OUTLET": {"cutoff_local": "16:00", "next_day_enabled": True, "ship_days": WEEKDAYS_AND_SATURDAY, "pickup_same_day_enabled": True},
        },
        "blackout_windows": [
            {"start": "2026-12-24", "end": "2026-12-25", "reason": "Christmas Eve / Christmas"},
        ],
        "notes": "Grand Rapids branch, Eastern time",
    },
]


# =============================================================================
# BRANCH DIRECTORY
# =============================================================================
# Coordinates are branch addresses; capabilities are processing operations.

DEFAULT_BRANCHES = [
    {"location_id": "loc-1", "name": "Jackson", "csr_key": "JACKSON", "state": "MI",
     "coordinate": {"lat": 42.2458, "lng": -84.4013},
     "capabilities": ["SAW", "SHEAR", "PLASMA", "WATERJET", "BEND", "DRILL"]},
    {"location_id": "loc-2", "name": "Detroit", "csr_key": "DETROIT", "state": "MI",
     "coordinate": {"lat": 42.3314, "lng": -83.0458},
     "capabilities": ["SAW", "SHEAR", "PLASMA", "DRILL"]},
    {"location_id": "loc-3", "name": "Kalamazoo", "csr_key": "KALAMAZOO", "state": "MI",
     "coordinate": {"lat": 42.2917, "lng": -85.5872},
     "capabilities": ["SAW", "SHEAR", "BEND"]},
    {"location_id": "loc-4", "name": "Grand Rapids", "csr_key": "GRAND_RAPIDS", "state": "MI",
     "coordinate": {"lat": 42.9634, "lng": -85.6681},
     "capabilities": ["SAW", "SHEAR", "PLASMA", "WATERJET", "BEND"]},
]


# =============================================================================
# INVENTORY SNAPSHOT
# =============================================================================

DEFAULT_BRANCH_INVENTORY = {
    "loc-1": {
        "METALS": {"qty_on_hand": 245, "weight_lbs": 82400, "sku_count": 38},
        "PLASTICS": {"qty_on_hand": 120, "weight_lbs": 18900, "sku_count": 14},
        "SUPPLIES": {"qty_on_hand": 500, "weight_lbs": 2200, "sku_count": 55},
        "OUTLET": {"qty_on_hand": 30, "weight_lbs": 6200, "sku_count": 12},
    },
    "loc-2": {
        "METALS": {"qty_on_hand": 180, "weight_lbs": 64000, "sku_count": 28},
        "PLASTICS": {"qty_on_hand": 40, "weight_lbs": 5600, "sku_count": 6},
        "SUPPLIES": {"qty_on_hand": 350, "weight_lbs": 1500, "sku_count": 40},
        "OUTLET": {"qty_on_hand": 15, "weight_lbs": 3100, "sku_count": 8},
    },
    "loc-3": {
        "METALS": {"qty_on_hand": 90, "weight_lbs": 31200, "sku_count": 15},
        "PLASTICS": {"qty_on_hand": 85, "weight_lbs": 12800, "sku_count": 10},
        "SUPPLIES": {"qty_on_hand": 200, "weight_lbs": 900, "sku_count": 28},
        "OUTLET": {"qty_on_hand": 8, "weight_lbs": 1600, "sku_count": 5},
    },
    "loc-4": {
        "METALS": {"qty_on_hand": 160, "weight_lbs": 55000, "sku_count": 25},
        "PLASTICS": {"qty_on_hand": 60, "weight_lbs": 8400, "sku_count": 9},
        "SUPPLIES": {"qty_on_hand": 300, "weight_lbs": 1300, "sku_count": 35},
        "OUTLET": {"qty_on_hand": 20, "weight_lbs": 4200, "sku_count": 10},
    },
}
