"""
Business logic services.

Each service handles one domain area.
"""

from services.cutoff_rule_store import (
    CutoffRuleStore,
    InMemoryCutoffRuleStore,
    SupabaseCutoffRuleStore,
)
from services.cutoff_rules_service import CutoffRulesService, get_cutoff_rules_service
from services.cutoff_service import (
    CutoffService,
    get_cutoff_service,
    evaluate_cutoff,
    cutoff_indicator,
    describe_cutoff,
    evaluate_promise,
    next_valid_ship_day,
    suggested_ship_dates,
)
from services.cutoff_clock import CutoffClock
from services.branch_facts_service import (
    BranchFactsSource,
    InMemoryBranchFactsSource,
    SupabaseBranchFactsSource,
)
from services.fulfillment_service import (
    FulfillmentService,
    get_fulfillment_service,
    rank_branches,
    RankingContext,
    RankingResult,
)

__all__ = [
    "CutoffRuleStore",
    "InMemoryCutoffRuleStore",
    "SupabaseCutoffRuleStore",
    "CutoffRulesService",
    "get_cutoff_rules_service",
    "CutoffService",
    "get_cutoff_service",
    "evaluate_cutoff",
    "cutoff_indicator",
    "describe_cutoff",
    "evaluate_promise",
    "next_valid_ship_day",
    "suggested_ship_dates",
    "CutoffClock",
    "BranchFactsSource",
    "InMemoryBranchFactsSource",
    "SupabaseBranchFactsSource",
    "FulfillmentService",
    "get_fulfillment_service",
    "rank_branches",
    "RankingContext",
    "RankingResult",
]
