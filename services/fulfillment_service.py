"""
Fulfillment service — which branch should fill this order?

rank_branches() is the pure core: for every candidate it evaluates the
cutoff rule, runs the four scorers, sums the points and sorts. The
FulfillmentService wraps it with the concurrent fetch of each
candidate's rule set and inventory snapshot.

Ranking is a stable descending sort on total score: ties keep the
candidate input order, rank 1 is the single recommended branch.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence
from uuid import uuid4
import structlog

from config import settings
from exceptions import AppError, BranchNotFoundError, ConfigurationError
from models.cutoff_rules import CutoffStatus, Division, LocationCutoffRuleSet
from models.fulfillment import (
    BranchFacts,
    BranchProfile,
    ComponentScores,
    CutoffDetail,
    DistanceDetail,
    FulfillmentSuggestion,
    GeoCoordinate,
    InventoryDetail,
    ProcessingDetail,
    RankBranchesRequest,
)
from services.branch_facts_service import BranchFactsSource, build_branch_facts_source
from services.cutoff_rules_service import CutoffRulesService, get_cutoff_rules_service
from services.cutoff_service import evaluate_cutoff, unknown_status
from services.scoring_service import (
    ScoringConfig,
    score_cutoff,
    score_distance,
    score_inventory,
    score_processing,
)
from utils.time_utils import now_utc

logger = structlog.get_logger(__name__)


# ===================
# PURE RANKING
# ===================

def _candidate_cutoff(
    rules: Optional[LocationCutoffRuleSet],
    division: Division,
    now: datetime,
    location_id: str
) -> CutoffStatus:
    """Cutoff status for a candidate; unreadable rules count as unknown."""
    try:
        return evaluate_cutoff(rules, division, now)
    except ConfigurationError as e:
        logger.warning("candidate_rules_invalid", location_id=location_id, code=e.code)
        return unknown_status(division, location_id)


def _score_candidate(
    candidate: BranchFacts,
    rules: Optional[LocationCutoffRuleSet],
    division: Division,
    required_ops: Sequence[str],
    destination: Optional[GeoCoordinate],
    now: datetime,
    config: ScoringConfig
) -> dict[str, Any]:
    profile = candidate.profile
    status = _candidate_cutoff(rules, division, now, profile.location_id)

    inventory = score_inventory(candidate.inventory, division, config)
    cutoff = score_cutoff(status, config)
    processing = score_processing(profile.capabilities, required_ops, config)
    distance = score_distance(profile.coordinate, destination, config)

    components = ComponentScores(
        inventory=inventory.score,
        cutoff=cutoff.score,
        processing=processing.score,
        distance=distance.score,
    )

    return {
        "location_id": profile.location_id,
        "location_name": profile.name,
        "csr_key": profile.csr_key,
        "total_score": components.total,
        "component_scores": components,
        "reasons": [inventory.reason, cutoff.reason, processing.reason, distance.reason],
        "inventory": InventoryDetail(
            available=inventory.available,
            known=inventory.known,
            total_qty=inventory.total_qty,
            total_weight=inventory.total_weight,
        ),
        "cutoff": CutoffDetail(
            cutoff_local=cutoff.cutoff_local,
            minutes_left=cutoff.minutes_left,
            cutoff_met=cutoff.cutoff_met,
            is_valid_ship_day=status.is_valid_ship_day,
            is_blacked_out=status.is_blacked_out,
        ),
        "processing": ProcessingDetail(capable=processing.capable, missing_ops=processing.missing_ops),
        "distance": DistanceDetail(miles=distance.miles, estimate_label=distance.estimate_label),
    }


def rank_branches(
    candidates: Sequence[BranchFacts],
    rules_by_location: Mapping[str, Optional[LocationCutoffRuleSet]],
    division: Division,
    required_ops: Optional[Sequence[str]],
    now: datetime,
    destination: Optional[GeoCoordinate] = None,
    exclude_location_id: Optional[str] = None,
    config: ScoringConfig = ScoringConfig()
) -> list[FulfillmentSuggestion]:
    """
    Score and rank candidate branches.

    Pure: identical inputs and `now` give identical output, and no
    input is modified. A candidate without a resolvable rule set
    scores 0 for cutoff instead of aborting the run.

    Args:
        candidates: Branch facts in caller order
        rules_by_location: Rule set per location_id (missing or None = unknown)
        division: Division being ordered
        required_ops: Processing operations the order needs
        now: Evaluation instant
        destination: Ship-to coordinate
        exclude_location_id: Branch to leave out
        config: Weights and thresholds

    Returns:
        Suggestions ordered by rank, best first
    """
    scored = [
        _score_candidate(
            candidate,
            rules_by_location.get(candidate.location_id),
            division,
            required_ops or [],
            destination,
            now,
            config,
        )
        for candidate in candidates
        if not (exclude_location_id and candidate.location_id == exclude_location_id)
    ]

    # sorted() is stable, so equal totals keep input order
    ordered = sorted(scored, key=lambda row: -row["total_score"])

    return [
        FulfillmentSuggestion(rank=index + 1, is_recommended=index == 0, **row)
        for index, row in enumerate(ordered)
    ]


# ===================
# SERVICE
# ===================

@dataclass
class RankingContext:
    """
    Request-scoped state for one ranking call.

    Passed in by the caller and returned with the result, so retries
    and cancellation act on an explicit object.
    """

    request_id: str = field(default_factory=lambda: uuid4().hex)
    now: datetime = field(default_factory=now_utc)
    fetch_timeout_seconds: float = field(default_factory=lambda: settings.candidate_fetch_timeout_seconds)
    degraded: list[dict[str, str]] = field(default_factory=list)


@dataclass
class RankingResult:
    context: RankingContext
    suggestions: list[FulfillmentSuggestion]

    @property
    def recommended(self) -> Optional[FulfillmentSuggestion]:
        return self.suggestions[0] if self.suggestions else None


class FulfillmentService:
    """
    Branch comparison for an order.

    Fetches all candidates' facts concurrently, then ranks them in one
    pure pass. A failed or slow fetch degrades only its own candidate.
    """

    def __init__(
        self,
        rules_service: Optional[CutoffRulesService] = None,
        facts_source: Optional[BranchFactsSource] = None,
        config: Optional[ScoringConfig] = None
    ):
        self.rules_service = rules_service or get_cutoff_rules_service()
        self.facts_source = facts_source or build_branch_facts_source()
        self.config = config or ScoringConfig.from_settings(settings)

    async def _fetch(
        self,
        fetch: Callable[[str], Any],
        source: str,
        location_id: str,
        context: RankingContext
    ) -> tuple[bool, Any]:
        """
        Run one blocking fetch with the per-candidate timeout.

        Returns:
            (ok, value); ok is False when the fetch failed or timed out
        """
        try:
            value = await asyncio.wait_for(
                asyncio.to_thread(fetch, location_id),
                timeout=context.fetch_timeout_seconds,
            )
            return True, value
        except asyncio.TimeoutError:
            logger.warning(
                "candidate_fetch_timeout",
                request_id=context.request_id,
                source=source,
                location_id=location_id,
                timeout=context.fetch_timeout_seconds
            )
            reason = "timeout"
        except AppError as e:
            logger.warning(
                "candidate_fetch_failed",
                request_id=context.request_id,
                source=source,
                location_id=location_id,
                error=e.message
            )
            reason = e.code

        context.degraded.append({"location_id": location_id, "source": source, "reason": reason})
        return False, None

    async def _fetch_candidate(
        self,
        profile: BranchProfile,
        context: RankingContext
    ) -> tuple[BranchFacts, Optional[LocationCutoffRuleSet]]:
        (_, rules), (_, inventory) = await asyncio.gather(
            self._fetch(self.rules_service.find, "cutoff_rules", profile.location_id, context),
            self._fetch(self.facts_source.get_inventory, "branch_inventory", profile.location_id, context),
        )
        return BranchFacts(profile=profile, inventory=inventory), rules

    async def rank(
        self,
        request: RankBranchesRequest,
        context: Optional[RankingContext] = None
    ) -> RankingResult:
        """
        Rank every branch for the request.

        If the caller is cancelled, all in-flight fetches are cancelled
        with it and nothing is returned.

        Args:
            request: Division, required processing, ship-to, exclusion
            context: Request-scoped context (a new one if omitted)

        Returns:
            RankingResult with the context and the full ordered list
        """
        context = context or RankingContext()
        branches = await asyncio.to_thread(self.facts_source.list_branches)
        candidates = [
            b for b in branches
            if not (request.exclude_location_id and b.location_id == request.exclude_location_id)
        ]

        fetched = await asyncio.gather(
            *(self._fetch_candidate(profile, context) for profile in candidates)
        )

        suggestions = rank_branches(
            candidates=[facts for facts, _ in fetched],
            rules_by_location={facts.location_id: rules for facts, rules in fetched},
            division=request.division,
            required_ops=request.required_processing,
            now=context.now,
            destination=request.ship_to,
            exclude_location_id=request.exclude_location_id,
            config=self.config,
        )

        logger.info(
            "branches_ranked",
            request_id=context.request_id,
            division=request.division.value,
            candidates=len(suggestions),
            degraded=len(context.degraded),
            recommended=suggestions[0].location_id if suggestions else None
        )

        return RankingResult(context=context, suggestions=suggestions)

    async def get_branch_suitability(
        self,
        location_id: str,
        request: RankBranchesRequest,
        context: Optional[RankingContext] = None
    ) -> FulfillmentSuggestion:
        """
        One branch's row from a full comparison.

        Raises:
            BranchNotFoundError: If the branch is not ranked
        """
        unfiltered = request.model_copy(update={"exclude_location_id": None})
        result = await self.rank(unfiltered, context)
        for suggestion in result.suggestions:
            if suggestion.location_id == location_id:
                return suggestion
        raise BranchNotFoundError(location_id)

    def csr_key_to_location_id(self, csr_key: str) -> Optional[str]:
        """Map an order-intake location key (e.g. "JACKSON") to a location id."""
        for branch in self.facts_source.list_branches():
            if branch.csr_key == csr_key:
                return branch.location_id
        return None

    def location_id_to_csr_key(self, location_id: str) -> Optional[str]:
        """Map a location id to its order-intake location key."""
        for branch in self.facts_source.list_branches():
            if branch.location_id == location_id:
                return branch.csr_key
        return None


# Singleton
_fulfillment_service: Optional[FulfillmentService] = None


def get_fulfillment_service() -> FulfillmentService:
    global _fulfillment_service
    if _fulfillment_service is None:
        _fulfillment_service = FulfillmentService()
    return _fulfillment_service
