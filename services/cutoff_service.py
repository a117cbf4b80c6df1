"""
Cutoff service — is the next-day promise still honorable right now?

Evaluates a location's cutoff rules for one division at one instant
and derives the GREEN / YELLOW / RED indicator used by the live display.
Also evaluates a requested ship date against the same rules (the
promise check). Evaluation is pure; CutoffService adds the rule lookup
around it.
"""

from datetime import date, datetime, timedelta
from typing import Optional
import structlog

from config import settings
from exceptions import ConfigurationError, CutoffRulesNotFoundError, DatabaseError
from models.cutoff_rules import (
    BlackoutWindow,
    CutoffDisplay,
    CutoffIndicator,
    CutoffStatus,
    Division,
    DivisionCutoffRule,
    LocationCutoffRuleSet,
    PromiseEvaluation,
    PromiseReason,
)
from services.cutoff_rules_service import CutoffRulesService, get_cutoff_rules_service
from utils.time_utils import (
    civil_time_in,
    day_of_week,
    format_countdown,
    format_ship_date,
    format_ship_days,
    format_time_12,
    now_utc,
    parse_hhmm,
)

logger = structlog.get_logger(__name__)


# ===================
# EVALUATION
# ===================

def unknown_status(division: Division, location_id: Optional[str] = None) -> CutoffStatus:
    """Status for a location/division with no usable rule."""
    return CutoffStatus(location_id=location_id, division=division, rules_found=False)


def evaluate_cutoff(
    rules: Optional[LocationCutoffRuleSet],
    division: Division,
    now: datetime
) -> CutoffStatus:
    """
    Evaluate one division's cutoff rule at an instant.

    Steps:
        1. Read civil time in the location's zone
        2. Ship day = today's day of week is in the rule's ship days
        3. Blacked out = today's date falls in any blackout window
        4. minutes_remaining = cutoff minute-of-day - current minute-of-day
        5. Promise available = enabled, ship day, not blacked out, minutes > 0

    Args:
        rules: Location rule set, or None if it could not be loaded
        division: Division being evaluated
        now: Evaluation instant

    Returns:
        CutoffStatus (rules_found=False when no rule applies)

    Raises:
        ConfigurationError: If the stored zone or cutoff time is malformed
    """
    if rules is None:
        return unknown_status(division)

    rule = rules.rule_for(division)
    if rule is None:
        return unknown_status(division, rules.location_id)

    today = civil_time_in(now, rules.timezone)
    cutoff_hour, cutoff_minute = parse_hhmm(rule.cutoff_local, division.value)

    is_valid_ship_day = today.day_of_week in rule.ship_days
    blackout = rules.blackout_on(today.date_key)
    minutes_remaining = (cutoff_hour * 60 + cutoff_minute) - today.minute_of_day

    promise_available = (
        rule.next_day_enabled
        and is_valid_ship_day
        and blackout is None
        and minutes_remaining > 0
    )

    return CutoffStatus(
        location_id=rules.location_id,
        division=division,
        rules_found=True,
        cutoff_local=rule.cutoff_local,
        timezone=rules.timezone,
        minutes_remaining=minutes_remaining,
        is_valid_ship_day=is_valid_ship_day,
        is_blacked_out=blackout is not None,
        blackout_reason=blackout.reason if blackout else None,
        next_day_enabled=rule.next_day_enabled,
        promise_available=promise_available,
        local_date=today.date_key,
        local_time=today.time_key,
    )


def cutoff_indicator(status: CutoffStatus, soon_minutes: int = 60) -> CutoffIndicator:
    """
    Map a status onto the display tri-state.

    RED when the promise is off for today, YELLOW when no rule exists or
    the cutoff is within soon_minutes, GREEN otherwise.
    """
    if not status.rules_found:
        return CutoffIndicator.YELLOW
    if (
        not status.next_day_enabled
        or status.is_blacked_out
        or not status.is_valid_ship_day
        or status.minutes_remaining is None
        or status.minutes_remaining <= 0
    ):
        return CutoffIndicator.RED
    if status.minutes_remaining <= soon_minutes:
        return CutoffIndicator.YELLOW
    return CutoffIndicator.GREEN


def cutoff_label(status: CutoffStatus, indicator: CutoffIndicator) -> str:
    """Chip label for a status."""
    if not status.rules_found:
        return "Cutoff time unavailable"
    if not status.next_day_enabled:
        return "Next-day shipping not available"
    if status.is_blacked_out:
        reason = f" ({status.blackout_reason})" if status.blackout_reason else ""
        return f"Blackout{reason}: next-day promise not available today"
    if not status.is_valid_ship_day:
        return "Non-ship day: next-day promise not available today"
    if indicator == CutoffIndicator.RED:
        return "Next-day cutoff passed, earliest ships next business day"
    return f"Cutoff {format_time_12(status.cutoff_local)} ({format_countdown(status.minutes_remaining)})"


def upcoming_blackouts(
    rules: LocationCutoffRuleSet,
    now: datetime,
    days: int = 14
) -> list[BlackoutWindow]:
    """
    Blackout windows overlapping the next `days` days, today included.

    Args:
        rules: Location rule set
        now: Evaluation instant
        days: Look-ahead window

    Returns:
        Windows in stored order
    """
    today = civil_time_in(now, rules.timezone).date_key
    horizon = (date.fromisoformat(today) + timedelta(days=days)).isoformat()
    return [
        window for window in rules.blackout_windows
        if window.end >= today and window.start <= horizon
    ]


def describe_cutoff(
    rules: Optional[LocationCutoffRuleSet],
    division: Division,
    now: datetime,
    soon_minutes: int = 60,
    blackout_days: int = 14
) -> CutoffDisplay:
    """Evaluate and package everything the cutoff widget shows."""
    status = evaluate_cutoff(rules, division, now)
    indicator = cutoff_indicator(status, soon_minutes)
    rule = rules.rule_for(division) if rules else None

    return CutoffDisplay(
        indicator=indicator,
        label=cutoff_label(status, indicator),
        countdown=format_countdown(status.minutes_remaining),
        status=status,
        upcoming_blackouts=upcoming_blackouts(rules, now, blackout_days) if rules else [],
        ship_days_label=format_ship_days(rule.ship_days) if rule else None,
    )


# ===================
# PROMISE
# ===================

def is_ship_date(day: date, rule: DivisionCutoffRule, rules: LocationCutoffRuleSet) -> bool:
    """A ship day of the week that no blackout window covers."""
    return day_of_week(day) in rule.ship_days and rules.blackout_on(day.isoformat()) is None


def next_valid_ship_day(
    start: date,
    rule: DivisionCutoffRule,
    rules: LocationCutoffRuleSet,
    max_search: int = 30
) -> Optional[date]:
    """
    First valid ship date on or after start.

    Returns:
        The date, or None when none falls within max_search days
    """
    for offset in range(max_search):
        day = start + timedelta(days=offset)
        if is_ship_date(day, rule, rules):
            return day
    return None


def suggested_ship_dates(
    start: date,
    rule: DivisionCutoffRule,
    rules: LocationCutoffRuleSet,
    count: int = 3,
    max_search: int = 60
) -> list[date]:
    """Up to `count` valid ship dates on or after start."""
    dates: list[date] = []
    day = start
    for _ in range(max_search):
        if len(dates) >= count:
            break
        if is_ship_date(day, rule, rules):
            dates.append(day)
        day += timedelta(days=1)
    return dates


def no_rules_promise(
    division: Division,
    location_id: Optional[str] = None,
    requested_ship_date: Optional[date] = None
) -> PromiseEvaluation:
    return PromiseEvaluation(
        location_id=location_id,
        division=division,
        status=CutoffIndicator.YELLOW,
        message="No cutoff rules configured for this location",
        reasons=[PromiseReason.NO_RULES],
        requested_ship_date=requested_ship_date.isoformat() if requested_ship_date else None,
    )


def promise_status(
    reasons: list[PromiseReason],
    requested: date,
    today: date,
    earliest: Optional[date]
) -> tuple[CutoffIndicator, str]:
    """Indicator and message for the collected reasons."""
    earliest_text = f"earliest ship {format_ship_date(earliest)}" if earliest else "no ship date available"

    if not reasons:
        if requested == today:
            return CutoffIndicator.GREEN, "Same-day pickup available"
        if requested == today + timedelta(days=1):
            return CutoffIndicator.GREEN, "Next-day available"
        return CutoffIndicator.GREEN, "Ship date available"
    if PromiseReason.DATE_IN_PAST in reasons:
        return CutoffIndicator.RED, "Requested date is in the past"
    if PromiseReason.CUTOFF_PASSED in reasons:
        return CutoffIndicator.RED, f"Cutoff passed, {earliest_text}"
    if PromiseReason.NON_SHIP_DAY in reasons or PromiseReason.BLACKOUT_WINDOW in reasons:
        return CutoffIndicator.RED, f"Date unavailable, {earliest_text}"
    if PromiseReason.SAME_DAY_NOT_AVAILABLE in reasons:
        return CutoffIndicator.RED, f"Same-day pickup not available, {earliest_text}"
    return CutoffIndicator.YELLOW, "Next-day shipping not available for this division"


def evaluate_promise(
    rules: Optional[LocationCutoffRuleSet],
    division: Division,
    now: datetime,
    requested_ship_date: Optional[date] = None,
    max_search_days: int = 30
) -> PromiseEvaluation:
    """
    Evaluate a requested ship date against a division's rules.

    The requested date (tomorrow when omitted) is checked for:
        - next-day shipping enabled for the division
        - ship day of the week, outside every blackout window
        - tomorrow: today's cutoff not yet passed
        - today: same-day pickup enabled and cutoff not yet passed
        - not before today

    The earliest ship date is searched from tomorrow, or from the day
    after once today's cutoff has passed.

    Args:
        rules: Location rule set, or None if it could not be loaded
        division: Division being promised
        now: Evaluation instant
        requested_ship_date: Local ship date asked for
        max_search_days: Days scanned for the earliest ship date

    Returns:
        PromiseEvaluation (YELLOW with NO_RULES when no rule applies)

    Raises:
        ConfigurationError: If the stored zone or cutoff time is malformed
    """
    rule = rules.rule_for(division) if rules else None
    if rule is None:
        return no_rules_promise(division, rules.location_id if rules else None, requested_ship_date)

    local = civil_time_in(now, rules.timezone)
    cutoff_hour, cutoff_minute = parse_hhmm(rule.cutoff_local, division.value)
    cutoff_passed = local.minute_of_day >= cutoff_hour * 60 + cutoff_minute

    today = date(local.year, local.month, local.day)
    tomorrow = today + timedelta(days=1)
    requested = requested_ship_date or tomorrow
    blackout = rules.blackout_on(requested.isoformat())

    reasons: list[PromiseReason] = []
    if not rule.next_day_enabled:
        reasons.append(PromiseReason.NEXT_DAY_DISABLED)
    if day_of_week(requested) not in rule.ship_days:
        reasons.append(PromiseReason.NON_SHIP_DAY)
    if blackout is not None:
        reasons.append(PromiseReason.BLACKOUT_WINDOW)
    if requested == tomorrow and cutoff_passed:
        reasons.append(PromiseReason.CUTOFF_PASSED)
    if requested == today:
        if not rule.pickup_same_day_enabled:
            reasons.append(PromiseReason.SAME_DAY_NOT_AVAILABLE)
        elif cutoff_passed:
            reasons.append(PromiseReason.CUTOFF_PASSED)
    if requested < today:
        reasons.append(PromiseReason.DATE_IN_PAST)

    search_start = tomorrow + timedelta(days=1) if cutoff_passed else tomorrow
    earliest = next_valid_ship_day(search_start, rule, rules, max_search_days)
    suggested = suggested_ship_dates(earliest, rule, rules) if earliest else []
    status, message = promise_status(reasons, requested, today, earliest)

    return PromiseEvaluation(
        location_id=rules.location_id,
        division=division,
        status=status,
        message=message,
        reasons=reasons,
        cutoff_local=rule.cutoff_local,
        cutoff_met=not cutoff_passed,
        local_date=local.date_key,
        local_time=local.time_key,
        requested_ship_date=requested.isoformat(),
        earliest_ship_date=earliest.isoformat() if earliest else None,
        suggested_dates=[day.isoformat() for day in suggested],
        blackout_reason=blackout.reason if blackout else None,
        pickup_same_day_enabled=rule.pickup_same_day_enabled,
    )


# ===================
# SERVICE
# ===================

class CutoffService:
    """
    Cutoff status lookups for a location.

    Read paths never fail the caller: a missing or unreadable rule set
    produces the "unavailable" display.
    """

    def __init__(self, rules_service: Optional[CutoffRulesService] = None):
        self.rules_service = rules_service or get_cutoff_rules_service()
        self.soon_minutes = settings.cutoff_soon_minutes
        self.blackout_days = settings.upcoming_blackout_days
        self.promise_search_days = settings.promise_search_days

    def get_display(
        self,
        location_id: str,
        division: Division,
        now: Optional[datetime] = None
    ) -> CutoffDisplay:
        """
        Current cutoff display for a location/division.

        Args:
            location_id: Location identifier
            division: Division being shown
            now: Evaluation instant (defaults to current time)

        Returns:
            CutoffDisplay, YELLOW "unavailable" when rules cannot load
        """
        now = now or now_utc()
        try:
            rules = self.rules_service.get(location_id)
            return describe_cutoff(rules, division, now, self.soon_minutes, self.blackout_days)
        except CutoffRulesNotFoundError:
            logger.info("cutoff_rules_missing", location_id=location_id)
        except (ConfigurationError, DatabaseError) as e:
            logger.warning("cutoff_rules_unavailable", location_id=location_id, code=e.code)

        status = unknown_status(division, location_id)
        indicator = cutoff_indicator(status, self.soon_minutes)
        return CutoffDisplay(
            indicator=indicator,
            label=cutoff_label(status, indicator),
            status=status,
        )

    def evaluate_promise(
        self,
        location_id: str,
        division: Division,
        requested_ship_date: Optional[date] = None,
        now: Optional[datetime] = None
    ) -> PromiseEvaluation:
        """
        Evaluate a requested ship date for a location/division.

        Args:
            location_id: Location identifier
            division: Division being promised
            requested_ship_date: Local ship date (defaults to tomorrow)
            now: Evaluation instant (defaults to current time)

        Returns:
            PromiseEvaluation, YELLOW NO_RULES when rules cannot load
        """
        now = now or now_utc()
        try:
            rules = self.rules_service.get(location_id)
            return evaluate_promise(rules, division, now, requested_ship_date, self.promise_search_days)
        except CutoffRulesNotFoundError:
            logger.info("cutoff_rules_missing", location_id=location_id)
        except (ConfigurationError, DatabaseError) as e:
            logger.warning("cutoff_rules_unavailable", location_id=location_id, code=e.code)

        return no_rules_promise(division, location_id, requested_ship_date)


# Singleton
_cutoff_service: Optional[CutoffService] = None


def get_cutoff_service() -> CutoffService:
    global _cutoff_service
    if _cutoff_service is None:
        _cutoff_service = CutoffService()
    return _cutoff_service
