# Playlink Cycle Outcomes
# Outcome types and the pure outcome -> next delay decision table

import re
from dataclasses import dataclass
from enum import Enum

from playlink.config.schema import ScheduleConfig


class OutcomeKind(str, Enum):
    """What happened during one sync cycle."""

    SUCCESS = "success"
    EMPTY = "empty"  # No identifiers left after pre-player filtering
    GATED = "gated"  # A hook vetoed or failed the cycle
    RATE_LIMITED = "rate_limited"
    TRANSIENT_FAILURE = "transient_failure"  # Any other non-2xx status
    NETWORK_ERROR = "network_error"


@dataclass(frozen=True)
class CycleOutcome:
    """Outcome of a single cycle; drives the next delay."""

    kind: OutcomeKind
    retry_after: float | None = None
    detail: str = ""


@dataclass(frozen=True)
class Decision:
    """Next delay in seconds and the updated consecutive-failure count."""

    delay: float
    failures: int


def decide(outcome: CycleOutcome, failures: int, schedule: ScheduleConfig) -> Decision:
    """
    Apply the scheduling table to a cycle outcome.

    Only SUCCESS resets the failure count and only NETWORK_ERROR increments
    it; every other outcome leaves it unchanged.

    Args:
        outcome: Outcome of the cycle that just finished.
        failures: Consecutive network errors before this cycle.
        schedule: Configured delays.

    Returns:
        Decision for the next cycle.
    """
    kind = outcome.kind

    if kind == OutcomeKind.SUCCESS:
        return Decision(schedule.success_delay, 0)

    if kind == OutcomeKind.RATE_LIMITED:
        delay = outcome.retry_after if outcome.retry_after else schedule.rate_limit_delay
        return Decision(delay, failures)

    if kind == OutcomeKind.NETWORK_ERROR:
        failures += 1
        if failures < schedule.failure_threshold:
            return Decision(schedule.retry_delay, failures)
        return Decision(schedule.escalated_delay, failures)

    # EMPTY, GATED, TRANSIENT_FAILURE
    return Decision(schedule.retry_delay, failures)


def _positive_int(value: str) -> int | None:
    value = value.strip()
    if not re.fullmatch(r"[0-9]+", value):
        return None
    try:
        number = int(value)
    except ValueError:
        # Longer than the interpreter's int string conversion limit
        return None
    return number if number > 0 else None


def _scaled_delay(number: int | None, scale: int, default: float) -> float:
    if not number:
        return default
    try:
        return float(number * scale)
    except OverflowError:
        return default


def resolve_retry_after(header: str | None, body: str, default: float) -> float:
    """
    Seconds to wait after a 429 response.

    A non-empty Retry-After header is authoritative: its first comma-separated
    part, if a positive integer, is the delay in seconds, otherwise default.
    Without the header, every non-digit is stripped from the body and a
    positive remainder is read as minutes. Numbers too large for a float
    also give default.

    The body heuristic concatenates all digits, so "retry in 1 to 5 minutes"
    yields 15 minutes.
    """
    if header:
        return _scaled_delay(_positive_int(header.split(",")[0]), 1, default)

    return _scaled_delay(_positive_int(re.sub(r"[^0-9]", "", body)), 60, default)
