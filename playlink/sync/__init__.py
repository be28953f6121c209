# Playlink Sync Module
# Periodic active-identifier sync with adaptive backoff

from playlink.sync.outcome import CycleOutcome, Decision, OutcomeKind, decide, resolve_retry_after
from playlink.sync.scheduler import SyncScheduler, format_delay
from playlink.sync.state import SyncState

__all__ = [
    # Outcome
    "CycleOutcome",
    "Decision",
    "OutcomeKind",
    "decide",
    "resolve_retry_after",
    # State
    "SyncState",
    # Scheduler
    "SyncScheduler",
    "format_delay",
]
