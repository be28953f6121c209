# Playlink Sync State
# Process-lifetime scheduler state

import asyncio
from dataclasses import dataclass
from typing import Optional

from playlink.sync.outcome import CycleOutcome


@dataclass
class SyncState:
    """
    Mutable state owned by a single SyncScheduler.

    Reset on every process start; never persisted.
    """

    consecutive_failures: int = 0
    pending: Optional[asyncio.TimerHandle] = None
    cycles: int = 0
    last_outcome: Optional[CycleOutcome] = None
    next_delay: Optional[float] = None

    @property
    def has_pending(self) -> bool:
        """Whether a next cycle is armed."""
        return self.pending is not None and not self.pending.cancelled()

    def cancel_pending(self) -> None:
        """Cancel the armed timer, if any."""
        if self.pending is not None:
            self.pending.cancel()
            self.pending = None
