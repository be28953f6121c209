# Playlink Sync Scheduler
# Periodic ping of active identifiers with adaptive backoff

import asyncio
from typing import Optional

from playlink.config.schema import ScheduleConfig
from playlink.errors import HookError, NetworkError
from playlink.hooks.pipeline import HookPipeline
from playlink.host.base import Host, session_identifiers
from playlink.http.client import HttpClient, Response
from playlink.logger import PlaylinkLogger
from playlink.sync.outcome import CycleOutcome, Decision, OutcomeKind, decide, resolve_retry_after
from playlink.sync.state import SyncState


PRE_CYCLE_VETO = "vetoed by pre-cycle hook"


def format_delay(seconds: float) -> str:
    """Human-readable delay for log lines."""
    if seconds < 60:
        return f"{seconds:g} seconds"
    return f"{seconds:g} seconds ({seconds / 60:.2f} minutes)"


class SyncScheduler:
    """
    Single perpetual sync cycle driven by one owned timer.

    Each cycle collects identifiers of sessions that pass the pre-player
    hooks, checks the pre-cycle hooks, posts the identifiers to the remote
    service and re-arms the timer according to the outcome. A cycle always
    cancels the pending timer first, so at most one is ever armed.
    """

    def __init__(
        self,
        host: Host,
        pipeline: HookPipeline,
        http: HttpClient,
        base_url: str,
        *,
        schedule: Optional[ScheduleConfig] = None,
        schemes: Optional[list[str]] = None,
        logger: Optional[PlaylinkLogger] = None,
    ):
        """
        Initialize scheduler.

        Args:
            host: Host process adapter.
            pipeline: Operator hooks.
            http: HTTP client for the remote service.
            base_url: Remote base URL ending in '/'.
            schedule: Delay configuration.
            schemes: Identifier schemes collected per session.
            logger: Operator log.
        """
        self.host = host
        self.pipeline = pipeline
        self.http = http
        self.base_url = base_url
        self.schedule = schedule or ScheduleConfig()
        self.schemes = schemes or ["license2", "license"]
        self.logger = logger or PlaylinkLogger()
        self.state = SyncState()
        self._stopped = False
        self._task: Optional[asyncio.Task] = None

    @property
    def ping_url(self) -> str:
        return f"{self.base_url}ping"

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def in_flight(self) -> Optional[asyncio.Task]:
        """Cycle task started by the timer, while it runs."""
        if self._task is not None and not self._task.done():
            return self._task
        return None

    def start(self, delay: float = 0) -> None:
        """Arm the first cycle. Must be called from a running event loop."""
        self._stopped = False
        self._arm(delay)

    def shutdown(self) -> None:
        """Cancel the pending timer; a cycle in flight finishes without re-arming."""
        self._stopped = True
        self.state.cancel_pending()
        self.state.next_delay = None

    def _arm(self, delay: float) -> None:
        self.state.cancel_pending()
        if self._stopped:
            return
        loop = asyncio.get_running_loop()
        self.state.pending = loop.call_later(delay, self._fire)
        self.state.next_delay = delay

    def _fire(self) -> None:
        self.state.pending = None
        self._task = asyncio.get_running_loop().create_task(self.run_cycle())
        self._task.add_done_callback(self._cycle_done)

    def _cycle_done(self, task: asyncio.Task) -> None:
        """Log a cycle that died and keep the loop alive."""
        if task.cancelled():
            return
        error = task.exception()
        if error is None:
            return

        delay = self.schedule.retry_delay
        self.logger.error(f"Sync cycle crashed: {type(error).__name__}: {error}. Retrying in {format_delay(delay)}")
        self._arm(delay)

    async def collect_identifiers(self) -> list[str]:
        """
        Identifiers of every session that passes the pre-player hooks.

        Sessions are enumerated fresh; duplicates across schemes are kept.
        """
        identifiers: list[str] = []
        for session in list(self.host.active_sessions()):
            if not await self.pipeline.pre_player(session):
                continue
            identifiers.extend(session_identifiers(self.host, session, self.schemes))
        return identifiers

    def classify(self, response: Response) -> CycleOutcome:
        """Map a ping response onto a cycle outcome."""
        if response.ok:
            return CycleOutcome(OutcomeKind.SUCCESS)

        body = response.text()
        if response.status_code == 429:
            retry_after = resolve_retry_after(response.header("Retry-After"), body, self.schedule.rate_limit_delay)
            return CycleOutcome(OutcomeKind.RATE_LIMITED, retry_after=retry_after, detail=body)

        return CycleOutcome(OutcomeKind.TRANSIENT_FAILURE, detail=f"HTTP {response.status_code}: {body}")

    async def _execute(self) -> CycleOutcome:
        try:
            identifiers = await self.collect_identifiers()
            if not identifiers:
                return CycleOutcome(OutcomeKind.EMPTY)

            if not await self.pipeline.pre_cycle():
                return CycleOutcome(OutcomeKind.GATED, detail=PRE_CYCLE_VETO)

            self.logger.debug(f"Pinging {len(identifiers)} identifiers")
            response = await self.http.request(
                self.ping_url,
                "POST",
                headers={"Content-Type": "application/json"},
                body=identifiers,
            )
            return self.classify(response)
        except HookError as e:
            return CycleOutcome(OutcomeKind.GATED, detail=str(e))
        except NetworkError as e:
            return CycleOutcome(OutcomeKind.NETWORK_ERROR, detail=str(e))
        except Exception as e:
            # Unexpected faults back off like network errors
            return CycleOutcome(OutcomeKind.NETWORK_ERROR, detail=f"{type(e).__name__}: {e}")

    async def run_cycle(self) -> CycleOutcome:
        """
        Run one cycle now and re-arm the timer.

        Returns:
            The cycle outcome.
        """
        self.state.cancel_pending()

        outcome = await self._execute()
        decision = decide(outcome, self.state.consecutive_failures, self.schedule)

        self.state.consecutive_failures = decision.failures
        self.state.cycles += 1
        self.state.last_outcome = outcome
        self._log(outcome, decision)

        if self._stopped:
            self.logger.debug("Scheduler stopped during cycle, not re-arming")
        else:
            self._arm(decision.delay)
        return outcome

    def _log(self, outcome: CycleOutcome, decision: Decision) -> None:
        delay = format_delay(decision.delay)
        kind = outcome.kind

        if kind == OutcomeKind.SUCCESS:
            self.logger.info("Successfully pinged server")
        elif kind == OutcomeKind.EMPTY:
            self.logger.info(f"No players to ping, retrying in {delay}")
        elif kind == OutcomeKind.GATED and outcome.detail == PRE_CYCLE_VETO:
            self.logger.info(f"Ping aborted by pre-cycle hook, retrying in {delay}")
        elif kind == OutcomeKind.GATED:
            self.logger.error(f"Ping aborted, {outcome.detail}. Retrying in {delay}")
        elif kind == OutcomeKind.RATE_LIMITED:
            self.logger.warning(f"Rate limited, next ping will be attempted in {delay}")
        elif kind == OutcomeKind.TRANSIENT_FAILURE:
            self.logger.error(f"Failed to ping server, retrying in {delay}: {outcome.detail}")
        elif decision.failures >= self.schedule.failure_threshold:
            self.logger.error(
                f"Too many consecutive ping errors ({decision.failures}), retrying in {delay}. "
                f"Check the server configuration and network connection. Last error: {outcome.detail}"
            )
        else:
            self.logger.error(f"Error pinging server, retrying in {delay}: {outcome.detail}")
