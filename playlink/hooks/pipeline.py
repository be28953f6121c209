# Playlink Hook Pipeline
# Ordered, short-circuiting operator policy checks

import inspect
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Optional

from playlink.config.schema import MalformedPolicy
from playlink.errors import HookError
from playlink.logger import PlaylinkLogger

PRE_LINK = "pre_link"
PRE_PLAYER = "pre_player"
PRE_CYCLE = "pre_cycle"

DEFAULT_DENY_REASON = "You are not allowed to link your account right now."


@dataclass(frozen=True)
class LinkDecision:
    """Result of the pre-link checkpoint."""

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> "LinkDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "LinkDecision":
        return cls(allowed=False, reason=reason)


def _hook_name(hook: Any) -> str:
    return getattr(hook, "__qualname__", None) or getattr(hook, "__name__", None) or repr(hook)


def _normalize_link_result(result: Any) -> LinkDecision:
    """Map a pre-link hook return value onto a LinkDecision."""
    if result is True:
        return LinkDecision.allow()
    if isinstance(result, LinkDecision):
        return result
    if isinstance(result, str):
        return LinkDecision.deny(result)
    return LinkDecision.deny(DEFAULT_DENY_REASON)


class HookPipeline:
    """
    Operator hooks for the three checkpoints.

    Each checkpoint holds an ordered list of predicates, sync or async.
    Evaluation is sequential and stops at the first non-allow result.

    A checkpoint whose list is missing or not a list is reported once and
    then behaves according to malformed_policy. Non-callable members are
    skipped with a warning. A predicate that raises is wrapped in HookError.
    """

    def __init__(
        self,
        *,
        pre_link: Any = (),
        pre_player: Any = (),
        pre_cycle: Any = (),
        logger: Optional[PlaylinkLogger] = None,
        malformed_policy: MalformedPolicy = MalformedPolicy.ALLOW,
    ):
        self.logger = logger or PlaylinkLogger()
        self.malformed_policy = MalformedPolicy(malformed_policy)
        self._malformed: set[str] = set()
        self._hooks: dict[str, list[Callable[..., Any]]] = {
            PRE_LINK: self._validate(PRE_LINK, pre_link),
            PRE_PLAYER: self._validate(PRE_PLAYER, pre_player),
            PRE_CYCLE: self._validate(PRE_CYCLE, pre_cycle),
        }

    @classmethod
    def allow_all(cls, logger: Optional[PlaylinkLogger] = None) -> "HookPipeline":
        """Pipeline with no hooks: every checkpoint allows."""
        return cls(logger=logger)

    def _validate(self, checkpoint: str, hooks: Any) -> list[Callable[..., Any]]:
        if hooks is None or isinstance(hooks, (str, bytes)) or not isinstance(hooks, Sequence):
            self.logger.warning(
                f"{checkpoint} hooks are not a list. Using '{self.malformed_policy.value}' for this checkpoint."
            )
            self._malformed.add(checkpoint)
            return []

        valid = []
        for index, hook in enumerate(hooks):
            if not callable(hook):
                self.logger.warning(f"{checkpoint} hook #{index} is not callable. Skipping the hook.")
                continue
            valid.append(hook)
        return valid

    def count(self, checkpoint: str) -> int:
        """Number of usable hooks registered for a checkpoint."""
        return len(self._hooks[checkpoint])

    def is_malformed(self, checkpoint: str) -> bool:
        """Whether the checkpoint fell back to malformed_policy."""
        return checkpoint in self._malformed

    def _malformed_allows(self, checkpoint: str) -> bool:
        return checkpoint not in self._malformed or self.malformed_policy == MalformedPolicy.ALLOW

    async def _call(self, checkpoint: str, hook: Callable[..., Any], *args: Any) -> Any:
        try:
            result = hook(*args)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            raise HookError(checkpoint, _hook_name(hook), e) from e
        return result

    async def pre_link(self, session: str) -> LinkDecision:
        """Decide whether a session may link its account."""
        if not self._malformed_allows(PRE_LINK):
            return LinkDecision.deny(DEFAULT_DENY_REASON)

        for hook in self._hooks[PRE_LINK]:
            decision = _normalize_link_result(await self._call(PRE_LINK, hook, session))
            if not decision.allowed:
                self.logger.debug(f"pre_link hook '{_hook_name(hook)}' denied session {session}")
                return decision
        return LinkDecision.allow()

    async def pre_player(self, session: str) -> bool:
        """Decide whether a session is included in the next ping."""
        if not self._malformed_allows(PRE_PLAYER):
            return False

        for hook in self._hooks[PRE_PLAYER]:
            if await self._call(PRE_PLAYER, hook, session) is False:
                self.logger.debug(f"pre_player hook '{_hook_name(hook)}' excluded session {session}")
                return False
        return True

    async def pre_cycle(self) -> bool:
        """Decide whether a sync cycle may contact the remote service."""
        if not self._malformed_allows(PRE_CYCLE):
            return False

        for hook in self._hooks[PRE_CYCLE]:
            if await self._call(PRE_CYCLE, hook) is False:
                self.logger.debug(f"pre_cycle hook '{_hook_name(hook)}' vetoed the cycle")
                return False
        return True
