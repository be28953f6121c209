# Playlink Hook Tests
# Tests for the hook pipeline and the hooks file loader

import asyncio
from io import StringIO
from pathlib import Path

import pytest

from playlink.config.schema import MalformedPolicy
from playlink.errors import HookError
from playlink.hooks.loader import load_hooks
from playlink.hooks.pipeline import (
    DEFAULT_DENY_REASON,
    PRE_CYCLE,
    PRE_LINK,
    PRE_PLAYER,
    HookPipeline,
    LinkDecision,
)
from playlink.logger import PlaylinkLogger


class TestPreLink:
    """Tests for the pre-link checkpoint."""

    def test_no_hooks_allows(self, logger: PlaylinkLogger):
        decision = asyncio.run(HookPipeline.allow_all(logger).pre_link("1"))
        assert decision == LinkDecision(allowed=True)

    def test_short_circuits_on_first_denial(self, logger: PlaylinkLogger):
        calls = []

        def hook_a(session):
            calls.append("a")
            return True

        def hook_b(session):
            calls.append("b")
            return "Nope"

        def hook_c(session):
            calls.append("c")
            return True

        pipeline = HookPipeline(pre_link=[hook_a, hook_b, hook_c], logger=logger)
        decision = asyncio.run(pipeline.pre_link("1"))

        assert decision == LinkDecision.deny("Nope")
        assert calls == ["a", "b"]

    def test_async_hooks(self, logger: PlaylinkLogger):
        async def slow_allow(session):
            await asyncio.sleep(0)
            return True

        async def slow_deny(session):
            return LinkDecision.deny("Come back later")

        pipeline = HookPipeline(pre_link=[slow_allow, slow_deny], logger=logger)
        assert asyncio.run(pipeline.pre_link("1")).reason == "Come back later"

    @pytest.mark.parametrize("result", [False, None, 0, []])
    def test_non_allow_results_use_default_reason(self, logger: PlaylinkLogger, result):
        pipeline = HookPipeline(pre_link=[lambda session: result], logger=logger)
        decision = asyncio.run(pipeline.pre_link("1"))
        assert not decision.allowed
        assert decision.reason == DEFAULT_DENY_REASON

    def test_truthy_but_not_true_denies(self, logger: PlaylinkLogger):
        pipeline = HookPipeline(pre_link=[lambda session: 1], logger=logger)
        assert not asyncio.run(pipeline.pre_link("1")).allowed

    def test_hook_receives_session(self, logger: PlaylinkLogger):
        seen = []
        pipeline = HookPipeline(pre_link=[lambda session: seen.append(session) or True], logger=logger)
        asyncio.run(pipeline.pre_link("42"))
        assert seen == ["42"]

    def test_exception_raises_hook_error(self, logger: PlaylinkLogger):
        def broken(session):
            raise ValueError("bad data")

        pipeline = HookPipeline(pre_link=[broken], logger=logger)
        with pytest.raises(HookError) as exc_info:
            asyncio.run(pipeline.pre_link("1"))

        assert exc_info.value.checkpoint == PRE_LINK
        assert isinstance(exc_info.value.cause, ValueError)
        assert "bad data" in str(exc_info.value)


class TestPrePlayerAndCycle:
    """Tests for the boolean checkpoints."""

    def test_pre_player_only_false_excludes(self, logger: PlaylinkLogger):
        pipeline = HookPipeline(pre_player=[lambda session: None], logger=logger)
        assert asyncio.run(pipeline.pre_player("1")) is True

        pipeline = HookPipeline(pre_player=[lambda session: False], logger=logger)
        assert asyncio.run(pipeline.pre_player("1")) is False

    def test_pre_cycle_short_circuits(self, logger: PlaylinkLogger):
        calls = []
        pipeline = HookPipeline(
            pre_cycle=[lambda: calls.append("a") or False, lambda: calls.append("b") or True],
            logger=logger,
        )
        assert asyncio.run(pipeline.pre_cycle()) is False
        assert calls == ["a"]

    def test_pre_cycle_async(self, logger: PlaylinkLogger):
        async def allowed():
            return True

        pipeline = HookPipeline(pre_cycle=[allowed], logger=logger)
        assert asyncio.run(pipeline.pre_cycle()) is True


class TestMalformedHooks:
    """Tests for missing or malformed hook lists."""

    @pytest.mark.parametrize("hooks", [None, "not a list", 42, {"a": 1}])
    def test_malformed_list_warns_and_allows(self, logger: PlaylinkLogger, log_output: StringIO, hooks):
        pipeline = HookPipeline(pre_cycle=hooks, logger=logger)

        assert pipeline.is_malformed(PRE_CYCLE)
        assert pipeline.count(PRE_CYCLE) == 0
        assert asyncio.run(pipeline.pre_cycle()) is True
        assert "pre_cycle hooks are not a list" in log_output.getvalue()

    def test_malformed_list_with_deny_policy(self, logger: PlaylinkLogger):
        pipeline = HookPipeline(pre_link=None, pre_player=None, logger=logger, malformed_policy=MalformedPolicy.DENY)

        assert not asyncio.run(pipeline.pre_link("1")).allowed
        assert asyncio.run(pipeline.pre_player("1")) is False
        assert asyncio.run(pipeline.pre_cycle()) is True

    def test_tuple_is_accepted(self, logger: PlaylinkLogger):
        pipeline = HookPipeline(pre_player=(lambda session: True,), logger=logger)
        assert not pipeline.is_malformed(PRE_PLAYER)
        assert pipeline.count(PRE_PLAYER) == 1

    def test_non_callable_members_skipped(self, logger: PlaylinkLogger, log_output: StringIO):
        pipeline = HookPipeline(pre_link=["oops", lambda session: "Denied", 3], logger=logger)

        assert pipeline.count(PRE_LINK) == 1
        assert asyncio.run(pipeline.pre_link("1")).reason == "Denied"
        assert "pre_link hook #0 is not callable" in log_output.getvalue()
        assert "pre_link hook #2 is not callable" in log_output.getvalue()


HOOKS_FILE = """
PRE_LINK_HOOKS = [lambda session: "Linking is closed"]
PRE_PLAYER_HOOKS = []
PRE_CYCLE_HOOKS = []
SETUP_ARGS = []


def setup(host, http):
    SETUP_ARGS.append((host, http))
    PRE_PLAYER_HOOKS.append(lambda session: session != "banned")
"""


class TestLoadHooks:
    """Tests for load_hooks()."""

    def test_no_path_allows_all(self, logger: PlaylinkLogger):
        pipeline = load_hooks(None, logger=logger)
        assert pipeline.count(PRE_LINK) == 0
        assert not pipeline.is_malformed(PRE_LINK)

    def test_loads_lists_and_calls_setup(self, temp_dir: Path, logger: PlaylinkLogger, log_output: StringIO):
        path = temp_dir / "hooks.py"
        path.write_text(HOOKS_FILE, encoding="utf-8")
        host, http = object(), object()

        pipeline = load_hooks(path, host=host, http=http, logger=logger)

        assert pipeline.count(PRE_LINK) == 1
        assert pipeline.count(PRE_PLAYER) == 1
        assert pipeline.count(PRE_CYCLE) == 0
        assert asyncio.run(pipeline.pre_link("1")).reason == "Linking is closed"
        assert asyncio.run(pipeline.pre_player("banned")) is False
        assert "1 pre-link, 1 pre-player, 0 pre-cycle" in log_output.getvalue()

    def test_missing_lists_are_malformed(self, temp_dir: Path, logger: PlaylinkLogger):
        path = temp_dir / "hooks.py"
        path.write_text("PRE_LINK_HOOKS = []\n", encoding="utf-8")

        pipeline = load_hooks(path, logger=logger, malformed_policy=MalformedPolicy.DENY)

        assert not pipeline.is_malformed(PRE_LINK)
        assert pipeline.is_malformed(PRE_PLAYER)
        assert asyncio.run(pipeline.pre_cycle()) is False

    def test_missing_file_runs_without_hooks(self, temp_dir: Path, logger: PlaylinkLogger, log_output: StringIO):
        pipeline = load_hooks(temp_dir / "absent.py", logger=logger)

        assert asyncio.run(pipeline.pre_link("1")).allowed
        assert "Could not load hooks" in log_output.getvalue()

    def test_broken_file_runs_without_hooks(self, temp_dir: Path, logger: PlaylinkLogger, log_output: StringIO):
        path = temp_dir / "hooks.py"
        path.write_text("raise RuntimeError('broken hooks')\n", encoding="utf-8")

        pipeline = load_hooks(path, logger=logger)

        assert asyncio.run(pipeline.pre_cycle()) is True
        assert "broken hooks" in log_output.getvalue()

    def test_failing_setup_runs_without_hooks(self, temp_dir: Path, logger: PlaylinkLogger):
        path = temp_dir / "hooks.py"
        path.write_text(
            "PRE_LINK_HOOKS = [lambda s: False]\n\ndef setup(host, http):\n    raise KeyError('x')\n",
            encoding="utf-8",
        )

        pipeline = load_hooks(path, logger=logger)
        assert pipeline.count(PRE_LINK) == 0
