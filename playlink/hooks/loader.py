# Playlink Hook Loader
# Build a HookPipeline from an operator-supplied Python file

import importlib.util
from pathlib import Path
from types import ModuleType
from typing import Any, Optional

from playlink.config.schema import MalformedPolicy
from playlink.hooks.pipeline import PRE_CYCLE, PRE_LINK, PRE_PLAYER, HookPipeline
from playlink.logger import PlaylinkLogger

PRE_LINK_HOOKS = "PRE_LINK_HOOKS"
PRE_PLAYER_HOOKS = "PRE_PLAYER_HOOKS"
PRE_CYCLE_HOOKS = "PRE_CYCLE_HOOKS"
SETUP = "setup"


def import_hooks_module(path: Path) -> ModuleType:
    """
    Import a hooks file as a standalone module.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ImportError: If the file cannot be loaded as a module.
    """
    if not path.exists():
        raise FileNotFoundError(f"Hooks file not found: {path}")

    spec = importlib.util.spec_from_file_location(f"playlink_hooks_{path.stem}", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load hooks from {path}")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def pipeline_from_module(
    module: ModuleType,
    *,
    logger: Optional[PlaylinkLogger] = None,
    malformed_policy: MalformedPolicy = MalformedPolicy.ALLOW,
) -> HookPipeline:
    """Read the three hook lists from a module; absent lists count as malformed."""
    return HookPipeline(
        pre_link=getattr(module, PRE_LINK_HOOKS, None),
        pre_player=getattr(module, PRE_PLAYER_HOOKS, None),
        pre_cycle=getattr(module, PRE_CYCLE_HOOKS, None),
        logger=logger,
        malformed_policy=malformed_policy,
    )


def load_hooks(
    path: str | Path | None,
    *,
    host: Any = None,
    http: Any = None,
    logger: Optional[PlaylinkLogger] = None,
    malformed_policy: MalformedPolicy = MalformedPolicy.ALLOW,
) -> HookPipeline:
    """
    Load operator hooks from a file.

    No path gives an allow-all pipeline. A file that is missing, fails to
    import, or whose setup() raises is reported as a warning and also gives
    an allow-all pipeline.

    Args:
        path: Path to the hooks file, or None.
        host: Host passed to the module's optional setup(host, http).
        http: HttpClient passed to the module's optional setup(host, http).
        logger: Operator log.
        malformed_policy: Checkpoint result when a hook list is malformed.

    Returns:
        HookPipeline ready to inject into the scheduler and commands.
    """
    logger = logger or PlaylinkLogger()

    if path is None:
        return HookPipeline.allow_all(logger)

    hooks_path = Path(path).expanduser()
    try:
        module = import_hooks_module(hooks_path)
        setup = getattr(module, SETUP, None)
        if callable(setup):
            setup(host, http)
    except Exception as e:
        # A broken hooks file degrades to no hooks
        logger.warning(f"Could not load hooks from {hooks_path}: {e}. Running without hooks.")
        return HookPipeline.allow_all(logger)

    pipeline = pipeline_from_module(module, logger=logger, malformed_policy=malformed_policy)
    logger.info(
        f"Loaded hooks from {hooks_path}: "
        f"{pipeline.count(PRE_LINK)} pre-link, "
        f"{pipeline.count(PRE_PLAYER)} pre-player, "
        f"{pipeline.count(PRE_CYCLE)} pre-cycle"
    )
    return pipeline
