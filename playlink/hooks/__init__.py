# Playlink Hooks Module
# Operator policy checkpoints and hook file loading

from playlink.hooks.loader import load_hooks, pipeline_from_module
from playlink.hooks.pipeline import (
    PRE_CYCLE,
    PRE_LINK,
    PRE_PLAYER,
    HookPipeline,
    LinkDecision,
)

__all__ = [
    # Pipeline
    "HookPipeline",
    "LinkDecision",
    "PRE_LINK",
    "PRE_PLAYER",
    "PRE_CYCLE",
    # Loader
    "load_hooks",
    "pipeline_from_module",
]
