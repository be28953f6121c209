"""Playlink - active-player sync and account linking for game servers.

Keeps a remote accounting service informed of which player identities are
connected to a host server, and lets players link their in-game identity to
a remote account.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "HookPipeline",
    "HttpClient",
    "LinkCommands",
    "LinkDecision",
    "PlaylinkConfig",
    "PlaylinkResource",
    "SyncScheduler",
    "load_config",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name == "HookPipeline" or name == "LinkDecision":
        from playlink import hooks

        return getattr(hooks, name)
    if name == "HttpClient":
        from playlink.http import HttpClient

        return HttpClient
    if name == "LinkCommands":
        from playlink.commands import LinkCommands

        return LinkCommands
    if name in ("PlaylinkConfig", "load_config"):
        from playlink import config

        return getattr(config, name)
    if name == "PlaylinkResource":
        from playlink.resource import PlaylinkResource

        return PlaylinkResource
    if name == "SyncScheduler":
        from playlink.sync import SyncScheduler

        return SyncScheduler
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
