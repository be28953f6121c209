# Playlink Commands Module
# Player chat commands for account linking

from playlink.commands.link import (
    NO_LICENSE,
    NOT_REGISTERED,
    TRY_AGAIN,
    ArgSpec,
    LinkCommands,
    SubCommand,
)

__all__ = [
    "LinkCommands",
    "SubCommand",
    "ArgSpec",
    "NO_LICENSE",
    "NOT_REGISTERED",
    "TRY_AGAIN",
]
