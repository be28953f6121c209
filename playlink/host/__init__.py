# Playlink Host Module
# Host-process collaborator protocol and adapters

from playlink.host.base import CommandHandler, Host, session_identifiers
from playlink.host.file_host import FileHost

__all__ = [
    "CommandHandler",
    "FileHost",
    "Host",
    "session_identifiers",
]
