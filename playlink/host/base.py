# Playlink Host Interface
# Collaborator protocol the resource consumes from its host process

from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Protocol

CommandHandler = Callable[[str | None, list[str]], Awaitable[None]]
LifecycleCallback = Callable[[], Any]
JoiningCallback = Callable[[str], Any]


class Host(Protocol):
    """
    The host process as seen by Playlink.

    Sessions are opaque string handles for connected players; None stands
    for the host console when a command is invoked outside a session.
    """

    @property
    def resource_name(self) -> str:
        """Name under which the host loaded this resource."""
        ...

    def active_sessions(self) -> Iterable[str]:
        """Currently connected sessions; may be empty."""
        ...

    def identifier(self, session: str, scheme: str) -> str | None:
        """Identifier of a session for a scheme, or None if it has none."""
        ...

    def send_message(self, session: str, message: str) -> None:
        """Deliver a chat message to a session."""
        ...

    def register_command(self, name: str, handler: CommandHandler) -> None:
        """Route a chat command to handler(session, args)."""
        ...

    def suggest_command(self, session: str, name: str, help_text: str, params: list[dict[str, str]]) -> None:
        """Show command help to a session's chat suggestions."""
        ...

    def on_stop(self, callback: LifecycleCallback) -> None:
        """Call back when the resource is being stopped."""
        ...

    def on_session_joining(self, callback: JoiningCallback) -> None:
        """Call back with each newly joining session."""
        ...

    def get_config(self, name: str, default: str) -> str:
        """Read a host configuration value."""
        ...

    def stop_self(self) -> None:
        """Ask the host to stop this resource."""
        ...


def session_identifiers(host: Host, session: str, schemes: Iterable[str]) -> list[str]:
    """
    Identifiers of a session for each scheme, in scheme order.

    Schemes the session has no identifier for are skipped.
    """
    identifiers = []
    for scheme in schemes:
        value = host.identifier(session, scheme)
        if value:
            identifiers.append(value)
    return identifiers
