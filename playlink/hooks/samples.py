"""Ready-made hooks that operators can list in their hooks file.

Hooks that need the host or the HTTP client are added from an optional
``setup(host, http)`` function, which the loader calls before reading the
lists::

    from playlink.hooks.samples import maintenance_window, min_playtime, still_connected

    PRE_LINK_HOOKS = []
    PRE_PLAYER_HOOKS = []
    PRE_CYCLE_HOOKS = [maintenance_window(hour=2)]


    def setup(host, http):
        PRE_LINK_HOOKS.append(min_playtime(http, host, cfx_server_id="37dmmz"))
        PRE_PLAYER_HOOKS.append(still_connected(host))
"""

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Optional

from playlink.errors import NetworkError
from playlink.host.base import Host
from playlink.http.client import HttpClient
from playlink.logger import PlaylinkLogger

PLAYTIME_URL = "https://lambda.fivem.net/api/ticket/playtimes/{server_id}"


def min_playtime(
    http: HttpClient,
    host: Host,
    *,
    cfx_server_id: str,
    min_seconds: int = 60 * 60,
    scheme: str = "fivem",
    url_template: str = PLAYTIME_URL,
    logger: Optional[PlaylinkLogger] = None,
) -> Callable[[str], Awaitable[bool | str]]:
    """Pre-link hook: require min_seconds of playtime on this server."""
    logger = logger or PlaylinkLogger()

    async def check_playtime(session: str) -> bool | str:
        identifier = host.identifier(session, scheme)
        if not identifier:
            return "Failed to get your license identifier. Please try again."

        try:
            res = await http.request(
                url_template.format(server_id=cfx_server_id),
                params=[("identifiers[]", identifier)],
            )
        except NetworkError as e:
            logger.error(f"Failed to fetch player playtime: {e}")
            return "Failed to verify your playtime. Please try again later."

        if not res.ok:
            logger.error(f"Failed to fetch player playtime: {res.text()}")
            return "Failed to verify your playtime. Please try again later."

        data = res.json()
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            logger.error(f"Invalid playtime response format: {data!r}")
            return "Failed to verify your playtime. Please try again later."

        seconds = data[0].get("seconds")
        if not isinstance(seconds, (int, float)) or isinstance(seconds, bool):
            logger.error(f"Invalid playtime response format: {data!r}")
            return "Failed to verify your playtime. Please try again later."

        if seconds < min_seconds:
            hours = min_seconds / 3600
            return f"You need at least {hours:g} hour(s) of playtime on this server to link your account."
        return True

    return check_playtime


def still_connected(host: Host) -> Callable[[str], bool]:
    """Pre-player hook: skip sessions that left since enumeration."""

    def is_connected(session: str) -> bool:
        return session in set(host.active_sessions())

    return is_connected


def maintenance_window(
    *,
    hour: int = 2,
    clock: Callable[[], datetime] = datetime.now,
    logger: Optional[PlaylinkLogger] = None,
) -> Callable[[], bool]:
    """Pre-cycle hook: no pings during the given local hour."""
    logger = logger or PlaylinkLogger()

    def outside_window() -> bool:
        if clock().hour == hour:
            logger.info("Skipping ping due to maintenance window.")
            return False
        return True

    return outside_window
