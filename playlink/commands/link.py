# Playlink Link Commands
# Player-issued connect/info sub-commands against the remote service

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Optional

from playlink.errors import HookError, NetworkError
from playlink.hooks.pipeline import DEFAULT_DENY_REASON, HookPipeline
from playlink.host.base import Host, session_identifiers
from playlink.http.client import HttpClient, Response
from playlink.logger import PlaylinkLogger

NO_LICENSE = "No valid game license found for your account."
NOT_REGISTERED = "This server is not registered with the account service. Please contact the server administrator."
TRY_AGAIN = "Failed to reach the account service. Please try again later."
UNKNOWN_COMMAND = "Unknown command."


@dataclass(frozen=True)
class ArgSpec:
    """A positional sub-command argument."""

    name: str
    help: str


@dataclass(frozen=True)
class SubCommand:
    """A sub-command with a fixed number of positional arguments."""

    name: str
    description: str
    handler: Callable[..., Awaitable[None]]
    args: tuple[ArgSpec, ...] = field(default_factory=tuple)

    @property
    def arity(self) -> int:
        return len(self.args)


class LinkCommands:
    """
    Handler for the resource's chat command.

    ``/<command> connect <token>`` links the player's identifiers to a remote
    account after the pre-link hooks allow it; ``/<command> info`` shows the
    link status and is not gated. Each invocation makes at most one request
    and never retries.
    """

    def __init__(
        self,
        host: Host,
        pipeline: HookPipeline,
        http: HttpClient,
        base_url: str,
        *,
        command_name: str = "playlink",
        schemes: Optional[list[str]] = None,
        chat_prefix: str = "[PLAYLINK]",
        logger: Optional[PlaylinkLogger] = None,
    ):
        self.host = host
        self.pipeline = pipeline
        self.http = http
        self.base_url = base_url
        self.command_name = command_name
        self.schemes = schemes or ["license2", "license"]
        self.chat_prefix = chat_prefix
        self.logger = logger or PlaylinkLogger()
        self.subcommands: dict[str, SubCommand] = {
            "connect": SubCommand(
                name="connect",
                description="Connect your account using the integration token",
                handler=self.connect,
                args=(ArgSpec("token", "Integration token from your account page"),),
            ),
            "info": SubCommand(
                name="info",
                description="Check your account link status",
                handler=self.info,
            ),
        }

    @property
    def connect_url(self) -> str:
        return f"{self.base_url}connect"

    def usage(self) -> str:
        names = "|".join(self.subcommands)
        return f"Usage: /{self.command_name} <{names}> [...args]"

    def subcommand_usage(self, subcommand: SubCommand) -> str:
        args = " ".join(f"<{arg.name}>" for arg in subcommand.args)
        return f"Usage: /{self.command_name} {subcommand.name} {args}".rstrip()

    def suggestion(self) -> tuple[str, list[dict[str, str]]]:
        """Help text and parameter help for chat suggestions."""
        return (
            "Link your account! Use a sub-command below.",
            [
                {"name": "|".join(self.subcommands), "help": "Sub-command to execute"},
                {"name": "args", "help": "Arguments for the sub-command (empty to show available arguments)"},
            ],
        )

    def reply(self, session: str, message: str) -> None:
        self.host.send_message(session, f"{self.chat_prefix} {message}")

    async def handle(self, session: str | None, args: list[str]) -> None:
        """
        Dispatch a raw command invocation.

        Args:
            session: Invoking session, or None for the host console.
            args: Raw arguments; the first one names the sub-command.
        """
        if session is None:
            self.logger.error("This command can only be run by a player.")
            return

        if not args:
            self.reply(session, f"Arguments required. {self.usage()}")
            return

        subcommand = self.subcommands.get(args[0])
        if subcommand is None:
            self.reply(session, f"{UNKNOWN_COMMAND} {self.usage()}")
            return

        command_args = list(args[1:])
        if len(command_args) != subcommand.arity:
            self.reply(session, f"Invalid arguments. {self.subcommand_usage(subcommand)}")
            return

        await subcommand.handler(session, *command_args)

    async def connect(self, session: str, token: str) -> None:
        """Link the session's identifiers to the account owning token."""
        identifiers = session_identifiers(self.host, session, self.schemes)
        if not identifiers:
            self.reply(session, NO_LICENSE)
            return

        try:
            decision = await self.pipeline.pre_link(session)
        except HookError as e:
            self.logger.error(str(e))
            self.reply(session, TRY_AGAIN)
            return

        if not decision.allowed:
            self.reply(session, decision.reason or DEFAULT_DENY_REASON)
            return

        params = [("license", identifier) for identifier in identifiers]
        params.append(("token", token))
        await self._request(session, "POST", params)

    async def info(self, session: str) -> None:
        """Show the link status of the session's identifiers."""
        identifiers = session_identifiers(self.host, session, self.schemes)
        if not identifiers:
            self.reply(session, NO_LICENSE)
            return

        await self._request(session, "GET", [("license", identifier) for identifier in identifiers])

    async def _request(self, session: str, method: str, params: list[tuple[str, str]]) -> None:
        try:
            response = await self.http.request(self.connect_url, method, params=params)
        except NetworkError as e:
            self.logger.error(f"Error connecting to server: {e}")
            self.reply(session, TRY_AGAIN)
            return

        self._report(session, response)

    def _report(self, session: str, response: Response) -> None:
        if response.status_code == 401:
            self.reply(session, NOT_REGISTERED)
            return

        if not response.ok:
            self.logger.error(f"Account service returned HTTP {response.status_code}: {response.text()}")
            self.reply(session, TRY_AGAIN)
            return

        self.reply(session, response.text())
