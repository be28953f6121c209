"""Resource lifecycle: startup checks, component wiring and shutdown."""

from __future__ import annotations

import asyncio
from typing import Optional

from playlink.commands.link import LinkCommands
from playlink.config.schema import PlaylinkConfig
from playlink.errors import ConfigurationError
from playlink.hooks.loader import load_hooks
from playlink.hooks.pipeline import HookPipeline
from playlink.host.base import Host
from playlink.http.client import HttpClient
from playlink.logger import PlaylinkLogger
from playlink.sync.scheduler import SyncScheduler

# The remote service and the chat command both depend on this name
RESOURCE_NAME = "playlink"


class PlaylinkResource:
    """
    One running Playlink instance inside a host process.

    ``prepare()`` validates the host configuration and builds the scheduler
    and command handler; ``start()`` additionally arms the first sync cycle
    and registers with the host. Configuration problems stop the resource
    through the host and are never retried.
    """

    def __init__(
        self,
        host: Host,
        config: Optional[PlaylinkConfig] = None,
        *,
        pipeline: Optional[HookPipeline] = None,
        http: Optional[HttpClient] = None,
        logger: Optional[PlaylinkLogger] = None,
    ):
        self.host = host
        self.config = config or PlaylinkConfig()
        self.logger = logger or PlaylinkLogger(verbose=self.config.output.verbose)
        self.http = http or HttpClient(
            timeout=self.config.remote.timeout,
            user_agent=self.config.remote.user_agent,
            logger=self.logger,
        )
        self._pipeline = pipeline
        self.server_id: str | None = None
        self.scheduler: SyncScheduler | None = None
        self.commands: LinkCommands | None = None
        self.started = False

    def read_server_id(self) -> str:
        """
        Read the server identity from the host.

        Raises:
            ConfigurationError: If the value is unset or the resource is misnamed.
        """
        server = self.config.server
        server_id = self.host.get_config(server.convar_name, server.unset_value)
        if not server_id or server_id == server.unset_value:
            raise ConfigurationError(
                f"'{server.convar_name}' is not set. Please set it in your server configuration."
            )

        if self.host.resource_name != RESOURCE_NAME:
            raise ConfigurationError(
                f"Resource must be named '{RESOURCE_NAME}' to function properly. Please rename the resource folder."
            )

        return server_id

    def prepare(self) -> tuple[SyncScheduler, LinkCommands]:
        """
        Validate configuration and build components without starting them.

        Returns:
            The scheduler and the command handler, also kept as attributes.

        Raises:
            ConfigurationError: If the resource cannot run.
        """
        self.server_id = self.read_server_id()
        base_url = self.config.base_url(self.server_id)

        if self._pipeline is None:
            self._pipeline = load_hooks(
                self.config.hooks.module,
                host=self.host,
                http=self.http,
                logger=self.logger,
                malformed_policy=self.config.hooks.malformed_policy,
            )

        schemes = list(self.config.identifiers.schemes)
        self.scheduler = SyncScheduler(
            self.host,
            self._pipeline,
            self.http,
            base_url,
            schedule=self.config.schedule,
            schemes=schemes,
            logger=self.logger,
        )
        self.commands = LinkCommands(
            self.host,
            self._pipeline,
            self.http,
            base_url,
            command_name=RESOURCE_NAME,
            schemes=schemes,
            chat_prefix=self.config.chat.prefix,
            logger=self.logger,
        )
        return self.scheduler, self.commands

    def start(self) -> bool:
        """
        Start the resource. Must be called from a running event loop.

        Returns:
            True if started; False if the resource stopped itself.
        """
        try:
            scheduler, commands = self.prepare()
        except ConfigurationError as e:
            self.logger.error(str(e))
            self.host.stop_self()
            return False

        self.logger.info(f'Resource started, configured server ID: "{self.server_id}", initiating ping sequence...')

        scheduler.start()
        self.host.register_command(RESOURCE_NAME, commands.handle)
        self.host.on_session_joining(self.suggest_command)
        self.host.on_stop(self.stop)
        self.started = True
        return True

    def suggest_command(self, session: str) -> None:
        """Push the command's chat suggestion to a joining session."""
        if self.commands is None:
            return
        help_text, params = self.commands.suggestion()
        self.host.suggest_command(session, RESOURCE_NAME, help_text, params)

    async def stop(self) -> None:
        """
        Cancel the pending cycle and release the HTTP client.

        A cycle already in flight gets up to the request timeout to finish
        before the client is closed; it never re-arms.
        """
        if self.scheduler is not None:
            self.scheduler.shutdown()
            cycle = self.scheduler.in_flight
            if cycle is not None:
                await asyncio.wait([cycle], timeout=self.config.remote.timeout)
        await self.http.aclose()
        if self.started:
            self.logger.info("Resource stopped")
        self.started = False
