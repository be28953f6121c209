# Playlink File Host
# Host adapter backed by a YAML sessions file, used by the CLI

import inspect
from pathlib import Path
from typing import Any, Optional

import yaml

from playlink.host.base import CommandHandler, JoiningCallback, LifecycleCallback
from playlink.logger import PlaylinkLogger


class FileHost:
    """
    Host whose connected sessions are listed in a YAML file.

    The file is re-read on every lookup so it can be edited while the
    resource runs::

        sessions:
          - id: "1"
            name: Alice
            identifiers:
              license: license:0123abcd
              license2: license2:4567ef01
    """

    def __init__(
        self,
        sessions_file: str | Path | None = None,
        *,
        convars: Optional[dict[str, str]] = None,
        resource_name: str = "playlink",
        logger: Optional[PlaylinkLogger] = None,
    ):
        self.sessions_file = Path(sessions_file).expanduser() if sessions_file else None
        self.convars = dict(convars or {})
        self._resource_name = resource_name
        self.logger = logger or PlaylinkLogger()
        self.commands: dict[str, CommandHandler] = {}
        self.stopped = False
        self._stop_callbacks: list[LifecycleCallback] = []
        self._joining_callbacks: list[JoiningCallback] = []

    @property
    def resource_name(self) -> str:
        return self._resource_name

    def _load(self) -> dict[str, dict[str, Any]]:
        """Read sessions keyed by id."""
        if self.sessions_file is None or not self.sessions_file.exists():
            return {}

        try:
            with open(self.sessions_file, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            self.logger.warning(f"Invalid sessions file {self.sessions_file}: {e}")
            return {}

        sessions: dict[str, dict[str, Any]] = {}
        for entry in data.get("sessions") or []:
            if not isinstance(entry, dict) or "id" not in entry:
                continue
            sessions[str(entry["id"])] = entry
        return sessions

    def active_sessions(self) -> list[str]:
        return list(self._load())

    def identifier(self, session: str, scheme: str) -> str | None:
        entry = self._load().get(session)
        if entry is None:
            return None
        value = (entry.get("identifiers") or {}).get(scheme)
        return str(value) if value else None

    def session_name(self, session: str) -> str:
        entry = self._load().get(session) or {}
        return str(entry.get("name") or session)

    def send_message(self, session: str, message: str) -> None:
        self.logger.info(f"chat -> {self.session_name(session)}: {message}")

    def register_command(self, name: str, handler: CommandHandler) -> None:
        self.commands[name] = handler

    def suggest_command(self, session: str, name: str, help_text: str, params: list[dict[str, str]]) -> None:
        self.logger.debug(f"suggestion -> {self.session_name(session)}: /{name} ({help_text})")

    def on_stop(self, callback: LifecycleCallback) -> None:
        self._stop_callbacks.append(callback)

    def on_session_joining(self, callback: JoiningCallback) -> None:
        self._joining_callbacks.append(callback)

    def get_config(self, name: str, default: str) -> str:
        return self.convars.get(name, default)

    def stop_self(self) -> None:
        self.stopped = True
        self.logger.warning(f"Resource '{self.resource_name}' stopped by itself")

    async def invoke(self, name: str, session: str | None, args: list[str]) -> None:
        """Run a registered command as if typed in chat."""
        handler = self.commands.get(name)
        if handler is None:
            raise KeyError(f"Command '{name}' is not registered")
        await handler(session, args)

    async def fire_joining(self, session: str) -> None:
        """Notify subscribers that a session is joining."""
        for callback in self._joining_callbacks:
            result = callback(session)
            if inspect.isawaitable(result):
                await result

    async def fire_stop(self) -> None:
        """Notify subscribers that the resource is stopping."""
        for callback in self._stop_callbacks:
            result = callback()
            if inspect.isawaitable(result):
                await result
