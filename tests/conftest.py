# Playlink Test Fixtures
# Pytest fixtures for Playlink tests

import inspect
import tempfile
from collections.abc import Generator
from io import StringIO
from pathlib import Path
from typing import Any, Callable, Optional, Union

import httpx
import pytest
import yaml
from rich.console import Console

from playlink.config.schema import ScheduleConfig
from playlink.http.client import HttpClient
from playlink.logger import PlaylinkLogger

BASE_URL = "https://playlink.test/api/servers/abc/"

Reply = Union[httpx.Response, Exception, Callable[[httpx.Request], Any]]


class FakeHost:
    """In-memory host recording everything the resource asks of it."""

    def __init__(
        self,
        sessions: Optional[dict[str, dict[str, str]]] = None,
        *,
        convars: Optional[dict[str, str]] = None,
        resource_name: str = "playlink",
    ):
        self.sessions = dict(sessions or {})
        self.convars = dict(convars or {})
        self._resource_name = resource_name
        self.messages: list[tuple[str, str]] = []
        self.commands: dict[str, Any] = {}
        self.suggestions: list[tuple[str, str]] = []
        self.stop_callbacks: list[Callable[[], Any]] = []
        self.joining_callbacks: list[Callable[[str], Any]] = []
        self.stopped = False

    @property
    def resource_name(self) -> str:
        return self._resource_name

    def active_sessions(self) -> list[str]:
        return list(self.sessions)

    def identifier(self, session: str, scheme: str) -> Optional[str]:
        return self.sessions.get(session, {}).get(scheme)

    def send_message(self, session: str, message: str) -> None:
        self.messages.append((session, message))

    def register_command(self, name: str, handler: Any) -> None:
        self.commands[name] = handler

    def suggest_command(self, session: str, name: str, help_text: str, params: list[dict[str, str]]) -> None:
        self.suggestions.append((session, name))

    def on_stop(self, callback: Callable[[], Any]) -> None:
        self.stop_callbacks.append(callback)

    def on_session_joining(self, callback: Callable[[str], Any]) -> None:
        self.joining_callbacks.append(callback)

    def get_config(self, name: str, default: str) -> str:
        return self.convars.get(name, default)

    def stop_self(self) -> None:
        self.stopped = True

    async def fire_stop(self) -> None:
        for callback in self.stop_callbacks:
            result = callback()
            if inspect.isawaitable(result):
                await result

    def last_message(self) -> str:
        return self.messages[-1][1]


class Remote:
    """
    Scripted remote service behind httpx.MockTransport.

    Replies are consumed in order; each is a response, an exception to
    raise, or a callable (sync or async) producing a response. Once the
    script runs out every request gets 200 "OK".
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._replies: list[Reply] = []

    def reply(self, *replies: Reply) -> "Remote":
        self._replies.extend(replies)
        return self

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._replies:
            return httpx.Response(200, text="OK")

        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            result = reply(request)
            if inspect.isawaitable(result):
                result = await result
            return result
        return reply

    def client(self, logger: Optional[PlaylinkLogger] = None) -> HttpClient:
        return HttpClient(transport=httpx.MockTransport(self), logger=logger)


def connect_error(message: str = "Connection refused") -> httpx.ConnectError:
    return httpx.ConnectError(message, request=httpx.Request("POST", BASE_URL))


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary home directory."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("PLAYLINK_CONFIG", raising=False)
    return home


@pytest.fixture
def log_output() -> StringIO:
    """Buffer receiving the operator log."""
    return StringIO()


@pytest.fixture
def logger(log_output: StringIO) -> PlaylinkLogger:
    """Verbose logger writing plain text into log_output."""
    console = Console(file=log_output, width=400, color_system=None)
    return PlaylinkLogger(console, verbose=True)


@pytest.fixture
def host() -> FakeHost:
    """Host with two connected players; Bob only has a license2 identifier."""
    return FakeHost(
        {
            "1": {"license": "license:aaa", "license2": "license2:bbb"},
            "2": {"license2": "license2:ccc"},
        },
        convars={"playlink_server_id": "abc"},
    )


@pytest.fixture
def remote() -> Remote:
    return Remote()


@pytest.fixture
def schedule() -> ScheduleConfig:
    return ScheduleConfig()


@pytest.fixture
def sessions_file(temp_dir: Path) -> Path:
    """Sessions file for the file-backed host."""
    path = temp_dir / "sessions.yaml"
    data = {
        "sessions": [
            {"id": "1", "name": "Alice", "identifiers": {"license": "license:aaa"}},
            {"id": 2, "name": "Bob", "identifiers": {"license2": "license2:ccc"}},
        ]
    }
    path.write_text(yaml.dump(data), encoding="utf-8")
    return path


@pytest.fixture
def sample_config(temp_dir: Path, sessions_file: Path) -> dict:
    """Partial configuration as it would appear in a YAML file."""
    return {
        "remote": {"base_url": "https://playlink.test/api/servers/{server_id}/"},
        "schedule": {"success_delay": 10},
        "host": {
            "sessions_file": str(sessions_file),
            "convars": {"playlink_server_id": "abc"},
        },
    }


@pytest.fixture
def config_file(temp_dir: Path, sample_config: dict) -> Path:
    """Write sample_config to a YAML file."""
    path = temp_dir / "config.yaml"
    path.write_text(yaml.dump(sample_config), encoding="utf-8")
    return path
