# Playlink Configuration Schema
# Pydantic models for YAML configuration validation

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class MalformedPolicy(str, Enum):
    """What a checkpoint does when its hook list is missing or not a list."""

    ALLOW = "allow"
    DENY = "deny"


class ServerConfig(BaseModel):
    """How the server identity is read from the host."""

    convar_name: str = Field(default="playlink_server_id", description="Host config value holding the server ID")
    unset_value: str = Field(default="__default__", description="Value the host returns when the server ID is unset")


class RemoteConfig(BaseModel):
    """Remote accounting service endpoint settings."""

    base_url: str = Field(
        default="https://playlink.gg/api/servers/{server_id}/",
        description="Base URL template, formatted with server_id",
    )
    dev_server_id: str = Field(default="dev", description="Server ID that switches to dev_base_url")
    dev_base_url: str = Field(
        default="http://localhost:3000/api/servers/dev/",
        description="Base URL used for local development",
    )
    timeout: float = Field(default=10.0, gt=0, description="Request timeout in seconds")
    user_agent: str = Field(default="playlink", description="User-Agent header for outbound requests")

    @field_validator("base_url")
    @classmethod
    def require_placeholder(cls, v: str) -> str:
        """The template must contain {server_id} and no other placeholder."""
        if "{server_id}" not in v:
            raise ValueError("base_url must contain '{server_id}'")
        try:
            v.format(server_id="x")
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"base_url may only contain the '{{server_id}}' placeholder: {e}") from e
        return v


class ScheduleConfig(BaseModel):
    """Delays, in seconds, applied after each sync cycle."""

    success_delay: float = Field(default=5, gt=0, description="Delay after a successful ping")
    retry_delay: float = Field(default=5 * 60, gt=0, description="Delay after a skipped or failed cycle")
    rate_limit_delay: float = Field(default=30 * 60, gt=0, description="Delay on 429 without a usable hint")
    escalated_delay: float = Field(default=30 * 60, gt=0, description="Delay after repeated network errors")
    failure_threshold: int = Field(default=3, ge=1, description="Consecutive network errors before escalating")


class IdentifierConfig(BaseModel):
    """Identifier schemes collected for every session, in order."""

    schemes: list[str] = Field(default_factory=lambda: ["license2", "license"], min_length=1)


class HooksConfig(BaseModel):
    """Operator hook module settings."""

    module: str | None = Field(default=None, description="Path to a Python file defining hook lists")
    malformed_policy: MalformedPolicy = Field(
        default=MalformedPolicy.ALLOW, description="Checkpoint result when its hook list is malformed"
    )

    @field_validator("module")
    @classmethod
    def expand_module_path(cls, v: str | None) -> str | None:
        """Expand ~ in module path."""
        if v is None:
            return None
        return str(Path(v).expanduser())


class ChatConfig(BaseModel):
    """Player-facing message settings."""

    prefix: str = Field(default="[PLAYLINK]", description="Prefix for chat messages")


class HostConfig(BaseModel):
    """Settings for the file-backed host used by the CLI."""

    sessions_file: str | None = Field(default=None, description="YAML file listing connected sessions")
    convars: dict[str, str] = Field(default_factory=dict, description="Host configuration values")

    @field_validator("sessions_file")
    @classmethod
    def expand_sessions_path(cls, v: str | None) -> str | None:
        """Expand ~ in sessions path."""
        if v is None:
            return None
        return str(Path(v).expanduser())


class OutputConfig(BaseModel):
    """Output and logging configuration."""

    verbose: bool = Field(default=False, description="Enable debug output")
    colored: bool = Field(default=True, description="Enable colored output")


class PlaylinkConfig(BaseModel):
    """Root configuration model for Playlink."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    identifiers: IdentifierConfig = Field(default_factory=IdentifierConfig)
    hooks: HooksConfig = Field(default_factory=HooksConfig)
    chat: ChatConfig = Field(default_factory=ChatConfig)
    host: HostConfig = Field(default_factory=HostConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    def base_url(self, server_id: str) -> str:
        """Resolve the remote base URL for a server ID, always ending in '/'."""
        if server_id == self.remote.dev_server_id:
            url = self.remote.dev_base_url
        else:
            url = self.remote.base_url.format(server_id=server_id)
        return url if url.endswith("/") else url + "/"
