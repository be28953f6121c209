# Playlink Default Configuration
# Full default configuration as Python dict and YAML generator

import copy
from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "server": {
        "convar_name": "playlink_server_id",
        "unset_value": "__default__",
    },
    "remote": {
        "base_url": "https://playlink.gg/api/servers/{server_id}/",
        "dev_server_id": "dev",
        "dev_base_url": "http://localhost:3000/api/servers/dev/",
        "timeout": 10.0,
        "user_agent": "playlink",
    },
    "schedule": {
        "success_delay": 5,
        "retry_delay": 300,
        "rate_limit_delay": 1800,
        "escalated_delay": 1800,
        "failure_threshold": 3,
    },
    "identifiers": {
        "schemes": ["license2", "license"],
    },
    "hooks": {
        "module": None,
        "malformed_policy": "allow",
    },
    "chat": {
        "prefix": "[PLAYLINK]",
    },
    "host": {
        "sessions_file": None,
        "convars": {},
    },
    "output": {
        "verbose": False,
        "colored": True,
    },
}


def default_config() -> dict[str, Any]:
    """Return a deep copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


def generate_default_config() -> str:
    """Generate default configuration as YAML string with comments."""
    header = """# Playlink Configuration
#
# server.convar_name is read from the host; the resource refuses to start
# while it still holds server.unset_value.
#
# schedule delays are in seconds:
#   - success_delay:    next ping after a successful one
#   - retry_delay:      after an empty, vetoed or failed cycle
#   - rate_limit_delay: on HTTP 429 without a usable Retry-After hint
#   - escalated_delay:  after failure_threshold consecutive network errors
#
# hooks.module points at a Python file defining PRE_LINK_HOOKS,
# PRE_PLAYER_HOOKS and PRE_CYCLE_HOOKS lists.

"""
    return header + yaml.dump(DEFAULT_CONFIG, default_flow_style=False, sort_keys=False, allow_unicode=True)
