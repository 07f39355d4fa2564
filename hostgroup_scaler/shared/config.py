"""Configuration helpers — read from environment variables."""

from __future__ import annotations

import os


def get_env(name: str, default: str | None = None) -> str:
    """Get an environment variable, raising if missing and no default."""
    value = os.environ.get(name, default)
    if value is None:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


# Host group / resource names (set by the deployment template)
ASG_NAME = lambda: get_env("ASG_NAME")
TABLE_NAME = lambda: get_env("TABLE_NAME")
BACKEND_ASG_NAME = lambda: get_env("BACKEND_ASG_NAME", "")
CREDENTIALS_KEY = lambda: get_env("CREDENTIALS_KEY", "cluster_credentials")

# Management plane access
MANAGEMENT_PORT = lambda: int(get_env("MANAGEMENT_PORT", "14000"))
MANAGEMENT_SCHEME = lambda: get_env("MANAGEMENT_SCHEME", "http")
RPC_TIMEOUT = lambda: float(get_env("RPC_TIMEOUT", "30"))

LOG_LEVEL = lambda: get_env("LOG_LEVEL", "INFO")
ROLE_TAG = "hostgroup-scaler/role"
