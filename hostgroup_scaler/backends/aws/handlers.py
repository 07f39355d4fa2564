"""AWS Lambda handler entry points.

These are thin wrappers that parse Lambda events, build backend dependencies,
call cloud-agnostic core logic, and format responses. All scaling logic
lives in hostgroup_scaler/core/.

The state machine runs fetch -> scale -> terminate once per scheduled tick.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from decimal import Decimal

logger = logging.getLogger(__name__)


# ---- Shared helpers ----


def _configure_logging():
    from hostgroup_scaler.shared.config import LOG_LEVEL

    logging.getLogger().setLevel(LOG_LEVEL().upper())


def _get_credential_store():
    """Build a DynamoDBCredentialStore from environment variables."""
    from hostgroup_scaler.shared.config import CREDENTIALS_KEY, TABLE_NAME
    from hostgroup_scaler.backends.aws.state import DynamoDBCredentialStore

    return DynamoDBCredentialStore(table_name=TABLE_NAME(), key=CREDENTIALS_KEY())


def _get_host_group_backend():
    """Build an AutoScalingGroupBackend."""
    from hostgroup_scaler.backends.aws.compute import AutoScalingGroupBackend

    return AutoScalingGroupBackend()


def _get_client_builder(info):
    """Build a JSON-RPC client factory for the management plane."""
    from hostgroup_scaler.shared.config import MANAGEMENT_PORT, MANAGEMENT_SCHEME, RPC_TIMEOUT
    from hostgroup_scaler.backends.jrpc.client import make_client_builder

    return make_client_builder(
        port=MANAGEMENT_PORT(),
        username=info.username,
        password=info.password,
        scheme=MANAGEMENT_SCHEME(),
        timeout=RPC_TIMEOUT(),
    )


def _json_default(value):
    """Serialize types that Python's JSON encoder does not handle."""
    if isinstance(value, Decimal):
        # Preserve integer semantics when possible (e.g. Decimal("1") -> 1).
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {value.__class__.__name__} is not JSON serializable")


def _to_payload(result: dict) -> dict:
    """Round-trip through JSON so the Lambda runtime gets plain types."""
    return json.loads(json.dumps(result, default=_json_default))


# ---- Fetch ----


def fetch_handler(event, context):
    """Describe the host group and return the input of a scale tick."""
    from hostgroup_scaler.core.fetch import fetch_host_group_info
    from hostgroup_scaler.shared.config import ASG_NAME, BACKEND_ASG_NAME

    _configure_logging()
    info = fetch_host_group_info(
        ASG_NAME(),
        _get_host_group_backend(),
        _get_credential_store(),
        backend_group_name=BACKEND_ASG_NAME() or None,
    )
    return _to_payload(info.to_dict())


# ---- Scale ----


def scale_handler(event, context):
    """Run one scale tick.

    Event: the fetch_handler output. Errors raised before the cluster
    snapshot is complete fail the invocation; the next tick retries.
    """
    from hostgroup_scaler.core.protocol import HostGroupInfo
    from hostgroup_scaler.core.scale import scale

    _configure_logging()
    info = HostGroupInfo.from_dict(event)
    response = scale(info, _get_client_builder(info))
    return _to_payload(response.to_dict())


# ---- Terminate ----


def terminate_handler(event, context):
    """Terminate instances released by the scale tick.

    Event: the scale_handler output.
    """
    from hostgroup_scaler.core.terminate import terminate_candidates
    from hostgroup_scaler.shared.config import ASG_NAME

    _configure_logging()
    result = terminate_candidates(event, ASG_NAME(), _get_host_group_backend())
    return _to_payload(result)
