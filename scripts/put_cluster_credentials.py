#!/usr/bin/env python3
"""Store management-plane credentials in the configured DynamoDB table."""

from __future__ import annotations

import argparse
import getpass
import os
import sys
from pathlib import Path

# Ensure repository root is importable when running from a checkout.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

def _env_name_for_option(option: str) -> str:
    return option.lstrip("-").replace("-", "_").upper()


def _resolve_opt(action: argparse.Action, cli_value: str | None, required: bool = True) -> str | None:
    if cli_value:
        return cli_value
    long_opts = [opt for opt in action.option_strings if opt.startswith("--")]
    canonical_opt = long_opts[0] if long_opts else action.option_strings[0]
    env_name = _env_name_for_option(canonical_opt)
    env_value = os.environ.get(env_name)
    if env_value:
        return env_value
    if required:
        raise RuntimeError(f"Missing {canonical_opt}. Provide {canonical_opt} or set {env_name}.")
    return None


def main() -> None:
    parser = argparse.ArgumentParser(description="Store cluster credentials for hostgroup-scaler")
    parser.add_argument("--username", default="admin", help="Management-plane user")
    table_action = parser.add_argument(
        "--table-name", help="Credentials table name (or use TABLE_NAME)"
    )
    key_action = parser.add_argument(
        "--credentials-key", help="Item key (or use CREDENTIALS_KEY, default cluster_credentials)"
    )
    region_action = parser.add_argument(
        "--aws-region",
        "--region",
        dest="aws_region",
        help="AWS region (or use AWS_REGION)",
    )
    args = parser.parse_args()

    table_name = _resolve_opt(table_action, args.table_name)
    key = _resolve_opt(key_action, args.credentials_key, required=False) or "cluster_credentials"
    region = _resolve_opt(region_action, args.aws_region, required=False)
    password = os.environ.get("CLUSTER_PASSWORD") or getpass.getpass("Cluster password: ")

    from hostgroup_scaler.backends.aws.state import DynamoDBCredentialStore

    store = DynamoDBCredentialStore(table_name=table_name, key=key, region_name=region)
    store.put_credentials(args.username, password)
    print(f"Stored credentials for {args.username} under {key!r} in {table_name}")


if __name__ == "__main__":
    main()
