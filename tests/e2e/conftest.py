"""E2E test fixtures — mock management plane plus optional LocalStack-backed DynamoDB."""

from __future__ import annotations

import os
import sys
import uuid

import boto3
import pytest
from botocore.exceptions import BotoCoreError

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from hostgroup_scaler.backends.mock.management import FakeManagementPlane
from tests.e2e.mock_management import MockManagementServer


@pytest.fixture(scope="session")
def mock_management():
    """Start a mock management-plane server on a random port."""
    server = MockManagementServer(username="admin", password="secret")
    server.start()
    yield server
    server.stop()


@pytest.fixture
def management(mock_management):
    """The running mock server with a fresh, empty cluster."""
    mock_management.plane = FakeManagementPlane()
    return mock_management


@pytest.fixture(scope="session")
def localstack_env():
    """Start LocalStack and provision the credentials table used by handlers."""
    try:
        from testcontainers.core.exceptions import ContainerStartException
        from testcontainers.localstack import LocalStackContainer
    except ModuleNotFoundError as exc:
        pytest.skip(f"LocalStack tests require testcontainers dependency: {exc}")

    container = LocalStackContainer(image="localstack/localstack:3.0").with_services("dynamodb")

    try:
        container.start()
    except (ContainerStartException, BotoCoreError, OSError) as exc:
        pytest.skip(f"LocalStack unavailable in this environment: {exc}")

    endpoint_url = container.get_url()
    region = "us-east-1"
    access_key = "test"
    secret_key = "test"

    os.environ.setdefault("AWS_ACCESS_KEY_ID", access_key)
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", secret_key)
    os.environ.setdefault("AWS_DEFAULT_REGION", region)

    credentials_table = f"hostgroup-scaler-credentials-e2e-{uuid.uuid4().hex[:8]}"

    dynamodb = boto3.client(
        "dynamodb",
        endpoint_url=endpoint_url,
        region_name=region,
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
    )

    dynamodb.create_table(
        TableName=credentials_table,
        AttributeDefinitions=[{"AttributeName": "key", "AttributeType": "S"}],
        KeySchema=[{"AttributeName": "key", "KeyType": "HASH"}],
        BillingMode="PAY_PER_REQUEST",
    )
    dynamodb.get_waiter("table_exists").wait(TableName=credentials_table)

    yield {
        "endpoint_url": endpoint_url,
        "region": region,
        "aws_access_key_id": access_key,
        "aws_secret_access_key": secret_key,
        "credentials_table": credentials_table,
    }

    container.stop()
