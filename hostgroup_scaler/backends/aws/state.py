"""DynamoDB-backed credential store."""

from __future__ import annotations

import boto3


class DynamoDBCredentialStore:
    def __init__(
        self,
        table_name: str,
        key: str = "cluster_credentials",
        endpoint_url: str | None = None,
        region_name: str | None = None,
    ):
        kwargs = {}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        if region_name:
            kwargs["region_name"] = region_name
        dynamodb = boto3.resource("dynamodb", **kwargs)
        self._table = dynamodb.Table(table_name)
        self._key = key

    def get_credentials(self) -> tuple[str, str]:
        resp = self._table.get_item(Key={"key": self._key})
        item = resp.get("Item")
        if item is None:
            raise RuntimeError(f"No credentials stored under {self._key!r}")
        return item["username"], item["password"]

    def put_credentials(self, username: str, password: str) -> None:
        self._table.put_item(
            Item={"key": self._key, "username": username, "password": password}
        )
