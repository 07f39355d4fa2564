"""In-memory credential store for testing."""

from __future__ import annotations


class InMemoryCredentialStore:
    def __init__(self, username: str | None = None, password: str | None = None):
        self._credentials: tuple[str, str] | None = None
        if username is not None and password is not None:
            self._credentials = (username, password)

    def get_credentials(self) -> tuple[str, str]:
        if self._credentials is None:
            raise RuntimeError("No credentials stored")
        return self._credentials

    def put_credentials(self, username: str, password: str) -> None:
        self._credentials = (username, password)
