import logging
import os
from pathlib import Path
from typing import Iterable, List

import httpx
import pytest
from typer.testing import CliRunner

from seaplanecli.domain.models.request import DangerZoneFeatures, TransportOptions
from seaplanecli.infrastructure.config import settings
from seaplanecli.infrastructure.http.transport import HttpRequestSender
from seaplanecli.infrastructure.identity.token_client import CredentialProvider
from seaplanecli.infrastructure.resilience.api_retry import AuthRetryExecutor

IDENTITY_URL = "https://identity.test/"
METADATA_URL = "https://metadata.test/"
API_KEY = "sk-test-api-key"


def error_response(status: int, title: str, detail: str = None) -> httpx.Response:
    body = {"status": status, "title": title}
    if detail is not None:
        body["detail"] = detail
    return httpx.Response(status, json=body)


def unauthorized() -> httpx.Response:
    return error_response(401, "Unauthorized", "token expired")


class FakeSeaplane:
    """In-memory stand-in for the identity and resource services.

    Every token request is answered with the next token from ``tokens``;
    resource requests are answered, in order, from the queued responses.
    """

    def __init__(self, tokens: Iterable[str] = ("token-1", "token-2", "token-3")):
        self.tokens: List[str] = list(tokens)
        self.identity_calls: List[httpx.Request] = []
        self.resource_calls: List[httpx.Request] = []
        self._responses: List[httpx.Response] = []

    def queue(self, *responses: httpx.Response) -> "FakeSeaplane":
        self._responses.extend(responses)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/token":
            self.identity_calls.append(request)
            token = self.tokens[min(len(self.identity_calls), len(self.tokens)) - 1]
            if request.headers.get("accept") == "application/json":
                return httpx.Response(200, json={"token": token, "tenant": "tnt-1", "subdomain": "tnt-1-sub"})
            return httpx.Response(200, text=token)
        self.resource_calls.append(request)
        if not self._responses:
            return error_response(500, "Internal Server Error", "no response queued")
        return self._responses.pop(0)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def bearer_tokens(self) -> List[str]:
        return [r.headers["authorization"] for r in self.resource_calls]


@pytest.fixture
def fake_seaplane() -> FakeSeaplane:
    return FakeSeaplane()


@pytest.fixture
def credential_provider(fake_seaplane: FakeSeaplane) -> CredentialProvider:
    return CredentialProvider(
        IDENTITY_URL,
        TransportOptions(),
        features=DangerZoneFeatures(),
        http_transport=fake_seaplane.transport,
    )


@pytest.fixture
def sender(fake_seaplane: FakeSeaplane):
    sender = HttpRequestSender(transport=fake_seaplane.transport)
    yield sender
    sender.close()


@pytest.fixture
def executor() -> AuthRetryExecutor:
    return AuthRetryExecutor()


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_configuration(monkeypatch, tmp_path: Path):
    """Keeps the developer's environment and config files out of every test."""
    for name in list(os.environ):
        if name.startswith("SEAPLANE_"):
            monkeypatch.delenv(name)
    monkeypatch.setattr(settings, "DEFAULT_CONFIG_FILE", tmp_path / "home" / ".seaplane" / "config.yaml")
    monkeypatch.chdir(tmp_path)
    settings.clear_test_config()
    yield
    settings.clear_test_config()


@pytest.fixture(autouse=True)
def restore_logging():
    """setup_logging() replaces the root handlers; put the originals back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
