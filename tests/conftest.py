"""Pytest fixtures for Nomad MCP Server tests."""

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from mcp_tools.nomad.client import NomadClient

from tests.fixtures.nomad_responses import LEADER_RESPONSE

NOMAD_ADDR = "http://nomad.test:4646"


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch):
    """Point settings at a fake agent and drop any ambient token."""
    from config import reload_settings
    monkeypatch.setenv("NOMAD_ADDR", NOMAD_ADDR)
    monkeypatch.delenv("NOMAD_TOKEN", raising=False)
    monkeypatch.setenv("MCP_LOG_LEVEL", "DEBUG")
    reload_settings()
    yield


class FakeNomad:
    """Canned Nomad agent behind an ``httpx.MockTransport``.

    Routes are keyed by (method, path without /v1). Every request except
    the health probe is recorded so tests can count network calls.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], httpx.Response] = {}
        self.requests: List[httpx.Request] = []
        self.probes = 0

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        json_body: Any = None,
        content: Optional[bytes] = None,
    ) -> None:
        if content is None:
            content = json.dumps(json_body).encode("utf-8") if json_body is not None else b""
        self.routes[(method, path)] = httpx.Response(status, content=content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/status/leader":
            self.probes += 1
            return httpx.Response(200, json=LEADER_RESPONSE)

        self.requests.append(request)
        path = request.url.path[len("/v1/"):]
        response = self.routes.get((request.method, path))
        if response is None:
            return httpx.Response(404, text=f"no route for {request.method} {path}")
        return httpx.Response(response.status_code, content=response.content)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)

    def last_query(self) -> List[Tuple[str, str]]:
        return list(self.last.url.params.multi_items())

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_nomad():
    """A fake Nomad agent with no routes."""
    return FakeNomad()


@pytest.fixture
def nomad_client(fake_nomad):
    """A client wired to the fake agent (not probed)."""
    return NomadClient(base_url=NOMAD_ADDR, transport=fake_nomad.transport())


@pytest.fixture
def test_client():
    """Create a test client for the FastAPI app."""
    from server import app
    return TestClient(app)
