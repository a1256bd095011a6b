"""Pytest configuration - loads .env and provides a local Crisp API stub."""

import json
import threading
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from crisp_cli.core.client import APIClient
from crisp_cli.sdk import CrispClient

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)


@dataclass
class RecordedRequest:
    """A request as received by the stub server."""

    method: str
    path: str
    headers: dict[str, str]
    body: bytes


@dataclass
class StubRoute:
    status: int = 200
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)


class StubAPI:
    """Canned responses keyed by (method, path), with a log of received requests."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], StubRoute] = {}
        self.requests: list[RecordedRequest] = []
        self.base_url = ""

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        json_body: Any = None,
        raw_body: bytes | None = None,
    ) -> None:
        """Register a response for a method and absolute path (e.g. /v1/plugin/x)."""
        if raw_body is not None:
            body = raw_body
        elif json_body is not None:
            body = json.dumps(json_body).encode("utf-8")
        else:
            body = b""
        headers = {"Content-Type": "application/json"} if body else {}
        self.routes[(method, path)] = StubRoute(status=status, body=body, headers=headers)

    @property
    def last(self) -> RecordedRequest:
        return self.requests[-1]


def _make_handler(stub: StubAPI) -> type[BaseHTTPRequestHandler]:
    class Handler(BaseHTTPRequestHandler):
        def _handle(self) -> None:
            length = int(self.headers.get("Content-Length") or 0)
            body = self.rfile.read(length) if length else b""
            stub.requests.append(
                RecordedRequest(
                    method=self.command,
                    path=self.path,
                    headers=dict(self.headers.items()),
                    body=body,
                )
            )
            route = stub.routes.get((self.command, self.path))
            if route is None:
                route = StubRoute(
                    status=404,
                    body=json.dumps({"error": True, "reason": "route_not_found", "data": {}}).encode(),
                    headers={"Content-Type": "application/json"},
                )
            self.send_response(route.status)
            for name, value in route.headers.items():
                self.send_header(name, value)
            self.send_header("Content-Length", str(len(route.body)))
            self.end_headers()
            if self.command != "HEAD":
                self.wfile.write(route.body)

        do_GET = do_HEAD = do_PATCH = do_DELETE = do_POST = do_PUT = _handle

        def log_message(self, format: str, *args: Any) -> None:
            pass

    return Handler


@pytest.fixture
def stub_api():
    """Run a local HTTP server standing in for the Crisp API."""
    stub = StubAPI()
    server = ThreadingHTTPServer(("127.0.0.1", 0), _make_handler(stub))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    stub.base_url = f"http://127.0.0.1:{server.server_address[1]}/v1/"
    try:
        yield stub
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def api_client(stub_api):
    """APIClient pointed at the stub server."""
    return APIClient(identifier="test-identifier", key="test-key", base_url=stub_api.base_url, timeout=5)


@pytest.fixture
def crisp(stub_api):
    """CrispClient pointed at the stub server."""
    return CrispClient(identifier="test-identifier", key="test-key", base_url=stub_api.base_url, timeout=5)
