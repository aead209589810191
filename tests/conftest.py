"""Shared test helpers: a scripted in-memory transport."""

from __future__ import annotations

import pytest

from wcf_mcp.client import CmdClient
from wcf_mcp.protocol.messages import Request, Response


class StubTransport:
    """Answers each request via ``responder(request) -> Response``.

    Every request is recorded in ``requests``.
    """

    def __init__(self, responder=None) -> None:
        self.responder = responder or (lambda request: Response(function=request.function))
        self.requests: list[Request] = []
        self.connected = True
        self.closed = False

    def call(self, request: Request) -> Response:
        self.requests.append(request)
        return self.responder(request)

    def close(self) -> None:
        self.closed = True
        self.connected = False

    def functions(self) -> list:
        return [r.function for r in self.requests]


@pytest.fixture
def make_client():
    """Build a ``(client, transport)`` pair around a responder callable."""

    def factory(responder=None):
        transport = StubTransport(responder)
        return CmdClient(transport), transport

    return factory
