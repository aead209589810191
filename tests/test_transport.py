"""Tests for the NNG connection wrapper."""

from __future__ import annotations

import sys
from unittest.mock import MagicMock, patch

import pytest

from wcf_mcp.protocol.codec import encode_request, encode_response
from wcf_mcp.protocol.functions import Function, build_get_self_wxid
from wcf_mcp.protocol.messages import make_response
from wcf_mcp.transport.nng_connection import DEFAULT_PORT, NNGConnection


class _FakeNNGException(Exception):
    pass


def _fake_pynng(sock):
    module = MagicMock()
    module.Pair1.return_value = sock
    module.NNGException = _FakeNNGException
    return module


def test_default_endpoint():
    conn = NNGConnection()
    assert conn.endpoint.port == DEFAULT_PORT
    assert conn.endpoint.address == "tcp://127.0.0.1:10086"
    assert not conn.connected


def test_call_requires_connection():
    with pytest.raises(ConnectionError):
        NNGConnection().call(build_get_self_wxid())


def test_open_dials_and_call_round_trips():
    sock = MagicMock()
    sock.recv.return_value = encode_response(
        make_response(Function.GET_SELF_WXID, "wxid_self")
    )
    request = build_get_self_wxid()

    with patch.dict(sys.modules, {"pynng": _fake_pynng(sock)}):
        conn = NNGConnection(host="10.0.0.2", port=9999)
        conn.open()

    sock.dial.assert_called_once_with("tcp://10.0.0.2:9999", block=True)
    assert conn.connected

    response = conn.call(request)
    sock.send.assert_called_once_with(encode_request(request))
    assert response.get_str() == "wxid_self"

    conn.close()
    sock.close.assert_called_once()
    assert not conn.connected


def test_open_failure_raises_connection_error():
    sock = MagicMock()
    sock.dial.side_effect = _FakeNNGException("connection refused")

    with patch.dict(sys.modules, {"pynng": _fake_pynng(sock)}):
        conn = NNGConnection()
        with pytest.raises(ConnectionError):
            conn.open()

    sock.close.assert_called_once()
    assert not conn.connected


def test_close_is_idempotent():
    conn = NNGConnection()
    conn.close()
    assert not conn.connected
