"""Tests for the per-function status conventions."""

import pytest

from wcf_mcp.protocol.functions import Function
from wcf_mcp.protocol.status import Result, is_success, reports_status, to_result


def test_zero_success_functions():
    assert is_success(Function.SEND_TXT, 0)
    assert not is_success(Function.SEND_TXT, 1)
    assert is_success(Function.DOWNLOAD_ATTACH, 0)
    assert not is_success(Function.DOWNLOAD_ATTACH, -1)


def test_one_success_functions():
    """Revoke, friend/transfer acceptance and room edits report 1 on success."""
    for function in (
        Function.REVOKE_MSG,
        Function.ACCEPT_FRIEND,
        Function.RECV_TRANSFER,
        Function.REFRESH_PYQ,
        Function.ADD_ROOM_MEMBERS,
        Function.DEL_ROOM_MEMBERS,
    ):
        assert is_success(function, 1)
        assert not is_success(function, 0)


def test_data_functions_do_not_report_status():
    assert not reports_status(Function.GET_CONTACTS)
    with pytest.raises(ValueError):
        is_success(Function.GET_CONTACTS, 0)


def test_to_result_keeps_raw_code():
    result = to_result(Function.SEND_IMG, -2)
    assert result == Result(ok=False, code=-2)
    assert result.to_dict() == {"ok": False, "status": -2}
