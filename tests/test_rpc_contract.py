import pytest

from coclai.errors import InvalidRequest
from coclai.rpc_contract import (
    KNOWN_METHODS,
    RpcValidationMode,
    validate_rpc_request,
    validate_rpc_response,
)

KNOWN = RpcValidationMode.KNOWN_METHODS

EXPECTED_CATALOG = (
    "thread/start",
    "thread/resume",
    "thread/fork",
    "thread/archive",
    "thread/read",
    "thread/list",
    "thread/loaded/list",
    "thread/rollback",
    "turn/start",
    "turn/interrupt",
)


def test_rejects_empty_method():
    with pytest.raises(InvalidRequest) as info:
        validate_rpc_request("", {}, KNOWN)
    assert info.value.detail == "json-rpc method must not be empty"


def test_rejects_blank_method():
    with pytest.raises(InvalidRequest):
        validate_rpc_request("   ", {}, KNOWN)


def test_validates_turn_interrupt_params_shape():
    with pytest.raises(InvalidRequest) as info:
        validate_rpc_request("turn/interrupt", {"threadId": "thr"}, KNOWN)
    assert info.value.detail.startswith(
        "invalid json-rpc request for turn/interrupt: params.turnId must be a non-empty string"
    )

    params = {"threadId": "thr", "turnId": "turn"}
    assert validate_rpc_request("turn/interrupt", params, KNOWN) == params


def test_turn_interrupt_rejects_blank_turn_id():
    with pytest.raises(InvalidRequest):
        validate_rpc_request("turn/interrupt", {"threadId": "thr", "turnId": "  "}, KNOWN)


def test_validates_thread_start_rejects_turn_level_sandbox_policy_key():
    with pytest.raises(InvalidRequest) as info:
        validate_rpc_request(
            "thread/start", {"cwd": "/tmp", "sandboxPolicy": {"type": "readOnly"}}, KNOWN
        )
    assert "params.sandboxPolicy is not valid for thread/start" in info.value.detail


def test_validates_thread_start_accepts_legacy_sandbox_string():
    params = {"cwd": "/tmp", "sandbox": "read-only"}
    assert validate_rpc_request("thread/start", params, KNOWN) == params


@pytest.mark.parametrize("sandbox", ["", " ", None, 3])
def test_thread_start_rejects_bad_sandbox(sandbox):
    with pytest.raises(InvalidRequest) as info:
        validate_rpc_request("thread/start", {"sandbox": sandbox}, KNOWN)
    assert "params.sandbox must be a non-empty string" in info.value.detail


def test_validates_thread_start_response_thread_id():
    with pytest.raises(InvalidRequest) as info:
        validate_rpc_response("thread/start", {"thread": {}}, KNOWN)
    assert info.value.detail == (
        'invalid json-rpc response for thread/start: result is missing thread id; payload={"thread":{}}'
    )

    result = {"thread": {"id": "thr_1"}}
    assert validate_rpc_response("thread/start", result, KNOWN) == result


def test_validates_turn_start_response_turn_id():
    with pytest.raises(InvalidRequest):
        validate_rpc_response("turn/start", {"turn": {}}, KNOWN)

    result = {"turn": {"id": "turn_1"}}
    assert validate_rpc_response("turn/start", result, KNOWN) == result


def test_passes_unknown_method_in_known_mode():
    assert validate_rpc_request("echo/custom", {"k": "v"}, KNOWN) == {"k": "v"}
    assert validate_rpc_response("echo/custom", {"ok": True}, KNOWN) == {"ok": True}


@pytest.mark.parametrize("method", KNOWN_METHODS)
def test_every_known_method_requires_object_params(method):
    with pytest.raises(InvalidRequest) as info:
        validate_rpc_request(method, [], KNOWN)
    assert f"invalid json-rpc request for {method}" in info.value.detail


@pytest.mark.parametrize("method", EXPECTED_CATALOG)
def test_known_method_catalog_is_enforced(method):
    assert method in KNOWN_METHODS
    assert KNOWN_METHODS.index(method) == EXPECTED_CATALOG.index(method)
    with pytest.raises(InvalidRequest) as info:
        validate_rpc_request(method, "not-an-object", KNOWN)
    assert "params must be an object" in info.value.detail


def test_method_outside_catalog_skips_shape_checks():
    assert validate_rpc_request("thread/unknown", [], KNOWN) == []


def test_thread_id_required_for_resume():
    with pytest.raises(InvalidRequest):
        validate_rpc_request("thread/resume", {}, KNOWN)
    assert validate_rpc_request("thread/resume", {"threadId": "t"}, KNOWN) == {"threadId": "t"}


def test_list_response_requires_data_array():
    with pytest.raises(InvalidRequest) as info:
        validate_rpc_response("thread/list", {"data": {}}, KNOWN)
    assert "result.data must be an array" in info.value.detail
    assert validate_rpc_response("thread/loaded/list", {"data": []}, KNOWN) == {"data": []}


def test_archive_response_requires_object():
    with pytest.raises(InvalidRequest):
        validate_rpc_response("thread/archive", None, KNOWN)
    assert validate_rpc_response("turn/interrupt", {}, KNOWN) == {}


def test_skips_validation_in_none_mode():
    with pytest.raises(InvalidRequest):
        validate_rpc_request("", None, RpcValidationMode.NONE)

    assert validate_rpc_request("turn/start", None, RpcValidationMode.NONE) is None
    assert validate_rpc_response("turn/start", "raw", RpcValidationMode.NONE) == "raw"


def test_default_mode_is_known_methods():
    with pytest.raises(InvalidRequest):
        validate_rpc_request("turn/start", None)