"""Shape checks for JSON-RPC requests and results of the known app-server methods."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Optional

from coclai.errors import InvalidRequest

THREAD_START = "thread/start"
THREAD_RESUME = "thread/resume"
THREAD_FORK = "thread/fork"
THREAD_ARCHIVE = "thread/archive"
THREAD_READ = "thread/read"
THREAD_LIST = "thread/list"
THREAD_LOADED_LIST = "thread/loaded/list"
THREAD_ROLLBACK = "thread/rollback"
TURN_START = "turn/start"
TURN_INTERRUPT = "turn/interrupt"

KNOWN_METHODS: tuple[str, ...] = (
    THREAD_START,
    THREAD_RESUME,
    THREAD_FORK,
    THREAD_ARCHIVE,
    THREAD_READ,
    THREAD_LIST,
    THREAD_LOADED_LIST,
    THREAD_ROLLBACK,
    TURN_START,
    TURN_INTERRUPT,
)

_THREAD_ID_METHODS = frozenset(
    {THREAD_RESUME, THREAD_FORK, THREAD_ARCHIVE, THREAD_READ, THREAD_ROLLBACK, TURN_START}
)
_THREAD_RESULT_METHODS = frozenset(
    {THREAD_START, THREAD_RESUME, THREAD_FORK, THREAD_READ, THREAD_ROLLBACK}
)
_LIST_METHODS = frozenset({THREAD_LIST, THREAD_LOADED_LIST})
_OBJECT_RESULT_METHODS = frozenset({THREAD_ARCHIVE, TURN_INTERRUPT})


class RpcValidationMode(Enum):
    """How strictly JSON-RPC payloads are checked."""

    NONE = "none"
    KNOWN_METHODS = "knownMethods"


def _render(payload: Any) -> str:
    return json.dumps(payload, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def _invalid_request(method: str, reason: str, payload: Any) -> InvalidRequest:
    return InvalidRequest(
        f"invalid json-rpc request for {method}: {reason}; payload={_render(payload)}"
    )


def _invalid_response(method: str, reason: str, payload: Any) -> InvalidRequest:
    return InvalidRequest(
        f"invalid json-rpc response for {method}: {reason}; payload={_render(payload)}"
    )


def _validate_method_name(method: str) -> None:
    if not method.strip():
        raise InvalidRequest("json-rpc method must not be empty")


def _require_object(value: Any, method: str, field_name: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise _invalid_request(method, f"{field_name} must be an object", value)
    return value


def _require_string(value: Any, method: str, key: str, field_name: str) -> None:
    obj = _require_object(value, method, field_name)
    found = obj.get(key)
    if not isinstance(found, str) or not found.strip():
        raise _invalid_request(
            method, f"{field_name}.{key} must be a non-empty string", value
        )


def _validate_thread_start_request(params: Any, method: str) -> None:
    obj = _require_object(params, method, "params")
    # thread/start takes the plain "sandbox" string; sandboxPolicy belongs to turns.
    if "sandboxPolicy" in obj:
        raise _invalid_request(
            method,
            "params.sandboxPolicy is not valid for thread/start; use params.sandbox",
            params,
        )
    if "sandbox" in obj:
        sandbox = obj["sandbox"]
        if not isinstance(sandbox, str) or not sandbox.strip():
            raise _invalid_request(
                method, "params.sandbox must be a non-empty string when provided", params
            )


def _nested_id(result: Any, flat_key: str, nested_key: str) -> Optional[str]:
    if not isinstance(result, dict):
        return None
    flat = result.get(flat_key)
    if isinstance(flat, str):
        return flat
    nested = result.get(nested_key)
    if isinstance(nested, dict) and isinstance(nested.get("id"), str):
        return nested["id"]
    return None


def _parse_thread_id(result: Any) -> Optional[str]:
    return _nested_id(result, "threadId", "thread")


def _parse_turn_id(result: Any) -> Optional[str]:
    return _nested_id(result, "turnId", "turn")


def validate_rpc_request(
    method: str, params: Any, mode: RpcValidationMode = RpcValidationMode.KNOWN_METHODS
) -> Any:
    """Check outgoing params for one method and return them unchanged.

    The method name must always be non-empty; in KNOWN_METHODS mode the
    params of known methods are checked for their required fields.
    """
    _validate_method_name(method)
    if mode is RpcValidationMode.NONE:
        return params

    if method in KNOWN_METHODS:
        _require_object(params, method, "params")

    if method == THREAD_START:
        _validate_thread_start_request(params, method)
    elif method in _THREAD_ID_METHODS:
        _require_string(params, method, "threadId", "params")
    elif method == TURN_INTERRUPT:
        _require_string(params, method, "threadId", "params")
        _require_string(params, method, "turnId", "params")
    return params


def validate_rpc_response(
    method: str, result: Any, mode: RpcValidationMode = RpcValidationMode.KNOWN_METHODS
) -> Any:
    """Check an incoming result for one method and return it unchanged."""
    _validate_method_name(method)
    if mode is RpcValidationMode.NONE:
        return result

    if method in _THREAD_RESULT_METHODS:
        if _parse_thread_id(result) is None:
            raise _invalid_response(method, "result is missing thread id", result)
    elif method == TURN_START:
        if _parse_turn_id(result) is None:
            raise _invalid_response(method, "result is missing turn id", result)
    elif method in _LIST_METHODS:
        obj = _require_object(result, method, "result")
        if not isinstance(obj.get("data"), list):
            raise _invalid_response(method, "result.data must be an array", result)
    elif method in _OBJECT_RESULT_METHODS:
        _require_object(result, method, "result")
    return result