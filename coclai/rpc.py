"""Classification and identifier extraction for raw JSON-RPC messages."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from coclai.errors import (
    InvalidRequest,
    MethodNotFound,
    Overloaded,
    RpcError,
    RpcErrorObject,
    ServerError,
)
from coclai.events import JsonRpcId, MsgKind

_U64_MAX = 2**64 - 1
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_UNSIGNED_TEXT = re.compile(r"\+?[0-9]+")
_MISSING = object()


@dataclass(frozen=True)
class ExtractedIds:
    thread_id: Optional[str] = None
    turn_id: Optional[str] = None
    item_id: Optional[str] = None


@dataclass(frozen=True)
class MsgMetadata:
    kind: MsgKind
    response_id: Optional[int]
    rpc_id: Optional[JsonRpcId]
    method: Optional[str]
    thread_id: Optional[str]
    turn_id: Optional[str]
    item_id: Optional[str]


def _get(value: Any, key: str) -> Any:
    """Return the member of an object, or the missing sentinel."""
    if isinstance(value, dict) and key in value:
        return value[key]
    return _MISSING


def _kind(has_id: bool, has_method: bool, has_result: bool, has_error: bool) -> MsgKind:
    if has_id and not has_method and (has_result or has_error):
        return MsgKind.RESPONSE
    if has_id and has_method and not has_result and not has_error:
        return MsgKind.SERVER_REQUEST
    if has_method and not has_id:
        return MsgKind.NOTIFICATION
    return MsgKind.UNKNOWN


def classify_message(json: Any) -> MsgKind:
    """Classify a message by which top-level keys it carries."""
    has = [_get(json, key) is not _MISSING for key in ("id", "method", "result", "error")]
    return _kind(*has)


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _str_field(root: Any, key: str) -> Optional[str]:
    direct = _as_str(_get(root, key))
    if direct is not None:
        return direct
    return _as_str(_get(_get(root, "params"), key))


def _nested_id_field(root: Any, key: str) -> Optional[str]:
    direct = _as_str(_get(_get(root, key), "id"))
    if direct is not None:
        return direct
    return _as_str(_get(_get(_get(root, "params"), key), "id"))


def _thread_id(root: Any) -> Optional[str]:
    return _str_field(root, "threadId") or _nested_id_field(root, "thread")


def _turn_id(root: Any) -> Optional[str]:
    return _str_field(root, "turnId") or _nested_id_field(root, "turn")


def _item_id(root: Any) -> Optional[str]:
    return _str_field(root, "itemId") or _nested_id_field(root, "item")


def _roots(json: Any) -> list[Any]:
    candidates = [
        _get(json, "params"),
        _get(json, "result"),
        _get(_get(json, "error"), "data"),
        json,
    ]
    return [root for root in candidates if root is not _MISSING]


def _first(roots: Iterable[Any], getter) -> Optional[str]:
    return next((found for found in map(getter, roots) if found is not None), None)


def extract_ids(json: Any) -> ExtractedIds:
    """Find thread, turn and item ids in the usual shallow JSON-RPC slots."""
    roots = _roots(json)
    return ExtractedIds(
        thread_id=_first(roots, _thread_id),
        turn_id=_first(roots, _turn_id),
        item_id=_first(roots, _item_id),
    )


def _is_u64(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= _U64_MAX


def _response_id(value: Any) -> Optional[int]:
    if _is_u64(value):
        return value
    if isinstance(value, str) and _UNSIGNED_TEXT.fullmatch(value):
        number = int(value)
        return number if number <= _U64_MAX else None
    return None


def _jsonrpc_id(value: Any) -> Optional[JsonRpcId]:
    if _is_u64(value):
        return value
    if isinstance(value, str):
        return value
    return None


def extract_message_metadata(json: Any) -> MsgMetadata:
    """Collect kind, ids and method of a message in one pass."""
    id_value = _get(json, "id")
    method_value = _get(json, "method")
    kind = _kind(
        id_value is not _MISSING,
        method_value is not _MISSING,
        _get(json, "result") is not _MISSING,
        _get(json, "error") is not _MISSING,
    )

    thread_id = turn_id = item_id = None
    for root in _roots(json):
        if thread_id is None:
            thread_id = _thread_id(root)
        if turn_id is None:
            turn_id = _turn_id(root)
        if item_id is None:
            item_id = _item_id(root)
        if thread_id is not None and turn_id is not None and item_id is not None:
            break

    return MsgMetadata(
        kind=kind,
        response_id=_response_id(id_value),
        rpc_id=_jsonrpc_id(id_value),
        method=_as_str(method_value),
        thread_id=thread_id,
        turn_id=turn_id,
        item_id=item_id,
    )


def map_rpc_error(json_error: Any) -> RpcError:
    """Turn a JSON-RPC error object into the matching error instance."""
    code = _get(json_error, "code")
    if isinstance(code, bool) or not isinstance(code, int) or not _I64_MIN <= code <= _I64_MAX:
        code = None
    message = _as_str(_get(json_error, "message")) or "unknown rpc error"
    if message == "" and isinstance(_get(json_error, "message"), str):
        message = ""
    data = _get(json_error, "data")
    data = None if data is _MISSING else data

    if code is None:
        return InvalidRequest("invalid rpc error payload")
    if code == -32001:
        return Overloaded()
    if code == -32600:
        return InvalidRequest(message)
    if code == -32601:
        return MethodNotFound(message)
    return ServerError(RpcErrorObject(code=code, message=message, data=data))