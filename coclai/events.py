"""Envelope records for messages crossing the JSON-RPC transport."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

JsonRpcId = Union[int, str]

_U64_MAX = 2**64 - 1


class Direction(str, Enum):
    """Which way a message travelled."""

    INBOUND = "inbound"
    OUTBOUND = "outbound"


class MsgKind(str, Enum):
    """Shape of a JSON-RPC message."""

    RESPONSE = "response"
    SERVER_REQUEST = "serverRequest"
    NOTIFICATION = "notification"
    UNKNOWN = "unknown"


def _parse_rpc_id(value: Any) -> Optional[JsonRpcId]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= _U64_MAX:
        return value
    raise ValueError(f"invalid rpc id: {value!r}")


def _parse_u64(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U64_MAX:
        raise ValueError(f"{name} must be an unsigned integer, got {value!r}")
    return value


def _parse_i64(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return value


def _parse_opt_str(name: str, value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    raise ValueError(f"{name} must be a string, got {value!r}")


@dataclass
class Envelope:
    """One observed message with its routing metadata."""

    seq: int
    ts_millis: int
    direction: Direction
    kind: MsgKind
    rpc_id: Optional[JsonRpcId]
    method: Optional[str]
    thread_id: Optional[str]
    turn_id: Optional[str]
    item_id: Optional[str]
    json: Any

    def to_dict(self) -> dict[str, Any]:
        """Return the camelCase wire shape."""
        return {
            "seq": self.seq,
            "tsMillis": self.ts_millis,
            "direction": self.direction.value,
            "kind": self.kind.value,
            "rpcId": self.rpc_id,
            "method": self.method,
            "threadId": self.thread_id,
            "turnId": self.turn_id,
            "itemId": self.item_id,
            "json": self.json,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Envelope":
        """Build an envelope from its camelCase wire shape."""
        if not isinstance(data, dict):
            raise ValueError("envelope must be an object")
        try:
            return cls(
                seq=_parse_u64("seq", data["seq"]),
                ts_millis=_parse_i64("tsMillis", data["tsMillis"]),
                direction=Direction(data["direction"]),
                kind=MsgKind(data["kind"]),
                rpc_id=_parse_rpc_id(data.get("rpcId")),
                method=_parse_opt_str("method", data.get("method")),
                thread_id=_parse_opt_str("threadId", data.get("threadId")),
                turn_id=_parse_opt_str("turnId", data.get("turnId")),
                item_id=_parse_opt_str("itemId", data.get("itemId")),
                json=data["json"],
            )
        except KeyError as exc:
            raise ValueError(f"envelope is missing field {exc.args[0]!r}") from exc