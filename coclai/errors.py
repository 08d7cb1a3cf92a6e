"""Error types raised by the runtime, the RPC layer, event sinks and the client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class RpcErrorObject:
    """A JSON-RPC error object as sent by the server."""

    code: int
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Return the wire shape of this error object."""
        return {"code": self.code, "message": self.message, "data": self.data}


class _ErrorBase(Exception):
    """Exception whose message comes from a template and which compares by value."""

    template = ""

    def __str__(self) -> str:
        return self.template.format(*self.args)

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self.args == other.args  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, str(self)))


# Runtime failures


class RuntimeFailure(_ErrorBase):
    """Base class for runtime lifecycle and transport failures."""


class NotInitialized(RuntimeFailure):
    template = "runtime is not initialized"


class AlreadyInitialized(RuntimeFailure):
    template = "runtime is already initialized"


class InvalidConfig(RuntimeFailure):
    template = "invalid config: {0}"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class TransportClosed(RuntimeFailure):
    template = "transport is closed"


class ProcessExited(RuntimeFailure):
    template = "child process exited"


class RuntimeTimeout(RuntimeFailure):
    template = "request timed out"


class ServerRequestReceiverTaken(RuntimeFailure):
    template = "server request receiver already taken"


class InternalError(RuntimeFailure):
    template = "internal error: {0}"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


# RPC failures


class RpcError(_ErrorBase):
    """Base class for JSON-RPC call failures."""


class Overloaded(RpcError):
    template = "runtime overloaded"


class RpcTimeout(RpcError):
    template = "rpc call timed out"


class InvalidRequest(RpcError):
    template = "invalid request: {0}"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class MethodNotFound(RpcError):
    template = "method not found: {0}"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ServerError(RpcError):
    template = "server error: {0!r}"

    def __init__(self, error: RpcErrorObject) -> None:
        super().__init__(error)
        self.error = error


class RpcTransportClosed(RpcError):
    template = "transport is closed"


# Event sink failures


class SinkError(_ErrorBase):
    """Base class for event sink failures."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class SinkIoError(SinkError):
    template = "io error: {0}"


class SinkSerializeError(SinkError):
    template = "serialize error: {0}"


class SinkInternalError(SinkError):
    template = "internal error: {0}"


# Client failures


class ClientError(_ErrorBase):
    """Base class for client configuration and compatibility failures."""


class SchemaDirNotFound(ClientError):
    template = "schema directory not found: {0}"

    def __init__(self, path: str) -> None:
        super().__init__(path)
        self.path = path


class SchemaDirNotDirectory(ClientError):
    template = "schema path is not a directory: {0}"

    def __init__(self, path: str) -> None:
        super().__init__(path)
        self.path = path


class CurrentDirError(ClientError):
    template = "failed to read current directory: {0}"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class MissingInitializeUserAgent(ClientError):
    template = "initialize result is missing userAgent"


class InvalidInitializeUserAgent(ClientError):
    template = "invalid initialize userAgent: {0}"

    def __init__(self, user_agent: str) -> None:
        super().__init__(user_agent)
        self.user_agent = user_agent


class IncompatibleCodexVersion(ClientError):
    template = "incompatible codex version {0}; required >= {1} (userAgent: {2})"

    def __init__(self, detected: str, required: str, user_agent: str) -> None:
        super().__init__(detected, required, user_agent)
        self.detected = detected
        self.required = required
        self.user_agent = user_agent