# coclai

Building blocks for clients that talk JSON-RPC to an app-server. The package has no third-party dependencies at run time.

## Modules

- `coclai.errors`: exceptions grouped under four bases.
  - `RuntimeFailure`: `NotInitialized`, `AlreadyInitialized`, `InvalidConfig`, `TransportClosed`, `ProcessExited`, `RuntimeTimeout`, `ServerRequestReceiverTaken`, `InternalError`.
  - `RpcError`: `Overloaded`, `RpcTimeout`, `InvalidRequest`, `MethodNotFound`, `ServerError`, `RpcTransportClosed`.
  - `SinkError`: `SinkIoError`, `SinkSerializeError`, `SinkInternalError`.
  - `ClientError`: `SchemaDirNotFound`, `SchemaDirNotDirectory`, `CurrentDirError`, `MissingInitializeUserAgent`, `InvalidInitializeUserAgent`, `IncompatibleCodexVersion`.

  Two errors of the same class with the same arguments compare equal. `RpcErrorObject` holds a JSON-RPC error payload (`code`, `message`, `data`); `ServerError.error` carries one.
- `coclai.events`: the `Direction` and `MsgKind` enums and the `Envelope` record. `Envelope.to_dict()` and `Envelope.from_dict()` convert to and from the camelCase wire shape. `from_dict` raises `ValueError` on malformed input.
- `coclai.rpc`:
  - `classify_message` sorts a message into response, server request, notification or unknown.
  - `extract_ids` finds thread, turn and item ids in `params`, `result`, `error.data` or at the top level.
  - `extract_message_metadata` returns kind, ids, method and rpc id in one pass.
  - `map_rpc_error` turns a JSON-RPC error object into the matching `RpcError` instance. It returns the instance and does not raise it.
- `coclai.rpc_contract`: `validate_rpc_request` and `validate_rpc_response` check payload shapes for the known `thread/*` and `turn/*` methods (`KNOWN_METHODS`). Each returns the payload unchanged or raises `InvalidRequest`. In `RpcValidationMode.NONE` only the method name is checked, and it must not be empty.
- `coclai.metrics`: `RuntimeMetrics` is a set of thread-safe counters with a sink-latency histogram. `snapshot(now_unix_millis)` returns a frozen `RuntimeMetricsSnapshot` with uptime, ingress rate, pending counts, average, p95 and maximum sink latency. The decrement methods never go below zero.
- `coclai.hooks`: `RuntimeHookConfig` holds ordered pre and post hooks. `HookKernel` holds the global hooks and runs them, followed by any scoped hooks. Hook names are de-duplicated, and the first hook registered under a name wins. A hook is any object with a `name` attribute and an async `call(ctx)` method; `ctx` must have a `phase` attribute. A hook that raises `HookIssue` is recorded in the report list, and the remaining hooks still run.
- `coclai.compat`: `parse_initialize_user_agent` splits `"Product/1.2.3 ..."` into a product name and a `SemVerTriplet`. `validate_runtime_compatibility` applies a `CompatibilityGuard`. By default the guard requires a user agent and rejects `Codex ...` products older than 0.104.0.
- `coclai.config`: `ClientConfig`, whose builder methods return updated copies. It also provides `resolve_default_schema_dir` and `validate_schema_dir`.

## Examples

### Classifying messages and validating requests

```python
from coclai.errors import InvalidRequest
from coclai.events import MsgKind
from coclai.rpc import classify_message, extract_ids, map_rpc_error
from coclai.rpc_contract import RpcValidationMode, validate_rpc_request

msg = {"method": "turn/started", "params": {"thread": {"id": "thr_1"}, "turnId": "turn_1"}}
assert classify_message(msg) is MsgKind.NOTIFICATION
ids = extract_ids(msg)
print(ids.thread_id, ids.turn_id)  # thr_1 turn_1

print(map_rpc_error({"code": -32601, "message": "no such method"}))
# method not found: no such method

try:
    validate_rpc_request("turn/interrupt", {"threadId": "thr"}, RpcValidationMode.KNOWN_METHODS)
except InvalidRequest as exc:
    print(exc)
```

### Metrics

```python
from coclai.metrics import RuntimeMetrics

metrics = RuntimeMetrics(start_unix_millis=0)
for _ in range(95):
    metrics.record_sink_write(80, is_error=False)
for _ in range(5):
    metrics.record_sink_write(8_000, is_error=False)
snap = metrics.snapshot(2_000)
print(snap.sink_latency_p95_micros, snap.sink_latency_max_micros)  # 100 8000
```

### Hooks

```python
import asyncio
from dataclasses import dataclass

from coclai.hooks import HookIssue, HookKernel, RuntimeHookConfig


@dataclass
class Ctx:
    phase: str


class Audit:
    name = "audit"

    async def call(self, ctx):
        return "noop"


class Broken:
    name = "broken"

    async def call(self, ctx):
        raise HookIssue("failed")


kernel = HookKernel(RuntimeHookConfig().with_pre_hook(Audit()))
report = []
decisions = asyncio.run(
    kernel.run_pre_with(Ctx("pre_run"), report, RuntimeHookConfig().with_pre_hook(Broken()))
)
print([d.hook_name for d in decisions])            # ['audit']
print([(i.hook_name, i.phase) for i in report])    # [('broken', 'pre_run')]
```

### Checking server compatibility

```python
from coclai.compat import CompatibilityGuard, parse_initialize_user_agent, validate_runtime_compatibility

product, version = parse_initialize_user_agent("Codex Desktop/0.104.0 (Mac OS; arm64)")
print(product, version)  # Codex Desktop 0.104.0
validate_runtime_compatibility("Codex Desktop/0.104.0", CompatibilityGuard())  # returns the version
```

### Client configuration

```python
from coclai.config import ClientConfig

cfg = ClientConfig().with_cli_bin("/usr/local/bin/cli").with_schema_dir("/tmp/schema")
schema_dir = cfg.resolve_schema_dir()  # raises SchemaDirNotFound if /tmp/schema does not exist
```

When no schema directory is set, `resolve_schema_dir` searches in this order:

1. The `APP_SERVER_SCHEMA_DIR` environment variable.
2. `SCHEMAS/app-server/active` under the current directory.
3. `SCHEMAS/app-server/active` next to the installed package.

The result must be an existing directory. Otherwise it raises `SchemaDirNotFound` or `SchemaDirNotDirectory`.

## What the package does not do

The package contains the pieces around a client. It does not include a client runtime:

- It does not start the app-server process.
- It has no stdio transport.
- It does not send JSON-RPC calls or wait for responses.
- It provides no client, session or thread API.
- It provides no event sink that writes envelopes anywhere.

`ClientConfig.cli_bin` and the hook configuration only store settings. Nothing here uses them to connect.

## Running the tests

```
pip install -e ".[test]"
pytest
```