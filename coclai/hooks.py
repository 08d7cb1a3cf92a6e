"""Pre and post lifecycle hooks: configuration, registration and execution."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Protocol, Sequence


class _Hook(Protocol):
    name: str

    async def call(self, ctx: Any) -> Any: ...


class HookIssue(Exception):
    """Raised by a hook to report a problem; the runtime records it and carries on."""

    def __init__(
        self,
        message: str = "",
        *,
        hook_name: str = "",
        phase: Any = None,
        issue_class: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.hook_name = hook_name
        self.phase = phase
        self.issue_class = issue_class

    def __repr__(self) -> str:
        return (
            f"HookIssue(message={self.message!r}, hook_name={self.hook_name!r}, "
            f"phase={self.phase!r}, issue_class={self.issue_class!r})"
        )


def _names(hooks: Iterable[_Hook]) -> list[str]:
    return [hook.name for hook in hooks]


def _append_unique(base: Sequence[_Hook], incoming: Iterable[_Hook]) -> list[_Hook]:
    """Return base followed by incoming hooks whose names are not seen yet."""
    merged = list(base)
    seen = set(_names(merged))
    for hook in incoming:
        if hook.name not in seen:
            seen.add(hook.name)
            merged.append(hook)
    return merged


@dataclass(eq=False)
class RuntimeHookConfig:
    """Ordered pre and post hooks; two configs are equal when their hook names match."""

    pre_hooks: list = field(default_factory=list)
    post_hooks: list = field(default_factory=list)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuntimeHookConfig):
            return NotImplemented
        return _names(self.pre_hooks) == _names(other.pre_hooks) and _names(
            self.post_hooks
        ) == _names(other.post_hooks)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"RuntimeHookConfig(pre_hooks={_names(self.pre_hooks)!r}, "
            f"post_hooks={_names(self.post_hooks)!r})"
        )

    def with_pre_hook(self, hook: _Hook) -> "RuntimeHookConfig":
        """Return a copy with one more pre hook."""
        return RuntimeHookConfig([*self.pre_hooks, hook], list(self.post_hooks))

    def with_post_hook(self, hook: _Hook) -> "RuntimeHookConfig":
        """Return a copy with one more post hook."""
        return RuntimeHookConfig(list(self.pre_hooks), [*self.post_hooks, hook])

    def is_empty(self) -> bool:
        """True when no hook is configured."""
        return not self.pre_hooks and not self.post_hooks


@dataclass(frozen=True)
class PreHookDecision:
    """The action one pre hook returned."""

    hook_name: str
    action: Any


def _normalize_issue(issue: HookIssue, fallback_name: str, phase: Any) -> HookIssue:
    if not issue.hook_name.strip():
        issue.hook_name = fallback_name
    issue.phase = phase
    return issue


class HookKernel:
    """Holds the runtime's global hooks and the latest hook report."""

    def __init__(self, config: Optional[RuntimeHookConfig] = None) -> None:
        config = config or RuntimeHookConfig()
        self._lock = threading.Lock()
        self._pre_hooks: list[_Hook] = list(config.pre_hooks)
        self._post_hooks: list[_Hook] = list(config.post_hooks)
        self._latest_report: list[HookIssue] = []

    def is_enabled(self) -> bool:
        with self._lock:
            return bool(self._pre_hooks or self._post_hooks)

    def register(self, config: RuntimeHookConfig) -> None:
        """Add hooks; names already registered are ignored to keep order deterministic."""
        if config.is_empty():
            return
        with self._lock:
            self._pre_hooks = _append_unique(self._pre_hooks, config.pre_hooks)
            self._post_hooks = _append_unique(self._post_hooks, config.post_hooks)

    def report_snapshot(self) -> list[HookIssue]:
        with self._lock:
            return list(self._latest_report)

    def set_latest_report(self, report: Iterable[HookIssue]) -> None:
        with self._lock:
            self._latest_report = list(report)

    def _merged(self, attr: str, scoped: Optional[RuntimeHookConfig]) -> list[_Hook]:
        with self._lock:
            hooks = list(getattr(self, f"_{attr}"))
        if scoped is None:
            return hooks
        return _append_unique(hooks, getattr(scoped, attr))

    async def run_pre_with(
        self,
        ctx: Any,
        report: list,
        scoped: Optional[RuntimeHookConfig] = None,
    ) -> list[PreHookDecision]:
        """Run global then scoped pre hooks; issues go into report, decisions are returned."""
        decisions = []
        for hook in self._merged("pre_hooks", scoped):
            try:
                action = await hook.call(ctx)
            except HookIssue as issue:
                report.append(_normalize_issue(issue, hook.name, ctx.phase))
            else:
                decisions.append(PreHookDecision(hook_name=hook.name, action=action))
        return decisions

    async def run_post_with(
        self,
        ctx: Any,
        report: list,
        scoped: Optional[RuntimeHookConfig] = None,
    ) -> None:
        """Run global then scoped post hooks; issues go into report."""
        for hook in self._merged("post_hooks", scoped):
            try:
                await hook.call(ctx)
            except HookIssue as issue:
                report.append(_normalize_issue(issue, hook.name, ctx.phase))