"""Version guard for the server identified by its initialize userAgent."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import takewhile
from typing import Optional

from coclai.errors import (
    IncompatibleCodexVersion,
    InvalidInitializeUserAgent,
    MissingInitializeUserAgent,
)

_U32_MAX = 2**32 - 1
_DIGITS = "0123456789"


@dataclass(frozen=True, order=True)
class SemVerTriplet:
    """A major.minor.patch version."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


DEFAULT_MIN_CODEX_VERSION = SemVerTriplet(0, 104, 0)


@dataclass(frozen=True)
class CompatibilityGuard:
    """Policy applied to the server's initialize userAgent at connect time."""

    require_initialize_user_agent: bool = True
    min_codex_version: Optional[SemVerTriplet] = field(
        default_factory=lambda: DEFAULT_MIN_CODEX_VERSION
    )


def _parse_u32(text: str) -> Optional[int]:
    if not text or any(ch not in _DIGITS for ch in text):
        return None
    number = int(text)
    return number if number <= _U32_MAX else None


def parse_initialize_user_agent(value: str) -> Optional[tuple[str, SemVerTriplet]]:
    """Split "Product/1.2.3 ..." into the product name and its version."""
    slash = value.find("/")
    if slash < 0:
        return None
    product = value[:slash].strip()
    if not product:
        return None

    version_part = "".join(
        takewhile(lambda ch: ch in _DIGITS or ch == ".", value[slash + 1 :])
    )
    parts = iter(version_part.split("."))
    numbers = []
    for _ in range(3):
        number = _parse_u32(next(parts, ""))
        if number is None:
            return None
        numbers.append(number)
    return product, SemVerTriplet(*numbers)


def validate_runtime_compatibility(
    user_agent: Optional[str], guard: CompatibilityGuard
) -> Optional[SemVerTriplet]:
    """Check a server userAgent against the guard.

    Returns the detected version when it was parsed, None when nothing was
    checked, and raises a ClientError when the guard rejects the server.
    """
    if not guard.require_initialize_user_agent and guard.min_codex_version is None:
        return None

    if user_agent is None:
        if guard.require_initialize_user_agent:
            raise MissingInitializeUserAgent()
        return None

    parsed = parse_initialize_user_agent(user_agent)
    if parsed is None:
        raise InvalidInitializeUserAgent(user_agent)
    product, version = parsed

    min_required = guard.min_codex_version
    if product.startswith("Codex ") and min_required is not None and version < min_required:
        raise IncompatibleCodexVersion(str(version), str(min_required), user_agent)
    return version