"""Exception hierarchy and the process-wide error sink for nrrdmeta."""

from __future__ import annotations

import logging
import threading
from typing import Optional

log = logging.getLogger(__name__)

NRRD = "nrrd"


class NrrdError(Exception):
    """Base exception for all nrrdmeta errors."""


class StructuralError(NrrdError, ValueError):
    """Missing object or data, or dim/space_dim/sizes out of range."""


class SpaceInfoError(NrrdError, ValueError):
    """Inconsistent space or orientation information.

    Attributes:
        violation: Which consistency rule failed (a ``SpaceViolation``).
        axis: Offending axis index, when the rule is per-axis.
        index: Offending coefficient index, when the rule is per-coefficient.
    """

    def __init__(
        self,
        message: str,
        *,
        violation: Optional[str] = None,
        axis: Optional[int] = None,
        index: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.violation = violation
        self.axis = axis
        self.index = index


class SpaceRangeError(StructuralError, SpaceInfoError):
    """Space label or space dimension outside its valid range."""


class NumericDomainError(NrrdError, ValueError):
    """Infinite or out-of-policy scalar value."""


class TypeSizeError(NrrdError, ValueError):
    """Invalid element type, or type/size mismatch (block size, kind size)."""


class FieldCheckError(NrrdError, ValueError):
    """A field validator failed; the inner cause is chained."""


class ConfigurationError(NrrdError, ValueError):
    """Invalid configuration value."""


class PlatformError(NrrdError, RuntimeError):
    """The platform sanity check failed. Not recoverable."""


def error_chain(exc: BaseException) -> list[str]:
    """Return the messages of an exception and its causes, outermost first."""
    out: list[str] = []
    seen: set[int] = set()
    cur: Optional[BaseException] = exc
    while cur is not None and id(cur) not in seen:
        seen.add(id(cur))
        out.append(str(cur))
        cur = cur.__cause__
    return out


class ErrorSink:
    """Accumulates error messages per subsystem key.

    Messages are stored in the order they were added and reported most
    recent first, so an outer routine's message precedes the inner cause.
    """

    def __init__(self) -> None:
        self._messages: dict[str, list[str]] = {}
        self._lock = threading.Lock()

    def add(self, key: str, message: str) -> None:
        """Append one message under key."""
        with self._lock:
            self._messages.setdefault(key, []).append(message)
        log.debug("[%s] %s", key, message)

    def maybe_add(self, key: str, message: str, use: bool) -> None:
        """Append message only when use is true."""
        if use:
            self.add(key, message)

    def add_exception(self, key: str, exc: BaseException) -> None:
        """Append every message of an exception chain, innermost first."""
        for message in reversed(error_chain(exc)):
            self.add(key, message)

    def count(self, key: str) -> int:
        with self._lock:
            return len(self._messages.get(key, ()))

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(k for k, v in self._messages.items() if v)

    def get(self, key: str) -> str:
        """Return all messages under key, most recent first, one per line."""
        with self._lock:
            messages = list(self._messages.get(key, ()))
        return "".join(f"[{key}] {m}\n" for m in reversed(messages))

    def done(self, key: str) -> None:
        """Forget all messages under key."""
        with self._lock:
            self._messages.pop(key, None)

    def get_done(self, key: str) -> str:
        """Return the messages under key and then forget them."""
        text = self.get(key)
        self.done(key)
        return text


# Process-wide sink shared by the boolean front ends (sanity, nrrd_check, ...)
biff = ErrorSink()
