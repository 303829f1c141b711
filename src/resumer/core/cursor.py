# src/resumer/core/cursor.py
"""Cursor classification and the serializability policy.

A cursor is primitive-serializable when it is composed only of None, bool,
int, finite float, str, and lists/tuples/str-keyed dicts of those. The check
uses exact types: a str subclass, an IntEnum member or a bool-returning record
are NOT primitive, because the host queue's argument serialization would not
reconstruct them as the same type.

Non-primitive cursors are tolerated until the enforcement horizon: each
iteration step that yields one routes exactly ONE notice to the deprecation
behavior. After the horizon (mode "raise") the step fails instead.

DeprecationState is shared mutable state. The engine takes it by injection
and falls back to DEFAULT_DEPRECATION. No locking: the host serializes
access to it.
"""

from __future__ import annotations

import math
import traceback
from collections.abc import Callable
from pathlib import Path
from typing import Any

from resumer.contracts.enums import CursorClass, DeprecationMode
from resumer.contracts.errors import CursorSerializationError
from resumer.core.logging import get_logger

logger = get_logger(__name__)

# Signature: (message, callstack, horizon, source_name) -> None
DeprecationBehavior = Callable[[str, list[traceback.FrameSummary], str, str], None]

_PRIMITIVE_SCALARS: tuple[type, ...] = (str, int, bool, type(None))

_PACKAGE_DIR = Path(__file__).resolve().parent.parent


def classify(value: Any) -> CursorClass:
    """Classify a cursor value, descending into lists, tuples and dicts.

    Args:
        value: Cursor value as yielded by an iterator

    Returns:
        CursorClass.PRIMITIVE or CursorClass.NON_PRIMITIVE
    """
    return CursorClass.PRIMITIVE if _is_primitive(value) else CursorClass.NON_PRIMITIVE


def _is_primitive(value: Any) -> bool:
    value_type = type(value)
    if value_type in _PRIMITIVE_SCALARS:
        return True
    if value_type is float:
        return math.isfinite(value)
    if value_type is list or value_type is tuple:
        return all(_is_primitive(v) for v in value)
    if value_type is dict:
        return all(type(k) is str and _is_primitive(v) for k, v in value.items())
    return False


def log_deprecation(message: str, callstack: list[traceback.FrameSummary], horizon: str, source_name: str) -> None:
    """Default deprecation behavior: a structured WARNING log line."""
    caller = callstack[-1] if callstack else None
    logger.warning(
        "deprecation",
        message=message,
        horizon=horizon,
        source=source_name,
        caller=f"{caller.filename}:{caller.lineno}" if caller is not None else None,
    )


class DeprecationState:
    """Where and how non-primitive cursor notices are reported.

    ``behavior`` is swappable (tests replace it with a recording callable).

    Example:
        deprecation = DeprecationState()
        notices = []
        deprecation.behavior = lambda message, *_: notices.append(message)
    """

    def __init__(
        self,
        *,
        mode: DeprecationMode = DeprecationMode.WARN,
        horizon: str = "2.0",
        source_name: str = "resumer",
        behavior: DeprecationBehavior | None = None,
    ) -> None:
        self.mode = mode
        self.horizon = horizon
        self.source_name = source_name
        self.behavior: DeprecationBehavior = behavior if behavior is not None else log_deprecation

    @classmethod
    def from_settings(cls, settings: Any, behavior: DeprecationBehavior | None = None) -> DeprecationState:
        """Build from a CursorSettings instance."""
        return cls(
            mode=settings.mode,
            horizon=settings.enforcement_horizon,
            source_name=settings.source_name,
            behavior=behavior,
        )

    @property
    def strict(self) -> bool:
        return self.mode == DeprecationMode.RAISE

    def warn(self, message: str) -> None:
        """Route one notice to the behavior, with the caller's stack."""
        if self.mode == DeprecationMode.SILENCE:
            return
        callstack = _outside_package(traceback.extract_stack())
        self.behavior(message, callstack, self.horizon, self.source_name)


def _outside_package(stack: list[traceback.FrameSummary]) -> list[traceback.FrameSummary]:
    """Drop the trailing resumer frames so the stack ends at the engine's caller."""
    end = len(stack)
    while end > 0 and Path(stack[end - 1].filename).resolve().is_relative_to(_PACKAGE_DIR):
        end -= 1
    return stack[:end] if end else stack


# Process-wide default, initialized with the logging behavior
DEFAULT_DEPRECATION = DeprecationState()


class CursorPolicy:
    """Applies the warn-then-reject policy to every cursor an iterator yields."""

    def __init__(self, deprecation: DeprecationState | None = None) -> None:
        self._deprecation = deprecation if deprecation is not None else DEFAULT_DEPRECATION

    @property
    def deprecation(self) -> DeprecationState:
        return self._deprecation

    def enforce(self, cursor: Any, job_name: str) -> CursorClass:
        """Check one cursor produced by one iteration step.

        Args:
            cursor: Cursor yielded alongside the item
            job_name: Job type whose build_enumerator produced it

        Returns:
            The cursor's classification

        Raises:
            CursorSerializationError: If the cursor is non-primitive and the
                enforcement horizon has been reached (mode "raise")
        """
        cursor_class = classify(cursor)
        if cursor_class is CursorClass.PRIMITIVE:
            return cursor_class
        if self._deprecation.strict:
            raise CursorSerializationError(job_name, cursor_class, cursor)
        self._deprecation.warn(self.deprecation_message(cursor, job_name))
        return cursor_class

    def deprecation_message(self, cursor: Any, job_name: str) -> str:
        return (
            "Cursor must be composed of objects capable of built-in (de)serialization:\n"
            "  str, int, float, list, dict, True, False, or None.\n"
            f"{job_name}.build_enumerator's iterator provided:\n"
            f"  {_describe(cursor)}\n"
            f"This will raise starting in {self._deprecation.horizon} of {self._deprecation.source_name}!"
        )


def _describe(cursor: Any) -> str:
    return f"{type(cursor).__module__}.{type(cursor).__qualname__}: {cursor!r}"
