# src/resumer/core/__init__.py
"""Core infrastructure: Cursor policy, Canonical cursor form, Configuration, Logging."""

from resumer.core.canonical import (
    canonical_cursor,
    cursor_dumps,
    cursor_fingerprint,
    cursor_loads,
    cursors_equal,
)
from resumer.core.config import (
    CursorSettings,
    ResumerSettings,
    SliceSettings,
    load_settings,
)
from resumer.core.cursor import (
    DEFAULT_DEPRECATION,
    CursorPolicy,
    DeprecationState,
    classify,
    log_deprecation,
)

__all__ = [
    "DEFAULT_DEPRECATION",
    "CursorPolicy",
    "CursorSettings",
    "DeprecationState",
    "ResumerSettings",
    "SliceSettings",
    "canonical_cursor",
    "classify",
    "cursor_dumps",
    "cursor_fingerprint",
    "cursor_loads",
    "cursors_equal",
    "load_settings",
    "log_deprecation",
]
