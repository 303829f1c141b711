# src/resumer/core/canonical.py
"""
Cursor wire form and structural identity.

Cursors cross a process boundary through the host queue's argument
serialization, so only primitive-serializable cursors have a wire form:

1. cursor_dumps/cursor_loads: plain JSON (what a queue stores)
2. canonical_cursor: RFC 8785/JCS canonical JSON (rfc8785 package), used for
   structural equality and fingerprints

Cursor identity is structural, not by reference: a tuple cursor and the list
it becomes after a JSON round trip are the same cursor.

IMPORTANT: NaN and Infinity are strictly REJECTED. They have no JSON form, so a
cursor containing them could never be reconstructed after re-enqueue.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

import rfc8785

from resumer.contracts.enums import CursorClass
from resumer.contracts.errors import CursorDecodeError, CursorEncodeError
from resumer.core.cursor import classify


def _require_primitive(cursor: Any) -> None:
    if classify(cursor) is not CursorClass.PRIMITIVE:
        raise CursorEncodeError(cursor)


def cursor_dumps(cursor: Any) -> str:
    """Serialize a primitive cursor for the host queue.

    Args:
        cursor: Primitive-serializable cursor

    Returns:
        JSON text

    Raises:
        CursorEncodeError: If the cursor is not primitive-serializable
    """
    _require_primitive(cursor)
    return json.dumps(cursor, allow_nan=False)


def cursor_loads(text: str) -> Any:
    """Reconstruct a cursor from its wire form.

    Raises:
        CursorDecodeError: If the text is not valid cursor JSON
    """
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except (json.JSONDecodeError, ValueError) as e:
        raise CursorDecodeError(f"Cannot decode cursor {text!r}: {e}") from e


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name} is not a valid cursor")


def canonical_cursor(cursor: Any) -> str:
    """Produce canonical JSON for a primitive cursor (no whitespace, sorted keys).

    Raises:
        CursorEncodeError: If the cursor is not primitive-serializable
    """
    _require_primitive(cursor)
    result: bytes = rfc8785.dumps(_to_lists(cursor))
    return result.decode("utf-8")


def _to_lists(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _to_lists(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_to_lists(v) for v in value]
    return value


def cursors_equal(left: Any, right: Any) -> bool:
    """Structural cursor equality, as seen after a wire round trip."""
    return canonical_cursor(left) == canonical_cursor(right)


def cursor_fingerprint(cursor: Any) -> str:
    """SHA-256 hex digest of the canonical cursor form."""
    return hashlib.sha256(canonical_cursor(cursor).encode("utf-8")).hexdigest()
