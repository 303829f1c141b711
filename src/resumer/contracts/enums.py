"""All status codes, classifications and reasons used across subsystem boundaries."""

from enum import StrEnum


class OutcomeStatus(StrEnum):
    """Result of running one iteration slice.

    Consumed by the host queue to decide whether to re-enqueue.
    """

    COMPLETED = "completed"
    INTERRUPTED = "interrupted"
    FAILED = "failed"


class CursorClass(StrEnum):
    """Serializability classification of a cursor value."""

    PRIMITIVE = "primitive"
    NON_PRIMITIVE = "non_primitive"


class StopReason(StrEnum):
    """Why a slice stopped before its iterator was exhausted."""

    MAX_RUNTIME = "max_runtime"
    MAX_ITERATIONS = "max_iterations"
    SHUTDOWN = "shutdown"
    # Caller-supplied predicate returned True without a known reason
    REQUESTED = "requested"


class DeprecationMode(StrEnum):
    """How non-primitive cursor detections are reported.

    WARN routes a notice to the deprecation behavior. RAISE raises
    CursorSerializationError (enforcement horizon reached). SILENCE drops it.
    """

    WARN = "warn"
    RAISE = "raise"
    SILENCE = "silence"


class CursorBinding(StrEnum):
    """How a job's build_enumerator accepts the cursor input."""

    KEYWORD = "keyword"
    VARIADIC = "variadic"
