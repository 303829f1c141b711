"""Exception hierarchy for the iteration engine.

ArgumentError subclasses are raised when a job or its starting cursor does not
fit the shape the engine requires. They are never converted into a Failed
outcome: a malformed job or cursor is not something a retry can fix.
"""

from typing import Any

from resumer.contracts.enums import CursorClass


class ArgumentError(ValueError):
    """Raised when an argument has the wrong shape for the operation."""


class CursorShapeError(ArgumentError):
    """Raised when a starting cursor is incompatible with the declared source.

    Example: a textual cursor for an integer-indexed source.
    """

    def __init__(self, source: str, cursor: Any, expected: str) -> None:
        self.source = source
        self.cursor = cursor
        self.expected = expected
        super().__init__(f"{source} cursor must be {expected}, got {type(cursor).__name__}: {cursor!r}")


class JobContractError(ArgumentError):
    """Raised when a job type is missing, or malforms, a required operation."""

    def __init__(self, job_name: str, operation: str, problem: str) -> None:
        self.job_name = job_name
        self.operation = operation
        self.problem = problem
        super().__init__(f"{job_name}.{operation} {problem}")


class CursorSerializationError(TypeError):
    """Raised when a non-primitive cursor is produced after the enforcement horizon.

    Attributes:
        job_name: Job type whose build_enumerator produced the cursor
        cursor_class: Classification of the offending cursor
        cursor: The offending cursor value
    """

    def __init__(self, job_name: str, cursor_class: CursorClass, cursor: Any) -> None:
        self.job_name = job_name
        self.cursor_class = cursor_class
        self.cursor = cursor
        super().__init__(
            f"{job_name}.build_enumerator produced a {cursor_class} cursor "
            f"({type(cursor).__name__}: {cursor!r}). Cursors must be composed of "
            f"str, int, float, list, dict, True, False, or None."
        )


class CursorEncodeError(TypeError):
    """Raised when a cursor has no wire form (it is not primitive-serializable).

    Seen when a non-primitive cursor tolerated in warn mode reaches the point
    where it must actually cross the queue boundary.
    """

    def __init__(self, cursor: Any) -> None:
        self.cursor = cursor
        super().__init__(
            f"Cursor has no wire form: {type(cursor).__name__}: {cursor!r}. "
            f"Only str, int, float, list, dict, True, False, or None can be serialized."
        )


class CursorDecodeError(ValueError):
    """Raised when the wire form of a cursor cannot be decoded."""


class UnregisteredJobError(LookupError):
    """Raised when a job type is looked up by a name nobody registered."""

    def __init__(self, name: str, known: list[str]) -> None:
        self.name = name
        self.known = known
        super().__init__(f"No job registered as {name!r}. Registered: {', '.join(known) or '(none)'}")
