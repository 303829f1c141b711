"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core/engine.
Settings classes are NOT re-exported here - import them from resumer.core.config.
"""

from resumer.contracts.enums import (
    CursorBinding,
    CursorClass,
    DeprecationMode,
    OutcomeStatus,
    StopReason,
)
from resumer.contracts.errors import (
    ArgumentError,
    CursorDecodeError,
    CursorEncodeError,
    CursorSerializationError,
    CursorShapeError,
    JobContractError,
    UnregisteredJobError,
)
from resumer.contracts.job import JobSpec
from resumer.contracts.outcomes import IterationOutcome

__all__ = [
    "ArgumentError",
    "CursorBinding",
    "CursorClass",
    "CursorDecodeError",
    "CursorEncodeError",
    "CursorSerializationError",
    "CursorShapeError",
    "DeprecationMode",
    "IterationOutcome",
    "JobContractError",
    "JobSpec",
    "OutcomeStatus",
    "StopReason",
    "UnregisteredJobError",
]
