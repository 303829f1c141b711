"""Job registration contract."""

from dataclasses import dataclass

from resumer.contracts.enums import CursorBinding


@dataclass(frozen=True)
class JobSpec:
    """Registration record for a job type.

    Produced once by contract validation and cached for the life of the
    process. Frozen: a validated contract never changes.
    """

    name: str
    job_cls: type
    cursor_binding: CursorBinding
