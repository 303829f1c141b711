"""Job types: base class, contract validation and registration.

Provides:
- IterationJob: base class with builder access and lifecycle hooks
- validate_job_type: one-time structural contract check
- JobRegistry / register_job: validated, cached registration
- hookimpl: pluggy marker for packages that expose job types
"""

from resumer.jobs.base import IterationJob
from resumer.jobs.contract import REQUIRED_OPERATIONS, job_name, validate_job_type
from resumer.jobs.hookspecs import hookimpl
from resumer.jobs.protocols import IterationJobProtocol
from resumer.jobs.registry import DEFAULT_REGISTRY, JobRegistry, register_job

__all__ = [
    "DEFAULT_REGISTRY",
    "REQUIRED_OPERATIONS",
    "IterationJob",
    "IterationJobProtocol",
    "JobRegistry",
    "hookimpl",
    "job_name",
    "register_job",
    "validate_job_type",
]
