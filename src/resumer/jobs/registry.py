# src/resumer/jobs/registry.py
"""Job registry: explicit, ordered registration of job types.

Registration runs contract validation once per job type and caches the
resulting JobSpec for the life of the registry. Registering at definition
time (as a class decorator) surfaces contract violations before any instance
can be scheduled:

    registry = JobRegistry()

    @registry.register
    class BackfillJob(IterationJob):
        ...
"""

from __future__ import annotations

from typing import Any, TypeVar

import pluggy

from resumer.contracts.errors import UnregisteredJobError
from resumer.contracts.job import JobSpec
from resumer.core.logging import get_logger
from resumer.jobs.contract import validate_job_type
from resumer.jobs.hookspecs import PROJECT_NAME, ResumerJobSpec

logger = get_logger(__name__)

JobT = TypeVar("JobT", bound=type)


class JobRegistry:
    """Validated job types, looked up by class or by name."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(ResumerJobSpec)
        # Validation cache: every type that passed validation, registered or not
        self._validated: dict[type, JobSpec] = {}
        # Insertion-ordered name index of explicitly registered types
        self._by_name: dict[str, JobSpec] = {}

    def ensure(self, job_cls: type) -> JobSpec:
        """Validate ``job_cls`` once and return its cached JobSpec.

        Raises:
            JobContractError: If the type violates the job contract
        """
        spec = self._validated.get(job_cls)
        if spec is None:
            spec = validate_job_type(job_cls)
            self._validated[job_cls] = spec
            logger.debug("job contract validated", job=spec.name, cursor_binding=str(spec.cursor_binding))
        return spec

    def register(self, job_cls: JobT) -> JobT:
        """Validate and register a job type. Usable as a class decorator.

        Raises:
            JobContractError: If the type violates the job contract
            ValueError: If another type is already registered under its name
        """
        spec = self.ensure(job_cls)
        existing = self._by_name.get(spec.name)
        if existing is not None and existing.job_cls is not job_cls:
            raise ValueError(f"Duplicate job name: '{spec.name}'. Already registered by {existing.job_cls.__module__}.{existing.job_cls.__qualname__}")
        self._by_name[spec.name] = spec
        return job_cls

    def register_plugin(self, plugin: Any) -> list[JobSpec]:
        """Register every job type a plugin returns from ``resumer_get_jobs``.

        Returns:
            Specs of the plugin's job types, in the order it listed them
        """
        self._pm.register(plugin)
        specs: list[JobSpec] = []
        for hook_impl in self._pm.hook.resumer_get_jobs.get_hookimpls():
            if hook_impl.plugin is not plugin:
                continue
            for job_cls in hook_impl.function():
                self.register(job_cls)
                specs.append(self.ensure(job_cls))
        return specs

    def is_registered(self, job_cls: type) -> bool:
        spec = self._validated.get(job_cls)
        return spec is not None and self._by_name.get(spec.name) is spec

    def get(self, name: str) -> JobSpec:
        try:
            return self._by_name[name]
        except KeyError:
            raise UnregisteredJobError(name, self.names()) from None

    def names(self) -> list[str]:
        return list(self._by_name)


# Process-wide default registry
DEFAULT_REGISTRY = JobRegistry()


def register_job(job_cls: JobT) -> JobT:
    """Register a job type with DEFAULT_REGISTRY (class decorator)."""
    return DEFAULT_REGISTRY.register(job_cls)
