# src/resumer/jobs/contract.py
"""Structural contract validation for job types.

A job type must define:
- build_enumerator(params, *, cursor): the cursor is a keyword the runner can
  always pass by name. Keyword-only (with or without a default) or collected by
  **kwargs is accepted. A positional (or positional-or-keyword) ``cursor``, or
  no way to pass ``cursor`` at all, is rejected.
- each_iteration(item, params): callable with two positional arguments.

Type annotations play no part: an annotated job and an unannotated one with
the same parameter kinds validate identically.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

from resumer.contracts.enums import CursorBinding
from resumer.contracts.errors import JobContractError
from resumer.contracts.job import JobSpec

REQUIRED_OPERATIONS: tuple[str, ...] = ("build_enumerator", "each_iteration")

_PROBE = object()


def job_name(job_cls: type) -> str:
    """Registration name: the class's own ``name`` attribute, else its qualname."""
    name = vars(job_cls).get("name")
    if isinstance(name, str) and name:
        return name
    return job_cls.__qualname__


def validate_job_type(job_cls: type) -> JobSpec:
    """Validate a job type and return its registration record.

    Args:
        job_cls: The job class (not an instance)

    Returns:
        JobSpec describing the validated job type

    Raises:
        JobContractError: If an operation is missing or malformed
    """
    if not isinstance(job_cls, type):
        raise TypeError(f"Expected a job class, got {type(job_cls).__name__}")
    name = job_name(job_cls)

    resolved = {operation: _resolve_operation(job_cls, name, operation) for operation in REQUIRED_OPERATIONS}

    binding = _check_build_enumerator(name, *resolved["build_enumerator"])
    _check_each_iteration(name, *resolved["each_iteration"])

    return JobSpec(name=name, job_cls=job_cls, cursor_binding=binding)


def _resolve_operation(job_cls: type, name: str, operation: str) -> tuple[Callable[..., Any], tuple[Any, ...]]:
    """Find an operation and the leading arguments Python supplies implicitly.

    Returns:
        (callable to inspect, placeholder arguments for self/cls)
    """
    try:
        raw = inspect.getattr_static(job_cls, operation)
    except AttributeError:
        raise JobContractError(name, operation, "is not defined") from None

    if isinstance(raw, staticmethod):
        return raw.__func__, ()
    if isinstance(raw, classmethod):
        return raw.__func__, (_PROBE,)
    if inspect.isfunction(raw):
        return raw, (_PROBE,)
    if callable(raw):
        return raw, ()
    raise JobContractError(name, operation, f"must be a method, got {type(raw).__name__}")


def _signature(name: str, operation: str, fn: Callable[..., Any]) -> inspect.Signature:
    try:
        return inspect.signature(fn)
    except (TypeError, ValueError) as e:
        raise JobContractError(name, operation, f"has no inspectable signature: {e}") from e


def _check_build_enumerator(name: str, fn: Callable[..., Any], leading: tuple[Any, ...]) -> CursorBinding:
    sig = _signature(name, "build_enumerator", fn)
    cursor_param = sig.parameters.get("cursor")

    if cursor_param is not None and cursor_param.kind is inspect.Parameter.KEYWORD_ONLY:
        binding = CursorBinding.KEYWORD
    elif cursor_param is not None and cursor_param.kind is not inspect.Parameter.VAR_KEYWORD:
        raise JobContractError(
            name,
            "build_enumerator",
            "must declare `cursor` as a keyword-only argument, e.g. "
            "`def build_enumerator(self, params, *, cursor)`; it is declared positionally",
        )
    elif any(p.kind is inspect.Parameter.VAR_KEYWORD for p in sig.parameters.values()):
        binding = CursorBinding.VARIADIC
    else:
        raise JobContractError(
            name,
            "build_enumerator",
            "must accept a `cursor` keyword argument, e.g. `def build_enumerator(self, params, *, cursor)`",
        )

    try:
        sig.bind(*leading, _PROBE, cursor=None)
    except TypeError as e:
        raise JobContractError(name, "build_enumerator", f"cannot be called as build_enumerator(params, cursor=...): {e}") from e
    return binding


def _check_each_iteration(name: str, fn: Callable[..., Any], leading: tuple[Any, ...]) -> None:
    sig = _signature(name, "each_iteration", fn)
    try:
        sig.bind(*leading, _PROBE, _PROBE)
    except TypeError as e:
        raise JobContractError(name, "each_iteration", f"cannot be called as each_iteration(item, params): {e}") from e
