"""
Decision / Diagnostic Boundary — one-way data-flow guard.

The decision layer (rules, cooldown, pipeline, CTA resolution) decides what a
user sees. The diagnostic layer (governance memory, analytics, lifecycle,
admin) only observes those decisions after the fact.

Behavioral Contract:
- Decision modules never import insight_kernel.diagnostics
- Diagnostic models all derive from DiagnosticModel
- Decision entry points run inside a decision scope and refuse diagnostic inputs,
  including inside mappings, sets and generators (generators are materialized)
- Diagnostic entry points refuse to run inside a decision scope
- A violation raises IsolationViolation and is never caught by this package
"""

import functools
from collections import abc
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Callable, Iterator, Optional

from pydantic import BaseModel, ConfigDict


class IsolationViolation(RuntimeError):
    """Raised when decision and diagnostic code paths cross."""


class DiagnosticModel(BaseModel):
    """Base for every read-only diagnostic artifact."""

    model_config = ConfigDict(frozen=True)


_decision_scope: ContextVar[Optional[str]] = ContextVar("decision_scope", default=None)


def current_decision_scope() -> Optional[str]:
    """Name of the innermost active decision entry point, if any."""
    return _decision_scope.get()


@contextmanager
def decision_scope(name: str) -> Iterator[None]:
    """Mark the enclosed block as decision-path logic."""
    token = _decision_scope.set(name)
    try:
        yield
    finally:
        _decision_scope.reset(token)


def assert_outside_decision_path(entry_point: str) -> None:
    scope = _decision_scope.get()
    if scope is not None:
        raise IsolationViolation(
            f"Diagnostic entry point '{entry_point}' called from decision path '{scope}'"
        )


def _materialize(value: object) -> object:
    """One-shot iterators become lists so they can be checked and still consumed."""
    if isinstance(value, abc.Iterator):
        return list(value)
    return value


def assert_no_diagnostic_inputs(entry_point: str, *values: object) -> None:
    """Reject DiagnosticModel values, including inside nested containers."""
    for value in values:
        if isinstance(value, DiagnosticModel):
            raise IsolationViolation(
                f"Decision entry point '{entry_point}' received diagnostic input "
                f"{type(value).__name__}"
            )
        if isinstance(value, (str, bytes, BaseModel)):
            continue
        if isinstance(value, abc.Mapping):
            assert_no_diagnostic_inputs(entry_point, *value.keys(), *value.values())
        elif isinstance(value, abc.Iterable) and not isinstance(value, abc.Iterator):
            assert_no_diagnostic_inputs(entry_point, *value)


def decision_path(name: str) -> Callable:
    """Decorator for decision entry points."""

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            args = tuple(_materialize(a) for a in args)
            kwargs = {k: _materialize(v) for k, v in kwargs.items()}
            assert_no_diagnostic_inputs(name, *args, *kwargs.values())
            with decision_scope(name):
                return fn(*args, **kwargs)

        return wrapper

    return decorator


def diagnostic_entry(name: str) -> Callable:
    """Decorator for diagnostic entry points."""

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            assert_outside_decision_path(name)
            return fn(*args, **kwargs)

        return wrapper

    return decorator
