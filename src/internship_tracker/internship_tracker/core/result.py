from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .exceptions import DomainError

INTERNAL_ERROR = "internal"


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a workflow operation.

    Public workflow operations never let an exception escape; callers
    inspect ``success`` and ``error_kind`` instead.
    """

    success: bool
    error: Optional[str] = None
    error_kind: Optional[str] = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, **data: Any) -> "OperationResult":
        return cls(success=True, data=dict(data))

    @classmethod
    def fail(cls, exc: DomainError) -> "OperationResult":
        return cls(success=False, error=str(exc), error_kind=exc.kind)


def guarded(logger: logging.Logger, action: str, fn: Callable[[], OperationResult]) -> OperationResult:
    """Run ``fn`` and turn any failure into a failed result."""
    try:
        return fn()
    except DomainError as e:
        logger.warning("%s failed: %s", action, e)
        return OperationResult.fail(e)
    except Exception:
        logger.exception("%s failed unexpectedly", action)
        return OperationResult(success=False, error=f"{action} failed", error_kind=INTERNAL_ERROR)
