"""Step outcomes for sequential orchestration flows.

A flow is a table of named steps, each either `REQUIRED` (failure aborts the
flow and propagates) or `BEST_EFFORT` (failure is logged and the flow goes on).
"""

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from pixpay.common.errors import PixPayError
from pixpay.common.logging import logger
from pixpay.common.metrics import step_failures_total


class StepPolicy(str, Enum):
    REQUIRED = "required"
    BEST_EFFORT = "best_effort"


class StepStatus(str, Enum):
    OK = "ok"
    SOFT_FAILED = "soft_failed"


@dataclass
class StepResult:
    """Outcome of one step that did not abort the flow."""

    name: str
    status: StepStatus
    value: Any = None
    error: PixPayError | None = None

    @property
    def ok(self) -> bool:
        return self.status is StepStatus.OK


async def run_step(name: str, policy: StepPolicy, call: Callable[[], Any | Awaitable[Any]]) -> StepResult:
    """Run one step under its policy.

    `call` may be sync or async. Only `PixPayError` is classified; anything else
    is a bug and propagates regardless of policy.
    """

    try:
        value = call()
        if inspect.isawaitable(value):
            value = await value
    except PixPayError as exc:
        step_failures_total.labels(step=name, policy=policy.value).inc()
        if policy is StepPolicy.REQUIRED:
            logger.error("step_aborted step=%s error_type=%s error=%s", name, type(exc).__name__, exc)
            raise
        logger.warning("step_soft_failed step=%s error_type=%s error=%s", name, type(exc).__name__, exc)
        return StepResult(name=name, status=StepStatus.SOFT_FAILED, error=exc)
    return StepResult(name=name, status=StepStatus.OK, value=value)
