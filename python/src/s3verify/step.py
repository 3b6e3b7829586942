"""Test step orchestration.

A step resolves its inputs from the run context, then for each planned
attempt builds a request, executes it, verifies the response and commits
the result to the registry. The first error ends the step as failed;
nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator

from s3verify import metrics
from s3verify.errors import S3VerifyError
from s3verify.registry import RunContext
from s3verify.request import Request
from s3verify.transport import closing_response
from s3verify.verify import ResponseVerifier

logger = logging.getLogger(__name__)


class StepState(str, Enum):
    """Lifecycle of a step: PENDING -> EXECUTING -> PASSED | FAILED."""

    PENDING = "pending"
    EXECUTING = "executing"
    PASSED = "passed"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Object-count policies
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Single:
    """Create exactly one object."""

    @property
    def count(self) -> int:
        return 1


@dataclass(frozen=True)
class BoundedLoop:
    """Create ``count`` distinct objects, stopping at the first failure."""

    count: int

    def __post_init__(self) -> None:
        if self.count < 1:
            raise ValueError(f"BoundedLoop count must be positive, got {self.count}")


ObjectCountPolicy = Single | BoundedLoop


@dataclass
class Attempt:
    """One request/response exchange planned by a step.

    Attributes:
        method: HTTP method.
        build: Builds the request; called right before execution.
        verifier: Checks the response.
        commit: Records the result in the registry after verification.
    """

    method: str
    build: Callable[[], Request]
    verifier: ResponseVerifier
    commit: Callable[[], None] | None = None


class TestStep:
    """Base class for one test case against the server.

    Subclasses implement :meth:`plan`, a generator of :class:`Attempt`
    objects. Registry lookups done inside :meth:`plan` raise at the point
    the step runs, so missing prerequisites fail the step like any other
    error.

    Attributes:
        name: Operation name shown in reports, e.g. ``PutObject``.
        state: Current lifecycle state.
        error: The error that failed the step, if any.
    """

    __test__ = False  # not a pytest test class

    name = "Step"

    def __init__(self) -> None:
        self.state = StepState.PENDING
        self.error: S3VerifyError | None = None

    def plan(self, ctx: RunContext) -> Iterator[Attempt]:
        raise NotImplementedError

    def run(self, ctx: RunContext) -> bool:
        """Execute the step to completion.

        Returns:
            True if every attempt passed, False otherwise. The failure
            cause is kept on :attr:`error`.
        """
        if self.state is not StepState.PENDING:
            raise RuntimeError(f"{self.name} has already run ({self.state.value})")
        self.state = StepState.EXECUTING
        try:
            for attempt in self.plan(ctx):
                self._execute(ctx, attempt)
        except S3VerifyError as exc:
            self.state = StepState.FAILED
            self.error = exc
            logger.error("%s failed: %s", self.name, exc, extra={"operation": self.name})
            metrics.record_step(self.name, self.state.value)
            return False
        self.state = StepState.PASSED
        logger.info("%s passed", self.name, extra={"operation": self.name})
        metrics.record_step(self.name, self.state.value)
        return True

    def _execute(self, ctx: RunContext, attempt: Attempt) -> None:
        request = attempt.build()
        logger.debug(
            "%s %s",
            attempt.method,
            request.path,
            extra={
                "operation": self.name,
                "method": attempt.method,
                "bucket": request.bucket,
                "key": request.key,
            },
        )
        response = ctx.transport.execute(attempt.method, request)
        metrics.record_request(attempt.method, response.status_code, request.content_length)
        with closing_response(response):
            attempt.verifier.verify(response)
        if attempt.commit is not None:
            attempt.commit()
