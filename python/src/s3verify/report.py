"""Human-readable per-step status lines."""

from __future__ import annotations

import sys
from typing import TextIO

from s3verify.step import StepState, TestStep


class Reporter:
    """Prints one status line per finished step and a final summary.

    Lines look like ``[03/07] PutObject: Passed``; a failed step is
    followed by its error message on the next line.
    """

    def __init__(self, total: int, stream: TextIO | None = None) -> None:
        self.total = total
        self.stream = stream or sys.stdout
        self.passed = 0
        self.failed = 0

    def message(self, index: int, step: TestStep) -> str:
        return f"[{index:02d}/{self.total}] {step.name}:"

    def report(self, index: int, step: TestStep) -> None:
        """Print the outcome of a finished step."""
        message = self.message(index, step)
        if step.state is StepState.PASSED:
            self.passed += 1
            print(f"{message} Passed", file=self.stream)
        else:
            self.failed += 1
            print(f"{message} Failed", file=self.stream)
            if step.error is not None:
                print(f"    {step.error}", file=self.stream)
        self.stream.flush()

    def summary(self) -> None:
        print(f"{self.passed} passed, {self.failed} failed", file=self.stream)
        self.stream.flush()
