"""Shared pytest fixtures for s3verify tests.

Tests never touch the network: steps run against ``StubTransport``
(see stubs.py), which records every request and answers from a script.
"""

import pytest

from s3verify.registry import BucketDescriptor, Partition, RunContext
from stubs import StubTransport


@pytest.fixture
def transport() -> StubTransport:
    return StubTransport()


@pytest.fixture
def ctx(transport) -> RunContext:
    """A run context in unprepared mode with bucket ``b1`` registered."""
    context = RunContext(transport)
    context.buckets.append(Partition.AD_HOC, BucketDescriptor("b1"))
    return context
