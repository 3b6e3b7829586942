"""Suite assembly and sequential execution."""

from __future__ import annotations

import logging
from typing import TextIO

from s3verify.config import RunConfig, S3VerifyConfig
from s3verify.operations import (
    CopyObjectStep,
    GetObjectStep,
    HeadObjectStep,
    MakeBucketStep,
    PutObjectStep,
    RemoveBucketStep,
    RemoveObjectStep,
)
from s3verify.registry import BucketDescriptor, Partition, RunContext
from s3verify.report import Reporter
from s3verify.step import BoundedLoop, Single, TestStep
from s3verify.transport import HTTPTransport, Transport
from s3verify.validation import validate_bucket_name

logger = logging.getLogger(__name__)


def build_suite(run: RunConfig, region: str = "us-east-1") -> list[TestStep]:
    """Return the ordered steps for the configured mode.

    Unprepared runs create their own bucket and upload ``object_count``
    objects; prepared runs reuse the prepared buckets and upload one.
    """
    steps: list[TestStep] = []
    if run.prepared:
        steps.append(PutObjectStep(Single(), object_size=run.object_size))
    else:
        steps.append(MakeBucketStep(prefix=run.bucket_prefix, region=region))
        steps.append(PutObjectStep(BoundedLoop(run.object_count), object_size=run.object_size))
    steps.extend([HeadObjectStep(), GetObjectStep(), CopyObjectStep()])
    return steps


def build_cleanup(run: RunConfig) -> list[TestStep]:
    """Steps that remove what the run created. Prepared buckets are kept."""
    if not run.cleanup:
        return []
    steps: list[TestStep] = [RemoveObjectStep()]
    if not run.prepared:
        steps.append(RemoveBucketStep())
    return steps


def load_prepared_buckets(ctx: RunContext, names: list[str]) -> None:
    """Register buckets created by an earlier setup run.

    Raises:
        ConstructionError: If a name is not a valid bucket name.
    """
    for name in names:
        validate_bucket_name(name)
        ctx.buckets.append(Partition.PREPARED, BucketDescriptor(name))


def run_steps(ctx: RunContext, steps: list[TestStep], reporter: Reporter, start: int = 1) -> bool:
    """Run ``steps`` one after another; a failure does not stop later steps.

    Returns:
        True if every step passed.
    """
    ok = True
    for index, step in enumerate(steps, start=start):
        logger.debug("Running step %d/%d: %s", index, reporter.total, step.name)
        if not step.run(ctx):
            ok = False
        reporter.report(index, step)
    return ok


def run(
    config: S3VerifyConfig,
    transport: Transport | None = None,
    stream: TextIO | None = None,
) -> bool:
    """Run the whole suite, then clean up.

    Args:
        config: The loaded configuration.
        transport: Transport to use; defaults to a signing HTTP transport.
        stream: Where status lines go (default stdout).

    Returns:
        True if every step, cleanup included, passed.
    """
    owned: HTTPTransport | None = None
    if transport is None:
        transport = owned = HTTPTransport(
            endpoint=config.server.endpoint,
            access_key=config.server.access_key,
            secret_key=config.server.secret_key,
            region=config.server.region,
            timeout=config.server.timeout,
        )

    try:
        ctx = RunContext(transport, prepared=config.run.prepared)
        if config.run.prepared:
            load_prepared_buckets(ctx, config.run.prepared_buckets)

        steps = build_suite(config.run, config.server.region)
        cleanup = build_cleanup(config.run)
        reporter = Reporter(len(steps) + len(cleanup), stream)

        logger.info(
            "Verifying %s (%s mode, %d steps)",
            config.server.endpoint,
            "prepared" if config.run.prepared else "unprepared",
            reporter.total,
        )
        ok = run_steps(ctx, steps, reporter)
        ok = run_steps(ctx, cleanup, reporter, start=len(steps) + 1) and ok
        reporter.summary()
        return ok
    finally:
        if owned is not None:
            owned.close()
