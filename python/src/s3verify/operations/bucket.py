"""Bucket-level operations.

Implements:
    - MakeBucket (PUT /{bucket})
    - RemoveBucket (DELETE /{bucket})
"""

from __future__ import annotations

import random
from functools import partial
from typing import Iterator

from s3verify.randomness import random_bucket_name
from s3verify.registry import BucketDescriptor, Partition, RunContext
from s3verify.request import Request, build_request
from s3verify.step import Attempt, TestStep
from s3verify.verify import (
    EmptyBodyCheck,
    HeaderPresentCheck,
    ResponseVerifier,
    StandardHeaderCheck,
    StatusCheck,
    empty_body_verifier,
)
from s3verify.xml_utils import render_create_bucket_configuration


def new_make_bucket_request(bucket: str, region: str = "us-east-1") -> Request:
    """Create a PUT bucket request, with a location constraint outside us-east-1."""
    return build_request(
        bucket, payload=render_create_bucket_configuration(region), require_key=False
    )


def make_bucket_verifier(expected_status: int) -> ResponseVerifier:
    return ResponseVerifier(
        [
            StandardHeaderCheck(),
            StatusCheck(expected_status),
            HeaderPresentCheck("Location"),
            EmptyBodyCheck(),
        ]
    )


def new_remove_bucket_request(bucket: str) -> Request:
    return build_request(bucket, require_key=False)


class MakeBucketStep(TestStep):
    """Create a fresh bucket and register it as ad-hoc."""

    name = "MakeBucket"

    def __init__(
        self,
        prefix: str = "s3verify",
        region: str = "us-east-1",
        bucket: str | None = None,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__()
        self.prefix = prefix
        self.region = region
        self.bucket = bucket
        self.rng = rng

    def plan(self, ctx: RunContext) -> Iterator[Attempt]:
        name = self.bucket or random_bucket_name(self.prefix, self.rng)
        yield Attempt(
            method="PUT",
            build=partial(new_make_bucket_request, name, self.region),
            verifier=make_bucket_verifier(200),
            commit=partial(ctx.buckets.append, Partition.AD_HOC, BucketDescriptor(name)),
        )


class RemoveBucketStep(TestStep):
    """Delete every ad-hoc bucket; run after their objects are removed."""

    name = "RemoveBucket"

    def plan(self, ctx: RunContext) -> Iterator[Attempt]:
        for bucket in ctx.buckets.all(Partition.AD_HOC):
            yield Attempt(
                method="DELETE",
                build=partial(new_remove_bucket_request, bucket.name),
                verifier=empty_body_verifier(204),
            )
