"""Object-level operations.

Implements:
    - PutObject (PUT /{bucket}/{key})
    - HeadObject (HEAD /{bucket}/{key})
    - GetObject (GET /{bucket}/{key})
    - CopyObject (PUT /{bucket}/{key} with x-amz-copy-source)
    - RemoveObject (DELETE /{bucket}/{key})
"""

from __future__ import annotations

import hashlib
import random
import urllib.parse
from functools import partial
from typing import Iterator

from s3verify.randomness import rand_bytes
from s3verify.registry import ObjectDescriptor, Partition, RunContext
from s3verify.request import Request, build_request
from s3verify.step import Attempt, ObjectCountPolicy, Single, TestStep
from s3verify.verify import (
    BodyEqualsCheck,
    CopyResultCheck,
    EmptyBodyCheck,
    HeaderEqualsCheck,
    ResponseVerifier,
    StandardHeaderCheck,
    StatusCheck,
    empty_body_verifier,
)

# Key used when a single object is uploaded on top of prepared state.
PUT_OBJECT_KEY = "s3verify/made/put/object"
# Prefix for the enumerated keys of a bounded upload loop.
PUT_OBJECT_KEY_PREFIX = "s3verify/put/object/"
COPY_OBJECT_KEY_PREFIX = "s3verify/copy/"

DEFAULT_OBJECT_SIZE = 60


def etag_for(body: bytes) -> str:
    """Quoted MD5 hex ETag S3 assigns to a single-part upload of ``body``."""
    return f'"{hashlib.md5(body).hexdigest()}"'


# ---------------------------------------------------------------------------
# Request builders and verifiers
# ---------------------------------------------------------------------------


def new_put_object_request(bucket: str, key: str, data: bytes) -> Request:
    """Create a PUT object request carrying ``data``."""
    return build_request(bucket, key, data)


def put_object_verify(expected_status: int) -> ResponseVerifier:
    """Standard headers, exact status, empty body."""
    return empty_body_verifier(expected_status)


def new_head_object_request(bucket: str, key: str) -> Request:
    return build_request(bucket, key)


def head_object_verifier(obj: ObjectDescriptor, expected_status: int) -> ResponseVerifier:
    return ResponseVerifier(
        [
            StandardHeaderCheck(),
            StatusCheck(expected_status),
            HeaderEqualsCheck("Content-Length", str(len(obj.body))),
            HeaderEqualsCheck("ETag", etag_for(obj.body)),
            EmptyBodyCheck(),
        ]
    )


def new_get_object_request(bucket: str, key: str) -> Request:
    return build_request(bucket, key)


def get_object_verifier(obj: ObjectDescriptor, expected_status: int) -> ResponseVerifier:
    return ResponseVerifier(
        [StandardHeaderCheck(), StatusCheck(expected_status), BodyEqualsCheck(obj.body)]
    )


def new_copy_object_request(
    bucket: str, key: str, source_bucket: str, source_key: str
) -> Request:
    """Create a server-side copy request from ``source_bucket/source_key``."""
    source = urllib.parse.quote(f"/{source_bucket}/{source_key}", safe="/~")
    return build_request(bucket, key, headers={"x-amz-copy-source": source})


def copy_object_verifier(source: ObjectDescriptor, expected_status: int) -> ResponseVerifier:
    return ResponseVerifier(
        [
            StandardHeaderCheck(),
            StatusCheck(expected_status),
            CopyResultCheck(etag_for(source.body)),
        ]
    )


def new_remove_object_request(bucket: str, key: str) -> Request:
    return build_request(bucket, key)


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


class PutObjectStep(TestStep):
    """Upload random objects into the run's target bucket.

    With :class:`Single` one object is uploaded under ``key`` (prepared
    runs already hold plenty of objects). With ``BoundedLoop(n)`` ``n``
    objects are uploaded under enumerated keys, stopping at the first
    failure. Every successful upload is registered as ad-hoc.
    """

    name = "PutObject"

    def __init__(
        self,
        policy: ObjectCountPolicy = Single(),
        object_size: int = DEFAULT_OBJECT_SIZE,
        key: str = PUT_OBJECT_KEY,
        key_prefix: str = PUT_OBJECT_KEY_PREFIX,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__()
        self.policy = policy
        self.object_size = object_size
        self.key = key
        self.key_prefix = key_prefix
        self.rng = rng

    def keys(self) -> list[str]:
        if isinstance(self.policy, Single):
            return [self.key]
        return [f"{self.key_prefix}{i}" for i in range(self.policy.count)]

    def plan(self, ctx: RunContext) -> Iterator[Attempt]:
        bucket = ctx.buckets.first(ctx.bucket_partition)
        for key in self.keys():
            obj = ObjectDescriptor(
                key=key, body=rand_bytes(self.object_size, self.rng), bucket=bucket.name
            )
            yield Attempt(
                method="PUT",
                build=partial(new_put_object_request, bucket.name, obj.key, obj.body),
                verifier=put_object_verify(200),
                commit=partial(ctx.objects.append, Partition.AD_HOC, obj),
            )


class HeadObjectStep(TestStep):
    """HEAD the first uploaded object and check its length and ETag."""

    name = "HeadObject"

    def plan(self, ctx: RunContext) -> Iterator[Attempt]:
        obj = ctx.objects.first(Partition.AD_HOC)
        yield Attempt(
            method="HEAD",
            build=partial(new_head_object_request, obj.bucket, obj.key),
            verifier=head_object_verifier(obj, 200),
        )


class GetObjectStep(TestStep):
    """GET the first uploaded object and compare it byte for byte."""

    name = "GetObject"

    def plan(self, ctx: RunContext) -> Iterator[Attempt]:
        obj = ctx.objects.first(Partition.AD_HOC)
        yield Attempt(
            method="GET",
            build=partial(new_get_object_request, obj.bucket, obj.key),
            verifier=get_object_verifier(obj, 200),
        )


class CopyObjectStep(TestStep):
    """Copy the first uploaded object within its bucket; register the copy."""

    name = "CopyObject"

    def __init__(self, key_prefix: str = COPY_OBJECT_KEY_PREFIX) -> None:
        super().__init__()
        self.key_prefix = key_prefix

    def plan(self, ctx: RunContext) -> Iterator[Attempt]:
        source = ctx.objects.first(Partition.AD_HOC)
        copy = ObjectDescriptor(
            key=self.key_prefix + source.key, body=source.body, bucket=source.bucket
        )
        yield Attempt(
            method="PUT",
            build=partial(
                new_copy_object_request, copy.bucket, copy.key, source.bucket, source.key
            ),
            verifier=copy_object_verifier(source, 200),
            commit=partial(ctx.objects.append, Partition.COPIED, copy),
        )


class RemoveObjectStep(TestStep):
    """Delete every ad-hoc and copied object created during the run."""

    name = "RemoveObject"

    def plan(self, ctx: RunContext) -> Iterator[Attempt]:
        for partition in (Partition.COPIED, Partition.AD_HOC):
            for obj in ctx.objects.all(partition):
                yield Attempt(
                    method="DELETE",
                    build=partial(new_remove_object_request, obj.bucket, obj.key),
                    verifier=empty_body_verifier(204),
                )
