"""Test steps for individual S3 operations."""

from s3verify.operations.bucket import MakeBucketStep, RemoveBucketStep
from s3verify.operations.object import (
    CopyObjectStep,
    GetObjectStep,
    HeadObjectStep,
    PutObjectStep,
    RemoveObjectStep,
)

__all__ = [
    "CopyObjectStep",
    "GetObjectStep",
    "HeadObjectStep",
    "MakeBucketStep",
    "PutObjectStep",
    "RemoveBucketStep",
    "RemoveObjectStep",
]
