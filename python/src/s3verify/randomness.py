"""Random payloads and bucket names for synthetic test data."""

from __future__ import annotations

import random
import string

from s3verify.validation import MAX_BUCKET_NAME_LENGTH, validate_bucket_name

_LETTERS = string.ascii_letters + string.digits
_BUCKET_CHARS = string.ascii_lowercase + string.digits


def rand_bytes(size: int, rng: random.Random | None = None) -> bytes:
    """Return ``size`` random alphanumeric bytes.

    Only the length is guaranteed; the content is whatever ``rng`` yields.
    """
    rng = rng or random.Random()
    return "".join(rng.choice(_LETTERS) for _ in range(size)).encode("ascii")


def random_bucket_name(prefix: str = "s3verify", rng: random.Random | None = None) -> str:
    """Return a valid, unlikely-to-collide bucket name starting with ``prefix``."""
    rng = rng or random.Random()
    suffix = "".join(rng.choice(_BUCKET_CHARS) for _ in range(12))
    name = f"{prefix}-{suffix}"[:MAX_BUCKET_NAME_LENGTH]
    validate_bucket_name(name)
    return name
