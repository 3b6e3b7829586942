"""Naming rules for the buckets and keys the harness generates.

These mirror the S3 naming rules so malformed identifiers are rejected
while a request is being built rather than by the server under test.

Each function raises ``ConstructionError`` on invalid input.
"""

import re

from s3verify.errors import ConstructionError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# S3 bucket naming rules:
#   - 3-63 characters
#   - lowercase letters, digits, hyphens, and periods
#   - must start and end with a letter or digit
#   - must not be formatted as an IP address
#   - no consecutive periods ("..") allowed

MAX_BUCKET_NAME_LENGTH = 63

_BUCKET_RE = re.compile(r"^[a-z0-9][a-z0-9.\-]{1,61}[a-z0-9]$")
_IP_RE = re.compile(r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}$")

_MAX_KEY_BYTES = 1024


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_bucket_name(name: str) -> None:
    """Validate a bucket name against S3 naming rules.

    Args:
        name: The candidate bucket name.

    Raises:
        ConstructionError: If the name violates any bucket naming rule.
    """
    if not _BUCKET_RE.match(name) or _IP_RE.match(name) or ".." in name:
        raise ConstructionError(f"Invalid bucket name: {name!r}")


def validate_object_key(key: str) -> None:
    """Validate an object key.

    Args:
        key: The object key string.

    Raises:
        ConstructionError: If the key exceeds 1024 bytes when UTF-8 encoded.
    """
    if len(key.encode("utf-8")) > _MAX_KEY_BYTES:
        raise ConstructionError(f"Object name too long: {len(key.encode('utf-8'))} bytes")
