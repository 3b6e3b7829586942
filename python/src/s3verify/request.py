"""Request model and builder for S3 operations.

A :class:`Request` is everything the transport needs to send one
operation: target, headers, declared length and a body stream positioned
at its start. :func:`build_request` is the only place requests are made,
so every request carries digests consistent with its body.
"""

from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass, field
from typing import BinaryIO, Mapping

from requests.structures import CaseInsensitiveDict

from s3verify.errors import ConstructionError
from s3verify.hashing import compute_hash
from s3verify.validation import validate_object_key

logger = logging.getLogger(__name__)

USER_AGENT = "s3verify/0.1.0"


@dataclass
class Request:
    """A fully built S3 request.

    Attributes:
        bucket: Target bucket name.
        key: Target object key, empty for bucket-level operations.
        headers: Case-insensitive request headers (last write wins).
        content_length: Exact byte length of ``body``.
        body: Single-read body stream positioned at its start.
    """

    bucket: str
    key: str = ""
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    content_length: int = 0
    body: BinaryIO = field(default_factory=io.BytesIO)

    @property
    def path(self) -> str:
        """Path-style resource path, e.g. ``/bucket/key``."""
        if self.key:
            return f"/{self.bucket}/{self.key}"
        return f"/{self.bucket}"


def build_request(
    bucket: str,
    key: str = "",
    payload: bytes = b"",
    headers: Mapping[str, str] | None = None,
    require_key: bool = True,
) -> Request:
    """Build a request whose digests and length match its body.

    Args:
        bucket: Target bucket name, must be non-empty.
        key: Target object key.
        payload: Request body bytes, may be empty.
        headers: Extra headers applied before the digest headers.
        require_key: Whether an empty ``key`` is an error.

    Returns:
        The built request.

    Raises:
        ConstructionError: On empty identifiers or an unreadable payload.
    """
    if not bucket:
        raise ConstructionError("Bucket name must not be empty")
    if require_key and not key:
        raise ConstructionError("Object name must not be empty")
    if key:
        validate_object_key(key)

    reader = io.BytesIO(payload)
    digests = compute_hash(reader)

    request_headers: CaseInsensitiveDict = CaseInsensitiveDict(headers or {})
    request_headers["Content-MD5"] = base64.b64encode(digests.md5).decode("ascii")
    request_headers["X-Amz-Content-Sha256"] = digests.sha256.hex()
    request_headers["User-Agent"] = USER_AGENT

    logger.debug("Built request for %s/%s (%d bytes)", bucket, key, digests.length)
    return Request(
        bucket=bucket,
        key=key,
        headers=request_headers,
        content_length=digests.length,
        body=reader,
    )
