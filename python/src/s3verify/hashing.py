"""Payload digests for outgoing requests.

S3 takes two independent digests of the same body: ``Content-MD5``
(base64 of the MD5 digest) and ``X-Amz-Content-Sha256`` (hex of the
SHA-256 digest, also used as the signed payload hash).
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import BinaryIO

from s3verify.errors import ConstructionError

_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class HashResult:
    """Digests and length of one payload.

    Attributes:
        md5: Raw MD5 digest (the content checksum).
        sha256: Raw SHA-256 digest (the content digest).
        length: Number of bytes read.
    """

    md5: bytes
    sha256: bytes
    length: int


def compute_hash(reader: BinaryIO) -> HashResult:
    """Hash a seekable stream in a single pass and rewind it.

    The stream is read from its current position to EOF, then moved back to
    that position so the same bytes can be sent as the request body.

    Args:
        reader: A seekable binary stream.

    Returns:
        The MD5 and SHA-256 digests and the byte count.

    Raises:
        ConstructionError: If the stream cannot be read to completion or
            cannot be rewound.
    """
    md5 = hashlib.md5()
    sha256 = hashlib.sha256()
    length = 0
    try:
        start = reader.tell()
        while True:
            chunk = reader.read(_CHUNK_SIZE)
            if not chunk:
                break
            md5.update(chunk)
            sha256.update(chunk)
            length += len(chunk)
        reader.seek(start)
    except (OSError, ValueError) as exc:
        raise ConstructionError(f"Unable to read request payload: {exc}") from exc
    return HashResult(md5=md5.digest(), sha256=sha256.digest(), length=length)
