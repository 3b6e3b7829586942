"""Validation of the headers every S3 response must carry."""

import email.utils

from requests.structures import CaseInsensitiveDict

from s3verify.errors import MissingHeader, VerificationError

# Headers S3 attaches to every response regardless of operation.
STANDARD_HEADERS = ("Date", "x-amz-request-id")


def verify_standard_headers(headers: CaseInsensitiveDict) -> None:
    """Check that the protocol-mandated response headers are present.

    ``Date`` must also parse as an RFC 1123 HTTP date.

    Args:
        headers: The response headers.

    Raises:
        MissingHeader: If a standard header is absent or empty.
        VerificationError: If ``Date`` is not a valid HTTP date.
    """
    for name in STANDARD_HEADERS:
        if not headers.get(name):
            raise MissingHeader(name)

    date = headers["Date"]
    try:
        email.utils.parsedate_to_datetime(date)
    except (TypeError, ValueError):
        raise VerificationError(f"Invalid Date header: {date!r}", actual=date)
