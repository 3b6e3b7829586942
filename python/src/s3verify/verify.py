"""Response verification as an ordered pipeline of checks.

Each operation declares the checks its responses must pass; the
:class:`ResponseVerifier` runs them in order and stops at the first
failure. Checks share a :class:`CheckedResponse` so the body stream is
read at most once no matter how many checks inspect it.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from requests.structures import CaseInsensitiveDict

from s3verify.errors import (
    MissingHeader,
    TransportError,
    UnexpectedStatus,
    VerificationError,
)
from s3verify.headers import verify_standard_headers
from s3verify.transport import Response
from s3verify.xml_utils import parse_copy_object_result, parse_error_code


class CheckedResponse:
    """Read-once view of a :class:`Response` shared by all checks."""

    def __init__(self, response: Response) -> None:
        self._response = response
        self._body: bytes | None = None

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> CaseInsensitiveDict:
        return self._response.headers

    def body(self) -> bytes:
        """Return the full body, reading the stream on first use only.

        A missing body stream is treated as an empty body.

        Raises:
            TransportError: If the body stream fails mid-read.
        """
        if self._body is None:
            stream = self._response.body
            if stream is None:
                self._body = b""
            else:
                try:
                    self._body = stream.read() or b""
                except OSError as exc:
                    raise TransportError(f"Unable to read response body: {exc}") from exc
        return self._body


class ResponseCheck(Protocol):
    """A single predicate over a response; raises on violation."""

    def check(self, response: CheckedResponse) -> None: ...


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def _error_code(response: CheckedResponse) -> str | None:
    """S3 error code from an error body, for failure messages only."""
    try:
        return parse_error_code(response.body())
    except TransportError:
        return None


class StandardHeaderCheck:
    """Delegates to the standard response header validator."""

    def check(self, response: CheckedResponse) -> None:
        verify_standard_headers(response.headers)


class StatusCheck:
    """The status code must equal the expected one exactly."""

    def __init__(self, expected: int) -> None:
        self.expected = expected

    def check(self, response: CheckedResponse) -> None:
        if response.status_code != self.expected:
            raise UnexpectedStatus(self.expected, response.status_code, _error_code(response))


class EmptyBodyCheck:
    """The body must be zero bytes long."""

    def check(self, response: CheckedResponse) -> None:
        body = response.body()
        if body:
            raise VerificationError(
                "Unexpected Body Received: expected empty body but received: "
                + body.decode("utf-8", errors="replace"),
                expected=b"",
                actual=body,
            )


class BodyEqualsCheck:
    """The body must match the expected bytes exactly."""

    def __init__(self, expected: bytes) -> None:
        self.expected = expected

    def check(self, response: CheckedResponse) -> None:
        body = response.body()
        if body != self.expected:
            raise VerificationError(
                f"Unexpected Body Received: wanted {len(self.expected)} bytes, "
                f"got {len(body)} bytes",
                expected=self.expected,
                actual=body,
            )


class CopyResultCheck:
    """The body must be a CopyObjectResult whose ETag matches the source."""

    def __init__(self, expected_etag: str) -> None:
        self.expected_etag = expected_etag

    def check(self, response: CheckedResponse) -> None:
        body = response.body()
        try:
            result = parse_copy_object_result(body)
        except ValueError as exc:
            raise VerificationError(
                f"Unexpected Body Received: invalid CopyObjectResult ({exc}): "
                + body.decode("utf-8", errors="replace"),
                actual=body,
            ) from exc
        if result["ETag"] != self.expected_etag:
            raise VerificationError(
                f"Unexpected CopyObjectResult ETag: wanted {self.expected_etag}, "
                f"got {result['ETag']}",
                expected=self.expected_etag,
                actual=result["ETag"],
            )


class HeaderPresentCheck:
    """A header must be present and non-empty."""

    def __init__(self, name: str) -> None:
        self.name = name

    def check(self, response: CheckedResponse) -> None:
        if not response.headers.get(self.name):
            raise MissingHeader(self.name)


class HeaderEqualsCheck:
    """A header must be present with an exact value."""

    def __init__(self, name: str, expected: str) -> None:
        self.name = name
        self.expected = expected

    def check(self, response: CheckedResponse) -> None:
        value = response.headers.get(self.name)
        if value is None:
            raise MissingHeader(self.name)
        if value != self.expected:
            raise VerificationError(
                f"Unexpected {self.name} header: wanted {self.expected}, got {value}",
                expected=self.expected,
                actual=value,
            )


# ---------------------------------------------------------------------------
# Verifier
# ---------------------------------------------------------------------------


class ResponseVerifier:
    """Runs checks in order, raising the first failure unchanged."""

    def __init__(self, checks: Sequence[ResponseCheck]) -> None:
        self.checks = list(checks)

    def verify(self, response: Response) -> None:
        """Verify ``response`` against every check.

        Raises:
            VerificationError: On the first check that fails.
            TransportError: If the body stream cannot be read.
        """
        checked = CheckedResponse(response)
        for check in self.checks:
            check.check(checked)


def empty_body_verifier(expected_status: int) -> ResponseVerifier:
    """Standard headers, exact status, empty body: the common write contract."""
    return ResponseVerifier([StandardHeaderCheck(), StatusCheck(expected_status), EmptyBodyCheck()])
