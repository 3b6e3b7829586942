"""HTTP transport: signs and sends requests, adapts responses.

The transport is the only component that touches the network. Requests
are signed with botocore's SigV4 implementation and sent path-style with
``requests``; responses are handed back as :class:`Response` objects whose
body is a single-read stream owned by the caller.
"""

from __future__ import annotations

import logging
import urllib.parse
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Iterator, Protocol

import requests
import urllib3
from botocore.auth import S3SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials
from requests.structures import CaseInsensitiveDict

from s3verify.errors import TransportError
from s3verify.request import Request

logger = logging.getLogger(__name__)

SERVICE_NAME = "s3"


@dataclass
class Response:
    """A received response.

    Attributes:
        status_code: HTTP status code.
        headers: Case-insensitive response headers.
        body: Single-read body stream, or None when there is no body.
        release: Callback that frees the connection, if any.
    """

    status_code: int
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    body: BinaryIO | None = None
    release: Callable[[], None] | None = None

    def close(self) -> None:
        """Release the underlying connection (idempotent)."""
        if self.release is not None:
            release, self.release = self.release, None
            release()
        elif self.body is not None and hasattr(self.body, "close"):
            self.body.close()


@contextmanager
def closing_response(response: Response) -> Iterator[Response]:
    """Yield ``response`` and close it on every exit path."""
    try:
        yield response
    finally:
        response.close()


class ResponseBody:
    """Single-read body stream that reports failures as ``TransportError``.

    urllib3 raises its own exception types (not ``OSError``) for truncated
    bodies and read timeouts; those end the step like any other transport
    failure.
    """

    def __init__(self, raw, description: str) -> None:
        self._raw = raw
        self._description = description

    def read(self, amt: int | None = None) -> bytes:
        try:
            return self._raw.read(amt, decode_content=True)
        except (urllib3.exceptions.HTTPError, requests.RequestException, OSError) as exc:
            raise TransportError(
                f"{self._description}: unable to read response body: {exc}"
            ) from exc

    def close(self) -> None:
        self._raw.close()


class Transport(Protocol):
    """Executes a built request and returns the response."""

    def execute(self, method: str, request: Request) -> Response:
        """Send ``request`` with ``method``.

        Raises:
            TransportError: If the request could not be sent or answered.
        """
        ...


class HTTPTransport:
    """SigV4-signing transport on top of a ``requests.Session``.

    Attributes:
        endpoint: Base URL of the server, e.g. ``http://localhost:9000``.
        region: Region used in the signing scope.
        timeout: Per-request deadline in seconds, or None to block.
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        region: str = "us-east-1",
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.region = region
        self.timeout = timeout
        self._credentials = Credentials(access_key, secret_key)
        self._session = session or requests.Session()

    def url_for(self, request: Request) -> str:
        """Return the path-style URL for ``request``."""
        return self.endpoint + urllib.parse.quote(request.path, safe="/~")

    def execute(self, method: str, request: Request) -> Response:
        url = self.url_for(request)
        data = request.body.read()
        headers = dict(request.headers)
        headers["Content-Length"] = str(request.content_length)
        # Bodies are compared byte for byte, so ask for them uncompressed.
        headers["Accept-Encoding"] = "identity"

        # S3 signs the path exactly as sent: no dot-segment removal, no re-quoting.
        aws_request = AWSRequest(method=method, url=url, data=data, headers=headers)
        S3SigV4Auth(self._credentials, SERVICE_NAME, self.region).add_auth(aws_request)

        logger.debug("%s %s (%d bytes)", method, url, request.content_length)
        try:
            resp = self._session.request(
                method,
                url,
                data=data,
                headers=dict(aws_request.headers),
                stream=True,
                timeout=self.timeout,
                allow_redirects=False,
            )
        except requests.RequestException as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        return Response(
            status_code=resp.status_code,
            headers=CaseInsensitiveDict(resp.headers),
            body=ResponseBody(resp.raw, f"{method} {url}"),
            release=resp.close,
        )

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()
