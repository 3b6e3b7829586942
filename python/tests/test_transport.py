"""Tests for the signing HTTP transport (no network)."""

import io

import pytest
import requests
import urllib3
from botocore.auth import S3SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials

from s3verify.errors import TransportError
from s3verify.request import build_request
from s3verify.transport import HTTPTransport, Response, closing_response


class FakeRaw(io.BytesIO):
    """urllib3-style raw stream that records how it was read."""

    decode_content = None

    def read(self, amt=None, decode_content=False):
        self.decode_content = decode_content
        return super().read(amt)


class FakeRawResponse:
    def __init__(self, status_code=200, headers=None, body=b""):
        self.status_code = status_code
        self.headers = headers or {"Date": "Mon, 01 Jan 2024 00:00:00 GMT"}
        self.raw = FakeRaw(body)
        self.closed = False

    def close(self):
        self.closed = True


class FakeSession:
    """Captures the arguments of Session.request."""

    def __init__(self, response=None, error=None):
        self.response = response or FakeRawResponse()
        self.error = error
        self.calls = []
        self.closed = False

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


def _s3_signature(method, url, headers, body):
    """Recompute the S3 SigV4 signature for a captured request."""
    unsigned = {k: v for k, v in headers.items() if k.lower() != "authorization"}
    request = AWSRequest(method=method, url=url, data=body, headers=unsigned)
    request.context["timestamp"] = unsigned["X-Amz-Date"]
    auth = S3SigV4Auth(Credentials("AKIDEXAMPLE", "secret"), "s3", "us-east-1")
    return auth.signature(auth.string_to_sign(request, auth.canonical_request(request)), request)


def _transport(session, **kwargs):
    return HTTPTransport(
        "http://localhost:9000/", "AKIDEXAMPLE", "secret", session=session, **kwargs
    )


class TestHTTPTransport:
    """Tests for HTTPTransport.execute()."""

    def test_signs_and_sends(self):
        """Requests are sent path-style with a SigV4 Authorization header."""
        session = FakeSession()
        req = build_request("b1", "dir/key", b"payload")
        _transport(session, timeout=5).execute("PUT", req)

        method, url, kwargs = session.calls[0]
        assert method == "PUT"
        assert url == "http://localhost:9000/b1/dir/key"
        assert kwargs["data"] == b"payload"
        assert kwargs["stream"] is True
        assert kwargs["timeout"] == 5
        headers = {k.lower(): v for k, v in kwargs["headers"].items()}
        assert headers["authorization"].startswith("AWS4-HMAC-SHA256 Credential=AKIDEXAMPLE/")
        assert "/us-east-1/s3/aws4_request" in headers["authorization"]
        assert headers["x-amz-content-sha256"] == req.headers["X-Amz-Content-Sha256"]
        assert headers["content-md5"] == req.headers["Content-MD5"]
        assert headers["content-length"] == "7"
        assert "x-amz-date" in headers

    def test_keys_are_quoted(self):
        session = FakeSession()
        _transport(session).execute("GET", build_request("b1", "a key+1"))
        assert session.calls[0][1] == "http://localhost:9000/b1/a%20key%2B1"

    def test_response_adapted(self):
        """Status, headers and the raw body stream are passed through."""
        raw = FakeRawResponse(404, {"X-Amz-Request-Id": "abc"}, b"<Error/>")
        response = _transport(FakeSession(raw)).execute("GET", build_request("b1", "k"))
        assert response.status_code == 404
        assert response.headers["x-amz-request-id"] == "abc"
        assert response.body.read() == b"<Error/>"
        response.close()
        assert raw.closed

    def test_signs_path_as_sent(self):
        """Repeated slashes and escaped characters are signed exactly as sent."""
        session = FakeSession()
        _transport(session).execute("PUT", build_request("b1", "dir//file name", b"x"))

        method, url, kwargs = session.calls[0]
        assert url == "http://localhost:9000/b1/dir//file%20name"
        expected = _s3_signature(method, url, kwargs["headers"], kwargs["data"])
        assert kwargs["headers"]["Authorization"].endswith(f"Signature={expected}")

    def test_requests_uncompressed_body(self):
        """Bodies are requested with identity encoding and read decoded."""
        raw = FakeRawResponse(body=b"data")
        session = FakeSession(raw)
        response = _transport(session).execute("GET", build_request("b1", "k"))
        headers = {k.lower(): v for k, v in session.calls[0][2]["headers"].items()}
        assert headers["accept-encoding"] == "identity"
        assert response.body.read() == b"data"
        assert raw.raw.decode_content is True

    @pytest.mark.parametrize(
        "error",
        [
            urllib3.exceptions.ProtocolError("Connection broken: IncompleteRead"),
            urllib3.exceptions.ReadTimeoutError(None, "/b1/k", "Read timed out."),
            OSError("connection reset"),
        ],
    )
    def test_body_read_errors_are_transport_errors(self, error):
        """Failures while streaming the body surface as TransportError."""

        class BrokenRaw(FakeRaw):
            def read(self, amt=None, decode_content=False):
                raise error

        raw = FakeRawResponse()
        raw.raw = BrokenRaw()
        response = _transport(FakeSession(raw)).execute("GET", build_request("b1", "k"))
        with pytest.raises(TransportError, match="unable to read response body"):
            response.body.read()

    def test_request_exception_is_transport_error(self):
        session = FakeSession(error=requests.ConnectionError("refused"))
        with pytest.raises(TransportError, match="refused"):
            _transport(session).execute("PUT", build_request("b1", "k", b"x"))

    def test_close_closes_session(self):
        session = FakeSession()
        _transport(session).close()
        assert session.closed


class TestClosingResponse:
    """Tests for closing_response()."""

    def test_releases_on_error(self):
        released = []
        response = Response(status_code=200, release=lambda: released.append(True))
        with pytest.raises(ValueError):
            with closing_response(response):
                raise ValueError("boom")
        assert released == [True]

    def test_close_is_idempotent(self):
        released = []
        response = Response(status_code=200, release=lambda: released.append(True))
        response.close()
        response.close()
        assert released == [True]
