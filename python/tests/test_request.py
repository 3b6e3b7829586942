"""Tests for request construction."""

import base64
import hashlib

import pytest

from s3verify.errors import ConstructionError
from s3verify.request import USER_AGENT, build_request


class TestBuildRequest:
    """Tests for build_request()."""

    @pytest.mark.parametrize("payload", [b"", b"x", b"hello world", bytes(range(256)) * 40])
    def test_content_length_matches_payload(self, payload):
        """The declared length is the exact payload length."""
        req = build_request("b1", "k1", payload)
        assert req.content_length == len(payload)

    @pytest.mark.parametrize("payload", [b"", b"abc", b"\x00\xff" * 1000])
    def test_digests_match_body(self, payload):
        """Digests re-derived from the body equal those in the headers."""
        req = build_request("b1", "k1", payload)
        body = req.body.read()
        assert body == payload
        assert req.headers["Content-MD5"] == base64.b64encode(hashlib.md5(body).digest()).decode()
        assert req.headers["X-Amz-Content-Sha256"] == hashlib.sha256(body).hexdigest()

    def test_body_positioned_at_start(self):
        """The body stream is readable from the first byte."""
        req = build_request("b1", "k1", b"payload")
        assert req.body.tell() == 0

    def test_user_agent(self):
        """The client identification header is set."""
        req = build_request("b1", "k1", b"")
        assert req.headers["User-Agent"] == USER_AGENT

    def test_headers_case_insensitive(self):
        """Header lookups ignore case."""
        req = build_request("b1", "k1", b"abc")
        assert req.headers["content-md5"] == req.headers["Content-MD5"]
        assert req.headers["x-amz-content-sha256"]

    def test_extra_headers_kept(self):
        """Caller headers are carried alongside the digest headers."""
        req = build_request("b1", "k1", headers={"x-amz-copy-source": "/src/key"})
        assert req.headers["X-Amz-Copy-Source"] == "/src/key"

    def test_digest_headers_win(self):
        """Digest headers override caller-supplied values (last write wins)."""
        req = build_request("b1", "k1", b"abc", headers={"content-md5": "bogus"})
        assert req.headers["Content-MD5"] == base64.b64encode(hashlib.md5(b"abc").digest()).decode()

    def test_path(self):
        """Object requests address /bucket/key, bucket requests /bucket."""
        assert build_request("b1", "a/b/c").path == "/b1/a/b/c"
        assert build_request("b1", require_key=False).path == "/b1"

    def test_empty_bucket_rejected(self):
        """An empty bucket name is a construction error."""
        with pytest.raises(ConstructionError):
            build_request("", "k1", b"data")

    def test_empty_key_rejected(self):
        """An empty object name is a construction error for object requests."""
        with pytest.raises(ConstructionError):
            build_request("b1", "", b"data")

    def test_key_too_long_rejected(self):
        """Keys longer than 1024 bytes are rejected before sending."""
        with pytest.raises(ConstructionError):
            build_request("b1", "k" * 1025)
