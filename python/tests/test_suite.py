"""Tests for suite assembly and full runs against a fake server."""

import io

import pytest

from s3verify.config import RunConfig, S3VerifyConfig
from s3verify.errors import ConstructionError
from s3verify.operations import (
    CopyObjectStep,
    GetObjectStep,
    HeadObjectStep,
    MakeBucketStep,
    PutObjectStep,
    RemoveBucketStep,
    RemoveObjectStep,
)
from s3verify.registry import Partition, RunContext
from s3verify.step import BoundedLoop, Single
from s3verify.suite import build_cleanup, build_suite, load_prepared_buckets, run
from stubs import FakeS3, StubTransport, make_response


class TestBuildSuite:
    """Tests for build_suite() and build_cleanup()."""

    def test_unprepared_order(self):
        """Unprepared runs make a bucket, then upload a bounded loop."""
        steps = build_suite(RunConfig(object_count=7))
        assert [type(s) for s in steps] == [
            MakeBucketStep,
            PutObjectStep,
            HeadObjectStep,
            GetObjectStep,
            CopyObjectStep,
        ]
        assert steps[1].policy == BoundedLoop(7)

    def test_prepared_uploads_single_object(self):
        steps = build_suite(RunConfig(prepared=True))
        assert isinstance(steps[0], PutObjectStep)
        assert steps[0].policy == Single()
        assert not any(isinstance(s, MakeBucketStep) for s in steps)

    def test_cleanup_steps(self):
        assert [type(s) for s in build_cleanup(RunConfig())] == [RemoveObjectStep, RemoveBucketStep]
        assert [type(s) for s in build_cleanup(RunConfig(prepared=True))] == [RemoveObjectStep]
        assert build_cleanup(RunConfig(cleanup=False)) == []

    def test_load_prepared_buckets(self):
        ctx = RunContext(None, prepared=True)
        load_prepared_buckets(ctx, ["alpha", "beta"])
        assert [b.name for b in ctx.buckets.all(Partition.PREPARED)] == ["alpha", "beta"]

    def test_load_prepared_buckets_rejects_bad_name(self):
        with pytest.raises(ConstructionError):
            load_prepared_buckets(RunContext(None), ["Not_A_Bucket"])


class TestRun:
    """Full runs through run()."""

    def _config(self, **run):
        return S3VerifyConfig(run=RunConfig(object_count=3, **run))

    def test_compliant_server_passes(self):
        """Every step passes and cleanup leaves the fake server empty."""
        fake = FakeS3()
        out = io.StringIO()
        assert run(self._config(), transport=StubTransport(fake), stream=out) is True
        lines = out.getvalue().splitlines()
        assert lines[0] == "[01/07] MakeBucket: Passed"
        assert lines[1] == "[02/07] PutObject: Passed"
        assert lines[-1] == "7 passed, 0 failed"
        assert fake.objects == {}
        assert fake.buckets == set()

    def test_failure_does_not_stop_later_steps(self):
        """A failing GetObject is reported and later steps still run."""
        fake = FakeS3()

        def responder(method, request):
            if method == "GET":
                return make_response(500)
            return fake(method, request)

        out = io.StringIO()
        assert run(self._config(), transport=StubTransport(responder), stream=out) is False
        text = out.getvalue()
        assert "[04/07] GetObject: Failed" in text
        assert "wanted 200, got 500" in text
        assert "[05/07] CopyObject: Passed" in text
        assert "6 passed, 1 failed" in text

    def test_prepared_run(self):
        """Prepared runs upload into the first prepared bucket and keep it."""
        fake = FakeS3()
        fake.buckets.add("prepped")
        transport = StubTransport(fake)
        config = self._config(prepared=True, prepared_buckets=["prepped"])
        assert run(config, transport=transport, stream=io.StringIO()) is True
        assert transport.calls[0][1].path == "/prepped/s3verify/made/put/object"
        assert fake.buckets == {"prepped"}

    def test_no_cleanup(self):
        fake = FakeS3()
        assert run(self._config(cleanup=False), StubTransport(fake), io.StringIO()) is True
        assert len(fake.objects) == 4
