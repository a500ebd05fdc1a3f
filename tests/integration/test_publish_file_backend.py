"""
End-to-end publish tests against the local directory backend.

Runs the real bootstrap, backend discovery, resolution, filtering and
upload pipeline, then inspects the bucket through the backend itself.
"""

import pytest

from blobpub.core.bootstrap import bootstrap
from blobpub.core.exceptions import AggregatePublishError, TemplateError
from blobpub.core.models import BlobConfig
from blobpub.services.publish import Publisher, resolve_target
from blobpub.services.publish.templates import build_template_context, render_template


@pytest.fixture(autouse=True)
def app():
    return bootstrap()


@pytest.fixture
def bucket_dir(tmp_path):
    return tmp_path / "bucket"


def file_blob(bucket_dir, **kwargs):
    return BlobConfig(provider="file", bucket=str(bucket_dir), **kwargs)


def listing(release, blob, prefix=""):
    """List the keys of a target through its own backend."""
    target = resolve_target(0, blob, render_template, build_template_context(release))
    with target.backend.open(target) as bucket:
        return bucket.list_keys(prefix)


class TestPublishToDirectory:
    """Publishing the four artifacts of testupload v1.0.0."""

    def test_exact_keys(self, make_release, dist, bucket_dir):
        blob = file_blob(bucket_dir, ids=["foo", "bar"])
        release = make_release(blobs=[blob], artifacts=dist)

        report = Publisher().publish(release)

        assert report.ok
        assert listing(release, blob) == [
            "testupload/v1.0.0/bin.deb",
            "testupload/v1.0.0/bin.tar.gz",
            "testupload/v1.0.0/checksum.txt",
            "testupload/v1.0.0/source.tar.gz",
        ]

    def test_ids_exclude_package(self, make_release, dist, bucket_dir):
        blob = file_blob(bucket_dir, ids=["foo"])
        release = make_release(blobs=[blob], artifacts=dist)

        Publisher().publish(release)

        keys = listing(release, blob)
        assert "testupload/v1.0.0/bin.deb" not in keys
        assert "testupload/v1.0.0/checksum.txt" in keys
        assert "testupload/v1.0.0/bin.tar.gz" in keys

    def test_republish_same_listing(self, make_release, dist, bucket_dir):
        blob = file_blob(bucket_dir)
        release = make_release(blobs=[blob], artifacts=dist)

        Publisher().publish(release)
        first = listing(release, blob)
        contents = {p.name: p.read_bytes() for p in bucket_dir.rglob("*") if p.is_file()}
        Publisher().publish(release)

        assert listing(release, blob) == first
        assert {p.name: p.read_bytes() for p in bucket_dir.rglob("*") if p.is_file()} == contents

    def test_templated_bucket_and_folder(self, make_release, dist, tmp_path):
        blob = BlobConfig(
            provider="file",
            bucket="{{ .Env.RELEASE_ROOT }}/{{ .ProjectName }}",
            folder="v{{ .Major }}/{{ .Version }}",
        )
        release = make_release(blobs=[blob], artifacts=dist, env={"RELEASE_ROOT": str(tmp_path)})

        Publisher().publish(release)

        assert (tmp_path / "testupload" / "v1" / "1.0.0" / "bin.tar.gz").exists()

    def test_broken_sibling(self, make_release, dist, bucket_dir):
        good = file_blob(bucket_dir)
        release = make_release(
            blobs=[BlobConfig(provider="file", bucket="{{ .Bad }}"), good],
            artifacts=dist,
        )

        with pytest.raises(AggregatePublishError) as exc_info:
            Publisher().publish(release)

        assert len(exc_info.value.errors_of(TemplateError)) == 1
        assert len(listing(release, good)) == 4

    def test_skip_publish_touches_nothing(self, make_release, dist, bucket_dir):
        release = make_release(blobs=[file_blob(bucket_dir)], artifacts=dist, skip_publish=True)
        Publisher().publish(release)
        assert not bucket_dir.exists()
