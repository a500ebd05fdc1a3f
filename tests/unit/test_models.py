"""
Unit tests for artifact, config and publish-state models.
"""

import json
import threading

import pytest
from pydantic import ValidationError

from blobpub.core.exceptions import ConfigFileError, TemplateError, UploadError
from blobpub.core.models import (
    DEFAULT_FOLDER,
    Artifact,
    ArtifactType,
    BlobConfig,
    PublishConfig,
    PublishReport,
    TargetOutcome,
    TargetState,
    load_artifacts,
)


class TestArtifact:
    """Tests for the Artifact model."""

    def test_type_by_value_or_name(self):
        by_value = Artifact(name="a.deb", path="a.deb", type="Linux Package")
        by_name = Artifact(name="a.deb", path="a.deb", type="LinuxPackage")
        assert ArtifactType(by_value.type) is ArtifactType.LINUX_PACKAGE
        assert ArtifactType(by_name.type) is ArtifactType.LINUX_PACKAGE

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            Artifact(name="a", path="a", type="Hologram")

    def test_id(self):
        assert Artifact(name="a", path="a", type="Archive", extra={"ID": "foo"}).id == "foo"
        assert Artifact(name="a", path="a", type="Archive").id is None

    def test_frozen(self):
        artifact = Artifact(name="a", path="a", type="Archive")
        with pytest.raises(ValidationError):
            artifact.name = "b"


class TestLoadArtifacts:
    """Tests for load_artifacts."""

    def test_loads_in_order(self, tmp_path):
        manifest = tmp_path / "artifacts.json"
        manifest.write_text(
            json.dumps(
                [
                    {"name": "checksums.txt", "path": "dist/checksums.txt", "type": "Checksum"},
                    {
                        "name": "app.tar.gz",
                        "path": "dist/app.tar.gz",
                        "type": "Archive",
                        "extra": {"ID": "default", "Format": "tar.gz"},
                        "goos": "linux",
                    },
                ]
            )
        )

        artifacts = load_artifacts(manifest)

        assert [a.name for a in artifacts] == ["checksums.txt", "app.tar.gz"]
        assert artifacts[1].id == "default"

    @pytest.mark.parametrize(
        "content",
        ["{not json", '{"name": "a"}', '[{"name": "a", "path": "a", "type": "Hologram"}]'],
    )
    def test_malformed(self, tmp_path, content):
        manifest = tmp_path / "artifacts.json"
        manifest.write_text(content)
        with pytest.raises(ConfigFileError):
            load_artifacts(manifest)

    def test_missing(self, tmp_path):
        with pytest.raises(ConfigFileError):
            load_artifacts(tmp_path / "artifacts.json")


class TestBlobConfig:
    """Tests for BlobConfig normalization."""

    def test_defaults(self):
        blob = BlobConfig(bucket="releases")
        assert blob.provider == "s3"
        assert blob.folder == DEFAULT_FOLDER
        assert blob.ids == []

    def test_empty_values(self):
        blob = BlobConfig(bucket="b", folder="", endpoint=" ", region="")
        assert blob.folder == DEFAULT_FOLDER
        assert blob.endpoint is None
        assert blob.region is None

    def test_bucket_required(self):
        with pytest.raises(ValidationError):
            BlobConfig(provider="s3")

    def test_unknown_provider_accepted(self):
        assert BlobConfig(provider="AzBlob", bucket="b").provider == "azblob"

    def test_parallelism_bounds(self):
        with pytest.raises(ValidationError):
            PublishConfig(parallelism=0)
        with pytest.raises(ValidationError):
            PublishConfig(timeout=0)


class TestTargetOutcome:
    """Tests for the target state machine."""

    def test_forward_transitions(self):
        outcome = TargetOutcome(index=0, label="s3://b")
        for state in (TargetState.RESOLVING, TargetState.CONNECTING, TargetState.FILTERING):
            outcome.advance(state)
        assert outcome.state == TargetState.FILTERING

    def test_skipping_states_allowed(self):
        outcome = TargetOutcome(index=0, label="s3://b")
        outcome.advance(TargetState.RESOLVING)
        outcome.finish()
        assert outcome.state == TargetState.SUCCEEDED

    def test_backwards_rejected(self):
        outcome = TargetOutcome(index=0, label="s3://b")
        outcome.advance(TargetState.CONNECTING)
        with pytest.raises(RuntimeError):
            outcome.advance(TargetState.RESOLVING)

    def test_terminal_is_final(self):
        outcome = TargetOutcome(index=0, label="s3://b")
        outcome.finish()
        with pytest.raises(RuntimeError):
            outcome.advance(TargetState.FAILED)

    def test_errors_fail_the_target(self):
        outcome = TargetOutcome(index=0, label="s3://b")
        error = UploadError("denied", key="k")
        outcome.record_error(error)
        outcome.finish()

        assert outcome.state == TargetState.FAILED
        assert error.target == "s3://b"

    def test_existing_target_kept(self):
        outcome = TargetOutcome(index=0, label="s3://b")
        error = TemplateError("x", context={"target": "blobs[0] (s3)"})
        outcome.record_error(error)
        assert error.target == "blobs[0] (s3)"

    def test_concurrent_recording_loses_nothing(self):
        outcome = TargetOutcome(index=0, label="s3://b")
        workers, per_worker = 16, 200
        start = threading.Barrier(workers)

        def record(worker):
            start.wait()
            for i in range(per_worker):
                key = f"w{worker}/k{i}"
                if i % 2:
                    outcome.record_error(UploadError("denied", key=key))
                else:
                    outcome.record_upload(key)

        threads = [threading.Thread(target=record, args=(w,)) for w in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        half = workers * per_worker // 2
        assert len(outcome.uploaded) == half
        assert len(set(outcome.uploaded)) == half
        assert len(outcome.errors) == half
        assert all(error.target == "s3://b" for error in outcome.errors)


class TestPublishReport:
    """Tests for PublishReport."""

    def test_errors_in_target_order(self):
        first = TargetOutcome(index=0, label="s3://a")
        second = TargetOutcome(index=1, label="s3://b")
        second.record_error(UploadError("late"))
        first.record_error(UploadError("early"))

        report = PublishReport(outcomes=[second, first])

        assert [e.message for e in report.errors] == ["early", "late"]
        assert not report.ok

    def test_raise_for_errors(self):
        outcome = TargetOutcome(index=0, label="s3://a")
        PublishReport(outcomes=[outcome]).raise_for_errors()
        outcome.record_error(UploadError("boom"))
        with pytest.raises(Exception, match="1 error"):
            PublishReport(outcomes=[outcome]).raise_for_errors()
