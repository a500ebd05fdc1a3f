"""
Publish orchestrator.

Drives a publish run: every configured target is resolved, connected,
filtered and uploaded independently, and every failure is collected
into the run's PublishReport.

Usage:
    publisher = Publisher()
    report = publisher.publish(release)   # raises AggregatePublishError
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed

from ...core.container import ServiceContainer, get_container
from ...core.di import resolve_or_default
from ...core.exceptions import (
    BackendConnectionError,
    BackendError,
    BlobpubException,
    ConfigError,
    PublishCancelledError,
    UploadError,
)
from ...core.interfaces.backend import IBucket
from ...core.interfaces.logger import ILogger
from ...core.interfaces.templates import ITemplateRenderer
from ...core.models.artifact import Artifact
from ...core.models.config import BlobConfig
from ...core.models.publish import PublishReport, ResolvedTarget, TargetOutcome, TargetState
from ...core.models.release import ReleaseContext
from ...core.registry import discover_backends
from .filters import collect_extra_files, filter_artifacts
from .keys import join_key
from .targets import resolve_target, target_label
from .templates import build_template_context, render_template

UploadPlan = list[tuple[str, Artifact]]


def plan_uploads(
    target: ResolvedTarget,
    artifacts: Iterable[Artifact],
) -> tuple[UploadPlan, list[ConfigError]]:
    """
    Pick the artifacts and extra files for a target and compute their keys.

    Nothing is contacted. Problems found while planning are returned
    alongside the plan so the remaining artifacts can still be uploaded.

    Returns:
        ``(plan, errors)`` where plan is a list of ``(key, artifact)``
    """
    errors: list[ConfigError] = []
    selected = filter_artifacts(artifacts, target)
    if target.extra_files:
        try:
            selected.extend(collect_extra_files(target.extra_files))
        except ConfigError as e:
            errors.append(e)

    plan: UploadPlan = []
    seen: dict[str, Artifact] = {}
    for artifact in selected:
        key = join_key(target.folder, artifact.name)
        if key in seen:
            errors.append(
                ConfigError(
                    f"{artifact.path} and {seen[key].path} would both upload to {key}",
                    key="key",
                    value=key,
                )
            )
            continue
        seen[key] = artifact
        plan.append((key, artifact))
    return plan, errors


def _default_logger() -> ILogger:
    from ..logging import NullLogger

    return resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]


class Publisher:
    """
    Publishes release artifacts to every configured blob target.

    Targets run concurrently on a bounded pool, and so do the uploads of
    one target. A failure never stops work on anything independent of
    it: a target that cannot be resolved or opened is skipped, an
    artifact that fails to upload does not stop its siblings.

    Cancellation (``cancel()`` or the configured timeout) stops new
    connections and new uploads; uploads already running finish on their
    own.
    """

    def __init__(
        self,
        renderer: ITemplateRenderer = render_template,
        container: ServiceContainer | None = None,
        logger: ILogger | None = None,
    ) -> None:
        """
        Initialize the publisher.

        Args:
            renderer: Template renderer for target fields
            container: Container holding the backend registry
            logger: Logger (defaults to the container's logger)
        """
        self._renderer = renderer
        self._container = container or get_container()
        self._logger = logger or _default_logger()
        self._cancel = threading.Event()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def publish(self, release: ReleaseContext) -> PublishReport:
        """
        Publish and raise if anything failed.

        Raises:
            AggregatePublishError: Carrying every target and artifact failure
        """
        report = self.run(release)
        report.raise_for_errors()
        return report

    def cancel(self) -> None:
        """Stop issuing new connections and uploads for the current run."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def run(self, release: ReleaseContext) -> PublishReport:
        """
        Publish and return the report without raising for failures.

        Args:
            release: Release metadata, artifacts and targets

        Returns:
            PublishReport with one outcome per configured target
        """
        if release.skip_publish:
            self._logger.info(
                "Publishing is disabled; skipping %d blob target(s)", len(release.blobs)
            )
            return PublishReport(skipped=True, skip_reason="publishing is disabled")
        if not release.blobs:
            self._logger.info("No blob targets configured; skipping")
            return PublishReport(skipped=True, skip_reason="no blob targets configured")

        if not self._container.list_backends():
            discover_backends(container=self._container)

        self._cancel = threading.Event()
        values = build_template_context(release)
        outcomes = [
            TargetOutcome(index=i, label=target_label(i, blob))
            for i, blob in enumerate(release.blobs)
        ]

        timer = None
        if release.publish.timeout:
            timeout = release.publish.timeout
            timer = threading.Timer(timeout, self._on_timeout, (timeout,))
            timer.daemon = True
            timer.start()

        try:
            workers = min(release.publish.target_parallelism, len(outcomes))
            with ThreadPoolExecutor(
                max_workers=workers, thread_name_prefix="blobpub-target"
            ) as pool:
                futures = [
                    pool.submit(self._publish_target, outcome, blob, release, values)
                    for outcome, blob in zip(outcomes, release.blobs)
                ]
                for future in as_completed(futures):
                    future.result()
        finally:
            if timer is not None:
                timer.cancel()

        report = PublishReport(outcomes=outcomes)
        self._log_summary(report)
        return report

    # -------------------------------------------------------------------------
    # Per-target pipeline
    # -------------------------------------------------------------------------

    def _on_timeout(self, timeout: float) -> None:
        self._logger.warning("Publish timed out after %ss; no new uploads will start", timeout)
        self._cancel.set()

    def _fail(self, outcome: TargetOutcome, error: BlobpubException) -> None:
        self._logger.bind(outcome.label).error("%s", error)
        outcome.record_error(error)

    def _check_cancelled(self, outcome: TargetOutcome, stage: str) -> bool:
        if not self._cancel.is_set():
            return False
        self._fail(outcome, PublishCancelledError(f"publish cancelled before {stage}"))
        outcome.finish()
        return True

    def _publish_target(
        self,
        outcome: TargetOutcome,
        blob: BlobConfig,
        release: ReleaseContext,
        values: dict,
    ) -> None:
        if self._check_cancelled(outcome, "resolving target"):
            return

        outcome.advance(TargetState.RESOLVING)
        try:
            target = resolve_target(outcome.index, blob, self._renderer, values, self._container)
        except BlobpubException as e:
            self._fail(outcome, e)
            outcome.finish()
            return
        except Exception as e:
            self._fail(outcome, ConfigError(f"failed to resolve target: {e}", cause=e))
            outcome.finish()
            return
        outcome.label = target.label

        if self._check_cancelled(outcome, "connecting"):
            return

        outcome.advance(TargetState.CONNECTING)
        try:
            bucket = target.backend.open(target)
        except BlobpubException as e:
            self._fail(outcome, e)
            outcome.finish()
            return
        except Exception as e:
            self._fail(
                outcome,
                BackendConnectionError(
                    f"failed to open bucket: {e}",
                    provider=target.provider,
                    bucket=target.bucket,
                    endpoint=target.endpoint,
                    cause=e,
                ),
            )
            outcome.finish()
            return

        try:
            outcome.advance(TargetState.FILTERING)
            plan, problems = plan_uploads(target, release.artifacts)
            for problem in problems:
                self._fail(outcome, problem)
            outcome.advance(TargetState.UPLOADING)
            if plan:
                self._upload_all(bucket, plan, outcome, release.publish.parallelism)
            else:
                self._logger.bind(target.label).info("no artifacts to upload")
        finally:
            self._close(bucket, outcome)
            outcome.advance(TargetState.CLOSED)

        outcome.finish()

    def _upload_all(
        self,
        bucket: IBucket,
        plan: UploadPlan,
        outcome: TargetOutcome,
        parallelism: int,
    ) -> None:
        self._logger.bind(outcome.label).info("uploading %d file(s)", len(plan))
        not_started: list[str] = []
        workers = min(parallelism, len(plan))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="blobpub-upload") as pool:
            futures = [
                pool.submit(self._upload_one, bucket, key, artifact, outcome)
                for key, artifact in plan
            ]
            for future in as_completed(futures):
                skipped_key = future.result()
                if skipped_key is not None:
                    not_started.append(skipped_key)

        if not_started:
            self._fail(
                outcome,
                PublishCancelledError(
                    f"publish cancelled; {len(not_started)} upload(s) not started",
                    pending=sorted(not_started),
                ),
            )

    def _upload_one(
        self,
        bucket: IBucket,
        key: str,
        artifact: Artifact,
        outcome: TargetOutcome,
    ) -> str | None:
        """Upload one artifact; returns the key when cancellation prevented the upload."""
        if self._cancel.is_set():
            return key
        try:
            bucket.put(key, artifact.path)
        except BlobpubException as e:
            self._fail(outcome, e)
            return None
        except Exception as e:
            self._fail(
                outcome,
                UploadError(f"upload failed: {e}", source_path=artifact.path, key=key, cause=e),
            )
            return None
        outcome.record_upload(key)
        self._logger.bind(outcome.label).info("uploaded %s", key)
        return None

    def _close(self, bucket: IBucket, outcome: TargetOutcome) -> None:
        try:
            bucket.close()
        except Exception as e:
            self._fail(outcome, BackendError(f"failed to close bucket: {e}", cause=e))

    def _log_summary(self, report: PublishReport) -> None:
        for outcome in report.outcomes:
            logger = self._logger.bind(outcome.label)
            if outcome.succeeded:
                logger.info("published %d file(s)", len(outcome.uploaded))
            else:
                logger.error(
                    "failed with %d error(s) after %d upload(s)",
                    len(outcome.errors),
                    len(outcome.uploaded),
                )
