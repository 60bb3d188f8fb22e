"""Release synchronization orchestration.

This module owns the whole sync flow so the CLI only has to render events
and pick an exit code:

    START -> CHECK_MARKER -> COMPARE_VERSIONS -> UP_TO_DATE
                                             -> DOWNLOAD -> EXTRACT -> RELOCATE
                                                -> RECORD_VERSION -> CLEANUP
    (any fatal error) -> FAILED

Progress is reported as `SyncEvent`s through `PipelineHooks`; nothing in the
control flow depends on whether anyone is listening.
"""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from adapters.fs_copy import copy_tree
from core import archive_extractor, version_marker
from core.config import AppSettings
from core.domain import semver
from core.domain.errors import ExtractError, MarkerNotFoundError, SyncError
from core.domain.models import EventLevel, ReleaseInfo, SyncEvent, SyncStage
from core.domain.semver import SemanticVersion
from core.interfaces.release_source import ReleaseSource
from core.staging import StagingArea, staging_area

logger = logging.getLogger(__name__)


@dataclass
class SyncRequest:
    """Parameters that control a single sync run."""

    output_dir: Path
    work_dir: Path | None = None
    marker_filename: str | None = None
    payload_subdir: str | None = None
    force: bool = False


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers."""

    event: Callable[[SyncEvent], None] | None = None


@dataclass(frozen=True)
class VersionCheck:
    """Outcome of CHECK_MARKER + COMPARE_VERSIONS."""

    current: SemanticVersion
    remote: SemanticVersion
    release: ReleaseInfo
    update_available: bool
    marker_problem: str | None = None


@dataclass
class SyncResult:
    """Output of a successful (or no-op) pipeline invocation."""

    state: SyncStage
    previous_version: SemanticVersion
    remote_version: SemanticVersion
    events: list[SyncEvent] = field(default_factory=list)

    @property
    def updated(self) -> bool:
        return self.state is SyncStage.CLEANUP


class _EventLog:
    def __init__(self, hooks: PipelineHooks) -> None:
        self._hooks = hooks
        self.events: list[SyncEvent] = []

    def emit(self, stage: SyncStage, message: str, level: EventLevel = EventLevel.INFO) -> None:
        event = SyncEvent(stage=stage, message=message, level=level)
        self.events.append(event)
        if self._hooks.event:
            self._hooks.event(event)


def _marker_name(settings: AppSettings, request: SyncRequest) -> str:
    return request.marker_filename or settings.marker_filename


def _payload_subdir(settings: AppSettings, request: SyncRequest) -> str:
    if request.payload_subdir is not None:
        return request.payload_subdir
    return settings.payload_subdir


def locate_payload(extracted_dir: Path, payload_subdir: str) -> Path:
    """Find the payload inside the single generated top-level directory.

    GitHub tarballs wrap everything in `<owner>-<repo>-<sha>/`; the name is
    unpredictable, so exactly one top-level directory is required.
    """

    top_level = sorted(extracted_dir.iterdir()) if extracted_dir.is_dir() else []
    if len(top_level) != 1 or not top_level[0].is_dir():
        names = ", ".join(p.name for p in top_level) or "<empty>"
        raise ExtractError(f"Expected a single top-level directory in archive, found: {names}")

    payload = top_level[0] / payload_subdir if payload_subdir else top_level[0]
    if not payload.is_dir():
        raise ExtractError(
            f"Payload directory '{payload_subdir}' not found in archive",
            entry=top_level[0].name,
        )
    return payload


def staging_parent(settings: AppSettings, request: SyncRequest) -> Path:
    """Directory under which the staging area is created.

    Never the output directory or anything inside it: with the defaults both
    are the cwd, so the system temp dir is used instead.
    """

    work_dir = Path(request.work_dir or settings.work_dir or Path.cwd())
    output_root = Path(request.output_dir).resolve()
    resolved = work_dir.resolve()
    if resolved == output_root or output_root in resolved.parents:
        logger.debug("Work dir %s is inside output %s; staging in temp dir", resolved, output_root)
        return Path(tempfile.gettempdir())
    return work_dir


async def _check(
    *,
    settings: AppSettings,
    request: SyncRequest,
    source: ReleaseSource,
    log: _EventLog,
) -> VersionCheck:
    output_dir = Path(request.output_dir)

    stage = SyncStage.CHECK_MARKER
    current, problem = version_marker.load_or_baseline(output_dir, _marker_name(settings, request))
    if problem is None:
        log.emit(stage, f"Current version: {current}")
    elif isinstance(problem, MarkerNotFoundError):
        log.emit(stage, f"No previous version recorded, using baseline {current}")
    else:
        log.emit(stage, f"{problem}. Using baseline {current}", EventLevel.WARNING)

    stage = SyncStage.COMPARE_VERSIONS
    log.emit(stage, "Fetching latest release information...")
    try:
        release = await source.fetch_latest()
        remote = semver.parse(release.tag_name)
    except SyncError as exc:
        exc.stage = stage.value
        raise

    update_available = semver.is_newer(current, remote)
    return VersionCheck(
        current=current,
        remote=remote,
        release=release,
        update_available=update_available,
        marker_problem=str(problem) if problem else None,
    )


async def check_release(
    *,
    settings: AppSettings,
    request: SyncRequest,
    source: ReleaseSource,
    hooks: PipelineHooks | None = None,
) -> VersionCheck:
    """Compare the local marker against the remote release without side effects."""

    log = _EventLog(hooks or PipelineHooks())
    log.emit(SyncStage.START, f"Checking {request.output_dir}")
    try:
        return await _check(settings=settings, request=request, source=source, log=log)
    except SyncError as exc:
        log.emit(SyncStage.FAILED, str(exc), EventLevel.ERROR)
        raise


async def _apply(
    *,
    settings: AppSettings,
    request: SyncRequest,
    source: ReleaseSource,
    check: VersionCheck,
    staging: StagingArea,
    log: _EventLog,
) -> None:
    output_dir = Path(request.output_dir)
    stage = SyncStage.DOWNLOAD
    try:
        log.emit(stage, f"Downloading version {check.release.tag_name}...")
        size = await source.download(check.release.tarball_url, staging.archive_path)
        log.emit(stage, f"Download successful ({size} bytes).")

        stage = SyncStage.EXTRACT
        log.emit(stage, "Extracting downloaded archive...")
        count = archive_extractor.extract(staging.archive_path, staging.extracted_dir)
        log.emit(stage, f"Extracted {count} entries.")

        stage = SyncStage.RELOCATE
        payload = locate_payload(staging.extracted_dir, _payload_subdir(settings, request))
        log.emit(stage, f"Copying files to {output_dir}")
        copy_tree(payload, output_dir)

        stage = SyncStage.RECORD_VERSION
        path = version_marker.save(output_dir, check.remote, _marker_name(settings, request))
        log.emit(stage, f"Recorded version {check.remote} in {path.name}")
    except SyncError as exc:
        exc.stage = stage.value
        raise


async def sync_release(
    *,
    settings: AppSettings,
    request: SyncRequest,
    source: ReleaseSource,
    hooks: PipelineHooks | None = None,
) -> SyncResult:
    """Run the full state machine.

    Returns a `SyncResult` in state UP_TO_DATE or CLEANUP. Any fatal error is
    re-raised as `SyncError` (with `.stage` set) after a FAILED event; the
    version marker is untouched in that case.
    """

    log = _EventLog(hooks or PipelineHooks())
    log.emit(SyncStage.START, f"Syncing into {request.output_dir}")

    try:
        check = await _check(settings=settings, request=request, source=source, log=log)

        if not check.update_available and not request.force:
            log.emit(SyncStage.UP_TO_DATE, f"No update available (remote {check.remote}).")
            return SyncResult(
                state=SyncStage.UP_TO_DATE,
                previous_version=check.current,
                remote_version=check.remote,
                events=log.events,
            )

        if check.update_available:
            log.emit(SyncStage.COMPARE_VERSIONS, f"New version exists: {check.remote}")
        else:
            log.emit(SyncStage.COMPARE_VERSIONS, f"Forcing re-sync of {check.remote}")

        work_dir = staging_parent(settings, request)

        def _cleanup_warning(message: str) -> None:
            log.emit(SyncStage.CLEANUP, message, EventLevel.WARNING)

        with staging_area(work_dir, on_cleanup_error=_cleanup_warning) as staging:
            await _apply(
                settings=settings,
                request=request,
                source=source,
                check=check,
                staging=staging,
                log=log,
            )
    except SyncError as exc:
        logger.debug("Sync failed at %s", exc.stage, exc_info=True)
        log.emit(SyncStage.FAILED, str(exc), EventLevel.ERROR)
        raise

    log.emit(SyncStage.CLEANUP, f"Synced version {check.remote}.")
    return SyncResult(
        state=SyncStage.CLEANUP,
        previous_version=check.current,
        remote_version=check.remote,
        events=log.events,
    )
