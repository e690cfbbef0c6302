"""Release Publisher: idempotent synchronization of a tagged release.

Lifecycle (see ``PublishMachine``):

    1. RESOLVE:   fetch the release for ``v<version>``; reuse it if present.
    2. CREATE:    only when RESOLVE found nothing.
    3. VALIDATE:  a numeric id and an upload endpoint must be known.
    4. RECONCILE: per desired file: list assets, delete a same-named asset,
                  upload the local bytes.
    5. DONE:      report the public release location.

Reruns converge: the release is reused and each asset is replaced, so the
end state is one release with one asset per file name.  Concurrent runs
against the same tag are not safe.
"""

from __future__ import annotations

import logging
from pathlib import Path

from femtorelease.core.errors import APIError, LocalAssetMissing
from femtorelease.core.github_client import ReleaseClient
from femtorelease.core.publish_machine import PublishMachine
from femtorelease.core.response_parser import find_asset_id
from femtorelease.models.release import (
    AssetAction,
    AssetOutcome,
    PublishReport,
    PublishState,
    ReleaseInfo,
    ReleaseRequest,
)

logger = logging.getLogger(__name__)

RELEASE_BODY_TEMPLATE = (
    "{project} v{version}\n\nBinaries for Linux and macOS (Intel and Apple Silicon)"
)


def release_tag(version: str) -> str:
    return f"v{version}"


def is_prerelease(version: str) -> bool:
    """A version with a ``-`` suffix (``1.0.0-rc1``) is a pre-release."""
    return "-" in version


def build_release_request(project: str, version: str) -> ReleaseRequest:
    """Body for creating the release of *version*."""
    tag = release_tag(version)
    return ReleaseRequest(
        tag_name=tag,
        name=tag,
        body=RELEASE_BODY_TEMPLATE.format(project=project, version=version),
        draft=False,
        prerelease=is_prerelease(version),
    )


def _local_size(path: Path) -> int:
    if not path.is_file():
        raise LocalAssetMissing(path.name)
    return path.stat().st_size


class ReleasePublisher:
    """Publishes local files as assets of a tagged release.

    Parameters
    ----------
    client:
        REST client bound to the target repository.
    project:
        Project name used in the release body.
    web_base:
        Browser URL of the repository's releases page, used for the
        reported location when the API omits ``html_url``.
    """

    def __init__(self, client: ReleaseClient, project: str, web_base: str) -> None:
        self._client = client
        self.project = project
        self.web_base = web_base.rstrip("/")

    def publish(self, version: str, desired_assets: list[Path]) -> PublishReport:
        """Synchronize release ``v<version>`` with *desired_assets*.

        Files absent from disk are skipped with a warning.  Any API error
        aborts the run; already-replaced assets are left as they are.
        """
        tag = release_tag(version)
        machine = PublishMachine(tag)
        try:
            release, created = self._resolve_or_create(machine, version)

            machine.transition(PublishState.VALIDATE)
            self._validate(release)

            machine.transition(PublishState.RECONCILE)
            outcomes = [self._reconcile(release, Path(p)) for p in desired_assets]
        except Exception as exc:
            machine.fail(str(exc))
            raise

        location = release.html_url or f"{self.web_base}/tag/{tag}"
        machine.transition(PublishState.DONE, location)
        logger.info("Release %s %s: %s", tag, "created" if created else "updated", location)
        return PublishReport(
            tag=tag,
            release_id=release.id,
            location=location,
            created=created,
            prerelease=is_prerelease(version),
            assets=outcomes,
            transitions=machine.history,
        )

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _resolve_or_create(
        self, machine: PublishMachine, version: str
    ) -> tuple[ReleaseInfo, bool]:
        tag = machine.tag
        existing = self._client.get_release_by_tag(tag)
        if existing is not None:
            logger.info("Reusing existing release %s (id %d)", tag, existing.id)
            return existing, False

        machine.transition(PublishState.CREATE, "no release for tag")
        request = build_release_request(self.project, version)
        logger.info(
            "Creating release %s%s", tag, " (prerelease)" if request.prerelease else ""
        )
        return self._client.create_release(request), True

    @staticmethod
    def _validate(release: ReleaseInfo) -> None:
        if not release.id or not release.upload_url:
            raise APIError(
                "Release is missing an id or upload endpoint",
                body=release.model_dump_json(),
                hint="Check that the token is valid and has the 'repo' scope.",
            )
        if not release.upload_url.startswith(("http://", "https://")):
            raise APIError(
                f"Release upload endpoint is not a URL: {release.upload_url!r}",
                body=release.model_dump_json(),
            )

    def _reconcile(self, release: ReleaseInfo, path: Path) -> AssetOutcome:
        """Make the remote asset named ``path.name`` match the local file."""
        name = path.name
        try:
            size = _local_size(path)
        except LocalAssetMissing as exc:
            logger.warning("Skipping %s (not found)", exc.name)
            return AssetOutcome(name=name, action=AssetAction.SKIPPED)

        assets = self._client.list_assets(release.id)
        existing_id = find_asset_id(assets, name)
        if existing_id is not None:
            logger.info("Deleting existing asset %s (id %d)", name, existing_id)
            self._client.delete_asset(existing_id)

        logger.info("Uploading %s...", name)
        uploaded = self._client.upload_asset(release.upload_url, path, name)
        logger.info("Uploaded %s", name)
        return AssetOutcome(
            name=name,
            action=AssetAction.REPLACED if existing_id is not None else AssetAction.UPLOADED,
            size_bytes=uploaded.size or size,
            replaced_asset_id=existing_id,
        )
