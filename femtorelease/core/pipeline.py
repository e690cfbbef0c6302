"""Release pipeline: the coordinator behind ``femtorelease publish``.

Wires the Build Matrix Orchestrator, Checksum Generator and Release
Publisher into one ordered run:

    build_all -> checksum each artifact -> desired asset set -> publish

A build or API failure propagates and halts the run; nothing is published
from a partial build.
"""

from __future__ import annotations

import logging
from pathlib import Path

from femtorelease.core.build_matrix import BuildMatrixOrchestrator
from femtorelease.core.checksum import checksum_all, sidecar_path
from femtorelease.core.publisher import ReleasePublisher
from femtorelease.models.artifacts import Artifact, ChecksumRecord
from femtorelease.models.release import PublishReport
from femtorelease.models.targets import Target

logger = logging.getLogger(__name__)


def desired_asset_set(output_dir: Path, project: str, targets: list[Target]) -> list[Path]:
    """Every file that should end up on the release, in publish order.

    Each target contributes its artifact followed by its checksum sidecar.
    Whether the files exist is decided at publish time.
    """
    paths: list[Path] = []
    for target in targets:
        artifact = Path(output_dir) / target.artifact_name(project)
        paths.extend([artifact, sidecar_path(artifact)])
    return paths


class ReleasePipeline:
    """Build, checksum and publish one version."""

    def __init__(
        self,
        builder: BuildMatrixOrchestrator,
        publisher: ReleasePublisher | None = None,
    ) -> None:
        self.builder = builder
        self.publisher = publisher
        self.artifacts: list[Artifact] = []
        self.checksums: list[ChecksumRecord] = []

    def build(self, version: str) -> list[Artifact]:
        """Build every target and write checksum sidecars."""
        self.artifacts = self.builder.build_all(version)
        self.checksums = checksum_all(self.artifacts)
        return self.artifacts

    def run(self, version: str, *, build: bool = True) -> PublishReport:
        """Build, checksum and publish *version*.

        With ``build=False`` whatever artifacts and sidecars are already in
        the output directory are published as-is.
        """
        if self.publisher is None:
            raise RuntimeError("ReleasePipeline.run needs a publisher")
        if build:
            self.build(version)
        desired = desired_asset_set(
            self.builder.output_dir, self.builder.project, self.builder.targets
        )
        logger.info("Uploading %d file(s) to release v%s...", len(desired), version)
        return self.publisher.publish(version, desired)
