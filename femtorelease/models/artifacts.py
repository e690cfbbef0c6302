"""Local artifact models (immutable once created within a run)."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from femtorelease.models.targets import Target


class Artifact(BaseModel):
    """A built, optionally stripped binary for one target.

    ``build_path`` is where the toolchain wrote it; ``path`` is the canonical
    copy in the output directory.
    """

    model_config = ConfigDict(frozen=True)

    target: Target
    name: str
    path: Path
    build_path: Path
    size_bytes: int = 0
    stripped: bool = False


class ChecksumRecord(BaseModel):
    """SHA-256 digest of one artifact, persisted as ``<artifact>.sha256``."""

    model_config = ConfigDict(frozen=True)

    artifact_name: str
    algorithm: str = "sha256"
    hexdigest: str
    path: Path

    @property
    def name(self) -> str:
        """File name of the sidecar, which is also its asset name."""
        return self.path.name
