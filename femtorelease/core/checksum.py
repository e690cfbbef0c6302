"""Checksum Generator: SHA-256 sidecars for built artifacts.

Each sidecar holds one line naming the artifact and its digest::

    <artifact-name>: <hexdigest>

``parse_sidecar`` also reads the ``sha256sum`` form (``<hexdigest>  <name>``)
so sidecars produced by that tool verify too.  Rerunning over identical bytes
rewrites an identical sidecar.
"""

from __future__ import annotations

import hashlib
import logging
import re
from pathlib import Path

from femtorelease.core.errors import BuildFailure
from femtorelease.models.artifacts import Artifact, ChecksumRecord

logger = logging.getLogger(__name__)

SIDECAR_SUFFIX = ".sha256"
_CHUNK_SIZE = 1 << 20
_HEX64 = re.compile(r"[0-9a-fA-F]{64}")


def sha256_file(path: Path) -> str:
    """Return the SHA-256 hex digest of a file, read in chunks."""
    digest = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def sidecar_path(artifact_path: Path) -> Path:
    return artifact_path.with_name(artifact_path.name + SIDECAR_SUFFIX)


def format_sidecar(name: str, hexdigest: str) -> str:
    return f"{name}: {hexdigest}\n"


def parse_sidecar(text: str) -> tuple[str, str]:
    """Parse a sidecar line into ``(name, hexdigest)``.

    Reads ``name: hexdigest`` as written by ``format_sidecar``, and the
    ``sha256sum`` text (``"  "``) and binary (``" *"``) forms.
    """
    line = text.strip().splitlines()[0] if text.strip() else ""
    name, sep, hexdigest = line.rpartition(": ")
    if sep and name and _HEX64.fullmatch(hexdigest.strip()):
        return name, hexdigest.strip().lower()

    hexdigest, sep, name = line.partition(" ")
    if not sep or not _HEX64.fullmatch(hexdigest):
        raise ValueError(f"Malformed checksum line: {text!r}")
    return name.lstrip(" *"), hexdigest.lower()


def checksum(artifact: Artifact) -> ChecksumRecord:
    """Hash *artifact* and write ``<artifact>.sha256`` beside it."""
    return checksum_path(artifact.path)


def checksum_path(path: Path) -> ChecksumRecord:
    """Hash the file at *path* and write its sidecar."""
    path = Path(path)
    if not path.is_file():
        raise BuildFailure(f"Cannot checksum missing artifact: {path}")
    record_path = sidecar_path(path)
    try:
        hexdigest = sha256_file(path)
        record_path.write_text(format_sidecar(path.name, hexdigest), encoding="utf-8")
    except OSError as exc:
        raise BuildFailure(
            f"Cannot write checksum for {path}: {exc.strerror or exc}"
        ) from exc
    logger.info("sha256 %s: %s", path.name, hexdigest)
    return ChecksumRecord(artifact_name=path.name, hexdigest=hexdigest, path=record_path)


def checksum_all(artifacts: list[Artifact]) -> list[ChecksumRecord]:
    return [checksum(a) for a in artifacts]


def verify_sidecar(artifact_path: Path) -> bool:
    """Return True if *artifact_path* matches the digest in its sidecar."""
    record = sidecar_path(Path(artifact_path))
    if not record.is_file():
        return False
    _, expected = parse_sidecar(record.read_text(encoding="utf-8"))
    return sha256_file(Path(artifact_path)) == expected
