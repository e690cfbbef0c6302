"""Build Matrix Orchestrator: sequential cross-compilation of every target.

For each target in registry order:

    verify toolchain -> cargo build --release --target <triple>
        -> check output exists -> strip (best-effort) -> copy to artifact name

Targets build one at a time.  Any failure in a required step aborts the
whole matrix; artifacts already produced are not returned, so a partial set
can never reach the publisher.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Mapping
from pathlib import Path

from femtorelease.core.errors import BuildFailure
from femtorelease.core.target_registry import all_targets
from femtorelease.core.toolchain import (
    BuildEnvironment,
    CommandRunner,
    SubprocessRunner,
    ToolchainProbe,
)
from femtorelease.models.artifacts import Artifact
from femtorelease.models.targets import Target

logger = logging.getLogger(__name__)


class BuildMatrixOrchestrator:
    """Builds the project binary for a list of targets.

    Parameters
    ----------
    project:
        Binary/crate name; also the artifact name prefix.
    targets:
        Targets to build, in order.  Defaults to the full registry.
    output_dir:
        Where canonical artifacts are copied.
    project_dir:
        Directory cargo runs in.
    cargo_target_dir:
        Cargo's target directory, relative to *project_dir* unless absolute.
    runner, probe:
        Injectable command runner and toolchain probe.
    base_env:
        Environment the per-target variables are layered onto.  Defaults to
        the process environment, which is copied, never modified.
    """

    def __init__(
        self,
        project: str,
        *,
        targets: list[Target] | None = None,
        output_dir: Path = Path("."),
        project_dir: Path = Path("."),
        cargo_target_dir: Path = Path("target"),
        runner: CommandRunner | None = None,
        probe: ToolchainProbe | None = None,
        base_env: Mapping[str, str] | None = None,
    ) -> None:
        self.project = project
        self.targets = list(targets) if targets is not None else all_targets()
        self.output_dir = Path(output_dir)
        self.project_dir = Path(project_dir)
        self.cargo_target_dir = Path(cargo_target_dir)
        self._runner = runner or SubprocessRunner()
        self._probe = probe or ToolchainProbe(self._runner)
        self._base_env = base_env

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def build_output_path(self, target: Target) -> Path:
        """Where cargo leaves the release binary for *target*."""
        root = self.cargo_target_dir
        if not root.is_absolute():
            root = self.project_dir / root
        return root / target.triple / "release" / self.project

    def artifact_path(self, target: Target) -> Path:
        return self.output_dir / target.artifact_name(self.project)

    # ------------------------------------------------------------------
    # Matrix
    # ------------------------------------------------------------------

    def build_all(self, version: str) -> list[Artifact]:
        """Build every target and return one artifact per target.

        Raises ``ToolchainError`` or ``BuildFailure`` on the first target that
        cannot be built; nothing is returned in that case.
        """
        logger.info(
            "Building %s v%s for %d target(s)...", self.project, version, len(self.targets)
        )
        artifacts = [self.build_target(target) for target in self.targets]
        logger.info("All builds complete!")
        return artifacts

    def build_target(self, target: Target) -> Artifact:
        """Build, strip and copy a single target."""
        logger.info("Building for %s...", target.triple)

        # 1. Toolchain must be present
        self._probe.verify(target)

        # 2. Build with target-scoped environment
        build_env = BuildEnvironment.for_target(target)
        if build_env.variables:
            logger.debug(
                "%s toolchain env: %s",
                target.triple,
                ", ".join(f"{k}={v}" for k, v in sorted(build_env.variables.items())),
            )
        result = self._runner.run(
            ["cargo", "build", "--release", "--target", target.triple],
            env=build_env.merged(self._base_env),
            cwd=self.project_dir,
        )
        if not result.ok:
            raise BuildFailure(
                f"cargo build failed for {target.triple} (exit code {result.returncode})",
                hint=result.stderr.strip(),
            )

        # 3. Output must exist
        build_path = self.build_output_path(target)
        if not build_path.is_file():
            raise BuildFailure(
                f"Build for {target.triple} succeeded but {build_path} does not exist",
                hint="Check the crate's binary name and CARGO_TARGET_DIR.",
            )

        # 4. Strip (best-effort)
        stripped = self._strip(target, build_path)

        # 5. Copy to the canonical artifact name
        dest = self.artifact_path(target)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(build_path, dest)
            size = dest.stat().st_size
        except OSError as exc:
            raise BuildFailure(
                f"Cannot write artifact {dest}: {exc.strerror or exc}",
                hint=f"Check that {self.output_dir} is a writable directory.",
            ) from exc
        logger.info("Created %s", dest.name)

        return Artifact(
            target=target,
            name=dest.name,
            path=dest,
            build_path=build_path,
            size_bytes=size,
            stripped=stripped,
        )

    def _strip(self, target: Target, build_path: Path) -> bool:
        """Strip debug symbols where the target benefits; never fatal."""
        if not target.strip_tool:
            return False
        tool = self._probe.find_strip(target)
        if tool is None:
            logger.warning(
                "%s not found; leaving %s unstripped", target.strip_tool, target.triple
            )
            return False
        result = self._runner.run([tool, str(build_path)])
        if not result.ok:
            logger.warning(
                "strip failed for %s (exit code %d); continuing",
                target.triple,
                result.returncode,
            )
            return False
        return True
