"""Toolchain probing and per-invocation build environments.

Two seams are pluggable so builds can be exercised without a Rust install:

- ``CommandRunner``: anything with ``run(args, env=, cwd=, capture=)``.
- ``which``: a ``shutil.which``-compatible lookup.

Cross-toolchain variables are never exported into ``os.environ``; they live
in a ``BuildEnvironment`` that is merged into a copy of the base environment
for exactly one invocation.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from femtorelease.core.errors import ToolchainError
from femtorelease.models.targets import Target, ToolchainKind

logger = logging.getLogger(__name__)

RUSTUP_HINT = "Install Rust with rustup: https://rustup.rs"

WhichFn = Callable[[str], "str | None"]


class CommandResult(BaseModel):
    """Exit status and (when captured) output of one external command."""

    model_config = ConfigDict(frozen=True)

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@runtime_checkable
class CommandRunner(Protocol):
    """Protocol for external command execution backends."""

    def run(
        self,
        args: list[str],
        *,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
        capture: bool = False,
    ) -> CommandResult:
        """Run *args* to completion and return its result.

        Output is streamed to the terminal unless *capture* is set.
        """
        ...


class SubprocessRunner:
    """Default runner backed by ``subprocess.run``."""

    def run(
        self,
        args: list[str],
        *,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
        capture: bool = False,
    ) -> CommandResult:
        logger.debug("exec: %s", " ".join(args))
        try:
            completed = subprocess.run(
                args,
                env=dict(env) if env is not None else None,
                cwd=cwd,
                capture_output=capture,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise ToolchainError(f"Command not found: {args[0]}") from exc
        return CommandResult(
            args=list(args),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )


class BuildEnvironment(BaseModel):
    """Environment variables scoped to a single target's build invocation."""

    model_config = ConfigDict(frozen=True)

    target_triple: str
    variables: dict[str, str] = {}

    @classmethod
    def for_target(cls, target: Target) -> BuildEnvironment:
        """Derive the cargo/cc variables that select *target*'s toolchain."""
        variables: dict[str, str] = {}
        toolchain = target.toolchain
        if toolchain.kind is ToolchainKind.CROSS:
            lower = target.triple.replace("-", "_")
            upper = lower.upper()
            if toolchain.cc:
                variables[f"CC_{lower}"] = toolchain.cc
            if toolchain.ar:
                variables[f"AR_{lower}"] = toolchain.ar
            if toolchain.linker:
                variables[f"CARGO_TARGET_{upper}_LINKER"] = toolchain.linker
        return cls(target_triple=target.triple, variables=variables)

    def merged(self, base: Mapping[str, str] | None = None) -> dict[str, str]:
        """Return a new mapping of *base* (default ``os.environ``) plus these variables."""
        env = dict(os.environ if base is None else base)
        env.update(self.variables)
        return env


class ToolchainProbe:
    """Checks that the tools a target needs are installed.

    Parameters
    ----------
    runner:
        Command runner used for ``rustup`` queries.
    which:
        Executable lookup, ``shutil.which`` by default.
    """

    def __init__(
        self,
        runner: CommandRunner | None = None,
        which: WhichFn | None = None,
    ) -> None:
        self._runner = runner or SubprocessRunner()
        self._which = which or shutil.which
        self._installed: set[str] | None = None

    # ------------------------------------------------------------------
    # Required tools
    # ------------------------------------------------------------------

    def require(self, binary: str, *, hint: str = "") -> str:
        """Return the resolved path of *binary* or raise ``ToolchainError``."""
        path = self._which(binary)
        if not path:
            raise ToolchainError(f"Required tool not found on PATH: {binary}", hint=hint)
        return path

    def installed_rust_targets(self) -> set[str]:
        """Return the rust targets rustup reports as installed (cached)."""
        if self._installed is None:
            self.require("rustup", hint=RUSTUP_HINT)
            result = self._runner.run(
                ["rustup", "target", "list", "--installed"], capture=True
            )
            if not result.ok:
                raise ToolchainError(
                    "rustup could not list installed targets",
                    hint=result.stderr.strip() or RUSTUP_HINT,
                )
            self._installed = {
                line.strip() for line in result.stdout.splitlines() if line.strip()
            }
        return self._installed

    def ensure_rust_target(self, target: Target) -> None:
        """Add *target*'s standard library via rustup when it is missing."""
        if target.triple in self.installed_rust_targets():
            return
        logger.info("Adding target %s...", target.triple)
        result = self._runner.run(["rustup", "target", "add", target.triple])
        if not result.ok:
            raise ToolchainError(
                f"rustup failed to add target {target.triple}",
                hint=f"Run manually: rustup target add {target.triple}",
            )
        self._installed = None

    def ensure_cross_binaries(self, target: Target) -> None:
        """Fail unless every cross compiler/archiver/linker is on PATH."""
        missing = [b for b in target.toolchain.required_binaries if not self._which(b)]
        if missing:
            raise ToolchainError(
                f"Cross toolchain for {target.triple} is incomplete; "
                f"missing: {', '.join(missing)}",
                hint=target.toolchain.install_hint
                or f"Install a toolchain providing {', '.join(missing)}",
            )

    def verify(self, target: Target) -> None:
        """Run every required check for *target*, in order."""
        self.require("cargo", hint=RUSTUP_HINT)
        self.ensure_rust_target(target)
        self.ensure_cross_binaries(target)

    # ------------------------------------------------------------------
    # Best-effort tools
    # ------------------------------------------------------------------

    def find_strip(self, target: Target) -> str | None:
        """Return the strip binary for *target*, or ``None`` if unavailable."""
        if not target.strip_tool:
            return None
        return self._which(target.strip_tool)
