"""Build target models: immutable (OS, arch) pairs and toolchain rules."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class OsFamily(str, Enum):
    """Operating system families binaries are published for."""

    LINUX = "linux"
    DARWIN = "darwin"


class ToolchainKind(str, Enum):
    """Whether a target builds with the host compiler or a cross toolchain."""

    NATIVE = "native"
    CROSS = "cross"


class Toolchain(BaseModel):
    """Compiler selection for one target.

    For ``CROSS`` toolchains ``cc``, ``ar`` and ``linker`` name the binaries
    that must be found on ``PATH`` before the build may start.
    """

    model_config = ConfigDict(frozen=True)

    kind: ToolchainKind = ToolchainKind.NATIVE
    cc: str | None = None
    ar: str | None = None
    linker: str | None = None
    install_hint: str = ""

    @property
    def required_binaries(self) -> list[str]:
        """Distinct cross binaries that must be present, in declaration order."""
        if self.kind is not ToolchainKind.CROSS:
            return []
        seen: list[str] = []
        for binary in (self.cc, self.ar, self.linker):
            if binary and binary not in seen:
                seen.append(binary)
        return seen


class Target(BaseModel):
    """One supported build target.

    ``triple`` is the compiler target triple; ``arch`` is its CPU prefix.
    Every target maps to exactly one artifact name ``<project>-<os>-<arch>``.
    """

    model_config = ConfigDict(frozen=True)

    triple: str
    os: OsFamily
    arch: str
    toolchain: Toolchain = Toolchain()
    strip_tool: str | None = None  # None: stripping does not apply

    @property
    def key(self) -> str:
        """Short ``<os>-<arch>`` identifier, e.g. ``linux-x86_64``."""
        return f"{self.os.value}-{self.arch}"

    def artifact_name(self, project: str) -> str:
        """Canonical output file name for *project* on this target."""
        return f"{project}-{self.key}"
