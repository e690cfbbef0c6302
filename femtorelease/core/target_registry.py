"""Static registry of supported build targets.

The registry order is the build order.  Unrecognized target strings are a
fatal configuration error: an incomplete release is never produced silently.
"""

from __future__ import annotations

import platform

from femtorelease.core.errors import ConfigurationError
from femtorelease.models.targets import OsFamily, Target, Toolchain, ToolchainKind

_AARCH64_LINUX_CROSS = Toolchain(
    kind=ToolchainKind.CROSS,
    cc="aarch64-linux-gnu-gcc",
    ar="aarch64-linux-gnu-ar",
    linker="aarch64-linux-gnu-gcc",
    install_hint="sudo apt install gcc-aarch64-linux-gnu",
)

DEFAULT_TARGETS: list[Target] = [
    Target(
        triple="x86_64-unknown-linux-gnu",
        os=OsFamily.LINUX,
        arch="x86_64",
        strip_tool="strip",
    ),
    Target(
        triple="aarch64-unknown-linux-gnu",
        os=OsFamily.LINUX,
        arch="aarch64",
        toolchain=_AARCH64_LINUX_CROSS,
        strip_tool="aarch64-linux-gnu-strip",
    ),
    Target(
        triple="x86_64-apple-darwin",
        os=OsFamily.DARWIN,
        arch="x86_64",
    ),
    Target(
        triple="aarch64-apple-darwin",
        os=OsFamily.DARWIN,
        arch="aarch64",
    ),
]

# uname -m spellings seen on supported hosts
_ARCH_ALIASES: dict[str, str] = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "aarch64": "aarch64",
    "arm64": "aarch64",
}


def all_targets() -> list[Target]:
    """Return the fixed, ordered list of supported targets."""
    return list(DEFAULT_TARGETS)


def get_target(name: str) -> Target:
    """Look up a target by triple (``x86_64-apple-darwin``) or key (``darwin-x86_64``).

    Raises ``ConfigurationError`` for anything not in the registry.
    """
    wanted = name.strip().lower()
    for target in DEFAULT_TARGETS:
        if wanted in (target.triple, target.key):
            return target
    known = ", ".join(t.triple for t in DEFAULT_TARGETS)
    raise ConfigurationError(
        f"Unknown build target: {name!r}",
        hint=f"Supported targets: {known}",
    )


def resolve_targets(names: list[str] | None = None) -> list[Target]:
    """Resolve a user selection into registry-ordered targets.

    ``None`` or an empty list selects every target.  Duplicates collapse.
    """
    if not names:
        return all_targets()
    selected = {get_target(n).triple for n in names}
    return [t for t in DEFAULT_TARGETS if t.triple in selected]


def host_target(system: str | None = None, machine: str | None = None) -> Target:
    """Map the running platform onto a registry target.

    This is the same detection the installer performs before choosing which
    asset to download.
    """
    system = (system or platform.system()).lower()
    machine = (machine or platform.machine()).lower()
    arch = _ARCH_ALIASES.get(machine)
    if arch is None or system not in (OsFamily.LINUX.value, OsFamily.DARWIN.value):
        raise ConfigurationError(
            f"Unsupported platform: {system}/{machine}",
            hint="Prebuilt binaries exist for Linux and macOS on x86_64 and aarch64.",
        )
    return get_target(f"{system}-{arch}")


def download_url(web_base: str, tag: str, target: Target, project: str) -> str:
    """Public download URL of *target*'s asset in release *tag*.

    *web_base* is the repository's releases URL, e.g.
    ``https://github.com/owner/repo/releases``.
    """
    return f"{web_base.rstrip('/')}/download/{tag}/{target.artifact_name(project)}"
