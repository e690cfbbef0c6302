"""femtorelease data models: all Pydantic v2, all frozen (immutable)."""

from femtorelease.models.artifacts import Artifact, ChecksumRecord
from femtorelease.models.release import (
    VALID_TRANSITIONS,
    AssetAction,
    AssetInfo,
    AssetOutcome,
    PublishReport,
    PublishState,
    PublishTransition,
    ReleaseInfo,
    ReleaseRequest,
)
from femtorelease.models.targets import OsFamily, Target, Toolchain, ToolchainKind

__all__ = [
    # targets
    "OsFamily",
    "Target",
    "Toolchain",
    "ToolchainKind",
    # artifacts
    "Artifact",
    "ChecksumRecord",
    # release
    "ReleaseInfo",
    "AssetInfo",
    "ReleaseRequest",
    "PublishState",
    "PublishTransition",
    "VALID_TRANSITIONS",
    "AssetAction",
    "AssetOutcome",
    "PublishReport",
]
