"""Release host payload models and the publish state model."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ReleaseInfo(BaseModel):
    """The fields of a release response the publisher depends on."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    upload_url: str
    tag_name: str = ""
    html_url: str = ""


class AssetInfo(BaseModel):
    """One asset entry of a release's asset list."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str
    size: int = 0


class ReleaseRequest(BaseModel):
    """Body of ``POST /releases``."""

    model_config = ConfigDict(frozen=True)

    tag_name: str
    name: str
    body: str
    draft: bool = False
    prerelease: bool = False


class PublishState(str, Enum):
    """Named states of the publish pipeline."""

    RESOLVE = "resolve"
    CREATE = "create"
    VALIDATE = "validate"
    RECONCILE = "reconcile"
    DONE = "done"
    FAILED = "failed"


# Valid publish transitions: enforced by PublishMachine.
# CREATE is only reachable when RESOLVE found nothing.
VALID_TRANSITIONS: dict[PublishState, set[PublishState]] = {
    PublishState.RESOLVE: {PublishState.CREATE, PublishState.VALIDATE, PublishState.FAILED},
    PublishState.CREATE: {PublishState.VALIDATE, PublishState.FAILED},
    PublishState.VALIDATE: {PublishState.RECONCILE, PublishState.FAILED},
    PublishState.RECONCILE: {PublishState.DONE, PublishState.FAILED},
    PublishState.DONE: set(),  # terminal
    PublishState.FAILED: set(),  # terminal
}


class PublishTransition(BaseModel):
    """Records a single publish state transition."""

    model_config = ConfigDict(frozen=True)

    from_state: PublishState
    to_state: PublishState
    reason: str = ""


class AssetAction(str, Enum):
    """What reconciliation did with one desired asset."""

    UPLOADED = "uploaded"
    REPLACED = "replaced"
    SKIPPED = "skipped"


class AssetOutcome(BaseModel):
    """Result of reconciling one desired asset."""

    model_config = ConfigDict(frozen=True)

    name: str
    action: AssetAction
    size_bytes: int = 0
    replaced_asset_id: int | None = None


class PublishReport(BaseModel):
    """Outcome of ``ReleasePublisher.publish``."""

    model_config = ConfigDict(frozen=True)

    tag: str
    release_id: int
    location: str
    created: bool
    prerelease: bool = False
    assets: list[AssetOutcome] = Field(default_factory=list)
    transitions: list[PublishTransition] = Field(default_factory=list)

    @property
    def uploaded_count(self) -> int:
        return sum(1 for a in self.assets if a.action is not AssetAction.SKIPPED)

    @property
    def skipped(self) -> list[str]:
        return [a.name for a in self.assets if a.action is AssetAction.SKIPPED]
