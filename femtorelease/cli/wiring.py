"""Builds the pipeline objects the commands use from ``ReleaseSettings``.

Commands call these through the module so tests can substitute fakes.
"""

from __future__ import annotations

import requests

from femtorelease.config import ReleaseSettings
from femtorelease.core.build_matrix import BuildMatrixOrchestrator
from femtorelease.core.github_client import ReleaseClient
from femtorelease.core.publisher import ReleasePublisher
from femtorelease.models.targets import Target


def make_builder(settings: ReleaseSettings, targets: list[Target]) -> BuildMatrixOrchestrator:
    return BuildMatrixOrchestrator(
        settings.project_name,
        targets=targets,
        output_dir=settings.output_dir,
        cargo_target_dir=settings.cargo_target_dir,
    )


def make_session() -> requests.Session:
    return requests.Session()


def make_publisher(settings: ReleaseSettings) -> ReleasePublisher:
    client = ReleaseClient(
        settings.repo,
        settings.require_token(),
        api_url=settings.api_url,
        session=make_session(),
        timeout=settings.http_timeout,
    )
    return ReleasePublisher(client, settings.project_name, settings.release_web_base)
