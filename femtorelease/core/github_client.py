"""Thin client for the release-hosting REST API.

Endpoints used::

    GET    /repos/{repo}/releases/tags/{tag}
    POST   /repos/{repo}/releases
    GET    /repos/{repo}/releases/{id}/assets
    DELETE /repos/{repo}/releases/assets/{id}
    POST   {upload_endpoint}?name={asset}

Calls are synchronous and never retried.  The session is injectable so the
publisher can be driven against an in-memory host in tests.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import requests

from femtorelease.core.errors import APIError
from femtorelease.core.response_parser import parse_asset, parse_assets, parse_release
from femtorelease.models.release import AssetInfo, ReleaseInfo, ReleaseRequest

logger = logging.getLogger(__name__)

ACCEPT = "application/vnd.github.v3+json"


class ReleaseClient:
    """REST client bound to one repository.

    Parameters
    ----------
    repo:
        ``owner/name`` slug.
    token:
        Access token sent as ``Authorization: token <token>``.
    api_url:
        API root, ``https://api.github.com`` by default.
    session:
        A ``requests.Session`` (or compatible object exposing ``request``).
    timeout:
        Per-request timeout in seconds; ``None`` blocks indefinitely.
    """

    def __init__(
        self,
        repo: str,
        token: str,
        *,
        api_url: str = "https://api.github.com",
        session: Any | None = None,
        timeout: float | None = None,
    ) -> None:
        self.repo = repo
        self._base = f"{api_url.rstrip('/')}/repos/{repo}"
        self._session = session or requests.Session()
        self._timeout = timeout
        self._headers = {
            "Authorization": f"token {token}",
            "Accept": ACCEPT,
        }

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> requests.Response:
        merged = dict(self._headers)
        if headers:
            merged.update(headers)
        logger.debug("%s %s", method, url)
        try:
            return self._session.request(
                method, url, headers=merged, timeout=self._timeout, **kwargs
            )
        except requests.RequestException as exc:
            raise APIError(f"{method} {url} failed: {exc}") from exc

    @staticmethod
    def _check(response: requests.Response, action: str) -> requests.Response:
        if response.status_code >= 400:
            hint = ""
            if response.status_code in (401, 403):
                hint = "Check that GITHUB_TOKEN is valid and has the 'repo' scope."
            raise APIError(
                f"{action} failed with HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
                hint=hint,
            )
        return response

    # ------------------------------------------------------------------
    # Releases
    # ------------------------------------------------------------------

    def get_release_by_tag(self, tag: str) -> ReleaseInfo | None:
        """Return the release for *tag*, or ``None`` if it does not exist."""
        response = self._request("GET", f"{self._base}/releases/tags/{tag}")
        if response.status_code == 404:
            return None
        self._check(response, f"Fetching release {tag}")
        return parse_release(response.text)

    def create_release(self, request: ReleaseRequest) -> ReleaseInfo:
        response = self._request(
            "POST", f"{self._base}/releases", json=request.model_dump()
        )
        self._check(response, f"Creating release {request.tag_name}")
        return parse_release(response.text)

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    def list_assets(self, release_id: int) -> list[AssetInfo]:
        response = self._request(
            "GET", f"{self._base}/releases/{release_id}/assets", params={"per_page": 100}
        )
        self._check(response, f"Listing assets of release {release_id}")
        return parse_assets(response.text)

    def delete_asset(self, asset_id: int) -> None:
        response = self._request("DELETE", f"{self._base}/releases/assets/{asset_id}")
        # Already gone is as good as deleted
        if response.status_code == 404:
            logger.debug("asset %d already deleted", asset_id)
            return
        self._check(response, f"Deleting asset {asset_id}")

    def upload_asset(self, upload_endpoint: str, path: Path, name: str | None = None) -> AssetInfo:
        """Upload the bytes of *path* as asset *name* (default: the file name)."""
        name = name or path.name
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise APIError(
                f"Cannot read {path} for upload: {exc.strerror or exc}"
            ) from exc
        response = self._request(
            "POST",
            upload_endpoint,
            params={"name": name},
            data=data,
            headers={
                "Content-Type": "application/octet-stream",
                "Content-Length": str(len(data)),
            },
        )
        self._check(response, f"Uploading {name}")
        return parse_asset(response.text)
