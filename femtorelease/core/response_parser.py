"""Response Parser: decode release-host JSON into typed models.

Every response is decoded with the JSON parser and validated into
``ReleaseInfo`` / ``AssetInfo``.  A missing or mistyped required field is an
``APIError`` carrying the raw body.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import ValidationError

from femtorelease.core.errors import APIError
from femtorelease.models.release import AssetInfo, ReleaseInfo

# RFC 6570 query expansion on upload_url, e.g. "{?name,label}"
_URI_TEMPLATE_SUFFIX = re.compile(r"\{[^}]*\}$")


def decode_json(body: str) -> Any:
    """Decode a response body, raising ``APIError`` on invalid JSON."""
    try:
        return json.loads(body)
    except (TypeError, ValueError) as exc:
        raise APIError(f"Response is not valid JSON: {exc}", body=str(body)) from exc


def _payload(body: str | bytes | dict | list) -> tuple[Any, str]:
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        return decode_json(body), body
    return body, json.dumps(body)


def upload_endpoint(upload_url: str) -> str:
    """Strip the URI template suffix from a release's ``upload_url``."""
    return _URI_TEMPLATE_SUFFIX.sub("", upload_url)


def parse_release(body: str | bytes | dict) -> ReleaseInfo:
    """Extract the release id and upload endpoint from a release response."""
    payload, raw = _payload(body)
    if not isinstance(payload, dict):
        raise APIError("Release response is not a JSON object", body=raw)
    missing = [f for f in ("id", "upload_url") if not payload.get(f)]
    if missing:
        raise APIError(
            f"Release response is missing required field(s): {', '.join(missing)}",
            body=raw,
            hint="Check that the token is valid and has the 'repo' scope.",
        )
    try:
        info = ReleaseInfo.model_validate(payload)
    except ValidationError as exc:
        raise APIError(f"Release response has unexpected shape: {exc}", body=raw) from exc
    return info.model_copy(update={"upload_url": upload_endpoint(info.upload_url)})


def parse_assets(body: str | bytes | list) -> list[AssetInfo]:
    """Parse a release's asset list into ``AssetInfo`` entries."""
    payload, raw = _payload(body)
    if not isinstance(payload, list):
        raise APIError("Asset list response is not a JSON array", body=raw)
    try:
        return [AssetInfo.model_validate(item) for item in payload]
    except ValidationError as exc:
        raise APIError(f"Asset list entry is missing id/name: {exc}", body=raw) from exc


def find_asset_id(assets: list[AssetInfo], name: str) -> int | None:
    """Return the id of the asset named exactly *name*, if present."""
    for asset in assets:
        if asset.name == name:
            return asset.id
    return None


def parse_asset(body: str | bytes | dict) -> AssetInfo:
    """Parse a single asset object, e.g. an upload response."""
    payload, raw = _payload(body)
    if not isinstance(payload, dict):
        raise APIError("Asset response is not a JSON object", body=raw)
    try:
        return AssetInfo.model_validate(payload)
    except ValidationError as exc:
        raise APIError(f"Asset response is missing id/name: {exc}", body=raw) from exc
