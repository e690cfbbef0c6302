"""Tests for the Release Publisher: resolve/create, reconcile, idempotency."""

from __future__ import annotations

import logging

import pytest

from femtorelease.core.errors import APIError
from femtorelease.core.publisher import (
    build_release_request,
    is_prerelease,
    release_tag,
)
from femtorelease.models.release import AssetAction, PublishState


@pytest.fixture
def local_assets(workdir):
    """Two artifacts and their sidecars on disk."""
    paths = []
    for name in ("femtobot-linux-x86_64", "femtobot-darwin-aarch64"):
        artifact = workdir / name
        artifact.write_bytes(f"binary {name}".encode())
        sidecar = workdir / f"{name}.sha256"
        sidecar.write_text(f"{name}: {'0' * 64}\n")
        paths += [artifact, sidecar]
    return paths


# ---------------------------------------------------------------------------
# Test: release request fields
# ---------------------------------------------------------------------------


class TestReleaseRequest:
    """Tag, display name, body and prerelease flag for a new release."""

    @pytest.mark.parametrize(
        ("version", "expected"),
        [("1.0.0", False), ("1.0.0-rc1", True), ("0.1.0", False), ("2.0.0-beta.2", True)],
    )
    def test_prerelease_detection(self, version, expected):
        assert is_prerelease(version) is expected
        assert build_release_request("femtobot", version).prerelease is expected

    def test_request_fields(self):
        request = build_release_request("femtobot", "0.2.0")
        assert release_tag("0.2.0") == "v0.2.0"
        assert request.tag_name == "v0.2.0"
        assert request.name == "v0.2.0"
        assert request.draft is False
        assert request.body.startswith("femtobot v0.2.0\n\n")
        assert "macOS" in request.body


# ---------------------------------------------------------------------------
# Test: resolve or create
# ---------------------------------------------------------------------------


class TestResolveOrCreate:
    """An existing release for the tag is reused; otherwise one is created."""

    def test_creates_missing_release(self, publisher, release_host, local_assets):
        report = publisher.publish("1.0.0", local_assets)
        assert report.created is True
        assert list(release_host.releases) == ["v1.0.0"]
        assert release_host.releases["v1.0.0"]["prerelease"] is False
        assert [t.to_state for t in report.transitions] == [
            PublishState.CREATE,
            PublishState.VALIDATE,
            PublishState.RECONCILE,
            PublishState.DONE,
        ]

    def test_creates_prerelease(self, publisher, release_host, local_assets):
        report = publisher.publish("1.0.0-rc1", local_assets)
        assert release_host.releases["v1.0.0-rc1"]["prerelease"] is True
        assert report.prerelease is True

    def test_reuses_existing_release(self, publisher, release_host, local_assets):
        existing = release_host.add_release("v1.0.0")
        report = publisher.publish("1.0.0", local_assets)
        assert report.created is False
        assert report.release_id == existing["id"]
        assert release_host.calls("POST")[0]["path"].endswith("/assets")
        assert not any(
            r["path"] == "/repos/owner/femtobot/releases" for r in release_host.calls("POST")
        )
        assert PublishState.CREATE not in [t.to_state for t in report.transitions]

    def test_location(self, publisher, release_host, local_assets):
        report = publisher.publish("1.0.0", local_assets)
        assert report.location == "https://example.test/owner/femtobot/releases/tag/v1.0.0"

    def test_location_falls_back_to_web_base(self, publisher, release_host, local_assets):
        release_host.add_release("v1.0.0", html_url="")
        report = publisher.publish("1.0.0", local_assets)
        assert report.location == "https://example.test/owner/femtobot/releases/tag/v1.0.0"


# ---------------------------------------------------------------------------
# Test: validate
# ---------------------------------------------------------------------------


class TestValidate:
    """A release without an id or upload endpoint stops the run."""

    def test_missing_upload_url_is_fatal(self, publisher, release_host, local_assets):
        release_host.respond_once(
            "POST", "/repos/owner/femtobot/releases", 201, {"id": 5, "tag_name": "v1.0.0"}
        )
        with pytest.raises(APIError) as excinfo:
            publisher.publish("1.0.0", local_assets)
        assert "upload_url" in str(excinfo.value)
        # Nothing was uploaded
        assert not any(r["path"].endswith("/assets") for r in release_host.calls("POST"))

    def test_create_rejected_is_fatal(self, publisher, release_host, local_assets):
        release_host.respond_once(
            "POST", "/repos/owner/femtobot/releases", 403, {"message": "Resource not accessible"}
        )
        with pytest.raises(APIError) as excinfo:
            publisher.publish("1.0.0", local_assets)
        assert excinfo.value.status_code == 403
        assert "Resource not accessible" in excinfo.value.body


# ---------------------------------------------------------------------------
# Test: reconcile assets
# ---------------------------------------------------------------------------


class TestReconcile:
    """Same-named assets are deleted before upload; missing files are skipped."""

    def test_uploads_every_local_file(self, publisher, release_host, local_assets):
        report = publisher.publish("1.0.0", local_assets)
        assert sorted(release_host.asset_names("v1.0.0")) == sorted(p.name for p in local_assets)
        assert all(a.action is AssetAction.UPLOADED for a in report.assets)
        assert report.uploaded_count == 4

    def test_replaces_same_named_asset(self, publisher, release_host, workdir):
        release_host.add_release("v1.0.0")
        old = release_host.add_asset("v1.0.0", "femtobot-linux-x86_64", b"old bytes")
        path = workdir / "femtobot-linux-x86_64"
        path.write_bytes(b"new bytes")

        report = publisher.publish("1.0.0", [path])

        (outcome,) = report.assets
        assert outcome.action is AssetAction.REPLACED
        assert outcome.replaced_asset_id == old["id"]
        methods = [
            (r["method"], r["path"].rsplit("/", 2)[-2:])
            for r in release_host.requests
            if r["method"] in ("DELETE", "POST")
        ]
        # Delete happens before the upload
        assert methods[0][0] == "DELETE"
        assert methods[1][0] == "POST"
        assets = release_host.assets[release_host.releases["v1.0.0"]["id"]]
        assert [a["name"] for a in assets] == ["femtobot-linux-x86_64"]
        assert release_host.blobs[assets[0]["id"]] == b"new bytes"

    def test_other_assets_untouched(self, publisher, release_host, workdir):
        release_host.add_release("v1.0.0")
        release_host.add_asset("v1.0.0", "femtobot-linux-aarch64")
        path = workdir / "femtobot-linux-x86_64"
        path.write_bytes(b"x")
        publisher.publish("1.0.0", [path])
        assert release_host.calls("DELETE") == []
        assert sorted(release_host.asset_names("v1.0.0")) == [
            "femtobot-linux-aarch64",
            "femtobot-linux-x86_64",
        ]

    def test_missing_local_file_is_skipped_with_warning(
        self, publisher, release_host, local_assets, workdir, caplog
    ):
        missing = workdir / "femtobot-darwin-x86_64"
        with caplog.at_level(logging.WARNING, logger="femtorelease"):
            report = publisher.publish("1.0.0", [*local_assets, missing])
        assert report.skipped == ["femtobot-darwin-x86_64"]
        assert "femtobot-darwin-x86_64" in caplog.text
        assert "femtobot-darwin-x86_64" not in release_host.asset_names("v1.0.0")
        assert report.uploaded_count == 4

    def test_upload_failure_aborts(self, publisher, release_host, local_assets):
        release = release_host.add_release("v1.0.0")
        release_host.respond_once(
            "POST",
            f"/repos/owner/femtobot/releases/{release['id']}/assets",
            500,
            {"message": "Server Error"},
        )
        with pytest.raises(APIError):
            publisher.publish("1.0.0", local_assets)
        # The first upload failed, so the run stopped there
        assert release_host.asset_names("v1.0.0") == []


# ---------------------------------------------------------------------------
# Test: reruns
# ---------------------------------------------------------------------------


class TestIdempotency:
    """Publishing twice leaves one release with one asset per name."""

    def test_publish_twice_converges(self, publisher, release_host, local_assets):
        first = publisher.publish("1.0.0", local_assets)
        second = publisher.publish("1.0.0", local_assets)

        assert list(release_host.releases) == ["v1.0.0"]
        assert first.release_id == second.release_id
        assert second.created is False
        names = release_host.asset_names("v1.0.0")
        assert sorted(names) == sorted(p.name for p in local_assets)
        assert len(names) == len(set(names))
        assert all(a.action is AssetAction.REPLACED for a in second.assets)
