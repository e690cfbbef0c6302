"""Shared test fixtures for femtorelease.

Two fakes stand in for the outside world:

- ``FakeRunner``: scripted cargo/rustup/strip; ``cargo build`` writes a fake
  binary where cargo would.
- ``FakeReleaseHost``: an in-memory release-hosting API exposing the
  ``requests.Session.request`` signature.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import pytest

from femtorelease.core.build_matrix import BuildMatrixOrchestrator
from femtorelease.core.github_client import ReleaseClient
from femtorelease.core.publisher import ReleasePublisher
from femtorelease.core.toolchain import CommandResult, ToolchainProbe

API_URL = "https://api.example.test"
UPLOAD_HOST = "https://uploads.example.test"
REPO = "owner/femtobot"
WEB_BASE = f"https://example.test/{REPO}/releases"

ALL_TOOLS = {
    "cargo",
    "rustup",
    "strip",
    "aarch64-linux-gnu-gcc",
    "aarch64-linux-gnu-ar",
    "aarch64-linux-gnu-strip",
}

ALL_TRIPLES = {
    "x86_64-unknown-linux-gnu",
    "aarch64-unknown-linux-gnu",
    "x86_64-apple-darwin",
    "aarch64-apple-darwin",
}


# ---------------------------------------------------------------------------
# Command runner fake
# ---------------------------------------------------------------------------


class FakeRunner:
    """Records commands and simulates cargo, rustup and strip."""

    def __init__(
        self,
        project: str = "femtobot",
        *,
        installed_targets: set[str] | None = None,
        fail_build: set[str] | None = None,
        skip_output: set[str] | None = None,
        strip_returncode: int = 0,
    ) -> None:
        self.project = project
        self.installed_targets = set(ALL_TRIPLES if installed_targets is None else installed_targets)
        self.fail_build = fail_build or set()
        self.skip_output = skip_output or set()
        self.strip_returncode = strip_returncode
        self.calls: list[dict[str, Any]] = []

    def run(
        self,
        args: list[str],
        *,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
        capture: bool = False,
    ) -> CommandResult:
        self.calls.append({"args": list(args), "env": dict(env or {}), "cwd": cwd})
        if args[:4] == ["rustup", "target", "list", "--installed"]:
            out = "\n".join(sorted(self.installed_targets)) + "\n"
            return CommandResult(args=args, returncode=0, stdout=out)
        if args[:3] == ["rustup", "target", "add"]:
            self.installed_targets.add(args[3])
            return CommandResult(args=args, returncode=0)
        if args[:2] == ["cargo", "build"]:
            triple = args[args.index("--target") + 1]
            if triple in self.fail_build:
                return CommandResult(args=args, returncode=101, stderr="error[E0425]")
            if triple not in self.skip_output:
                out = Path(cwd or ".") / "target" / triple / "release" / self.project
                out.parent.mkdir(parents=True, exist_ok=True)
                out.write_bytes(f"ELF:{triple}".encode())
            return CommandResult(args=args, returncode=0)
        if args[0].endswith("strip"):
            return CommandResult(args=args, returncode=self.strip_returncode)
        return CommandResult(args=args, returncode=127, stderr=f"unknown command {args[0]}")

    def commands(self, prefix: str) -> list[list[str]]:
        return [c["args"] for c in self.calls if c["args"][0] == prefix]

    def builds(self) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["args"][:2] == ["cargo", "build"]]


def make_which(available: set[str]) -> Callable[[str], str | None]:
    def _which(name: str) -> str | None:
        return f"/usr/bin/{name}" if name in available else None

    return _which


# ---------------------------------------------------------------------------
# Release host fake
# ---------------------------------------------------------------------------


class FakeResponse:
    """The subset of ``requests.Response`` the client reads."""

    def __init__(self, status_code: int, payload: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self.text = text if text is not None else ("" if payload is None else json.dumps(payload))

    def json(self) -> Any:
        return json.loads(self.text)


class FakeReleaseHost:
    """In-memory release host keyed by tag, with per-release asset lists."""

    def __init__(self, repo: str = REPO) -> None:
        self.repo = repo
        self.releases: dict[str, dict[str, Any]] = {}
        self.assets: dict[int, list[dict[str, Any]]] = {}
        self.blobs: dict[int, bytes] = {}
        self.requests: list[dict[str, Any]] = []
        self.fail_next: dict[str, FakeResponse] = {}
        self._next_id = 1000

    # -- setup helpers --------------------------------------------------

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def add_release(self, tag: str, **fields: Any) -> dict[str, Any]:
        release_id = self._new_id()
        release = {
            "id": release_id,
            "tag_name": tag,
            "name": tag,
            "draft": False,
            "prerelease": False,
            "upload_url": f"{UPLOAD_HOST}/repos/{self.repo}/releases/{release_id}/assets{{?name,label}}",
            "html_url": f"https://example.test/{self.repo}/releases/tag/{tag}",
        }
        release.update(fields)
        self.releases[tag] = release
        self.assets[release_id] = []
        return release

    def add_asset(self, tag: str, name: str, data: bytes = b"old") -> dict[str, Any]:
        release_id = self.releases[tag]["id"]
        asset = {"id": self._new_id(), "name": name, "size": len(data)}
        self.assets[release_id].append(asset)
        self.blobs[asset["id"]] = data
        return asset

    def asset_names(self, tag: str) -> list[str]:
        return [a["name"] for a in self.assets[self.releases[tag]["id"]]]

    def respond_once(self, method: str, path: str, status: int, payload: Any = None) -> None:
        """Answer the next *method* request to *path* with a canned response."""
        self.fail_next[f"{method} {path}"] = FakeResponse(status, payload)

    def calls(self, method: str) -> list[dict[str, Any]]:
        return [r for r in self.requests if r["method"] == method]

    # -- requests.Session API -------------------------------------------

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: bytes | None = None,
    ) -> FakeResponse:
        path = urlsplit(url).path
        self.requests.append(
            {"method": method, "url": url, "path": path, "headers": headers or {},
             "params": params or {}, "json": json, "data": data}
        )
        key = f"{method} {path}"
        if key in self.fail_next:
            return self.fail_next.pop(key)

        prefix = f"/repos/{self.repo}"
        if method == "GET" and (m := re.fullmatch(rf"{prefix}/releases/tags/(.+)", path)):
            release = self.releases.get(m.group(1))
            if release is None:
                return FakeResponse(404, {"message": "Not Found"})
            return FakeResponse(200, release)
        if method == "POST" and path == f"{prefix}/releases":
            if json["tag_name"] in self.releases:
                return FakeResponse(422, {"message": "Validation Failed"})
            release = self.add_release(
                json["tag_name"], name=json["name"], body=json["body"],
                draft=json["draft"], prerelease=json["prerelease"],
            )
            return FakeResponse(201, release)
        if method == "GET" and (m := re.fullmatch(rf"{prefix}/releases/(\d+)/assets", path)):
            return FakeResponse(200, self.assets.get(int(m.group(1)), []))
        if method == "DELETE" and (m := re.fullmatch(rf"{prefix}/releases/assets/(\d+)", path)):
            asset_id = int(m.group(1))
            for assets in self.assets.values():
                for asset in assets:
                    if asset["id"] == asset_id:
                        assets.remove(asset)
                        self.blobs.pop(asset_id, None)
                        return FakeResponse(204)
            return FakeResponse(404, {"message": "Not Found"})
        if method == "POST" and (m := re.fullmatch(rf"{prefix}/releases/(\d+)/assets", path)):
            release_id = int(m.group(1))
            name = (params or {}).get("name")
            if any(a["name"] == name for a in self.assets[release_id]):
                return FakeResponse(422, {"message": "already_exists"})
            asset = {"id": self._new_id(), "name": name, "size": len(data or b"")}
            self.assets[release_id].append(asset)
            self.blobs[asset["id"]] = data or b""
            return FakeResponse(201, asset)
        return FakeResponse(404, {"message": f"no route for {key}"})


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test inside an empty working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_runner() -> type[FakeRunner]:
    """Factory fixture: build a FakeRunner with custom behaviour."""
    return FakeRunner


@pytest.fixture
def make_builder(workdir: Path) -> Callable[..., BuildMatrixOrchestrator]:
    """Factory fixture: a builder wired to a FakeRunner in ``workdir``."""

    def _factory(
        runner: FakeRunner | None = None,
        tools: set[str] | None = None,
        **kwargs: Any,
    ) -> BuildMatrixOrchestrator:
        runner = runner or FakeRunner()
        probe = ToolchainProbe(runner, which=make_which(ALL_TOOLS if tools is None else tools))
        defaults: dict[str, Any] = {
            "output_dir": workdir,
            "project_dir": workdir,
            "runner": runner,
            "probe": probe,
            "base_env": {"PATH": "/usr/bin"},
        }
        defaults.update(kwargs)
        return BuildMatrixOrchestrator("femtobot", **defaults)

    return _factory


@pytest.fixture
def release_host() -> FakeReleaseHost:
    return FakeReleaseHost()


@pytest.fixture
def client(release_host: FakeReleaseHost) -> ReleaseClient:
    return ReleaseClient(REPO, "test-token", api_url=API_URL, session=release_host)


@pytest.fixture
def publisher(client: ReleaseClient) -> ReleasePublisher:
    return ReleasePublisher(client, "femtobot", WEB_BASE)


@pytest.fixture
def which_for() -> Callable[[set[str]], Callable[[str], str | None]]:
    """Factory fixture: a ``shutil.which`` stand-in knowing only *available*."""
    return make_which
