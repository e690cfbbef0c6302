"""Release configuration: env-driven.

Centralized settings using pydantic-settings.  Reads from a ``.env`` file and
``FEMTORELEASE_*`` environment variables.  The access token is read from the
conventional ``GITHUB_TOKEN`` variable, and the bare ``REPO`` variable is
honoured for the repository slug.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from femtorelease.core.errors import ConfigurationError

TOKEN_URL = "https://github.com/settings/tokens"


class ReleaseSettings(BaseSettings):
    """Release settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export GITHUB_TOKEN=ghp_xxx
        export FEMTORELEASE_REPO=someone/femtobot
        export FEMTORELEASE_LOG_LEVEL=DEBUG

    Or via .env file::

        FEMTORELEASE_OUTPUT_DIR=dist
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FEMTORELEASE_",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Project being released
    project_name: str = "femtobot"
    repo: str = Field(
        "enzofrasca/femtobot",
        validation_alias=AliasChoices("FEMTORELEASE_REPO", "REPO", "repo"),
    )
    default_version: str = "0.1.0"

    # Release host
    api_url: str = "https://api.github.com"
    web_url: str = "https://github.com"
    token: str = Field(
        "",
        validation_alias=AliasChoices("GITHUB_TOKEN", "FEMTORELEASE_TOKEN", "token"),
    )
    # None means block forever, matching curl's default.
    http_timeout: float | None = None

    # Local layout
    output_dir: Path = Path(".")
    cargo_target_dir: Path = Path("target")

    log_level: str = "INFO"

    def require_token(self) -> str:
        """Return the access token or fail with a setup hint."""
        if not self.token:
            raise ConfigurationError(
                "GITHUB_TOKEN environment variable not set",
                hint=f"Get a token from: {TOKEN_URL}\nRequired scopes: repo",
            )
        return self.token

    @property
    def release_web_base(self) -> str:
        """Browser URL of the repository's releases page."""
        return f"{self.web_url.rstrip('/')}/{self.repo}/releases"


def load_settings() -> ReleaseSettings:
    """Read ``ReleaseSettings``, reporting bad values as ``ConfigurationError``."""
    try:
        return ReleaseSettings()
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        details = "\n".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigurationError(
            f"Invalid configuration: {', '.join(fields) or 'settings'}",
            hint=f"{details}\nCheck the FEMTORELEASE_* environment variables and .env.",
        ) from exc
