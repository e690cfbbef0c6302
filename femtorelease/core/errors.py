"""Error taxonomy for the release pipeline.

Every fatal path carries a human-readable cause and, where one exists, a
remediation ``hint`` (install command, environment variable, URL).  The CLI
is the single place that turns these into a nonzero exit.

- ``ConfigurationError`` : missing or invalid input (version, token, target).
- ``ToolchainError``     : compiler / cross-toolchain binaries not installed.
- ``BuildFailure``       : build invocation failed or produced no output.
- ``APIError``           : error or malformed response from the release host.
- ``LocalAssetMissing``  : expected local file absent at publish time.
  Recoverable: the publisher logs it and skips the asset.
"""

from __future__ import annotations


class ReleaseError(RuntimeError):
    """Base class for all release pipeline errors.

    Parameters
    ----------
    message:
        Human-readable cause.
    hint:
        Optional remediation shown to the user after the cause.
    """

    def __init__(self, message: str, *, hint: str = "") -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(ReleaseError):
    """Raised when required configuration or input is missing or invalid."""


class ToolchainError(ReleaseError):
    """Raised when a required compiler or cross-toolchain binary is missing."""


class BuildFailure(ReleaseError):
    """Raised when a target build exits nonzero or its output is missing."""


class APIError(ReleaseError):
    """Raised on an error or malformed response from the release host.

    The raw response body is kept for diagnosis.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str = "",
        hint: str = "",
    ) -> None:
        super().__init__(message, hint=hint)
        self.status_code = status_code
        self.body = body


class LocalAssetMissing(ReleaseError):
    """Raised when a file of the desired asset set is absent from disk."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Local asset not found: {name}")
        self.name = name


class InvalidTransitionError(ReleaseError):
    """Raised when the publish state machine is asked for an illegal move."""
