"""femtorelease: release automation for the femtobot single-binary app.

Cross-compiles the binary for a fixed set of OS/architecture targets,
writes SHA-256 sidecars and idempotently publishes everything as assets of
a ``v<version>`` release.
"""

__version__ = "0.1.0"

from femtorelease.core.build_matrix import BuildMatrixOrchestrator
from femtorelease.core.publisher import ReleasePublisher
from femtorelease.cli.app import app as cli

__all__ = ["BuildMatrixOrchestrator", "ReleasePublisher", "cli", "__version__"]
