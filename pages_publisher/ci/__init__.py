"""CI environment providers."""

from pages_publisher.ci.base import CIContext, CIEnvironment
from pages_publisher.ci.loading import (
    CIProviderNotFoundError,
    detect_ci,
    load_ci_manifest,
)
from pages_publisher.ci.manifest import CIManifest

__all__ = [
    "CIContext",
    "CIEnvironment",
    "CIManifest",
    "CIProviderNotFoundError",
    "detect_ci",
    "load_ci_manifest",
]
