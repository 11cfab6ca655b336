"""Loading of CI providers from entry points."""

import logging
from collections.abc import Mapping
from importlib.metadata import entry_points
from typing import Any

from pages_publisher.ci.manifest import CIManifest

ENTRY_POINT_GROUP = "pages_publisher.ci"
FALLBACK_PROVIDER = "local"

log = logging.getLogger(__name__)


class CIProviderNotFoundError(Exception):
    """Raised when a CI provider is not found."""


def load_ci_manifest(key: str) -> CIManifest[Any]:
    """Load a CI provider manifest by key.

    Args:
        key: The provider key as registered in pyproject.toml
             (e.g., "travis", "github-actions")

    Returns:
        The provider manifest instance

    Raises:
        CIProviderNotFoundError: If no provider with the given key is found

    """
    entries = entry_points(group=ENTRY_POINT_GROUP)

    for entry in entries:
        if entry.name == key:
            manifest: CIManifest[Any] = entry.load()
            return manifest

    available = [e.name for e in entries]
    raise CIProviderNotFoundError(
        f"CI provider '{key}' not found. Available providers: {available}"
    )


def detect_ci(environ: Mapping[str, str]) -> tuple[str, CIManifest[Any]]:
    """Find the provider matching the environment, falling back to local.

    Returns:
        The provider key and its manifest

    """
    for entry in sorted(entry_points(group=ENTRY_POINT_GROUP), key=lambda e: e.name):
        manifest: CIManifest[Any] = entry.load()
        if manifest.detect(environ):
            log.info("Detected CI provider: %s", entry.name)
            return entry.name, manifest

    log.info("No CI provider detected, using %s", FALLBACK_PROVIDER)
    return FALLBACK_PROVIDER, load_ci_manifest(FALLBACK_PROVIDER)
