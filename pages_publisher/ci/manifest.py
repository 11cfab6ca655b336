"""CI provider manifest definition for the plugin system."""

from collections.abc import Mapping
from dataclasses import dataclass

from pages_publisher.ci.base import CIContext, CIEnvironment


@dataclass(frozen=True, kw_only=True)
class CIManifest[EnvT: CIEnvironment]:
    """Manifest describing a CI provider plugin.

    The manifest references the environment model and the variable whose
    value ``true`` identifies the CI system during auto-detection. Providers
    without a marker are only used when selected explicitly or as fallback.
    """

    environment_cls: type[EnvT]
    marker: str | None = None

    def detect(self, environ: Mapping[str, str]) -> bool:
        """Check whether the environment belongs to this CI system."""
        if self.marker is None:
            return False
        return environ.get(self.marker, "").lower() == "true"

    def load_context(self, environ: Mapping[str, str]) -> CIContext:
        """Read the CI context from the environment."""
        return self.environment_cls.from_environ(environ).to_context()
