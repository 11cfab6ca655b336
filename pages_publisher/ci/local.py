"""Environment for runs outside any CI system."""

from pydantic import Field

from pages_publisher.ci.base import CIContext, CIEnvironment, OptionalSecret
from pages_publisher.ci.manifest import CIManifest


class LocalEnvironment(CIEnvironment):
    """Manual runs use the developer's own git identity."""

    build_id: str = Field(default="local", alias="PAGES_BUILD_ID")
    token: OptionalSecret = Field(default=None, alias="GH_TOKEN")

    def to_context(self) -> CIContext:
        return CIContext(
            name="Local",
            is_pull_request=False,
            build_identifier=self.build_id,
            credential=self.token,
        )


local_manifest = CIManifest(environment_cls=LocalEnvironment)
