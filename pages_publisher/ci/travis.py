"""Travis CI environment."""

from pydantic import Field

from pages_publisher.ci.base import CIContext, CIEnvironment, OptionalSecret
from pages_publisher.ci.manifest import CIManifest
from pages_publisher.models.request import CommitterIdentity

TRAVIS_IDENTITY = CommitterIdentity(name="Travis", email="travis@travis-ci.org")


class TravisEnvironment(CIEnvironment):
    """Variables set by Travis CI for every job."""

    pull_request: str = Field(default="", alias="TRAVIS_PULL_REQUEST")
    build_number: str = Field(default="unknown", alias="TRAVIS_BUILD_NUMBER")
    token: OptionalSecret = Field(default=None, alias="GH_TOKEN")

    def to_context(self) -> CIContext:
        """Travis sets TRAVIS_PULL_REQUEST to the PR number, or "false".

        Anything else, including a missing variable, counts as a pull request.
        """
        return CIContext(
            name="Travis",
            is_pull_request=self.pull_request != "false",
            build_identifier=self.build_number,
            credential=self.token,
            committer=TRAVIS_IDENTITY,
        )


travis_manifest = CIManifest(environment_cls=TravisEnvironment, marker="TRAVIS")
