"""GitHub Actions environment."""

from pydantic import Field

from pages_publisher.ci.base import CIContext, CIEnvironment, OptionalSecret
from pages_publisher.ci.manifest import CIManifest
from pages_publisher.models.request import CommitterIdentity

GITHUB_ACTIONS_IDENTITY = CommitterIdentity(
    name="github-actions[bot]",
    email="41898282+github-actions[bot]@users.noreply.github.com",
)

# pull_request_target runs trusted workflow code, but the build output it
# publishes may come from the fork.
PULL_REQUEST_EVENTS = frozenset({"pull_request", "pull_request_target"})


class GitHubActionsEnvironment(CIEnvironment):
    """Variables set by GitHub Actions for every workflow run."""

    event_name: str = Field(default="", alias="GITHUB_EVENT_NAME")
    run_number: str = Field(default="unknown", alias="GITHUB_RUN_NUMBER")
    gh_token: OptionalSecret = Field(default=None, alias="GH_TOKEN")
    github_token: OptionalSecret = Field(default=None, alias="GITHUB_TOKEN")

    def to_context(self) -> CIContext:
        """Prefer GH_TOKEN, it can reach repositories other than this one."""
        return CIContext(
            name="GitHub Actions",
            is_pull_request=self.event_name in PULL_REQUEST_EVENTS,
            build_identifier=self.run_number,
            credential=(
                self.gh_token if self.gh_token is not None else self.github_token
            ),
            committer=GITHUB_ACTIONS_IDENTITY,
        )


github_actions_manifest = CIManifest(
    environment_cls=GitHubActionsEnvironment, marker="GITHUB_ACTIONS"
)
