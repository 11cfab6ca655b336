"""Models describing a single publish attempt."""

from pathlib import Path
from typing import Annotated, Literal

from pydantic import AfterValidator, Field, SecretStr

from pages_publisher.models.base import Model

DEFAULT_COMMIT_MESSAGE = "{ci_name} build {build_identifier} pushed to GitHub Pages"

type PushMode = Literal["force", "lease"]


def _reject_dot_segments(value: str) -> str:
    # "." and ".." would resolve outside a local directory of repositories
    if any(not part.strip(".") for part in value.split("/")):
        raise ValueError(f"{value!r} has an owner or name made only of dots")
    return value


def _check_commit_template(value: str) -> str:
    try:
        value.format(ci_name="", build_identifier="")
    except (AttributeError, IndexError, KeyError, ValueError) as e:
        raise ValueError(
            f"Commit message template {value!r} cannot be formatted: {e!r}. "
            "Available fields are {ci_name} and {build_identifier}"
        ) from e
    return value


RepositoryName = Annotated[
    str,
    Field(pattern=r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$"),
    AfterValidator(_reject_dot_segments),
]
CommitTemplate = Annotated[str, AfterValidator(_check_commit_template)]


class CommitterIdentity(Model):
    """Author and committer identity used for the publish commit."""

    name: str = Field(..., min_length=1, description="Committer name")
    email: str = Field(..., min_length=1, description="Committer email")


class PublishRequest(Model):
    """Everything needed to publish one build to the pages branch.

    A request is built fresh for each CI run and used exactly once.
    """

    source_directory: Path = Field(
        ..., description="Directory holding the already-built static output"
    )
    target_repository: RepositoryName = Field(
        ..., description="Hosting repository in owner/name format"
    )
    target_branch: str = Field(default="master", min_length=1)
    credential: SecretStr | None = Field(
        default=None, description="Token authorizing the push"
    )
    is_pull_request_context: bool = Field(
        default=False,
        description="Whether the run was triggered by an untrusted pull request",
    )
    build_identifier: str = Field(..., description="Label embedded in the commit")
    ci_name: str = Field(default="Local", description="CI system label")
    committer: CommitterIdentity | None = None
    remote_base_url: str = Field(
        default="https://github.com",
        description="Hosting base URL, or a local directory of bare repositories",
    )
    commit_message: CommitTemplate = DEFAULT_COMMIT_MESSAGE
    push_mode: PushMode = "force"

    def render_commit_message(self) -> str:
        """Format the commit message template for this build."""
        return self.commit_message.format(
            ci_name=self.ci_name,
            build_identifier=self.build_identifier,
        )
