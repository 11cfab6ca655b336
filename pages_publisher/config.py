"""Publisher configuration loaded from YAML and command-line overrides."""

import asyncio
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ConfigDict, Field, ValidationError

from pages_publisher.ci.base import CIContext
from pages_publisher.errors import ConfigError
from pages_publisher.models.base import Model
from pages_publisher.models.request import (
    DEFAULT_COMMIT_MESSAGE,
    CommitTemplate,
    PublishRequest,
    PushMode,
    RepositoryName,
)


class PublisherConfig(Model):
    """Where to publish from and to.

    Secrets never live here, they come from the CI environment.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    target_repository: RepositoryName = Field(
        ..., description="Hosting repository in owner/name format"
    )
    target_branch: str = Field(default="master", min_length=1)
    source_directory: Path = Field(
        default=Path("result"), description="Build output directory"
    )
    remote_base_url: str = "https://github.com"
    commit_message: CommitTemplate = DEFAULT_COMMIT_MESSAGE
    push_mode: PushMode = "force"
    work_dir: Path | None = Field(
        default=None, description="Clone here instead of a temporary directory"
    )

    def to_request(self, context: CIContext) -> PublishRequest:
        """Combine the configuration with the current CI run."""
        return PublishRequest(
            source_directory=self.source_directory,
            target_repository=self.target_repository,
            target_branch=self.target_branch,
            credential=context.credential,
            is_pull_request_context=context.is_pull_request,
            build_identifier=context.build_identifier,
            ci_name=context.name,
            committer=context.committer,
            remote_base_url=self.remote_base_url,
            commit_message=self.commit_message,
            push_mode=self.push_mode,
        )


async def load_config(
    path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> PublisherConfig:
    """Load configuration from an optional YAML file.

    Overrides whose value is None are ignored, so unset command-line flags
    leave the file's values in place.

    Raises:
        ConfigError: If the file is missing, malformed or invalid.

    """
    data: dict[str, Any] = {}

    if path is not None:
        try:
            content = await asyncio.to_thread(path.read_text)
            loaded = yaml.safe_load(content)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e

        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        data.update(loaded or {})

    data.update(
        (key, value) for key, value in (overrides or {}).items() if value is not None
    )

    try:
        return PublisherConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
