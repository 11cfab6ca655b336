"""Abstract base for CI environment models."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Annotated, Any, Self

from pydantic import BeforeValidator, ConfigDict, SecretStr

from pages_publisher.models.base import Model
from pages_publisher.models.request import CommitterIdentity


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


OptionalSecret = Annotated[SecretStr | None, BeforeValidator(_blank_to_none)]


class CIContext(Model):
    """What the publisher needs to know about the current CI run."""

    name: str
    is_pull_request: bool
    build_identifier: str
    credential: SecretStr | None = None
    committer: CommitterIdentity | None = None


class CIEnvironment(Model, ABC):
    """Environment variables exposed by a CI system.

    Subclasses declare fields aliased to the variable names they read and
    translate them into a ``CIContext``.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> Self:
        """Build the model from a process environment mapping."""
        return cls.model_validate(dict(environ))

    @abstractmethod
    def to_context(self) -> CIContext:
        """Translate the environment into a CI context."""
