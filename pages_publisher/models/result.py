"""Models for publish outcomes."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, kw_only=True)
class SyncStats:
    """Counts of what the mirror step did to the working copy."""

    copied: int = 0
    unchanged: int = 0
    deleted: int = 0


@dataclass(frozen=True, kw_only=True)
class PublishResult:
    """Result of a single publish attempt.

    Failures are raised as ``PublishError`` subclasses, so only the two
    successful outcomes are represented here.
    """

    status: Literal["published", "skipped"]
    repository: str
    branch: str
    commit_sha: str | None = None
    created_branch: bool = False
    sync: SyncStats | None = None
    reason: str | None = None
