"""Publish a build output directory as one new commit on the pages branch."""

import logging
import tempfile
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import SecretStr

from pages_publisher.errors import (
    AcquisitionError,
    GitCommandError,
    MissingCredentialError,
    MissingOutputError,
    PushRejectedError,
)
from pages_publisher.gate import PublishGate, deny_pull_requests
from pages_publisher.git import GitClient, build_remote_url
from pages_publisher.models.request import PublishRequest
from pages_publisher.models.result import PublishResult
from pages_publisher.sync import mirror

log = logging.getLogger(__name__)


def check_source_directory(source_directory: Path) -> None:
    """Ensure the build step left something to publish.

    Raises:
        MissingOutputError: If the directory is absent, not a directory or empty.

    """
    if not source_directory.is_dir():
        raise MissingOutputError(
            f"Build output directory does not exist: {source_directory}"
        )
    if not any(source_directory.iterdir()):
        raise MissingOutputError(
            f"Build output directory is empty: {source_directory}"
        )


def require_credential(request: PublishRequest) -> SecretStr:
    """Return the push credential, refusing blank ones.

    Raises:
        MissingCredentialError: If no usable credential was provided.

    """
    credential = request.credential
    if credential is None or not credential.get_secret_value().strip():
        raise MissingCredentialError(
            f"A push credential is required to publish to {request.target_repository}"
        )
    return credential


@dataclass(frozen=True, kw_only=True)
class Publisher:
    """Turns a build output directory into a single commit on a remote branch.

    Steps run strictly in order: gate, preconditions, shallow acquisition,
    mirror, commit, push. Nothing remote changes before the push, so any
    earlier failure leaves the target repository untouched.
    """

    git: GitClient = field(default_factory=GitClient)
    gate: PublishGate = deny_pull_requests
    work_dir: Path | None = None

    async def publish(self, request: PublishRequest) -> PublishResult:
        """Publish the request's build output.

        Returns:
            A ``published`` result with the new commit, or ``skipped`` when the
            gate refused the request.

        Raises:
            MissingOutputError: If the build output is absent or empty
            MissingCredentialError: If no push credential is available
            AcquisitionError: If the target branch could not be cloned
            SyncError: If the build output could not be mirrored
            GitCommandError: If staging or committing failed
            PushRejectedError: If the remote refused the push

        """
        repository = request.target_repository
        branch = request.target_branch

        if not self.gate(request):
            log.info("Pull request context, skipping publish to %s", repository)
            return PublishResult(
                status="skipped",
                repository=repository,
                branch=branch,
                reason="pull request context",
            )

        check_source_directory(request.source_directory)
        credential = require_credential(request)

        url = build_remote_url(request.remote_base_url, repository, credential)
        display_url = build_remote_url(request.remote_base_url, repository)
        log.info(
            "Publishing %s to %s (%s)", request.source_directory, display_url, branch
        )

        async with self._workspace() as worktree:
            try:
                tip = await self.git.remote_branch_tip(url, branch)
                if tip is None:
                    log.info("Branch %s does not exist yet, starting it", branch)
                    await self.git.init_orphan(url, branch, worktree)
                else:
                    log.info("Cloning %s at %s", branch, tip[:7])
                    await self.git.clone_shallow(url, branch, worktree)
            except GitCommandError as e:
                raise AcquisitionError(
                    f"Failed to acquire branch {branch} of {display_url}: {e.stderr}"
                ) from e

            try:
                stats = await mirror(request.source_directory, worktree)

                await self.git.stage_all(worktree)
                message = request.render_commit_message()
                commit_sha = await self.git.commit(
                    worktree, message, request.committer
                )
                log.info("Created commit %s: %s", commit_sha[:7], message)

                try:
                    await self.git.push(
                        worktree, branch, mode=request.push_mode, expected_tip=tip
                    )
                except GitCommandError as e:
                    raise PushRejectedError(
                        f"Push to {branch} of {display_url} was rejected: {e.stderr}"
                    ) from e
            finally:
                # the working copy may outlive the run when work_dir is set
                await self.git.set_remote_url(worktree, display_url)

        log.info("Published build %s to %s", request.build_identifier, branch)
        return PublishResult(
            status="published",
            repository=repository,
            branch=branch,
            commit_sha=commit_sha,
            created_branch=tip is None,
            sync=stats,
        )

    @asynccontextmanager
    async def _workspace(self) -> AsyncGenerator[Path, None]:
        """Yield an empty directory to hold the working copy."""
        if self.work_dir is not None:
            if self.work_dir.exists() and not self.work_dir.is_dir():
                raise AcquisitionError(
                    f"Work directory is not a directory: {self.work_dir}"
                )
            if self.work_dir.exists() and any(self.work_dir.iterdir()):
                raise AcquisitionError(f"Work directory is not empty: {self.work_dir}")
            yield self.work_dir
            return

        with tempfile.TemporaryDirectory(prefix="pages-publish-") as tmp:
            yield Path(tmp) / "build"


async def publish(request: PublishRequest) -> PublishResult:
    """Publish with the default git client and pull request gate."""
    return await Publisher().publish(request)
