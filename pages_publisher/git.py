"""Async wrapper around the git executable."""

import asyncio
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

from pydantic import SecretStr
from yarl import URL

from pages_publisher.errors import GitCommandError
from pages_publisher.models.request import CommitterIdentity, PushMode

log = logging.getLogger(__name__)

TOKEN_USER = "x-access-token"

_URL_USERINFO = re.compile(
    r"(?P<scheme>\b[a-z][a-z0-9+.-]*://)[^/@\s]+@", re.IGNORECASE
)


def mask_credentials(text: str) -> str:
    """Replace the userinfo part of every URL in text with ``***``."""
    return _URL_USERINFO.sub(r"\g<scheme>***@", text)


def build_remote_url(
    base_url: str,
    repository: str,
    credential: SecretStr | None = None,
) -> str:
    """Build the clone/push URL for an owner/name repository.

    HTTP(S) bases get the credential embedded as basic auth. Any other base is
    treated as a directory of bare repositories laid out as ``owner/name.git``
    and returned as a ``file://`` URL.
    """
    name = repository if repository.endswith(".git") else f"{repository}.git"
    owner, repo = name.split("/", 1)
    url = URL(base_url)

    if url.scheme in {"http", "https"}:
        url = url / owner / repo
        if credential is not None:
            url = url.with_user(TOKEN_USER).with_password(
                credential.get_secret_value()
            )
        return str(url)

    # file:// keeps --depth effective, plain local paths silently ignore it
    root = Path(url.path) if url.scheme == "file" else Path(base_url)
    return (root / owner / repo).absolute().as_uri()


@dataclass(frozen=True, kw_only=True)
class GitClient:
    """Runs the git commands needed to publish a working copy."""

    executable: str = "git"

    async def run(self, *args: str, cwd: Path | None = None) -> str:
        """Run git and return its stripped stdout.

        Raises:
            GitCommandError: If git exits non-zero. Credentials embedded in
                URLs are masked in both the command and stderr.

        """
        log.debug("Running: git %s", mask_credentials(" ".join(args)))
        process = await asyncio.create_subprocess_exec(
            self.executable,
            *args,
            cwd=cwd,
            env={**os.environ, "GIT_TERMINAL_PROMPT": "0"},
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()

        if process.returncode != 0:
            raise GitCommandError(
                tuple(mask_credentials(arg) for arg in args),
                process.returncode or 1,
                mask_credentials(stderr.decode(errors="replace").strip()),
            )

        return stdout.decode(errors="replace").strip()

    async def remote_branch_tip(self, url: str, branch: str) -> str | None:
        """Return the commit SHA of a remote branch, or None if it does not exist."""
        ref = f"refs/heads/{branch}"
        output = await self.run("ls-remote", "--heads", url, ref)

        for line in output.splitlines():
            sha, _, name = line.partition("\t")
            if name == ref:
                return sha

        return None

    async def clone_shallow(self, url: str, branch: str, destination: Path) -> None:
        """Clone only the tip commit of a branch into destination."""
        await self.run(
            "clone",
            "--depth",
            "1",
            "--quiet",
            f"--branch={branch}",
            url,
            str(destination),
        )

    async def init_orphan(self, url: str, branch: str, destination: Path) -> None:
        """Initialise an empty working copy whose first commit starts branch."""
        destination.mkdir(parents=True, exist_ok=True)
        await self.run("init", "--quiet", cwd=destination)
        await self.run("symbolic-ref", "HEAD", f"refs/heads/{branch}", cwd=destination)
        await self.run("remote", "add", "origin", url, cwd=destination)

    async def set_remote_url(self, worktree: Path, url: str) -> None:
        """Point origin at url, replacing whatever the clone recorded."""
        await self.run("remote", "set-url", "origin", url, cwd=worktree)

    async def stage_all(self, worktree: Path) -> None:
        """Stage additions, modifications and deletions."""
        await self.run("add", "--all", ".", cwd=worktree)

    async def commit(
        self,
        worktree: Path,
        message: str,
        identity: CommitterIdentity | None = None,
    ) -> str:
        """Commit the index, even when nothing changed, and return the new SHA.

        The identity is applied to this invocation only; without one git falls
        back to its configured user.
        """
        identity_args: list[str] = []
        if identity is not None:
            identity_args = [
                "-c",
                f"user.name={identity.name}",
                "-c",
                f"user.email={identity.email}",
            ]

        await self.run(
            *identity_args,
            "commit",
            "--allow-empty",
            "--quiet",
            "-m",
            message,
            cwd=worktree,
        )
        return await self.run("rev-parse", "HEAD", cwd=worktree)

    async def push(
        self,
        worktree: Path,
        branch: str,
        *,
        mode: PushMode = "force",
        expected_tip: str | None = None,
    ) -> None:
        """Overwrite the remote branch with the local HEAD.

        In ``lease`` mode the push only succeeds while the remote branch still
        points at expected_tip (None meaning the branch must not exist).
        """
        ref = f"refs/heads/{branch}"
        if mode == "lease":
            force_arg = f"--force-with-lease={ref}:{expected_tip or ''}"
        else:
            force_arg = "--force"

        await self.run(
            "push", force_arg, "--quiet", "origin", f"HEAD:{ref}", cwd=worktree
        )
