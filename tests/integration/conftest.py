"""Fixtures for integration tests against local bare repositories."""

import subprocess
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

import pytest

IDENTITY = ["-c", "user.name=Seed", "-c", "user.email=seed@example.com"]


class CreateRemoteFn(Protocol):
    """Protocol for remote repository creation function."""

    def __call__(
        self,
        repository: str,
        branch: str | None = None,
        files: Mapping[str, str] | None = None,
    ) -> Path:
        """Create a bare repository, optionally seeding a branch with files."""


class PushFilesFn(Protocol):
    """Protocol for pushing a commit to a remote branch."""

    def __call__(self, bare: Path, branch: str, files: Mapping[str, str]) -> str:
        """Replace the branch content with files and return the new SHA."""


def git(*args: str, cwd: Path) -> str:
    """Run git for test setup and return its stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


def read_tree(bare: Path, branch: str) -> dict[str, str]:
    """Return the content of every file on a branch of a bare repository."""
    names = git("ls-tree", "-r", "--name-only", branch, cwd=bare).splitlines()
    return {name: git("show", f"{branch}:{name}", cwd=bare) for name in names}


def tree_modes(bare: Path, branch: str) -> dict[str, str]:
    """Return the git file mode of every entry on a branch."""
    modes = {}
    for line in git("ls-tree", "-r", branch, cwd=bare).splitlines():
        meta, _, name = line.partition("\t")
        modes[name] = meta.split()[0]
    return modes


@pytest.fixture
def remote_root(tmp_path: Path) -> Path:
    """Directory standing in for the git hosting service."""
    root = tmp_path / "remote"
    root.mkdir()
    return root


@pytest.fixture
def push_files(tmp_path: Path) -> PushFilesFn:
    """Return a function that pushes a fresh commit on top of a branch."""
    counter = [0]

    def _push(bare: Path, branch: str, files: Mapping[str, str]) -> str:
        counter[0] += 1
        seed = tmp_path / f"seed-{counter[0]}"
        seed.mkdir()
        git("init", "--quiet", cwd=seed)
        git("symbolic-ref", "HEAD", f"refs/heads/{branch}", cwd=seed)
        git("remote", "add", "origin", str(bare), cwd=seed)
        if git("ls-remote", "--heads", "origin", branch, cwd=seed):
            git("fetch", "--quiet", "origin", branch, cwd=seed)
            git("reset", "--quiet", "FETCH_HEAD", cwd=seed)
            git("rm", "-r", "--quiet", "--cached", "--ignore-unmatch", ".", cwd=seed)
        for name, content in files.items():
            path = seed / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        git("add", "--all", ".", cwd=seed)
        git(*IDENTITY, "commit", "--allow-empty", "--quiet", "-m", "seed", cwd=seed)
        git("push", "--quiet", "origin", f"HEAD:refs/heads/{branch}", cwd=seed)
        return git("rev-parse", "HEAD", cwd=seed)

    return _push


@pytest.fixture
def create_remote(remote_root: Path, push_files: PushFilesFn) -> CreateRemoteFn:
    """Return a function that creates hosted repositories."""

    def _create(
        repository: str,
        branch: str | None = None,
        files: Mapping[str, str] | None = None,
    ) -> Path:
        bare = remote_root / f"{repository}.git"
        bare.mkdir(parents=True)
        git("init", "--bare", "--quiet", cwd=bare)
        if branch is not None:
            push_files(bare, branch, files or {})
        return bare

    return _create
