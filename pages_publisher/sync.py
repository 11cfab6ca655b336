"""Mirror a build output directory into a git working copy."""

import asyncio
import filecmp
import logging
import os
import shutil
import stat
from collections.abc import Collection
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from pages_publisher.errors import SyncError
from pages_publisher.models.result import SyncStats

log = logging.getLogger(__name__)

DEFAULT_EXCLUDES = frozenset({".git"})


@dataclass(kw_only=True)
class SourceTree:
    """Files and directories found in the source, keyed by relative path."""

    files: dict[PurePosixPath, Path] = field(default_factory=dict)
    directories: set[PurePosixPath] = field(default_factory=set)

    def __contains__(self, relative: PurePosixPath) -> bool:
        return relative in self.files or relative in self.directories


def scan_source(
    source: Path, excludes: Collection[str] = DEFAULT_EXCLUDES
) -> SourceTree:
    """Collect the source tree, resolving symbolic links to their targets.

    A link to a directory is descended into unless it points back at one of
    its own ancestors.

    Raises:
        SyncError: If a symbolic link in the source has no target.

    """
    tree = SourceTree()
    _scan_directory(
        source, PurePosixPath(), excludes, tree, frozenset({os.path.realpath(source)})
    )
    return tree


def _scan_directory(
    directory: Path,
    relative: PurePosixPath,
    excludes: Collection[str],
    tree: SourceTree,
    ancestors: frozenset[str],
) -> None:
    with os.scandir(directory) as entries:
        for entry in sorted(entries, key=lambda e: e.name):
            if entry.name in excludes:
                continue

            path = Path(entry.path)
            entry_relative = relative / entry.name

            if entry.is_symlink() and not path.exists():
                raise SyncError(f"Symbolic link has no target: {entry_relative}")

            if entry.is_dir():
                real = os.path.realpath(path)
                if real in ancestors:
                    log.warning("Skipping symbolic link loop at %s", entry_relative)
                    continue
                tree.directories.add(entry_relative)
                _scan_directory(
                    path, entry_relative, excludes, tree, ancestors | {real}
                )
            elif entry.is_file():
                tree.files[entry_relative] = path
            else:
                log.debug("Skipping special file %s", entry_relative)


def delete_extraneous(
    destination: Path,
    tree: SourceTree,
    excludes: Collection[str] = DEFAULT_EXCLUDES,
) -> int:
    """Remove destination entries that are absent from the source tree."""
    deleted = 0
    pending = [(destination, PurePosixPath())]

    while pending:
        directory, relative = pending.pop()
        with os.scandir(directory) as entries:
            for entry in entries:
                if entry.name in excludes:
                    continue

                entry_relative = relative / entry.name
                path = Path(entry.path)

                if entry_relative not in tree:
                    log.debug("Deleting %s", entry_relative)
                    if entry.is_dir(follow_symlinks=False):
                        shutil.rmtree(path)
                    else:
                        path.unlink()
                    deleted += 1
                elif entry.is_dir(follow_symlinks=False):
                    pending.append((path, entry_relative))

    return deleted


def _clear_path(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)


def copy_in_place(source: Path, target: Path) -> bool:
    """Copy source over target, reusing the existing file when there is one.

    Returns:
        False when target already had identical content and permission bits,
        True otherwise.

    """
    if target.is_symlink() or (target.exists() and not target.is_file()):
        _clear_path(target)

    if target.is_file():
        source_stat = source.stat()
        target_stat = target.stat()
        if target_stat.st_size == source_stat.st_size and filecmp.cmp(
            source, target, shallow=False
        ):
            if stat.S_IMODE(target_stat.st_mode) == stat.S_IMODE(source_stat.st_mode):
                return False
            shutil.copymode(source, target)
            return True

    with source.open("rb") as src, target.open("wb") as dst:
        shutil.copyfileobj(src, dst)
    shutil.copystat(source, target)
    return True


def mirror_tree(
    source: Path,
    destination: Path,
    excludes: Collection[str] = DEFAULT_EXCLUDES,
) -> SyncStats:
    """Make destination hold exactly the files of source.

    Entries named in excludes are neither copied nor deleted, which keeps the
    working copy's ``.git`` directory intact.
    """
    tree = scan_source(source, excludes)
    deleted = delete_extraneous(destination, tree, excludes)

    for directory in sorted(tree.directories):
        target = destination.joinpath(*directory.parts)
        if target.is_symlink() or (target.exists() and not target.is_dir()):
            _clear_path(target)
        target.mkdir(parents=True, exist_ok=True)

    copied = unchanged = 0
    for relative, path in sorted(tree.files.items()):
        if copy_in_place(path, destination.joinpath(*relative.parts)):
            copied += 1
        else:
            unchanged += 1

    return SyncStats(copied=copied, unchanged=unchanged, deleted=deleted)


async def mirror(source: Path, destination: Path) -> SyncStats:
    """Mirror source into destination without blocking the event loop."""
    try:
        stats = await asyncio.to_thread(mirror_tree, source, destination)
    except OSError as e:
        raise SyncError(f"Failed to mirror {source} into {destination}: {e}") from e

    log.info(
        "Synced build output: %d copied, %d unchanged, %d deleted",
        stats.copied,
        stats.unchanged,
        stats.deleted,
    )
    return stats
