"""Errors raised while publishing.

Every error aborts the remaining steps of a publish. The CLI turns them into
a non-zero exit code, nothing else catches them.
"""


class PublishError(Exception):
    """Base class for publish failures."""


class MissingOutputError(PublishError):
    """Raised when the build output directory is absent or empty."""


class MissingCredentialError(PublishError):
    """Raised when a push credential is required but not provided."""


class AcquisitionError(PublishError):
    """Raised when the target branch could not be cloned or initialised."""


class SyncError(PublishError):
    """Raised when the build output could not be mirrored into the working copy."""


class GitCommandError(PublishError):
    """Raised when a git invocation exits with a non-zero status."""

    def __init__(self, args: tuple[str, ...], returncode: int, stderr: str) -> None:
        self.command = args
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"git {' '.join(args)} failed with exit code {returncode}: {stderr}"
        )


class PushRejectedError(PublishError):
    """Raised when the remote refused the push."""


class ConfigError(PublishError):
    """Raised when the publisher configuration cannot be loaded."""
