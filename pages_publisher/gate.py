"""Decide whether a publish request may touch the target repository."""

from collections.abc import Callable

from pages_publisher.models.request import PublishRequest

type PublishGate = Callable[[PublishRequest], bool]


def deny_pull_requests(request: PublishRequest) -> bool:
    """Allow publishing unless the run comes from an untrusted pull request.

    Pull request builds must never receive or exercise the push credential.
    """
    return not request.is_pull_request_context
