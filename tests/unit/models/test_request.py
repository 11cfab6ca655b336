"""Tests for publish request models."""

from pathlib import Path

import pytest
from pydantic import SecretStr, ValidationError

from pages_publisher.gate import deny_pull_requests
from pages_publisher.models.request import CommitterIdentity, PublishRequest
from pages_publisher.testing.factories import PublishRequestFactory


class TestPublishRequest:
    """Tests for PublishRequest model."""

    def test_defaults(self) -> None:
        """Targets master with force push by default."""
        request = PublishRequest(
            source_directory=Path("result"),
            target_repository="owner/site",
            build_identifier="1",
        )

        assert request.target_branch == "master"
        assert request.push_mode == "force"
        assert request.credential is None
        assert request.is_pull_request_context is False
        assert request.remote_base_url == "https://github.com"

    @pytest.mark.parametrize(
        "repository",
        ["owner/site", "owner/owner.github.io", "owner/owner.github.io.git"],
    )
    def test_accepts_repository(self, repository: str) -> None:
        """Accepts owner/name identifiers."""
        request = PublishRequestFactory.build(target_repository=repository)

        assert request.target_repository == repository

    @pytest.mark.parametrize(
        "repository",
        [
            "site",
            "owner/site/extra",
            "owner/",
            "https://github.com/o/r",
            "../site",
            "owner/..",
        ],
    )
    def test_rejects_repository(self, repository: str) -> None:
        """Rejects anything that is not owner/name."""
        with pytest.raises(ValidationError):
            PublishRequestFactory.build(target_repository=repository)

    def test_renders_commit_message(self) -> None:
        """Formats the CI name and build label into the message."""
        request = PublishRequestFactory.build(ci_name="Travis", build_identifier="42")

        assert request.render_commit_message() == (
            "Travis build 42 pushed to GitHub Pages"
        )

    def test_custom_commit_message(self) -> None:
        """Accepts a custom template."""
        request = PublishRequestFactory.build(
            build_identifier="42", commit_message="Deploy #{build_identifier}"
        )

        assert request.render_commit_message() == "Deploy #42"

    def test_rejects_unknown_template_field(self) -> None:
        """Refuses templates that name fields other than the CI name and build."""
        with pytest.raises(ValidationError, match="build_identifier"):
            PublishRequestFactory.build(commit_message="Deploy {sha}")

    def test_credential_hidden(self) -> None:
        """Never shows the credential in repr or str."""
        request = PublishRequestFactory.build(credential=SecretStr("s3cr3t"))

        assert "s3cr3t" not in repr(request)
        assert "s3cr3t" not in str(request)

    def test_is_frozen(self) -> None:
        """Requests cannot be changed after creation."""
        request = PublishRequestFactory.build()

        with pytest.raises(ValidationError):
            request.target_branch = "other"  # type: ignore[misc]


def test_committer_identity_requires_values() -> None:
    """Rejects empty names and emails."""
    with pytest.raises(ValidationError):
        CommitterIdentity(name="", email="bot@example.com")


@pytest.mark.parametrize(("pull_request", "allowed"), [(False, True), (True, False)])
def test_deny_pull_requests(pull_request: bool, allowed: bool) -> None:
    """Only trusted runs may publish."""
    request = PublishRequestFactory.build(is_pull_request_context=pull_request)

    assert deny_pull_requests(request) is allowed
