"""CLI entry point for publishing a built site to its pages branch."""

import argparse
import asyncio
import dataclasses
import json
import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pages_publisher.ci.loading import (
    CIProviderNotFoundError,
    detect_ci,
    load_ci_manifest,
)
from pages_publisher.config import load_config
from pages_publisher.errors import PublishError
from pages_publisher.models.result import PublishResult
from pages_publisher.publisher import Publisher

STATUS_SYMBOLS = {
    "published": "✅",
    "skipped": "⏭️",
}


def log_result_summary(log: logging.Logger, result: PublishResult) -> None:
    """Log a short human readable summary of the publish outcome."""
    symbol = STATUS_SYMBOLS.get(result.status, "?")
    log.info("%s %s: %s (%s)", symbol, result.repository, result.status, result.branch)
    if result.commit_sha:
        log.info("  Commit: %s", result.commit_sha)
    if result.created_branch:
        log.info("  Created branch %s", result.branch)
    if result.reason:
        log.info("  Reason: %s", result.reason)


def format_output(result: PublishResult) -> dict[str, Any]:
    """Format the publish result for JSON output."""
    return dataclasses.asdict(result)


async def run(
    ci_key: str,
    config_path: Path | None,
    overrides: Mapping[str, Any],
    environ: Mapping[str, str],
) -> int:
    """Publish and return exit code."""
    log = logging.getLogger("pages_publisher")

    try:
        config = await load_config(config_path, overrides)

        if ci_key == "auto":
            _, manifest = detect_ci(environ)
        else:
            manifest = load_ci_manifest(ci_key)

        context = manifest.load_context(environ)
        log.info(
            "CI: %s (pull_request=%s, build=%s)",
            context.name,
            context.is_pull_request,
            context.build_identifier,
        )

        publisher = Publisher(work_dir=config.work_dir)
        result = await publisher.publish(config.to_request(context))
    except (PublishError, CIProviderNotFoundError) as e:
        log.error("Publish failed: %s", e)
        return 1

    log_result_summary(log, result)
    print(json.dumps(format_output(result), indent=2))
    return 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Publish pre-built static site output to a pages branch"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file with publisher settings (flags override it)",
    )
    parser.add_argument(
        "--ci",
        default="auto",
        help="CI provider key (auto, travis, github-actions, local)",
    )
    parser.add_argument(
        "--source-dir",
        type=Path,
        default=None,
        help="Directory holding the built site (default: result)",
    )
    parser.add_argument(
        "--target-repo",
        default=None,
        help="Hosting repository identifier (owner/name format)",
    )
    parser.add_argument(
        "--target-branch",
        default=None,
        help="Branch the site is published to (default: master)",
    )
    parser.add_argument(
        "--remote-base-url",
        default=None,
        help="Git hosting base URL (default: https://github.com)",
    )
    parser.add_argument(
        "--push-mode",
        choices=["force", "lease"],
        default=None,
        help="force overwrites the branch, lease fails if it moved meanwhile",
    )
    parser.add_argument(
        "--work-dir",
        type=Path,
        default=None,
        help="Empty directory to clone into instead of a temporary one",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            ci_key=args.ci,
            config_path=args.config,
            overrides={
                "source_directory": args.source_dir,
                "target_repository": args.target_repo,
                "target_branch": args.target_branch,
                "remote_base_url": args.remote_base_url,
                "push_mode": args.push_mode,
                "work_dir": args.work_dir,
            },
            environ=os.environ,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
