"""
Command-line interface for the GitLab project migration tool.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

from . import gitlab_utils as glu
from .config import load_config
from .exceptions import ConfigurationError, MigrationError
from .orchestrator import Migrator
from .utils import setup_logging

if TYPE_CHECKING:
    from .orchestrator import MigrationResult

logger: logging.Logger = logging.getLogger(__name__)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Migrate a GitLab project's labels, milestones, issues and comments to another GitLab instance"
    )

    # Positional arguments
    _ = parser.add_argument("source_project", help="Source project path (namespace/project) or numeric id")
    _ = parser.add_argument("destination_project", help="Destination project path (group-path/project)")

    _ = parser.add_argument("--source-url", help="Source GitLab URL (default: env SOURCE_GITLAB_URL)")
    _ = parser.add_argument("--target-url", help="Destination GitLab URL (default: env TARGET_GITLAB_URL)")
    _ = parser.add_argument(
        "--source-pass-token", help="Path for the source token in pass utility (default: env SOURCE_GITLAB_TOKEN)"
    )
    _ = parser.add_argument(
        "--target-pass-token", help="Path for the destination token in pass utility (default: env TARGET_GITLAB_TOKEN)"
    )

    _ = parser.add_argument("--include-snippets", action="store_true", help="Also migrate snippets and their comments")
    _ = parser.add_argument("--include-deploy-keys", action="store_true", help="Also migrate deploy keys")
    _ = parser.add_argument(
        "--no-group-members",
        action="store_false",
        dest="seed_group_members",
        help="Do not copy source group members into a newly created destination group",
    )
    _ = parser.add_argument(
        "--map-group-members",
        action="store_true",
        help="Match users against the destination group's members instead of all destination users",
    )

    _ = parser.add_argument(
        "--verbose", "-v", action="count", default=0, help="Increase console verbosity (-v: info, -vv: debug)"
    )

    return parser.parse_args(argv)


def _print_report(result: MigrationResult) -> None:
    print(f"Migrated project: {result.project.path_with_namespace}")
    if result.project.web_url:
        print(f"URL: {result.project.web_url}")
    for kind, count in sorted(result.stats.created.items()):
        closed = result.stats.closed.get(kind, 0)
        suffix = f" ({closed} closed)" if closed else ""
        print(f"  {kind}: {count} created{suffix}")
    print(f"  users mapped: {len(result.identity_map)}")

    if result.stats.failures:
        print(f"WARNING: {len(result.stats.failures)} entities could not be migrated:")
        for failure in result.stats.failures:
            print(f"  - {failure.entity_kind} {failure.source_id}: {failure.message}")


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_arguments(argv)

    verbosity: int = args.verbose
    setup_logging(verbosity=verbosity)

    try:
        config = load_config(
            args.source_project,
            args.destination_project,
            source_url=args.source_url,
            destination_url=args.target_url,
            source_pass_token=args.source_pass_token,
            destination_pass_token=args.target_pass_token,
            include_snippets=args.include_snippets,
            include_deploy_keys=args.include_deploy_keys,
            seed_group_members=args.seed_group_members,
            map_group_members=args.map_group_members,
        )
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")  # noqa: TRY400
        sys.exit(2)

    try:
        source = glu.get_client(config.source_url, config.source_token)
        destination = glu.get_client(config.destination_url, config.destination_token)
        result = Migrator(source, destination, config).migrate()
    except MigrationError:
        logger.exception("Migration failed")
        sys.exit(1)

    _print_report(result)
    sys.exit(0)
