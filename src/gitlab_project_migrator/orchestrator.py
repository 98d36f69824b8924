"""Migration orchestrator that coordinates the source and destination instances.

The Migrator runs an ordered list of pipeline steps. Each step receives the
``MigrationContext`` produced by the previous one and returns a new context,
so data only flows downstream:

Step 1: Destination
    - Load the destination project if it already exists and check it is private;
      an existing project keeps its namespace
    - Otherwise find the destination group by path, or reuse a personal
      namespace, or create the group, then create the project

Step 2: Identities
    - Read all users from both instances (or the members of an existing
      destination group)
    - Build the identity map (source user id -> destination user id)

Step 3: Group members (only for groups created in this run)
    - Add mapped members of the source group to the new group

Step 4: Labels
    - Create all labels; referenced by name later, so no mapping

Step 5: Milestones
    - Create milestones in ascending source id order, closing closed ones
    - Build the milestone map (source milestone id -> destination milestone id)

Step 6: Issues and Comments
    For each issue in ascending source id order:
        a. Translate assignee and milestone through the two maps
        b. Create the issue, close it if closed in the source
        c. Create its comments in ascending source id order with an
           attribution header

Step 7: Deploy keys and snippets (opt-in)

Error Handling
--------------
- Configuration and precondition errors are raised before the destination
  is modified.
- Read failures abort the run.
- Create failures follow the entity kind's policy (see ``stages``): labels,
  comments, members, snippets and deploy keys are reported and skipped;
  milestones and issues abort the run.
- Nothing is rolled back and nothing is deduplicated: rerunning after a failure
  creates the already migrated labels, milestones and issues a second time.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING

from .context import MigrationContext
from .deploy_keys import migrate_deploy_keys
from .groups import GroupResolution, namespace_path, resolve_group
from .identity import map_users
from .issues import migrate_issues
from .labels import migrate_labels
from .members import migrate_group_members
from .milestones import migrate_milestones
from .models import User
from .pagination import fetch_all
from .projects import create_destination_project, find_destination_project, load_source_project
from .snippets import migrate_snippets

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from .config import MigrationConfig
    from .models import Project
    from .protocols import ProjectClient
    from .stages import MigrationStats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationResult:
    """Result of a completed migration run."""

    project: Project
    stats: MigrationStats
    identity_map: Mapping[int, int]  # source_user_id -> destination_user_id
    milestone_map: Mapping[int, int]  # source_milestone_id -> destination_milestone_id


@dataclass(frozen=True)
class PipelineStep:
    name: str
    run: Callable[[MigrationContext], MigrationContext]


def resolve_destination(ctx: MigrationContext) -> MigrationContext:
    """Find or create the destination group and project.

    An existing project keeps its own namespace; the group lookup only runs when
    the project still has to be created.
    """
    # Read-only checks first, so a failed precondition leaves the destination untouched
    project = find_destination_project(ctx.destination, ctx.destination_path)

    if project is not None:
        resolution = GroupResolution(namespace=project.namespace, created=False)
    else:
        group_path = namespace_path(ctx.destination_path)
        source_namespace = ctx.source_project.namespace
        group_name = (
            source_namespace.name if source_namespace.full_path == group_path else group_path.rpartition("/")[2]
        )
        resolution = resolve_group(ctx.destination, group_name, group_path)
        project = create_destination_project(
            ctx.destination, ctx.source_project, resolution.namespace, ctx.destination_path
        )

    logger.info(f"Project to be used ID: {project.id} - {project.path_with_namespace}")
    return dataclasses.replace(
        ctx,
        destination_project=project,
        destination_group=resolution.namespace,
        group_created=resolution.created,
    )


def resolve_identities(ctx: MigrationContext, *, group_members_only: bool = False) -> MigrationContext:
    """Map source users to destination users."""
    source_users = fetch_all(partial(ctx.source.fetch_page, "users", ()))
    if group_members_only and ctx.group_created:
        # A group created in this run only holds its creator so far
        logger.warning(
            f"Group {ctx.group.full_path} was created in this run, mapping against all destination users instead"
        )
        group_members_only = False
    if group_members_only and ctx.group.kind == "group":
        destination_users = fetch_all(partial(ctx.destination.fetch_page, "group_members", (ctx.group.id,)))
    else:
        destination_users = fetch_all(partial(ctx.destination.fetch_page, "users", ()))

    identity_map = map_users(map(User.from_api, source_users), map(User.from_api, destination_users))
    return dataclasses.replace(ctx, identity_map=identity_map)


def copy_group_members(ctx: MigrationContext) -> MigrationContext:
    if ctx.group_created:
        migrate_group_members(ctx)
    return ctx


def copy_labels(ctx: MigrationContext) -> MigrationContext:
    migrate_labels(ctx)
    return ctx


def copy_milestones(ctx: MigrationContext) -> MigrationContext:
    return dataclasses.replace(ctx, milestone_map=migrate_milestones(ctx))


def copy_issues(ctx: MigrationContext) -> MigrationContext:
    migrate_issues(ctx)
    return ctx


def copy_deploy_keys(ctx: MigrationContext) -> MigrationContext:
    migrate_deploy_keys(ctx)
    return ctx


def copy_snippets(ctx: MigrationContext) -> MigrationContext:
    migrate_snippets(ctx)
    return ctx


def build_pipeline(config: MigrationConfig) -> list[PipelineStep]:
    """Return the steps of a run in dependency order."""
    steps = [
        PipelineStep("destination", resolve_destination),
        PipelineStep("identities", partial(resolve_identities, group_members_only=config.map_group_members)),
    ]
    if config.seed_group_members:
        steps.append(PipelineStep("group members", copy_group_members))
    steps += [
        PipelineStep("labels", copy_labels),
        PipelineStep("milestones", copy_milestones),
        PipelineStep("issues", copy_issues),
    ]
    if config.include_deploy_keys:
        steps.append(PipelineStep("deploy keys", copy_deploy_keys))
    if config.include_snippets:
        steps.append(PipelineStep("snippets", copy_snippets))
    return steps


class Migrator:
    """Orchestrates migration of one project from a source to a destination instance.

    Usage:
        source = gitlab_utils.get_client(config.source_url, config.source_token)
        destination = gitlab_utils.get_client(config.destination_url, config.destination_token)
        result = Migrator(source, destination, config).migrate()

    The migrator keeps no state between runs; everything is returned in
    MigrationResult.
    """

    _source: ProjectClient
    _destination: ProjectClient
    _config: MigrationConfig

    def __init__(self, source: ProjectClient, destination: ProjectClient, config: MigrationConfig) -> None:
        self._source = source
        self._destination = destination
        self._config = config

    def migrate(self) -> MigrationResult:
        """Execute the full migration.

        Returns:
            MigrationResult with the destination project, statistics and mappings

        Raises:
            MigrationError: If a step fails in a way that prevents continuation
        """
        logger.info(f"Migrating {self._config.source_project} -> {self._config.destination_project}")
        source_project = load_source_project(self._source, self._config.source_project)

        ctx = MigrationContext(
            source=self._source,
            destination=self._destination,
            source_project=source_project,
            destination_path=self._config.destination_project,
        )
        for step in build_pipeline(self._config):
            logger.info(f"Running step: {step.name}")
            ctx = step.run(ctx)

        logger.info(f"Migration of {source_project.path_with_namespace} completed")
        return MigrationResult(
            project=ctx.project,
            stats=ctx.stats,
            identity_map=ctx.identity_map,
            milestone_map=ctx.milestone_map,
        )
