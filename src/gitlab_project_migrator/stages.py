"""Per-entity-kind failure handling for destination writes.

Each entity kind is migrated through an ``EntityStage`` that knows what a failed
create or state transition means for the run:

- ``ABORT``: the failure is raised as ``EntityMigrationError`` and the run stops.
  Used where a missing entity would silently corrupt later stages (milestones,
  whose ids issues reference; issues, which must be migrated in full).
- ``REPORT``: the failure is logged and recorded in ``MigrationStats`` and the
  next entity is processed. Used for independent entities such as labels and
  comments.

Entities created before a failure are never rolled back.
"""

from __future__ import annotations

import enum
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .exceptions import EntityMigrationError, TransportError
from .models import CLOSED_STATE

if TYPE_CHECKING:
    from .protocols import ProjectClient

logger: logging.Logger = logging.getLogger(__name__)


class FailurePolicy(enum.Enum):
    ABORT = "abort"
    REPORT = "report"


@dataclass(frozen=True)
class EntityFailure:
    """A destination write that failed under the REPORT policy."""

    entity_kind: str
    source_id: int | str
    message: str


@dataclass
class MigrationStats:
    """Statistics collected during migration."""

    created: Counter[str] = field(default_factory=Counter)
    closed: Counter[str] = field(default_factory=Counter)
    failures: list[EntityFailure] = field(default_factory=list)


@dataclass(frozen=True)
class EntityStage:
    """Creates and closes destination entities of one kind under a failure policy."""

    entity_kind: str
    policy: FailurePolicy

    def create(
        self,
        client: ProjectClient,
        parent_ids: tuple[int, ...],
        attributes: dict[str, Any],
        *,
        source_id: int | str,
        stats: MigrationStats,
    ) -> dict[str, Any] | None:
        """Create the entity; returns None when a REPORT-policy create failed."""
        try:
            created = client.create(self.entity_kind, parent_ids, attributes)
        except TransportError as e:
            self.fail(source_id, e, stats)
            return None
        stats.created[self.entity_kind] += 1
        logger.debug(f"Created {self.entity_kind} for source {source_id}")
        return created

    def close(
        self,
        client: ProjectClient,
        parent_ids: tuple[int, ...],
        entity_id: int,
        *,
        source_id: int | str,
        stats: MigrationStats,
    ) -> bool:
        """Transition a freshly created entity to closed; returns False when a REPORT-policy call failed."""
        try:
            client.update_state(self.entity_kind, parent_ids, entity_id, CLOSED_STATE)
        except TransportError as e:
            self.fail(source_id, e, stats)
            return False
        stats.closed[self.entity_kind] += 1
        logger.debug(f"Closed {self.entity_kind} {entity_id} (source {source_id})")
        return True

    def fail(self, source_id: int | str, error: TransportError, stats: MigrationStats) -> None:
        """Apply the failure policy to a failed request for the given source entity."""
        if self.policy is FailurePolicy.ABORT:
            raise EntityMigrationError(self.entity_kind, source_id, str(error)) from error
        logger.error(f"Failed to migrate {self.entity_kind} {source_id}: {error}")
        stats.failures.append(EntityFailure(self.entity_kind, source_id, str(error)))


LABELS = EntityStage("label", FailurePolicy.REPORT)
MILESTONES = EntityStage("milestone", FailurePolicy.ABORT)
ISSUES = EntityStage("issue", FailurePolicy.ABORT)
ISSUE_NOTES = EntityStage("issue_note", FailurePolicy.REPORT)
GROUP_MEMBERS = EntityStage("group_member", FailurePolicy.REPORT)
SNIPPETS = EntityStage("snippet", FailurePolicy.REPORT)
SNIPPET_NOTES = EntityStage("snippet_note", FailurePolicy.REPORT)
DEPLOY_KEYS = EntityStage("deploy_key", FailurePolicy.REPORT)
