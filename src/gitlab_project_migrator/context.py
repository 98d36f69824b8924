"""State threaded through the pipeline steps."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from .stages import MigrationStats

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .models import Namespace, Project
    from .protocols import ProjectClient


@dataclass(frozen=True)
class MigrationContext:
    """Everything a step needs, produced by the steps before it.

    Steps never mutate a context; they return a new one via
    ``dataclasses.replace``. The id maps are read-only once built. Only
    ``stats`` accumulates across steps.
    """

    source: ProjectClient
    destination: ProjectClient
    source_project: Project
    destination_path: str
    destination_project: Project | None = None
    destination_group: Namespace | None = None
    group_created: bool = False
    identity_map: Mapping[int, int] = field(default_factory=lambda: MappingProxyType({}))
    milestone_map: Mapping[int, int] = field(default_factory=lambda: MappingProxyType({}))
    stats: MigrationStats = field(default_factory=MigrationStats)

    @property
    def project(self) -> Project:
        """The destination project; only available after it has been resolved."""
        if self.destination_project is None:
            msg = "Destination project not resolved yet"
            raise RuntimeError(msg)
        return self.destination_project

    @property
    def group(self) -> Namespace:
        if self.destination_group is None:
            msg = "Destination group not resolved yet"
            raise RuntimeError(msg)
        return self.destination_group
