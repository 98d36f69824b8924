"""
Custom exception classes for the GitLab project migration tool.
"""

from __future__ import annotations


class MigrationError(Exception):
    """Base exception for migration errors."""


class ConfigurationError(MigrationError):
    """Raised when a required endpoint, token or project path is missing or malformed."""


class PreconditionError(MigrationError):
    """Raised when the destination is not in a state the migration can start from."""


class TransportError(MigrationError):
    """Raised when a request to a GitLab instance fails."""


class EntityMigrationError(MigrationError):
    """Raised when creating a single entity in the destination fails and the run must stop."""

    def __init__(self, entity_kind: str, source_id: int | str, message: str) -> None:
        self.entity_kind: str = entity_kind
        self.source_id: int | str = source_id
        super().__init__(f"Failed to migrate {entity_kind} {source_id}: {message}")
