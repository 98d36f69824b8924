"""
GitLab Project Migration Tool

Migrates a project's labels, milestones, issues and comments from one GitLab
instance to another, mapping users and milestones between the two.
"""

from __future__ import annotations

from .cli import main
from .config import MigrationConfig, load_config
from .exceptions import (
    ConfigurationError,
    EntityMigrationError,
    MigrationError,
    PreconditionError,
    TransportError,
)
from .orchestrator import MigrationResult, Migrator
from .utils import setup_logging

# Package version
__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "EntityMigrationError",
    "MigrationConfig",
    "MigrationError",
    "MigrationResult",
    "Migrator",
    "PreconditionError",
    "TransportError",
    "load_config",
    "main",
    "setup_logging",
]
