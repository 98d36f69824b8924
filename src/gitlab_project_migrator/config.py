"""
Configuration for a migration run: endpoints, tokens, project paths and switches.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from . import utils
from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

logger: logging.Logger = logging.getLogger(__name__)

SOURCE_URL_ENV_VAR: Final[str] = "SOURCE_GITLAB_URL"
SOURCE_TOKEN_ENV_VAR: Final[str] = "SOURCE_GITLAB_TOKEN"  # noqa: S105
TARGET_URL_ENV_VAR: Final[str] = "TARGET_GITLAB_URL"
TARGET_TOKEN_ENV_VAR: Final[str] = "TARGET_GITLAB_TOKEN"  # noqa: S105


@dataclass(frozen=True)
class MigrationConfig:
    source_url: str
    source_token: str = field(repr=False)
    destination_url: str
    destination_token: str = field(repr=False)
    source_project: str
    destination_project: str
    include_snippets: bool = False
    include_deploy_keys: bool = False
    seed_group_members: bool = True
    map_group_members: bool = False


def _resolve(
    value: str | None,
    env_var: str,
    env: Mapping[str, str],
    pass_path: str | None = None,
) -> str | None:
    """Resolve a setting from an explicit value, then a pass path, then the environment."""
    if value:
        return value

    if pass_path:
        try:
            return utils.get_pass_value(pass_path)
        except utils.PassError as e:
            msg = f"Could not read {env_var} from pass path '{pass_path}': {e}"
            raise ConfigurationError(msg) from e

    return env.get(env_var)


def _require(value: str | None, description: str, hint: str) -> str:
    if value is None or not value.strip():
        msg = f"No {description} given, pass using {hint}"
        raise ConfigurationError(msg)
    return value.strip()


def load_config(
    source_project: str,
    destination_project: str,
    *,
    source_url: str | None = None,
    destination_url: str | None = None,
    source_token: str | None = None,
    destination_token: str | None = None,
    source_pass_token: str | None = None,
    destination_pass_token: str | None = None,
    include_snippets: bool = False,
    include_deploy_keys: bool = False,
    seed_group_members: bool = True,
    map_group_members: bool = False,
    env: Mapping[str, str] | None = None,
) -> MigrationConfig:
    """Build and validate the run configuration.

    Raises:
        ConfigurationError: If an endpoint, token or project path is missing or empty,
            or the destination path has no group part
    """
    env = os.environ if env is None else env

    config = MigrationConfig(
        source_url=_require(
            _resolve(source_url, SOURCE_URL_ENV_VAR, env), "source endpoint", f"--source-url or {SOURCE_URL_ENV_VAR}"
        ),
        source_token=_require(
            _resolve(source_token, SOURCE_TOKEN_ENV_VAR, env, source_pass_token),
            "source API token",
            f"--source-pass-token or {SOURCE_TOKEN_ENV_VAR}",
        ),
        destination_url=_require(
            _resolve(destination_url, TARGET_URL_ENV_VAR, env),
            "destination endpoint",
            f"--target-url or {TARGET_URL_ENV_VAR}",
        ),
        destination_token=_require(
            _resolve(destination_token, TARGET_TOKEN_ENV_VAR, env, destination_pass_token),
            "destination API token",
            f"--target-pass-token or {TARGET_TOKEN_ENV_VAR}",
        ),
        source_project=_require(source_project, "source project", "the SOURCE_PROJECT argument"),
        destination_project=_require(
            destination_project, "destination project path", "the DESTINATION_PATH argument"
        ).strip("/"),
        include_snippets=include_snippets,
        include_deploy_keys=include_deploy_keys,
        seed_group_members=seed_group_members,
        map_group_members=map_group_members,
    )

    group_path, _, project_name = config.destination_project.rpartition("/")
    if not group_path or not project_name:
        msg = f"Destination path '{config.destination_project}' must have the form <group-path>/<project>"
        raise ConfigurationError(msg)

    logger.debug(f"Loaded configuration: {config}")
    return config
