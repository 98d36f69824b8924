"""Matching users of the source instance to users of the destination instance.

The two instances have independent user directories and no shared key. A
source user is mapped to a destination user only when exactly one destination
user has the same username or the same display name; anything else is left
unmapped and downstream code omits the reference.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .models import User

logger: logging.Logger = logging.getLogger(__name__)

IdentityMap: TypeAlias = "Mapping[int, int]"
"""Source user id -> destination user id."""


def map_users(source_users: Iterable[User], destination_users: Iterable[User]) -> IdentityMap:
    """Build the read-only mapping of source user ids to destination user ids."""
    candidates = list(destination_users)
    user_map: dict[int, int] = {}

    for user in source_users:
        matches = [u for u in candidates if u.username == user.username or u.name == user.name]
        if len(matches) == 1:
            logger.debug(f"Mapping user {user.username} to {matches[0].username}: {user.id}={matches[0].id}")
            user_map[user.id] = matches[0].id
        elif matches:
            logger.info(
                f"User {user.username} matches {len(matches)} destination users "
                f"({', '.join(m.username for m in matches)}), leaving unmapped"
            )
        else:
            logger.debug(f"No destination user found for {user.username}")

    logger.info(f"Mapped {len(user_map)} users")
    return MappingProxyType(user_map)
