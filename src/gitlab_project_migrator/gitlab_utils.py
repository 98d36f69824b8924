from __future__ import annotations

import logging
from typing import Any, Final

import requests
from gitlab import Gitlab
from gitlab.exceptions import GitlabError, GitlabHttpError
from gitlab.utils import EncodedId

from .exceptions import TransportError

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

# Collection name -> path template; placeholders are filled with the parent ids
_COLLECTION_PATHS: Final[dict[str, str]] = {
    "groups": "/groups",
    "namespaces": "/namespaces",
    "users": "/users",
    "group_members": "/groups/{0}/members",
    "labels": "/projects/{0}/labels",
    "milestones": "/projects/{0}/milestones",
    "issues": "/projects/{0}/issues",
    "issue_notes": "/projects/{0}/issues/{1}/notes",
    "snippets": "/projects/{0}/snippets",
    "snippet_notes": "/projects/{0}/snippets/{1}/notes",
    "deploy_keys": "/projects/{0}/deploy_keys",
}

# Entity kind -> path template of the endpoint that creates it
_CREATE_PATHS: Final[dict[str, str]] = {
    "group": "/groups",
    "project": "/projects",
    "group_member": "/groups/{0}/members",
    "label": "/projects/{0}/labels",
    "milestone": "/projects/{0}/milestones",
    "issue": "/projects/{0}/issues",
    "issue_note": "/projects/{0}/issues/{1}/notes",
    "snippet": "/projects/{0}/snippets",
    "snippet_note": "/projects/{0}/snippets/{1}/notes",
    "deploy_key": "/projects/{0}/deploy_keys",
}

# Entity kind -> path template of a single entity; the last placeholder is the entity id
_ENTITY_PATHS: Final[dict[str, str]] = {
    "milestone": "/projects/{0}/milestones/{1}",
    "issue": "/projects/{0}/issues/{1}",
}

# Target state -> value of the ``state_event`` request parameter
_STATE_EVENTS: Final[dict[str, str]] = {
    "closed": "close",
    "opened": "reopen",
    "active": "activate",
}


def _build_path(templates: dict[str, str], name: str, ids: tuple[int | str, ...]) -> str:
    try:
        template = templates[name]
    except KeyError:
        msg = f"Unsupported collection or entity kind: {name}"
        raise ValueError(msg) from None
    return template.format(*(EncodedId(i) for i in ids))


class GitlabClient:
    """``ProjectClient`` implementation using python-gitlab's raw HTTP helpers.

    Requests go through ``Gitlab.http_*`` rather than the object managers so that
    every collection is read one explicit page at a time and every record comes
    back as a plain dictionary.
    """

    def __init__(self, gitlab: Gitlab) -> None:
        self.gitlab: Gitlab = gitlab

    @property
    def url(self) -> str:
        return self.gitlab.url

    def fetch_page(
        self,
        collection: str,
        parent_ids: tuple[int, ...],
        page: int,
        page_size: int,
    ) -> list[dict[str, Any]]:
        path = _build_path(_COLLECTION_PATHS, collection, parent_ids)
        logger.debug(f"GET {self.url}{path} page={page} per_page={page_size}")
        try:
            result = self.gitlab.http_list(path, page=page, per_page=page_size)
        except (GitlabError, requests.RequestException) as e:
            msg = f"Failed to fetch page {page} of {collection} from {self.url}{path}: {e}"
            raise TransportError(msg) from e
        return list(result)  # pyright: ignore[reportArgumentType]

    def create(
        self,
        entity_kind: str,
        parent_ids: tuple[int, ...],
        attributes: dict[str, Any],
    ) -> dict[str, Any]:
        path = _build_path(_CREATE_PATHS, entity_kind, parent_ids)
        post_data = {key: value for key, value in attributes.items() if value is not None}
        logger.debug(f"POST {self.url}{path}")
        try:
            result = self.gitlab.http_post(path, post_data=post_data)
        except (GitlabError, requests.RequestException) as e:
            msg = f"Failed to create {entity_kind} at {self.url}{path}: {e}"
            raise TransportError(msg) from e
        return result  # pyright: ignore[reportReturnType]

    def update_state(
        self,
        entity_kind: str,
        parent_ids: tuple[int, ...],
        entity_id: int,
        target_state: str,
    ) -> None:
        path = _build_path(_ENTITY_PATHS, entity_kind, (*parent_ids, entity_id))
        try:
            state_event = _STATE_EVENTS[target_state]
        except KeyError:
            msg = f"Unsupported target state: {target_state}"
            raise ValueError(msg) from None
        logger.debug(f"PUT {self.url}{path} state_event={state_event}")
        try:
            _ = self.gitlab.http_put(path, post_data={"state_event": state_event})
        except (GitlabError, requests.RequestException) as e:
            msg = f"Failed to transition {entity_kind} {entity_id} to {target_state} at {self.url}{path}: {e}"
            raise TransportError(msg) from e

    def get_project(self, path_or_id: str | int) -> dict[str, Any] | None:
        path = f"/projects/{EncodedId(path_or_id)}"
        try:
            return self.gitlab.http_get(path)  # pyright: ignore[reportReturnType]
        except GitlabHttpError as e:
            if e.response_code == 404:
                return None
            msg = f"Failed to load project {path_or_id} from {self.url}: {e}"
            raise TransportError(msg) from e
        except (GitlabError, requests.RequestException) as e:
            msg = f"Failed to load project {path_or_id} from {self.url}: {e}"
            raise TransportError(msg) from e

    def get_snippet_content(self, project_id: int, snippet_id: int) -> str:
        path = f"/projects/{EncodedId(project_id)}/snippets/{EncodedId(snippet_id)}/raw"
        try:
            response = self.gitlab.http_get(path, raw=True)
        except (GitlabError, requests.RequestException) as e:
            msg = f"Failed to download snippet {snippet_id} from {self.url}: {e}"
            raise TransportError(msg) from e
        return response.text  # pyright: ignore[reportAttributeAccessIssue]


def get_client(url: str, token: str) -> GitlabClient:
    """Get a client for the GitLab instance at ``url`` using the token."""
    return GitlabClient(Gitlab(url, private_token=token))
