"""Azure DevOps REST client using a Personal Access Token.

Covers the four calls iterctl needs: list teams, read the iteration
tree, create an iteration node, and add an iteration to a team's
settings. One :class:`requests.Session` is reused for the whole run.

No retries: a transport error or unexpected status raises
:class:`AzureDevOpsError` and the caller decides what is fatal.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import requests

from iterctl.domain.errors import AzureDevOpsError, ConfigurationError
from iterctl.domain.iterations import IterationNode, Team
from iterctl.infrastructure.reader import (
    FINISH_DATE_KEY,
    START_DATE_KEY,
    format_remote_date,
    node_from_payload,
)

if TYPE_CHECKING:
    from iterctl.config.models import AzureDevOpsConfig

logger = logging.getLogger(__name__)

TEAMS_PAGE_SIZE = 100


def _segment(value: str) -> str:
    return quote(value, safe="")


class AzureDevOpsClient:
    """Thin synchronous client for one Azure DevOps organization."""

    def __init__(
        self,
        uri: str,
        personal_access_token: str,
        *,
        api_version: str = "7.1",
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not uri:
            msg = "azure_devops.uri is not configured"
            raise ConfigurationError(msg)
        if not personal_access_token:
            msg = "azure_devops.personal_access_token is not configured"
            raise ConfigurationError(msg)
        self.base_url = uri.rstrip("/")
        self.api_version = api_version
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.auth = ("", personal_access_token)
        self._session.headers.update({"Accept": "application/json"})

    @classmethod
    def from_config(cls, config: AzureDevOpsConfig) -> AzureDevOpsClient:
        return cls(
            config.uri,
            config.personal_access_token.get_secret_value(),
            api_version=config.api_version,
            timeout=config.timeout,
        )

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> AzureDevOpsClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        check: bool = True,
    ) -> requests.Response:
        url = f"{self.base_url}/{path}"
        query = {"api-version": self.api_version, **(params or {})}
        logger.debug("%s %s", method, url)
        try:
            resp = self._session.request(
                method, url, params=query, json=json, timeout=self.timeout
            )
        except requests.RequestException as exc:
            msg = f"Azure DevOps request failed: {method} {url}: {exc}"
            raise AzureDevOpsError(msg, detail={"url": url}) from exc

        if check and not resp.ok:
            msg = f"Azure DevOps API error: {resp.status_code} {resp.text[:200]}"
            raise AzureDevOpsError(msg, detail={"url": url, "status": resp.status_code})
        return resp

    @staticmethod
    def _json(resp: requests.Response) -> dict[str, Any]:
        if not resp.content:
            return {}
        try:
            data = resp.json()
        except ValueError as exc:
            msg = f"Azure DevOps returned a non-JSON body ({resp.status_code})"
            raise AzureDevOpsError(msg) from exc
        return data if isinstance(data, dict) else {}

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def get_teams(self, project: str) -> list[Team]:
        """List every team in *project*."""
        teams: list[Team] = []
        skip = 0
        while True:
            resp = self._request(
                "GET",
                f"_apis/projects/{_segment(project)}/teams",
                params={"$top": TEAMS_PAGE_SIZE, "$skip": skip},
            )
            page = self._json(resp).get("value", [])
            teams.extend(Team(id=str(t["id"]), name=str(t["name"])) for t in page)
            if len(page) < TEAMS_PAGE_SIZE:
                return teams
            skip += TEAMS_PAGE_SIZE

    def get_root_iteration_node(self, project: str, depth: int = 1) -> dict[str, Any]:
        """Raw root iteration node of *project*, children to *depth* levels."""
        resp = self._request(
            "GET",
            f"{_segment(project)}/_apis/wit/classificationnodes/Iterations",
            params={"$depth": depth},
        )
        return self._json(resp)

    def create_iteration_node(
        self,
        project: str,
        name: str,
        start_date: date,
        finish_date: date,
    ) -> IterationNode | None:
        """Create a dated iteration under the project root.

        Returns None when the server answers without an identifier.
        """
        body = {
            "name": name,
            "attributes": {
                START_DATE_KEY: format_remote_date(start_date),
                FINISH_DATE_KEY: format_remote_date(finish_date),
            },
        }
        resp = self._request(
            "POST",
            f"{_segment(project)}/_apis/wit/classificationnodes/Iterations",
            json=body,
        )
        payload = self._json(resp)
        if not payload.get("identifier"):
            return None
        return node_from_payload(payload)

    def assign_iteration_to_team(self, project: str, team: Team, identifier: str) -> bool:
        """Add an iteration to a team's iteration settings."""
        resp = self._request(
            "POST",
            f"{_segment(project)}/{_segment(team.name)}/_apis/work/teamsettings/iterations",
            json={"id": identifier},
            check=False,
        )
        if not resp.ok:
            logger.debug("Team assignment rejected: %s %s", resp.status_code, resp.text[:200])
        return resp.ok
