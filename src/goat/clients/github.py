"""GitHub Actions REST client for build status and workflow dispatch."""

from __future__ import annotations

from typing import Any

from goat.clients.config import DEFAULT_GITHUB_API_URL
from goat.clients.http import MissingCredentialsError, UpstreamError, response_json, send_request
from goat.core.types import WorkflowRun


class GitHubError(UpstreamError):
    """Base GitHub Actions client error."""


class GitHubMissingTokenError(GitHubError, MissingCredentialsError):
    """Raised when no token is configured for the requested call."""


class GitHubActionsClient:
    """Repository-scoped GitHub Actions client."""

    def __init__(
        self,
        *,
        repo: str,
        token: str,
        api_url: str = DEFAULT_GITHUB_API_URL,
        timeout_s: float = 10.0,
    ) -> None:
        self._repo = repo.strip("/")
        self._token = token.strip()
        self._api_url = api_url.rstrip("/")
        self._timeout_s = timeout_s

    @property
    def configured(self) -> bool:
        return bool(self._token)

    @property
    def repo(self) -> str:
        return self._repo

    def _headers(self) -> dict[str, str]:
        if not self._token:
            raise GitHubMissingTokenError("GitHub token not configured")
        return {
            "Accept": "application/vnd.github.v3+json",
            "Authorization": f"Bearer {self._token}",
        }

    def _url(self, path: str) -> str:
        return f"{self._api_url}/repos/{self._repo}/actions/{path}"

    async def _get_json(self, path: str) -> Any:
        response = await send_request(
            "GET",
            self._url(path),
            headers=self._headers(),
            timeout_s=self._timeout_s,
            provider="GitHub",
            error_cls=GitHubError,
        )
        return response_json(response, provider="GitHub", error_cls=GitHubError)

    async def latest_run(self) -> WorkflowRun | None:
        """Most recent workflow run of any workflow, or ``None`` when there are none."""
        body = await self._get_json("runs?per_page=1")
        runs = body.get("workflow_runs") if isinstance(body, dict) else None
        if not isinstance(runs, list) or not runs or not isinstance(runs[0], dict):
            return None
        try:
            return WorkflowRun.from_api(runs[0])
        except (TypeError, ValueError) as exc:
            raise GitHubError(f"Unexpected workflow run in GitHub response: {exc}") from exc

    async def run_jobs(self, run_id: int) -> list[dict[str, Any]]:
        body = await self._get_json(f"runs/{run_id}/jobs")
        jobs = body.get("jobs") if isinstance(body, dict) else None
        if not isinstance(jobs, list):
            return []
        return [job for job in jobs if isinstance(job, dict)]

    async def dispatch_workflow(self, workflow_file: str, ref: str = "main") -> None:
        """Trigger ``workflow_dispatch``; GitHub answers 204 with no body."""
        headers = self._headers()
        headers["Content-Type"] = "application/json"
        await send_request(
            "POST",
            self._url(f"workflows/{workflow_file}/dispatches"),
            headers=headers,
            payload={"ref": ref},
            timeout_s=self._timeout_s,
            provider="GitHub",
            error_cls=GitHubError,
        )
