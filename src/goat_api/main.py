"""FastAPI interface for The Goat with request-scoped dependency access."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from goat.builds.history import load_build_history
from goat.builds.status import build_logs_payload, is_building
from goat.builds.watch import poll_build_status
from goat.catalog.features import FeatureCatalog
from goat.catalog.schedule import current_day, next_release_time, time_left
from goat.clients.config import (
    DEFAULT_FAL_BASE_URL,
    DEFAULT_FAL_QUEUE_URL,
    DEFAULT_GITHUB_API_URL,
    DEFAULT_OPENROUTER_BASE_URL,
    DEFAULT_OPENROUTER_MODEL,
    DEFAULT_X_TITLE,
    load_provider_credentials,
)
from goat.clients.fal import (
    DEFAULT_FAL_MODEL,
    FalClient,
    FalError,
    FalMissingAPIKeyError,
    FalNoImagesError,
)
from goat.clients.github import GitHubActionsClient, GitHubError
from goat.clients.openrouter import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    OpenRouterClient,
    OpenRouterError,
    OpenRouterMissingAPIKeyError,
)
from goat.core.config import Settings
from goat.explore.tiles import explore_layout, grid_payload

logger = logging.getLogger(__name__)


class ChatMessage(BaseModel):
    role: str = Field(pattern="^(system|user|assistant)$")
    content: str


class CompletionIn(BaseModel):
    """Chat completion proxy input; field names follow the browser client."""

    messages: list[ChatMessage] = Field(min_length=1)
    model: str | None = None
    maxTokens: int = Field(default=DEFAULT_MAX_TOKENS, ge=1)
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)


class ImageIn(BaseModel):
    prompt: str = Field(min_length=1)
    model: str = DEFAULT_FAL_MODEL
    width: int = Field(default=512, ge=64, le=2048)
    height: int = Field(default=512, ge=64, le=2048)


def _error(message: str, status_code: int, **extra: Any) -> JSONResponse:
    return JSONResponse({"error": message, **extra}, status_code=status_code)


def build_app(
    settings: Settings | None = None,
    *,
    catalog: FeatureCatalog | None = None,
    credentials: dict[str, Any] | None = None,
) -> FastAPI:
    """Build FastAPI app with an explicit dependency container in ``app.state``."""
    settings = settings or Settings()
    creds = credentials if credentials is not None else load_provider_credentials()
    timeout_s = float(creds.get("timeout_s", 30.0))

    app = FastAPI(title=settings.app_name, version="0.1.0")
    app.state.settings = settings
    app.state.catalog = catalog or FeatureCatalog.from_path(settings.catalog_path)
    app.state.build_trigger_secret = str(creds.get("build_trigger_secret", ""))
    app.state.openrouter = OpenRouterClient(
        api_key=str(creds.get("openrouter_api_key", "")),
        model=str(creds.get("openrouter_model") or DEFAULT_OPENROUTER_MODEL),
        base_url=str(creds.get("openrouter_base_url") or DEFAULT_OPENROUTER_BASE_URL),
        timeout_s=timeout_s,
        referer=settings.site_url,
        title=str(creds.get("openrouter_title") or DEFAULT_X_TITLE),
    )
    app.state.fal = FalClient(
        api_key=str(creds.get("fal_api_key", "")),
        base_url=str(creds.get("fal_base_url") or DEFAULT_FAL_BASE_URL),
        queue_url=str(creds.get("fal_queue_url") or DEFAULT_FAL_QUEUE_URL),
        timeout_s=max(timeout_s, 60.0),
    )
    github_api_url = str(creds.get("github_api_url") or DEFAULT_GITHUB_API_URL)
    # Status reads and workflow dispatch use separate tokens.
    app.state.github_status = GitHubActionsClient(
        repo=settings.github_repo,
        token=str(creds.get("github_status_token", "")),
        api_url=github_api_url,
        timeout_s=timeout_s,
    )
    app.state.github_dispatch = GitHubActionsClient(
        repo=settings.github_repo,
        token=str(creds.get("github_dispatch_token", "")),
        api_url=github_api_url,
        timeout_s=timeout_s,
    )

    @app.get("/api/home")
    def get_home(request: Request) -> dict[str, Any]:
        """Homepage data: day counter, countdown to midnight, shipped features, build log."""
        state = request.app.state
        now = datetime.now()
        release = next_release_time(now)
        return {
            "day": current_day(now, state.settings.launch_date),
            "nextRelease": release.isoformat(),
            "countdown": time_left(release, now).to_payload(),
            "features": [feature.to_payload() for feature in state.catalog.released()],
            "buildLog": [entry.to_payload() for entry in state.catalog.build_log],
        }

    @app.get("/api/features")
    def list_features(request: Request) -> dict[str, Any]:
        features = request.app.state.catalog.released()
        return {"features": [feature.to_payload() for feature in features]}

    @app.get("/api/features/{feature_id}")
    def get_feature(request: Request, feature_id: str) -> dict[str, Any]:
        feature = request.app.state.catalog.get(feature_id)
        if feature is None or not feature.released:
            raise HTTPException(status_code=404, detail=f"Unknown feature: {feature_id}")
        return feature.to_payload()

    @app.get("/api/explore")
    async def get_explore(
        request: Request,
        building: bool | None = Query(default=None),
    ) -> dict[str, Any]:
        """Explore grid; the build tile follows live build status unless ``building`` is given."""
        state = request.app.state
        if building is None:
            status = await poll_build_status(state.github_status)
            building = bool(status.get("isBuilding"))
        grid = explore_layout(state.catalog.sorted_by_day(released_only=False), is_building=building)
        return {"isBuilding": building, **grid_payload(grid)}

    @app.post("/api/complete")
    async def complete(request: Request, body: CompletionIn) -> Any:
        client: OpenRouterClient = request.app.state.openrouter
        try:
            content = await client.complete(
                [message.model_dump() for message in body.messages],
                model=body.model,
                max_tokens=body.maxTokens,
                temperature=body.temperature,
            )
        except OpenRouterMissingAPIKeyError:
            return _error("OpenRouter API key not configured", 500)
        except OpenRouterError as exc:
            logger.error("openrouter_failed status=%s error=%s", exc.status_code, exc)
            if exc.status_code is None or exc.status_code < 400:
                return _error("Internal server error", 500)
            return _error("Failed to get completion", exc.status_code)
        return {"content": content}

    @app.post("/api/generate-image")
    async def generate_image(request: Request, body: ImageIn) -> Any:
        client: FalClient = request.app.state.fal
        try:
            images = await client.generate(
                body.prompt,
                model=body.model,
                width=body.width,
                height=body.height,
            )
        except FalMissingAPIKeyError:
            return _error("Fal API key not configured", 500)
        except FalNoImagesError as exc:
            return _error(str(exc), 500, result=exc.result)
        except FalError as exc:
            logger.error("fal_failed status=%s error=%s", exc.status_code, exc)
            if exc.status_code is not None and exc.status_code >= 400:
                return _error("Failed to generate image", exc.status_code, details=exc.body)
            return _error(str(exc), 500)
        return {"images": [image.to_payload() for image in images]}

    @app.get("/api/build-status")
    async def build_status(request: Request) -> dict[str, Any]:
        return await poll_build_status(request.app.state.github_status)

    @app.get("/api/build-logs")
    async def build_logs(request: Request) -> Any:
        client: GitHubActionsClient = request.app.state.github_status
        if not client.configured:
            return _error("No token", 500)
        try:
            run = await client.latest_run()
        except GitHubError as exc:
            logger.warning("build_runs_failed error=%s", exc)
            return _error("Failed to fetch runs", 500)
        if run is None:
            return _error("No runs found", 404)

        try:
            jobs = await client.run_jobs(run.id)
        except GitHubError as exc:
            logger.warning("build_jobs_failed run_id=%s error=%s", run.id, exc)
            return {
                "isBuilding": is_building(run),
                "status": run.status,
                "conclusion": run.conclusion,
                "logs": [],
            }
        return build_logs_payload(run, jobs)

    @app.get("/api/trigger-build")
    def trigger_build_info() -> dict[str, str]:
        return {"message": "Use POST to trigger a build", "status": "ready"}

    @app.post("/api/trigger-build")
    async def trigger_build(request: Request) -> Any:
        state = request.app.state
        try:
            body = await request.json()
        except ValueError:
            body = {}
        secret = body.get("secret") if isinstance(body, dict) else None
        if state.build_trigger_secret and secret != state.build_trigger_secret:
            logger.warning("trigger_build_unauthorized")
            return _error("Unauthorized", 401)

        client: GitHubActionsClient = state.github_dispatch
        if not client.configured:
            return _error("GitHub token not configured", 500)
        try:
            await client.dispatch_workflow(state.settings.workflow_file, state.settings.workflow_ref)
        except GitHubError as exc:
            logger.error("trigger_build_failed status=%s error=%s", exc.status_code, exc)
            if exc.status_code is None or exc.status_code < 400:
                return _error("Internal server error", 500)
            return _error("Failed to trigger build", exc.status_code)

        logger.info(
            "build_triggered repo=%s workflow=%s ref=%s",
            client.repo,
            state.settings.workflow_file,
            state.settings.workflow_ref,
        )
        return {"success": True, "message": "Build triggered! The Goat is waking up..."}

    @app.get("/api/debug/builds")
    def debug_builds(request: Request) -> dict[str, Any]:
        logs, error = load_build_history(request.app.state.settings.build_logs_path)
        if error:
            return {"logs": [], "error": error}
        return {"logs": logs}

    return app


app = build_app()
