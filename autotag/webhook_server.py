"""Webhook server for GitHub App push events."""

import structlog
from fastapi import FastAPI, HTTPException, Request
from pydantic import ValidationError

from autotag.config.settings import AppSettings
from autotag.engine.types import FetchOutcome
from autotag.engine.workflow import TaggingWorkflow
from autotag.exceptions import AutotagError, ConfigurationError
from autotag.fetchers.registry import build_default_registry
from autotag.models.events import PushEvent
from autotag.providers.auth import get_installation_token
from autotag.providers.github_rest import GitHubHostClient

log = structlog.get_logger(__name__)

app = FastAPI(title="autotag webhook server")

# Global state
settings: AppSettings | None = None
registry = build_default_registry()
workflow = TaggingWorkflow(registry)


def get_settings() -> AppSettings:
    """Return process settings, loading them on first use."""
    global settings
    if settings is None:
        settings = AppSettings()
    return settings


@app.on_event("startup")
async def startup():
    """Initialize on startup."""
    global workflow
    try:
        app_settings = get_settings()
        workflow = TaggingWorkflow(registry, config_path=app_settings.config_path)
        log.info("webhook_server_started", app_id=app_settings.app_id, formats=registry.keys())
    except ValidationError as e:
        log.error("webhook_startup_failed", error=str(e))
        raise ConfigurationError(f"Invalid server settings: {e}") from e


@app.post("/webhook/github")
async def github_webhook(request: Request):
    """Handle GitHub webhook events."""
    event_type = request.headers.get("X-GitHub-Event")

    if not event_type:
        raise HTTPException(status_code=400, detail="Missing X-GitHub-Event header")

    delivery = request.headers.get("X-GitHub-Delivery", "")

    try:
        payload = await request.json()
    except ValueError as e:
        raise HTTPException(status_code=400, detail="Request body is not JSON") from e

    log.info("webhook_received", event_type=event_type, delivery=delivery)

    if event_type == "ping":
        return {"status": "pong"}

    if event_type != "push":
        log.warning("unhandled_event_type", event_type=event_type)
        return {"status": "ignored", "event_type": event_type}

    try:
        event = PushEvent.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Malformed push payload: {e.error_count()} error(s)") from e

    structlog.contextvars.bind_contextvars(repository=event.repository.full_name, delivery=delivery)
    try:
        outcome = await handle_push_event(event)
        return {
            "status": "success",
            "event_type": event_type,
            "tag": outcome.caption if outcome and outcome.changed else None,
        }

    except AutotagError as e:
        log.error("webhook_processing_failed", error=e.message, kind=str(e.kind), exc_info=True)
        raise HTTPException(status_code=422, detail=e.message) from e
    except Exception as e:
        log.error("webhook_processing_unexpected", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error") from e
    finally:
        structlog.contextvars.clear_contextvars()


async def handle_push_event(event: PushEvent) -> FetchOutcome | None:
    """Authenticate as the App installation and run the tagging workflow."""
    if event.installation is None:
        raise ConfigurationError("push payload carries no installation id; is the GitHub App installed?")

    app_settings = get_settings()
    token = await get_installation_token(app_settings, event.installation.id)

    owner = event.repository.owner.login or event.repository.owner.display_name
    client = GitHubHostClient(token, owner=owner, repo=event.repository.name, base_url=app_settings.github_base_url)
    await client.connect()
    try:
        return await workflow.handle_push(event, client)
    finally:
        await client.disconnect()


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "autotag-webhook", "formats": registry.keys()}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)  # nosec B104 # Development server binding
