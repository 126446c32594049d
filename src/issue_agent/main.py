"""FastAPI application entry point for the issue agent.

This module provides the FastAPI application that receives GitHub webhook
deliveries, verifies their signatures and routes them to the event
handlers. It also wires every collaborator once at startup.

Startup aborts (before any traffic is accepted) when the settings are
invalid, the private key or a template cannot be read, or GitHub rejects
the App credentials.
"""

import json
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from fastapi import APIRouter, BackgroundTasks, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from src.issue_agent import __version__
from src.issue_agent.agent.client import AgentClient
from src.issue_agent.config import AgentSettings, get_settings
from src.issue_agent.dispatcher import AgentDispatcher
from src.issue_agent.github.auth import GitHubAppAuth
from src.issue_agent.github.client import GitHubAPIError, GitHubClient
from src.issue_agent.handlers import build_router, load_welcome_messages
from src.issue_agent.network import resolve_from_settings
from src.issue_agent.router import EventContext, EventRouter
from src.issue_agent.webhook.handler import WebhookHandler
from src.issue_agent.webhook.models import WebhookEvent

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


WEBHOOK_PATH = "/api/webhook"


GitHubClientFactory = Callable[[int], Awaitable[GitHubClient]]


@dataclass
class AppServices:
    """Process-wide collaborators, built once at startup and never mutated.

    Attributes:
        webhook_handler: Verifies and parses deliveries.
        router: Maps event kinds to handlers.
        github_client_factory: Creates a client scoped to an installation.
        agent_client: Shared agent chat client, closed on shutdown.
        started_at: Monotonic start time, for the healthcheck uptime.
    """

    webhook_handler: WebhookHandler
    router: EventRouter
    github_client_factory: GitHubClientFactory
    agent_client: Optional[AgentClient] = None
    started_at: float = field(default_factory=time.monotonic)


def _redact_secret(value: Optional[str], visible_chars: int = 4) -> str:
    """Redact a secret value, showing only the first few characters."""
    if not value:
        return ""
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def _log_configuration(settings: AgentSettings, agent_base_url: str) -> None:
    logger.info("Issue agent configuration:")
    logger.info(f"  App ID: {settings.app_id}")
    logger.info(f"  Private Key Path: {settings.private_key_path}")
    logger.info(f"  Webhook Secret: {_redact_secret(settings.webhook_secret)}")
    logger.info(f"  GitHub API URL: {settings.github_api_url}")
    logger.info(f"  GitHub GraphQL URL: {settings.github_graphql_url}")
    logger.info(
        f"  GraphQL Token: {_redact_secret(settings.github_token_classic) or '(installation token)'}"
    )
    logger.info(f"  Agent Base URL: {agent_base_url}")
    logger.info(f"  Agent Timeout Seconds: {settings.agent_timeout_seconds}")
    logger.info(f"  Host: {settings.host}")
    logger.info(f"  Port: {settings.port}")


def installation_client_factory(
    app_auth: GitHubAppAuth, settings: AgentSettings
) -> GitHubClientFactory:
    """Build a factory that mints installation-scoped GitHub clients."""

    async def factory(installation_id: int) -> GitHubClient:
        token = await app_auth.get_installation_token(installation_id)
        return GitHubClient(
            token=token,
            base_url=settings.github_api_url,
            graphql_url=settings.github_graphql_url,
            graphql_token=settings.github_token_classic,
        )

    return factory


async def build_services(settings: AgentSettings) -> AppServices:
    """Wire all collaborators from validated settings.

    Raises:
        OSError: If the private key or a template cannot be read.
        GitHubAPIError: If GitHub rejects the App credentials.
    """
    private_key = settings.read_private_key()
    messages = load_welcome_messages()

    agent_base_url = resolve_from_settings(settings)
    _log_configuration(settings, agent_base_url)

    app_auth = GitHubAppAuth(
        app_id=settings.app_id,
        private_key=private_key,
        base_url=settings.github_api_url,
    )
    app_info = await app_auth.get_app()
    logger.info("Authenticated as '%s'", app_info.get("name"))

    agent_client = AgentClient(
        base_url=agent_base_url,
        timeout=settings.agent_timeout_seconds,
    )
    dispatcher = AgentDispatcher(agent_client=agent_client)

    return AppServices(
        webhook_handler=WebhookHandler(secret=settings.webhook_secret),
        router=build_router(dispatcher, messages),
        github_client_factory=installation_client_factory(app_auth, settings),
        agent_client=agent_client,
    )


async def process_delivery(
    services: AppServices,
    event: WebhookEvent,
    delivery_id: Optional[str] = None,
) -> None:
    """Handle one delivery with a client for its installation.

    Failures are logged; nothing is raised back to the server.
    """
    if event.installation_id is None:
        logger.error(
            "Delivery has no installation id, cannot authenticate",
            extra={"issue_id": event.issue_id, "delivery_id": delivery_id},
        )
        return

    try:
        github = await services.github_client_factory(event.installation_id)
    except GitHubAPIError as e:
        logger.error(
            "Failed to authenticate installation: %s",
            e.message,
            extra={
                "installation_id": event.installation_id,
                "delivery_id": delivery_id,
                "status_code": e.status_code,
            },
        )
        return

    async with github:
        await services.router.dispatch(
            EventContext(event=event, github=github, delivery_id=delivery_id)
        )


def create_app(services: Optional[AppServices] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        services: Pre-built collaborators. When omitted they are built from
            the environment during startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Issue agent starting up...")

        built = services
        if built is None:
            try:
                built = await build_services(get_settings())
            except Exception:
                logger.exception("Failed to initialize the application")
                raise
        app.state.services = built

        logger.info("Issue agent started successfully")

        yield

        logger.info("Issue agent shutting down...")
        if built.agent_client is not None:
            await built.agent_client.close()

    app = FastAPI(
        title="Git Issue Agent",
        description="GitHub App that relays issue comments to the issue agent",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(api)
    return app


api = APIRouter()


@api.get("/health")
async def health(request: Request):
    """Liveness endpoint.

    Returns:
        dict: status, uptime in seconds, current UTC timestamp and version.
    """
    services: AppServices = request.app.state.services
    return {
        "status": "healthy",
        "uptime": round(time.monotonic() - services.started_at, 3),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
    }


@api.post(WEBHOOK_PATH, status_code=202)
async def github_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    x_github_event: Optional[str] = Header(None),
    x_hub_signature_256: Optional[str] = Header(None),
    x_github_delivery: Optional[str] = Header(None),
):
    """GitHub webhook receiver endpoint.

    Verifies the delivery signature, parses the event and schedules its
    handler after the acknowledgement is sent.

    Returns:
        dict: Acknowledgment of webhook receipt.
    """
    services: AppServices = request.app.state.services
    body = await request.body()

    if not services.webhook_handler.verify(body, x_hub_signature_256):
        logger.warning(
            "Rejected delivery with invalid signature",
            extra={"delivery_id": x_github_delivery, "event": x_github_event},
        )
        raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        payload = json.loads(body)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON payload")

    event = services.webhook_handler.parse_event(x_github_event, payload)
    if event is None or not services.router.supports(event.kind):
        return JSONResponse(
            status_code=200,
            content={"status": "ignored", "event": x_github_event},
        )

    background_tasks.add_task(process_delivery, services, event, x_github_delivery)

    return {"status": "accepted", "event": event.kind.value, "issue_id": event.issue_id}


app = create_app()


def main() -> None:
    import uvicorn

    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info(
        "Server is listening for events at: http://localhost:%s%s",
        settings.port,
        WEBHOOK_PATH,
    )
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
