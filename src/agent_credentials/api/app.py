"""
agent_credentials.api.app

FastAPI app factory and composition root.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Bootstrap credentials once at startup: resolve the client secret, then build the
  token broker from it.
- Close owned HTTP clients and azure credentials at shutdown.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager

import httpx
from azure.identity.aio import DefaultAzureCredential
from fastapi import FastAPI

from agent_credentials import __version__
from agent_credentials.api.routers.health import router as health_router
from agent_credentials.api.routers.tokens import router as tokens_router
from agent_credentials.directory.graph import GraphDirectoryClient
from agent_credentials.observability.logging import configure_logging, get_logger
from agent_credentials.observability.middleware import RequestContextMiddleware
from agent_credentials.secret_lifecycle.resolver import RuntimeCredentialResolver
from agent_credentials.settings import Settings
from agent_credentials.tokens.broker import TokenBroker
from agent_credentials.tokens.resources import ResourceCatalog
from agent_credentials.tokens.selector import CredentialSelector

log = get_logger(__name__)


async def bootstrap_broker(settings: Settings, stack: AsyncExitStack) -> TokenBroker:
    """
    Resolve the client secret for this process and build the token broker from it.
    Every resource created here is registered on `stack` for shutdown.
    """

    http = await stack.enter_async_context(
        httpx.AsyncClient(timeout=settings.http_timeout_seconds)
    )
    graph_credential = await stack.enter_async_context(
        DefaultAzureCredential(
            exclude_environment_credential=True,
            managed_identity_client_id=settings.managed_identity_client_id or None,
        )
    )

    directory = GraphDirectoryClient(
        http=http, credential=graph_credential, base_url=settings.graph_base_url
    )
    resolver = RuntimeCredentialResolver.from_settings(settings, directory=directory)
    client_secret = await resolver.ensure_secret()

    selector = CredentialSelector.from_settings(settings, http=http, client_secret=client_secret)
    broker = TokenBroker(catalog=ResourceCatalog(), selector=selector)
    stack.push_async_callback(broker.aclose)
    log.info("bootstrap_completed", client_id=resolver.client_id)
    return broker


def create_app(*, settings: Settings, broker: TokenBroker | None = None) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        async with AsyncExitStack() as stack:
            if broker is not None:
                # Injected brokers belong to the caller and are not closed here.
                app.state.broker = broker
            elif settings.env == "test":
                log.info("bootstrap_skipped", reason="test_env")
            else:
                app.state.broker = await bootstrap_broker(settings, stack)
            yield
        log.info("shutdown")

    app = FastAPI(
        title="Agent Credentials",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.broker = None

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(tokens_router)
    return app


# --- Module Notes -----------------------------------------------------------
# The client secret is resolved exactly once per process here; the delegated-user flow
# then uses it for every on-behalf-of exchange.
