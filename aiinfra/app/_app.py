# -*- coding: utf-8 -*-
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .routers import router as api_router
from ..config import Config, load_config
from ..providers import AiProviderGateway, HttpAiProviderGateway
from ..sync import AiProviderActions

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[Config] = None,
    gateway: Optional[AiProviderGateway] = None,
) -> FastAPI:
    """Build the API app.

    Without ``gateway`` an :class:`HttpAiProviderGateway` is created from
    ``config`` and closed on shutdown.
    """
    if config is None:
        config = load_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        gw = gateway
        if gw is None:
            owned = HttpAiProviderGateway(
                config.gateway.base_url,
                timeout=config.gateway.timeout,
                api_key=config.gateway.api_key,
            )
            gw = owned
        app.state.actions = AiProviderActions(
            gw,
            deprecated_edition=config.deprecated_edition,
        )
        logger.info(f"provider service: {config.gateway.base_url}")
        try:
            yield
        finally:
            app.state.actions.close()
            if owned is not None:
                await owned.aclose()

    app = FastAPI(title="aiinfra", lifespan=lifespan)
    app.state.config = config
    app.include_router(api_router, prefix="/api")
    return app
