"""FastAPI application factory wiring error handling and translations."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi import Request

from webbase.core.config import I18nSettings
from webbase.core.config import get_i18n_settings
from webbase.core.handlers import register_error_handlers
from webbase.localize.loader import load_files
from webbase.localize.store import BundleStore
from webbase.localize.store import Translator

logger = logging.getLogger(__name__)


def get_translator(request: Request) -> Translator:
    """Dependency returning the lookup bound during application startup."""
    return request.app.state.translator


def create_app(settings: I18nSettings | None = None, store: BundleStore | None = None) -> FastAPI:
    """Build the application; translations are loaded before the first request."""
    settings = get_i18n_settings() if settings is None else settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Loading translations with settings=%s", settings.safe_for_logging())
        app.state.translator = load_files(
            settings.locale,
            settings.default_locale,
            store=BundleStore() if store is None else store,
            settings=settings,
        )
        yield

    app = FastAPI(title="webbase", lifespan=lifespan)
    register_error_handlers(app)

    @app.get("/health")
    def health() -> dict[str, str]:
        """Report that the service is up and translations are loaded."""
        return {"status": "ok"}

    return app


app = create_app()
