# allosports/main.py
import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from allosports.api.routers import articles, auth, categories
from allosports.config import Settings, settings as default_settings
from allosports.core.bootstrap import ensure_default_admin, seed_demo_content
from allosports.core.errors import install_error_handlers
from allosports.storage import Storage, build_storage

logger = logging.getLogger("uvicorn.error")


def _configure_logging(config: Settings) -> None:
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logger.setLevel(level)


def create_app(config: Settings | None = None, storage: Storage | None = None) -> FastAPI:
    """
    Build the ASGI application.

    Args:
        config: Settings to run with (defaults to the environment-derived ones)
        storage: Store to serve from; built from config.storage_backend when omitted.
            Tests pass their own store here.

    Raises:
        RuntimeError: If no signing key is configured outside development
    """
    config = config or default_settings
    _configure_logging(config)

    # Fail now rather than on the first login
    config.signing_key()
    if not config.jwt_secret:
        logger.warning("[security] SESSION_SECRET not set; using the development signing key (ENV=%s)", config.env)

    storage = storage or build_storage(config)

    app = FastAPI(title=config.APP_NAME)
    app.state.settings = config
    app.state.storage = storage

    # CORS (with Cookie)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    @app.on_event("startup")
    async def on_startup():
        await storage.open()
        logger.info("[startup] storage backend: %s", storage.name)
        # Ensure there's a default admin account on first run
        await ensure_default_admin(storage, config)
        if config.seed_demo_content:
            await seed_demo_content(storage)

    @app.on_event("shutdown")
    async def on_shutdown():
        await storage.close()

    # REST
    app.include_router(auth.router, prefix="/api")
    app.include_router(articles.router, prefix="/api")
    app.include_router(categories.router, prefix="/api")

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    return app


app = create_app()
