"""
FastAPI application factory.

Assembles the app, registers all routers & error handlers, and wires
up lifecycle events.  Database schema is managed by Alembic — NOT
create_all.
"""

import logging

from fastapi import FastAPI

from iam.controllers.access_controller import router as access_router
from iam.controllers.assignment_controller import router as assignment_router
from iam.controllers.auth_controller import router as auth_router
from iam.controllers.group_controller import router as group_router
from iam.controllers.module_controller import router as module_router
from iam.controllers.permission_controller import router as permission_router
from iam.controllers.role_controller import router as role_router
from iam.controllers.user_controller import router as user_router
from iam.core.config import settings
from iam.core.database import async_session_factory, engine
from iam.core.errors import register_exception_handlers
from iam.models import Base  # noqa: F401 — ensures all models are registered

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG or settings.TRACE_RESOLUTION else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    register_exception_handlers(app)

    # ── Register routers ─────────────────────────────────────────────
    app.include_router(auth_router)
    app.include_router(user_router)
    app.include_router(group_router)
    app.include_router(role_router)
    app.include_router(module_router)
    app.include_router(permission_router)
    app.include_router(assignment_router)
    app.include_router(access_router)

    # ── Startup / Shutdown ───────────────────────────────────────────
    @app.on_event("startup")
    async def on_startup() -> None:
        """Seed modules, permissions & the admin account on startup.

        NOTE: Database schema is managed by Alembic migrations.
        Run `alembic upgrade head` before starting the app.
        """
        if not settings.AUTO_SEED:
            logger.info("AUTO_SEED disabled; skipping seed.")
            return

        from iam.rbac.permission_seed import seed

        async with async_session_factory() as session:
            await seed(session)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await engine.dispose()
        logger.info("Database engine disposed.")

    # ── Health check ─────────────────────────────────────────────────
    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
