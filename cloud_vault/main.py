import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import sessionmaker

from cloud_vault.core.config import Settings, get_settings
from cloud_vault.core.errors import register_error_handlers
from cloud_vault.models import file, user  # noqa: F401  register tables
from cloud_vault.models.database import Base, build_engine, build_session_factory
from cloud_vault.routers import admin, auth, files
from cloud_vault.services.auth import seed_default_admin
from cloud_vault.services.storage import ObjectStorage

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def seed_admin(session_factory: sessionmaker, settings: Settings) -> None:
    """Create the default admin; failures are logged, never raised."""
    db = session_factory()
    try:
        admin_user = seed_default_admin(
            db,
            settings.default_admin_username,
            settings.default_admin_password,
            settings.password_hash_method,
        )
        if admin_user:
            logger.info("Default admin created: %s", admin_user.username)
        else:
            logger.info("Admin user already present, skipping seed")
    except Exception:
        logger.exception("Could not create default admin")
    finally:
        db.close()


def create_app(settings: Settings | None = None, storage: ObjectStorage | None = None) -> FastAPI:
    settings = settings or get_settings()
    engine = build_engine(settings)
    session_factory = build_session_factory(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Base.metadata.create_all(bind=engine)
        seed_admin(session_factory, settings)
        yield
        engine.dispose()

    app = FastAPI(title="Cloud Vault", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.storage = storage or ObjectStorage.from_settings(settings)

    register_error_handlers(app)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info("%s %s %s in %dms", request.method, request.url.path, status_code, duration_ms)

    # include our routers
    app.include_router(auth.router)
    app.include_router(files.router)
    app.include_router(admin.router)

    @app.get("/", response_class=HTMLResponse)
    def home(request: Request):
        return templates.TemplateResponse(request, "index.html", {"title": app.title})

    return app


def run() -> None:
    settings = get_settings()  # raises without DATABASE_URL
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(settings)
    logger.info("Cloud Vault listening on port %s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
