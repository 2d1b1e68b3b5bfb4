"""
Name Registry -- Application entry point.

Run with:
    uvicorn registry.main:app --reload

or `python -m registry.main` (honours HOST / PORT).

Then open http://localhost:3000 for the submission form,
http://localhost:3000/admin for the admin panel,
or http://localhost:3000/docs for the interactive Swagger UI.

This file:
  1. Creates the FastAPI application
  2. Adds CORS and request-logging middleware
  3. Maps RegistryError subclasses to {"error": ...} JSON responses
  4. Builds the record store and session cache at startup (lifespan)
  5. Mounts the route modules, the two HTML pages and /health
"""

import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager, suppress
from datetime import timedelta
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from registry import __version__
from registry.config import Settings, load_settings
from registry.errors import ConfigError, RegistryError
from registry.models.schemas import HealthResponse
from registry.routes import admin, records, submit
from registry.sessions import SessionCache, run_sweeper
from registry.store import RecordStore, build_store
from registry.timeutil import utc_now, utc_timestamp

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)

FRONTEND_DIR = Path(__file__).resolve().parent.parent / "frontend"

BAD_REQUEST = "Geçersiz istek"


def create_app(
    settings: Settings | None = None,
    store: RecordStore | None = None,
    sessions: SessionCache | None = None,
) -> FastAPI:
    """Build the application.

    Anything not passed in is created at startup from the environment.
    Configuration errors surface at startup, not at import time, so the
    module can be imported without a complete environment.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            cfg = settings if settings is not None else load_settings()
        except ConfigError as e:
            logger.critical("Configuration error: %s", e)
            raise

        logging.getLogger().setLevel(cfg.log_level)

        app.state.settings = cfg
        app.state.store = store if store is not None else build_store(cfg)
        # An empty SessionCache is falsy, hence the explicit None check
        app.state.sessions = sessions if sessions is not None else SessionCache(
            cfg.admin_username,
            cfg.admin_password,
            ttl=timedelta(hours=cfg.session_ttl_hours),
        )
        sweeper = asyncio.create_task(run_sweeper(app.state.sessions, cfg.session_sweep_seconds))
        logger.info("Record store ready: %s", app.state.store.describe())

        yield

        sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper
        await app.state.store.close()

    app = FastAPI(
        lifespan=lifespan,
        title="Name Registry",
        version=__version__,
        description=(
            "Collects name submissions from a public form and lists them, "
            "newest first, to an authenticated admin.\n\n"
            "| Endpoint | Purpose |\n"
            "|----------|--------|\n"
            "| `POST /api/submit` | Register a name |\n"
            "| `POST /api/admin/login` | Exchange admin credentials for a bearer token |\n"
            "| `GET /api/records` | List all submissions (bearer token required) |\n"
            "| `GET /health` | Liveness and configuration flags |\n"
        ),
    )

    # -----------------------------------------------------------------------
    # Middleware
    # -----------------------------------------------------------------------

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    # -----------------------------------------------------------------------
    # Error responses
    # -----------------------------------------------------------------------

    @app.exception_handler(RegistryError)
    async def registry_error(request: Request, exc: RegistryError):
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def bad_request(request: Request, exc: RequestValidationError):
        logger.info("Rejected malformed %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse({"error": BAD_REQUEST}, status_code=400)

    # -----------------------------------------------------------------------
    # API routes
    # -----------------------------------------------------------------------

    app.include_router(submit.router)
    app.include_router(admin.router)
    app.include_router(records.router)

    # -----------------------------------------------------------------------
    # Frontend pages
    # -----------------------------------------------------------------------

    @app.get("/", include_in_schema=False)
    async def index_page():
        """Serve the public submission form."""
        return FileResponse(FRONTEND_DIR / "index.html")

    @app.get("/admin", include_in_schema=False)
    async def admin_page():
        """Serve the admin panel."""
        return FileResponse(FRONTEND_DIR / "admin.html")

    # -----------------------------------------------------------------------
    # Health check
    # -----------------------------------------------------------------------

    @app.get(
        "/health",
        response_model=HealthResponse,
        summary="Health check",
        description="Liveness plus which storage settings are present. Never exposes secret values.",
        tags=["System"],
    )
    async def health(request: Request) -> HealthResponse:
        cfg: Settings = request.app.state.settings
        info = request.app.state.store.describe()
        return HealthResponse(
            timestamp=utc_timestamp(utc_now()),
            backend=info["backend"],
            data_file=info.get("data_file"),
            supabase_url_configured=bool(cfg.supabase_url),
            supabase_key_configured=bool(cfg.supabase_key),
            admin_configured=bool(cfg.admin_username and cfg.admin_password),
            active_sessions=len(request.app.state.sessions),
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "registry.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
    )
