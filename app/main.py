import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.logging import setup_logging
from app.core.middleware import RequestLoggingMiddleware
from app.infra.db import create_tables, get_session_factory
from app.infra.supabase_client import get_supabase, supabase_configured
from app.repositories.storage_repo import StorageRepository

# Routers
from app.routers.contracts import router as contracts_router
from app.routers.health import router as health_router

from app.services.accounts.account_provisioner import UsersServiceProvisioner
from app.services.geocoding.geocoder import NominatimGeocoder
from app.services.ingestion.pipeline import ContractImportPipeline
from app.services.notifications.notifier import LoginInfoNotifier

logger = logging.getLogger("contracts.boot")


def build_pipeline() -> ContractImportPipeline:
    """Default wiring; a collaborator without configuration stays None and is skipped."""
    return ContractImportPipeline(
        get_session_factory(),
        object_store=StorageRepository(get_supabase()) if supabase_configured() else None,
        geocoder=NominatimGeocoder(),
        account_provisioner=UsersServiceProvisioner() if settings.USERS_API_BASE_URL else None,
        notifier=LoginInfoNotifier() if settings.NOTIFIER_BASE_URL else None,
    )


def create_app(pipeline: ContractImportPipeline | None = None) -> FastAPI:
    app = FastAPI(title="Contract Import Service")

    # -------------------------------------------------
    # Middleware
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",
            "http://localhost:5174",
            "http://localhost:5175",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    if pipeline is not None:
        app.state.pipeline = pipeline

    # -------------------------------------------------
    # Startup
    # -------------------------------------------------
    @app.on_event("startup")
    def startup():
        setup_logging()
        if getattr(app.state, "pipeline", None) is not None:
            return

        create_tables()
        logger.info("[BOOT] Database ready: %s", settings.DATABASE_URL.split("@")[-1])

        app.state.pipeline = build_pipeline()
        logger.info(
            "[BOOT] Import pipeline wired (object_store=%s, users=%s, notifier=%s)",
            app.state.pipeline.object_store is not None,
            app.state.pipeline.account_provisioner is not None,
            app.state.pipeline.notifier is not None,
        )

    # -------------------------------------------------
    # Routers
    # -------------------------------------------------
    app.include_router(health_router, prefix="/api/v1/health", tags=["health"])
    app.include_router(contracts_router, prefix="/api/v1", tags=["contracts"])

    return app


app = create_app()
