"""
EDC Catalog - FastAPI application entry point.

This module builds the FastAPI application serving the management API of
the catalog: assets, policy definitions, contract definitions, and catalog
generation. It composes the metadata stores and the catalog matcher
explicitly and hands them to the routes through `app.state`.

Run it with `edc-catalog` (see `run`) or `uvicorn edc_catalog.main:app`.
"""

from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from edc_catalog.core.config import Settings, get_settings
from edc_catalog.db.client import CatalogStores, init_stores
from edc_catalog.routes import assets_routes, catalog_routes, contracts_routes, policies_routes
from edc_catalog.services.sample_data_service import register_sample_data
from edc_catalog.util.monitor import Monitor, configure_logging

__version__ = "0.1.0"


def create_app(settings: Optional[Settings] = None, stores: Optional[CatalogStores] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings (Optional[Settings]): Runtime settings; read from the
            environment when omitted.
        stores (Optional[CatalogStores]): Prebuilt stores; empty stores are
            created when omitted.

    Returns:
        FastAPI: The configured application.
    """

    settings = settings or get_settings()
    stores = stores or init_stores(Monitor("edc_catalog"))

    # --------------------------------------------------------------------------
    # Application initialization
    # --------------------------------------------------------------------------

    app = FastAPI(
        title=settings.api_title,
        description="Management API of an EDC catalog: assets, policy definitions and contract definitions",
        version=__version__,
    )

    app.state.settings = settings
    app.state.stores = stores

    # --------------------------------------------------------------------------
    # Middleware configuration
    # --------------------------------------------------------------------------

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # malformed bodies map to 400
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    # --------------------------------------------------------------------------
    # Application startup events
    # --------------------------------------------------------------------------

    @app.on_event("startup")
    async def startup_catalog():
        """
        Register the sample data, when enabled, before handling requests.
        """

        monitor = stores.monitor
        monitor.info("========================================")
        monitor.info(f"Starting {settings.api_title}")
        monitor.info("========================================")
        if settings.seed_sample_data:
            register_sample_data(stores, settings.management_path)
        else:
            monitor.info("Sample data disabled (EDC_SEED_SAMPLE_DATA=false)")
        monitor.info(f"Management API: {settings.management_path}/v3/*")

    # --------------------------------------------------------------------------
    # API routes registration
    # --------------------------------------------------------------------------

    base = f"{settings.management_path.rstrip('/')}/v3"

    app.include_router(assets_routes.router, prefix=f"{base}/assets", tags=["Assets"])
    app.include_router(policies_routes.router, prefix=f"{base}/policydefinitions", tags=["Policy Definitions"])
    app.include_router(contracts_routes.router, prefix=f"{base}/contractdefinitions", tags=["Contract Definitions"])
    app.include_router(catalog_routes.router, prefix=f"{base}/catalog", tags=["Catalog"])

    return app


def run() -> None:
    """Serve the management API with uvicorn, using the environment settings."""

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.management_port)


app = create_app()


if __name__ == "__main__":
    run()
