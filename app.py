"""Main FastAPI application for the Scaforge plugin service."""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv('.env')

# Configure logging before the scaforge modules create their loggers
log_level = os.getenv('LOG_LEVEL', 'INFO')
logging.basicConfig(
    level=getattr(logging, log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scaforge import __version__
from scaforge.errors import ScaforgeError
from scaforge.routers import plugins_router

app = FastAPI(
    title="Scaforge Plugin Service",
    description="Plugin catalog, dependency resolution and auto-integration rules",
    version=__version__,
)

# CORS_ORIGINS: comma-separated origins, "*" by default
cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)

app.include_router(plugins_router)  # /api/plugins, /api/project, /api/integrations


@app.exception_handler(ScaforgeError)
async def scaforge_error_handler(request: Request, exc: ScaforgeError):
    """Render resolver errors not converted by a router."""
    return JSONResponse(status_code=400, content={"detail": exc.to_dict()})


@app.get("/")
async def root():
    return {"message": "Scaforge Plugin Service API", "docs": "/docs"}


@app.on_event("startup")
async def startup_event():
    """Application startup event."""
    from scaforge.dependencies import get_catalog, get_config_store, get_rule_engine

    logger.info("Starting Scaforge Plugin Service")
    logger.info(f"Working directory: {Path.cwd()}")

    catalog = get_catalog()
    logger.info(f"Plugin catalog: {catalog.count()} plugins in {len(catalog.categories())} categories")

    get_rule_engine()

    store = get_config_store()
    if store.exists():
        logger.info(f"Project config: {store.path}")
    else:
        logger.warning(f"No project config at {store.path}, run 'manage_plugins.py init' first")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event."""
    logger.info("Shutting down Scaforge Plugin Service")


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", "9090"))
    uvicorn.run("app:app", host="0.0.0.0", port=port, reload=True)
