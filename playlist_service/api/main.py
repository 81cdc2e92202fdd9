from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from playlist_service.api.routes.catalog import router as catalog_router
from playlist_service.api.routes.playlists import router as playlists_router
from playlist_service.core.config import get_settings
from playlist_service.core.errors import PlaylistServiceError
from playlist_service.core.logging import get_logger
from playlist_service.db.init_db import create_all_tables
from playlist_service.middleware.observability import ObservabilityMiddleware

settings = get_settings()
logger = get_logger("playlist_service.api")

# Define OpenAPI tags for grouping
openapi_tags = [
    {"name": "Health", "description": "Service health and readiness."},
    {"name": "Playlists", "description": "Playlist and playlist track management APIs."},
    {"name": "Catalog", "description": "Track lookup and search."},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        create_all_tables()
        logger.info("database.tables_created")
    yield


app = FastAPI(
    title="Playlist Service API",
    description="Playlists with ordered track membership for the music platform.",
    version="1.0.0",
    contact={"name": "Backend Team"},
    license_info={"name": "Proprietary"},
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=openapi_tags,
    lifespan=lifespan,
)

# Apply CORS policy from configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS if settings.CORS_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Conditionally enable observability middleware
if settings.OBS_ENABLED:
    app.add_middleware(ObservabilityMiddleware)


@app.exception_handler(PlaylistServiceError)
async def handle_service_error(request: Request, exc: PlaylistServiceError) -> JSONResponse:
    """Render domain errors as {"detail", "code"} with the status the error maps to."""
    logger.info(
        "request.rejected",
        extra={"path": request.url.path, "code": exc.code, "status_code": exc.status_code},
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


@app.get(
    "/",
    summary="Health Check",
    description="Health check endpoint for liveness probes.\n\nReturns a simple JSON indicating the service is healthy.",
    tags=["Health"],
    responses={200: {"description": "Service is healthy"}},
)
def health_check():
    """Root health endpoint."""
    return {"message": "Healthy"}


app.include_router(playlists_router)
app.include_router(catalog_router)
