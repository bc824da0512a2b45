"""FastAPI application wrapper for the ingestion pipeline.

Runs the same ``IngestionService`` as the Lambda handler, backed by a
connection pool that lives for the lifetime of the application.
"""

import asyncio
import logging
import os

from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from .config import apply_log_level, load_lambda_config
from .constants import API_NAME
from .models.request import IngestRequest
from .repository import close_connection_pool, create_connection_pool
from .service import IngestionService, build_ingestion_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

INGEST_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the connection pool and service on startup, close the pool on shutdown."""
    config = load_lambda_config()
    apply_log_level(config.log_level)

    try:
        pool = await create_connection_pool(config)
    except Exception as e:
        logger.error(f"{API_NAME} Failed to initialize service on startup: {e}", exc_info=True)
        raise

    app.state.pool = pool
    app.state.service = build_ingestion_service(
        config,
        connection_factory=pool.acquire,
        release_connection=pool.release,
    )
    logger.info(f"{API_NAME} Service initialized on startup (connection pool)")

    yield

    app.state.service = None
    await close_connection_pool(pool)
    logger.info(f"{API_NAME} Service cleaned up")


app = FastAPI(title=API_NAME, version="1.0.0", lifespan=lifespan)


def get_service(request: Request) -> IngestionService:
    return request.app.state.service


@app.get("/health")
async def health_check():
    """Liveness probe; does not touch the database."""
    return {"status": "healthy", "message": "Tracker ingest API is healthy"}


@app.api_route("/ingest", methods=INGEST_METHODS)
async def ingest(request: Request, service: IngestionService = Depends(get_service)):
    """Accept a ping. Every method is routed here so the pipeline answers 405 itself."""
    ingest_request = IngestRequest(
        method=request.method,
        headers=dict(request.headers),
        raw_body=await request.body(),
        request_id=request.headers.get("x-request-id"),
    )
    response = await service.handle(ingest_request)
    return JSONResponse(status_code=response.status_code, content=response.body)


if __name__ == "__main__":
    import uvicorn

    # Force asyncio loop to avoid uvloop issues
    asyncio.set_event_loop_policy(asyncio.DefaultEventLoopPolicy())

    uvicorn.run(
        "tracker_ingest.app:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8080)),
        log_level="info",
        reload=False,
        loop="asyncio",
    )
