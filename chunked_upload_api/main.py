"""
Main FastAPI application entry point.
Configures and initializes the Chunked Upload API.
"""
import logging
from fastapi import FastAPI, Request
from mangum import Mangum
from chunked_upload_api.core.config import settings
from chunked_upload_api.core.exception_handler import register_exception_handlers
from chunked_upload_api.core.logging_config import setup_logging
from chunked_upload_api.api.routes import health_routes, upload_routes

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="Resumable chunked uploads for large video files",
    root_path=f"/{settings.environment}"
)

# Register exception handlers
register_exception_handlers(app)

# Register routes
app.include_router(health_routes.router)
app.include_router(upload_routes.router)


# Middleware to log request paths
@app.middleware("http")
async def log_request(request: Request, call_next):
    logger.info("%s %s", request.method, request.url.path)
    response = await call_next(request)
    return response

# Lambda handler for AWS
handler = Mangum(app, lifespan="off")


# For local development
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
