import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from app.api import analytics, correlation
from app.api.errors import describe_validation_errors, validation_error
from app.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Flare Insights", version="0.1.0")


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Malformed parameters (wrong types, unparseable numbers) get the same
    400 error body as missing ones instead of FastAPI's default 422.
    """
    message = describe_validation_errors(exc.errors())
    logger.info("Rejected request to %s: %s", request.url.path, message)
    return validation_error("Invalid request parameters", message)


# Include routers
app.include_router(correlation.router)
app.include_router(analytics.router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
