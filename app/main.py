import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import SubscriptionError
from app.routers import plans, subscription_service, subscriptions
from app.schemas.subscription import ErrorResult
from app.services.scheduler import start_scheduler, stop_scheduler

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(title="Course Subscriptions API", debug=settings.debug, lifespan=lifespan)


@app.exception_handler(SubscriptionError)
async def subscription_error_handler(request: Request, exc: SubscriptionError):
    """Render lifecycle errors as an ErrorResult body."""
    if exc.status_code >= 500:
        logger.error(f"{request.url.path} failed with {exc.code}: {exc.message}")
    else:
        logger.info(f"{request.url.path} rejected with {exc.code}: {exc.message}")

    body = ErrorResult(code=exc.code, error=exc.message, details=exc.details)
    # Older clients expect every lifecycle response to be a 200
    status_code = status.HTTP_200_OK if settings.legacy_error_envelope else exc.status_code
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


app.include_router(plans.router)
app.include_router(subscriptions.router)
app.include_router(subscription_service.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
