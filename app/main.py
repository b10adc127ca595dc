import logging
import logging.config

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.config import settings
from app.deps import limiter
from app.routers.database import router as database_router
from app.routers.page import router as page_router
from app.routers.search import router as search_router
from app.services.gateway import Gateway

logging.config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "format": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
        },
        "root": {"level": "INFO", "handlers": ["console"]},
    }
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.API_TITLE,
    description="Reads Notion pages, databases and search results and returns them as plain text.",
    version=settings.API_VERSION,
)

# Rate-limiting state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# One gateway for the whole process: every request's remote calls share its slots.
app.state.gateway = Gateway(
    max_concurrent=settings.MAX_CONCURRENT_REQUESTS,
    timeout=settings.OPERATION_TIMEOUT,
)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception for %s", request.url)
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred."})


app.include_router(database_router)
app.include_router(page_router)
app.include_router(search_router)


@app.get("/", summary="Health check")
async def root() -> dict:
    return {"message": "Hello from the Notion text API"}
