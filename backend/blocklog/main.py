import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import blocklog.models  # noqa: F401  registers tables on Base.metadata
from blocklog.api.routes import router
from blocklog.core.config import settings
from blocklog.core.errors import BlocklogError
from blocklog.core.logging import configure_logging
from blocklog.db.session import engine
from blocklog.models.base import Base

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("blocklog api started")
    yield


app = FastAPI(title="Blocklog API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BlocklogError)
async def handle_domain_error(request: Request, exc: BlocklogError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or "request", "message": err.get("msg", "invalid value")})
    return JSONResponse(
        status_code=400,
        content={
            "status_code": 400,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "path": request.url.path,
            "method": request.method,
            "message": "Validation failed",
            "errors": errors,
            "error": "Bad Request",
        },
    )


app.include_router(router)
