# daybook/main.py
import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from daybook import __version__
from daybook.api import auth, events, habits, todos
from daybook.config import settings
from daybook.core.exceptions import StorageError
from daybook.core.logging import setup_logging

setup_logging()
logger = logging.getLogger("daybook")


# ════════════════════════════════════════
# APP + MIDDLEWARE
# ════════════════════════════════════════

app = FastAPI(
    title="Daybook API",
    version=__version__,
    description="Calendar, todo list and habit tracker",
)
app.state.limiter = auth.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start    = time.time()
    response = await call_next(request)
    ms       = (time.time() - start) * 1000
    logger.info(f"{request.method} {request.url.path} → {response.status_code} ({ms:.0f}ms)")
    return response


# ════════════════════════════════════════
# ERROR HANDLERS  (all errors use the {success, error} envelope)
# ════════════════════════════════════════

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error: {exc.errors()}")
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"][1:])
        messages.append(f"{field}: {error['msg']}" if field else error["msg"])
    return JSONResponse(status_code=400, content={"success": False, "error": "; ".join(messages)})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"success": False, "error": "Storage failure. Please try again."})


@app.exception_handler(Exception)
async def global_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"success": False, "error": "Something went wrong. Please try again."})


# ════════════════════════════════════════
# ROUTES  (all under /api/)
# ════════════════════════════════════════

@app.get("/api/health")
def health_check():
    return {"status": "ok", "message": "Daybook API is running", "version": __version__}


app.include_router(auth.router)
app.include_router(habits.router)
app.include_router(todos.router)
app.include_router(events.router)
