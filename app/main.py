import logging
import time
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import API_VERSION, CORS_ORIGINS, DEBUG, LOG_LEVEL, TASKS_FILE
from .errors import MalformedRequestError, StorageError, TaskAPIError
from .logging_config import setup_logging
from .models import format_timestamp
from .routers import tasks
from .schemas.task import HealthResponse

setup_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Task Manager API",
    description="Task management REST API backed by a JSON file",
    version=API_VERSION,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s -> %d (%.1fms)", request.method, request.url.path, response.status_code, elapsed_ms
    )
    return response


def _server_error_body(detail: str) -> dict:
    return {
        "error": "Internal server error",
        "message": detail if DEBUG else "Something went wrong",
    }


@app.exception_handler(TaskAPIError)
async def task_api_error_handler(request: Request, exc: TaskAPIError):
    if isinstance(exc, StorageError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=_server_error_body(exc.message))
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        malformed = MalformedRequestError()
        return JSONResponse(status_code=malformed.status_code, content=malformed.to_body())

    messages = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(status_code=400, content={"errors": messages})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(status_code=404, content={"error": "Route not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=_server_error_body(str(exc)))


# Include routers
app.include_router(tasks.router, prefix="/api", tags=["tasks"])


@app.on_event("startup")
def on_startup():
    logger.info("Task Manager API %s starting, data file: %s", API_VERSION, TASKS_FILE)


@app.get("/")
def read_root():
    return {"message": "Task Manager API"}


@app.get("/api/health", response_model=HealthResponse)
def health_check():
    return HealthResponse(
        status="OK",
        timestamp=format_timestamp(datetime.now(timezone.utc)),
        version=API_VERSION,
    )
