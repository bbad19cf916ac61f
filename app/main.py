import logging
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# .env from the project root wherever uvicorn is started from
_PROJ_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJ_ROOT / ".env")

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi.errors import RateLimitExceeded

from app.api.uploads import router as uploads_router
from app.core.config import cors_origins_list, settings
from app.core.rate_limit import limiter
from app.core.storage import StorageError, UploadStorage, get_storage, init_storage
from app.logging import setup_logging
from app.schemas import UploadErrorResponse

setup_logging()
log = logging.getLogger("mockapi")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_storage()
    storage = get_storage()
    log.info("Upload directory: %s", storage.content.directory.resolve())
    log.info("Dashboard: http://localhost:%s/uploads", settings.port)
    if settings.serialize_log_writes:
        log.info("Log writes serialized per log document")
    yield


app = FastAPI(
    title="Mock Upload API",
    description="Mock server for mobile uploads and QR code events",
    lifespan=lifespan,
)
app.state.limiter = limiter


def _error_response(request: Request, status_code: int, detail: str) -> JSONResponse:
    rid = getattr(request.state, "request_id", None)
    body = {"error": detail, "status_code": status_code}
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=status_code, content=body)


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    log.warning("Rate limit exceeded: path=%s detail=%s", request.url.path, exc.detail)
    return _error_response(request, 429, "Too many requests. Please wait a minute.")


app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)


@app.exception_handler(HTTPException)
def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(request, exc.status_code, exc.detail if isinstance(exc.detail, str) else str(exc.detail))


@app.exception_handler(StorageError)
def storage_exception_handler(request: Request, exc: StorageError) -> JSONResponse:
    log.exception("Storage failure: path=%s %s", request.url.path, exc, exc_info=exc)
    body = UploadErrorResponse(message="Could not store the submission.", reason="storage_error")
    return JSONResponse(status_code=500, content=body.model_dump())


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled exception: path=%s %s", request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Unexpected server error."})


@app.middleware("http")
async def request_id_and_latency(request: Request, call_next):
    request.state.request_id = str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    latency_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = request.state.request_id
    log.info(
        "request_id=%s method=%s path=%s status=%s latency_ms=%.2f",
        request.state.request_id,
        request.method,
        request.url.path,
        response.status_code,
        latency_ms,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(uploads_router)


@app.get("/", response_class=PlainTextResponse)
def index():
    return "Mock API is online!"


@app.get("/health")
def health(storage: UploadStorage = Depends(get_storage)):
    return {
        "status": "ok",
        "upload_dir": str(storage.content.directory),
        "uploads": len(storage.uploads),
        "events": len(storage.events),
    }
