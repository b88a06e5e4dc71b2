from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from pressroom import __version__
from pressroom.api.routes import analyze, export, history, search, share, usage
from pressroom.config import settings
from pressroom.errors import PressroomError
from pressroom.services import logger as log_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    log_service.log_event(event_type="startup", message="Pressroom API starting")
    yield


app = FastAPI(
    title="Pressroom",
    description="Music press search with asynchronous article analysis",
    version=__version__,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(search.router)
app.include_router(analyze.router)
app.include_router(share.router)
app.include_router(usage.router)
app.include_router(history.router)
app.include_router(export.router)


@app.exception_handler(PressroomError)
async def pressroom_error_handler(request: Request, exc: PressroomError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [str(err.get("msg", "")) for err in exc.errors()]
    return JSONResponse(status_code=422, content={"error": "Invalid request", "details": details})


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "pressroom"}
