"""
FastAPI Main Application

YouTube Viral Analyzer Web Interface
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from fastapi.responses import HTMLResponse, JSONResponse
from contextlib import asynccontextmanager
from pathlib import Path
import sys

# Add project root to path
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

from api.routes import auth, analysis, thumbnails
from api.middleware.auth_gate import SessionGateMiddleware
from channels import list_channels
from errors import AppError
from schemas import describe_validation_error
from utils import safe_return_path, setup_logger
import config


logger = setup_logger("api", config.LOG_FILE, config.LOG_LEVEL)
setup_logger("services", config.LOG_FILE, config.LOG_LEVEL)
setup_logger("errors", config.LOG_FILE, config.LOG_LEVEL)


# ============================================================================
# LIFESPAN (startup/shutdown)
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup checks."""
    if not config.APP_PASSWORD:
        logger.error("APP_PASSWORD is not set - every protected route will reject requests")
    if not config.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY is not set - analysis and generation will fail")
    if not (config.BUNNY_STORAGE_ZONE and config.BUNNY_ACCESS_KEY and config.BUNNY_CDN_HOST):
        logger.warning("Bunny CDN not configured - thumbnails will use temporary provider URLs")

    logger.success(f"YouTube Viral Analyzer {config.APP_VERSION} ready")
    yield


# ============================================================================
# APP CREATION
# ============================================================================

app = FastAPI(
    title="YouTube Viral Analyzer",
    description="Password-protected YouTube metadata and thumbnail generator",
    version=config.APP_VERSION,
    lifespan=lifespan
)

# Session check on every non-public path
app.add_middleware(SessionGateMiddleware)

# Static files
STATIC_DIR = ROOT_DIR / "static"
STATIC_DIR.mkdir(exist_ok=True)
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

# Templates
TEMPLATES_DIR = ROOT_DIR / "templates"
TEMPLATES_DIR.mkdir(exist_ok=True)
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


# ============================================================================
# SECURITY HEADERS MIDDLEWARE
# ============================================================================

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
    "X-DNS-Prefetch-Control": "on",
}


@app.middleware("http")
async def security_headers_middleware(request: Request, call_next):
    """Attach the security headers to every response, gate rejections included."""
    response = await call_next(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    return response


# ============================================================================
# ERROR HANDLERS
# ============================================================================

def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return error_response(400, describe_validation_error(exc.errors()))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
    return error_response(500, "Something went wrong")


# ============================================================================
# ROUTES
# ============================================================================

# API routes
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(analysis.router, prefix="/api", tags=["analysis"])
app.include_router(thumbnails.router, prefix="/api", tags=["thumbnails"])


# ============================================================================
# FRONTEND ROUTES
# ============================================================================

@app.get("/login", response_class=HTMLResponse)
async def login_page(request: Request):
    """Login page. ?from= is where to go after a successful login."""
    target = safe_return_path(request.query_params.get("from"))
    return templates.TemplateResponse(request, "login.html", {"return_to": target})


@app.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Main page - transcript analyzer."""
    return templates.TemplateResponse(
        request,
        "index.html",
        {"channels": list_channels(), "max_transcript_length": config.MAX_TRANSCRIPT_LENGTH}
    )


# ============================================================================
# HEALTH CHECK
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": config.APP_VERSION}


# ============================================================================
# RUN
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=config.SERVER_HOST,
        port=config.SERVER_PORT,
        reload=config.DEBUG_MODE,
        reload_dirs=[str(ROOT_DIR)]
    )
