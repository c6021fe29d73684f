import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import uploads
from .config import settings
from .database import init_db
from .errors import AcadriveError, field_errors
from .routes.faculty import router as faculty_router
from .routes.upload import router as upload_router

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and the uploads directory on startup."""
    if not settings.jwt_secret:
        logger.warning("JWT_SECRET is not set; authenticated endpoints will fail")
    init_db()
    uploads.uploads_dir()
    logger.info("Acadrive API ready (uploads in %s)", settings.uploads_dir)
    yield


# FastAPI App Initialization
app = FastAPI(title="Acadrive API", lifespan=lifespan)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(AcadriveError)
async def acadrive_error_handler(request: Request, exc: AcadriveError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Validation failed", "errors": field_errors(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"error": "Route not found"})
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


app.include_router(faculty_router, prefix=settings.api_prefix)
app.include_router(upload_router, prefix=settings.api_prefix)


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Server is running!"


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


@app.get(uploads.PUBLIC_PREFIX + "/{filename}")
async def get_upload(filename: str):
    """Serves an uploaded file."""
    return FileResponse(uploads.resolve(filename))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("backend.main:app", host="0.0.0.0", port=8000)
