import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobtracker.config import settings
from jobtracker.errors import (
    DuplicateUrlError,
    InvalidInputError,
    NotFoundError,
    PersistenceError,
)
from jobtracker.routers import applications, backup

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("jobtracker")

app = FastAPI(
    title="Job Application Tracker",
    description="Tracks job application links in a single spreadsheet table",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotFoundError)
def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"error": "NOT_FOUND", "message": str(exc)})


@app.exception_handler(DuplicateUrlError)
def duplicate_url_handler(request: Request, exc: DuplicateUrlError):
    return JSONResponse(
        status_code=400,
        content={"error": "DUPLICATE_URL", "message": str(exc), "details": {"url": exc.url}},
    )


@app.exception_handler(InvalidInputError)
def invalid_input_handler(request: Request, exc: InvalidInputError):
    return JSONResponse(status_code=400, content={"error": "VALIDATION_ERROR", "message": str(exc)})


@app.exception_handler(PersistenceError)
def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error("Persistence failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={
            "error": "PERSISTENCE_ERROR",
            "message": "Changes could not be saved. Please try again.",
        },
    )


app.include_router(applications.router, prefix=settings.api_prefix)
app.include_router(backup.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
