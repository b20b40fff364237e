"""FastAPI application - serves the audio analysis API."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from audiocues.api.analyze import router as analyze_router
from audiocues.errors import AnalysisError, AnalysisTimeoutError

logger = logging.getLogger(__name__)

app = FastAPI(title="Audiocues", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analyze_router, prefix="/api")


@app.exception_handler(AnalysisError)
async def analysis_error_handler(request: Request, exc: AnalysisError):
    # Detector failures and timeouts are logged where they happen.
    if exc.status_code != 500 and not isinstance(exc, AnalysisTimeoutError):
        logger.warning(f"{request.url.path}: {exc.code}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}"
        for err in exc.errors()
    )
    logger.warning(f"{request.url.path}: invalid request: {problems}")
    return JSONResponse(status_code=400, content={"error": f"Invalid request: {problems}"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/api/health")
async def health():
    return {"status": "ok"}


def run():
    import uvicorn
    from audiocues.config import settings

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )
    uvicorn.run(
        "audiocues.main:app",
        host=settings.host,
        port=settings.port,
    )
