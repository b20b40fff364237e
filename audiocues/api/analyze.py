"""Audio analysis endpoints (file upload and remote URL)."""

import asyncio

from fastapi import APIRouter, File, Form, UploadFile

from audiocues.analysis.engine import AnalysisEngine
from audiocues.analysis.models import AnalysisResult, DetectionParams, SampleBuffer
from audiocues.api.schemas import AnalysisResponse, AnalyzeUrlRequest, ErrorResponse, PitchResponse
from audiocues.audio.ingest import load_upload, load_url
from audiocues.config import settings

router = APIRouter(prefix="/audio")

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


def _params(method, threshold, silence) -> DetectionParams:
    return DetectionParams.from_fields(
        method,
        threshold,
        silence,
        defaults=DetectionParams(
            method=settings.default_method,
            threshold=settings.default_threshold,
            silence=settings.default_silence,
        ),
    )


def result_to_response(result: AnalysisResult) -> AnalysisResponse:
    return AnalysisResponse(
        bpm=result.bpm,
        confidence=result.confidence,
        onsets=list(result.onsets),
        pitches=[PitchResponse(time=p.time, frequency=p.frequency) for p in result.pitches],
    )


async def _run_analysis(buffer: SampleBuffer, params: DetectionParams) -> AnalysisResponse:
    # Fresh engine (and so fresh detectors) per request.
    engine = AnalysisEngine()
    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(None, engine.analyze, buffer, params)
    return result_to_response(result)


@router.post("/analyze", response_model=AnalysisResponse, responses=_ERROR_RESPONSES)
async def analyze_upload(
    audio: UploadFile | None = File(None),
    method: str | None = Form(None),
    threshold: str | None = Form(None),
    silence: str | None = Form(None),
):
    """Analyze an uploaded audio file for tempo, onsets and pitch."""
    params = _params(method, threshold, silence)
    buffer = await load_upload(audio)
    return await _run_analysis(buffer, params)


@router.post("/analyze-url", response_model=AnalysisResponse, responses=_ERROR_RESPONSES)
async def analyze_url(request: AnalyzeUrlRequest):
    """Fetch audio from a URL and analyze it."""
    params = _params(request.method, request.threshold, request.silence)
    buffer = await load_url(request.url)
    return await _run_analysis(buffer, params)
