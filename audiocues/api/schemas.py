"""Pydantic request/response models for API."""

from pydantic import BaseModel


class PitchResponse(BaseModel):
    time: float
    frequency: float


class AnalysisResponse(BaseModel):
    bpm: float
    confidence: float
    onsets: list[float]
    pitches: list[PitchResponse]


class AnalyzeUrlRequest(BaseModel):
    url: str | None = None
    method: str | None = None
    threshold: float | None = None
    silence: float | None = None


class ErrorResponse(BaseModel):
    error: str
