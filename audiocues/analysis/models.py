"""Core data models for clip feature extraction."""

from dataclasses import dataclass

import numpy as np

from audiocues.errors import InvalidInputError

# Onset detection functions understood by the onset detector.
ONSET_METHODS = frozenset({
    "default", "energy", "hfc", "complex", "phase",
    "wphase", "specdiff", "kl", "mkl", "specflux",
})


@dataclass(frozen=True)
class WindowConfig:
    """Analysis window width and hop stride, both in samples."""
    buffer_size: int = 4096
    hop_size: int = 256

    def __post_init__(self):
        if self.buffer_size <= 0 or self.hop_size <= 0:
            raise ValueError(
                f"buffer_size and hop_size must be positive "
                f"(got {self.buffer_size}, {self.hop_size})"
            )
        if self.hop_size > self.buffer_size:
            raise ValueError(
                f"hop_size ({self.hop_size}) must not exceed buffer_size ({self.buffer_size})"
            )


@dataclass(frozen=True)
class SampleBuffer:
    """Mono audio for one analysis call.

    ``samples`` is copied into a read-only contiguous float32 array, so hop
    slices can be handed to the detectors without further copies and no
    caller can mutate the buffer mid-analysis.
    """
    samples: np.ndarray
    sample_rate: int

    def __post_init__(self):
        samples = np.array(self.samples, dtype=np.float32)
        if samples.ndim != 1:
            raise ValueError(f"expected mono samples, got shape {samples.shape}")
        samples.flags.writeable = False
        object.__setattr__(self, "samples", samples)

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def duration(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return len(self.samples) / self.sample_rate


@dataclass(frozen=True)
class DetectionParams:
    """Request-scoped onset detection tunables."""
    method: str = "default"
    threshold: float = 1.1
    silence: float = -70.0  # dB

    @classmethod
    def from_fields(
        cls,
        method: str | None = None,
        threshold: str | float | None = None,
        silence: str | float | None = None,
        defaults: "DetectionParams | None" = None,
    ) -> "DetectionParams":
        """Build params from optional form/JSON fields.

        Missing or blank fields fall back to *defaults*. Raises
        ``InvalidInputError`` for unparsable numbers or an unknown method.
        """
        defaults = defaults or cls()
        method = (method or "").strip() or defaults.method
        if method not in ONSET_METHODS:
            raise InvalidInputError(
                f"Unknown detection method '{method}'. Use: {', '.join(sorted(ONSET_METHODS))}"
            )
        return cls(
            method=method,
            threshold=_parse_float("threshold", threshold, defaults.threshold),
            silence=_parse_float("silence", silence, defaults.silence),
        )


def _parse_float(name: str, value: str | float | None, default: float) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"'{name}' must be a number, got {value!r}") from None
    if not np.isfinite(parsed):
        raise InvalidInputError(f"'{name}' must be finite, got {value!r}")
    return parsed


@dataclass(frozen=True)
class TempoEstimate:
    bpm: float
    confidence: float  # 0.0-1.0


@dataclass(frozen=True)
class PitchSample:
    time: float  # seconds
    frequency: float  # Hz, always > 0


@dataclass(frozen=True)
class AnalysisResult:
    """Feature summary of a single clip.

    Onsets and pitches are stored as tuples so the result cannot change
    after construction.
    """
    bpm: float
    confidence: float
    onsets: tuple[float, ...] = ()
    pitches: tuple[PitchSample, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "onsets", tuple(self.onsets))
        object.__setattr__(self, "pitches", tuple(self.pitches))
