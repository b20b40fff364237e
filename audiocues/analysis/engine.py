"""Analysis orchestrator - runs the tempo, onset and pitch passes."""

import logging
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from pathlib import Path

from audiocues.analysis.aggregators import OnsetAggregator, PitchAggregator, TempoAggregator
from audiocues.analysis.detectors import AubioDetectorFactory, DetectorFactory
from audiocues.analysis.models import (
    AnalysisResult,
    DetectionParams,
    PitchSample,
    SampleBuffer,
    TempoEstimate,
    WindowConfig,
)
from audiocues.analysis.windows import HopScanner
from audiocues.audio.loader import decode_file
from audiocues.config import settings
from audiocues.errors import (
    AnalysisError,
    AnalysisTimeoutError,
    DetectorError,
    InsufficientDataError,
    InvalidInputError,
)

logger = logging.getLogger(__name__)


def run_tempo_pass(buffer: SampleBuffer, window: WindowConfig, detectors: DetectorFactory) -> TempoEstimate:
    """Scan the buffer with a fresh tempo detector and average its beat estimates."""
    detector = detectors.tempo(window, buffer.sample_rate)
    aggregator = TempoAggregator(window.hop_size)
    for _offset, hop in HopScanner(buffer.samples, window):
        aggregator.update(detector.process(hop), detector)
    return aggregator.result()


def run_onset_pass(
    buffer: SampleBuffer,
    window: WindowConfig,
    detectors: DetectorFactory,
    params: DetectionParams,
) -> list[float]:
    """Scan the buffer with a fresh onset detector and collect onset times."""
    detector = detectors.onset(window, buffer.sample_rate, params)
    aggregator = OnsetAggregator(buffer.sample_rate)
    for offset, hop in HopScanner(buffer.samples, window):
        aggregator.update(offset, detector.process(hop))
    return aggregator.result()


def run_pitch_pass(
    buffer: SampleBuffer,
    window: WindowConfig,
    detectors: DetectorFactory,
    method: str = "default",
) -> list[PitchSample]:
    """Scan the buffer with a fresh pitch detector and keep the voiced hops."""
    detector = detectors.pitch(window, buffer.sample_rate, method)
    aggregator = PitchAggregator(buffer.sample_rate)
    for offset, hop in HopScanner(buffer.samples, window):
        aggregator.update(offset, detector.process(hop))
    return aggregator.result()


class AnalysisEngine:
    """Runs the three detector passes over one clip and joins their results.

    Detectors are built inside each pass, so nothing stateful outlives a
    single ``analyze`` call. The passes share only the read-only buffer and
    run concurrently on a private thread pool.
    """

    def __init__(
        self,
        detectors: DetectorFactory | None = None,
        window: WindowConfig | None = None,
        timeout: float | None = None,
        pitch_method: str | None = None,
    ):
        self.detectors = detectors or AubioDetectorFactory()
        self.window = window or settings.window
        self.timeout = timeout if timeout is not None else settings.analysis_timeout
        self.pitch_method = pitch_method or settings.pitch_method

    def analyze_file(self, file_path: str | Path, params: DetectionParams | None = None) -> AnalysisResult:
        """Decode an audio file and analyze its first channel."""
        return self.analyze(decode_file(file_path), params)

    def analyze(self, buffer: SampleBuffer, params: DetectionParams | None = None) -> AnalysisResult:
        """Extract tempo, onsets and pitch from a decoded buffer.

        Raises ``InvalidInputError`` for a non-positive sample rate,
        ``InsufficientDataError`` when the buffer holds less than one hop or
        no beat is confirmed, ``DetectorError`` when a detector raises and
        ``AnalysisTimeoutError`` when the passes exceed ``timeout``.
        """
        if params is None:
            params = DetectionParams(
                method=settings.default_method,
                threshold=settings.default_threshold,
                silence=settings.default_silence,
            )
        self._validate(buffer)
        logger.info(
            f"Analyzing {buffer.duration:.1f}s of audio at {buffer.sample_rate}Hz "
            f"(window={self.window.buffer_size}, hop={self.window.hop_size}, method={params.method})"
        )

        pool = ThreadPoolExecutor(max_workers=3, thread_name_prefix="audiocues-pass")
        try:
            futures: dict[str, Future] = {
                "tempo": pool.submit(run_tempo_pass, buffer, self.window, self.detectors),
                "onset": pool.submit(run_onset_pass, buffer, self.window, self.detectors, params),
                "pitch": pool.submit(run_pitch_pass, buffer, self.window, self.detectors, self.pitch_method),
            }
            done, pending = wait(futures.values(), timeout=self.timeout, return_when=FIRST_EXCEPTION)

            # A failed pass aborts the analysis even if others are still running.
            for name, future in futures.items():
                exc = future.exception() if future in done else None
                if exc is None:
                    continue
                if isinstance(exc, AnalysisError):
                    raise exc
                logger.error(f"{name} detector failed", exc_info=exc)
                raise DetectorError(name, exc) from exc
            if pending:
                logger.error(f"Analysis exceeded {self.timeout:.0f}s; abandoning {len(pending)} pass(es)")
                raise AnalysisTimeoutError(self.timeout)

            tempo = futures["tempo"].result()
            onsets = futures["onset"].result()
            pitches = futures["pitch"].result()
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

        logger.info(
            f"  tempo {tempo.bpm:.1f} BPM (confidence {tempo.confidence:.2f}), "
            f"{len(onsets)} onsets, {len(pitches)} voiced hops"
        )
        return AnalysisResult(
            bpm=tempo.bpm,
            confidence=tempo.confidence,
            onsets=onsets,
            pitches=pitches,
        )

    def _validate(self, buffer: SampleBuffer) -> None:
        if buffer.sample_rate <= 0:
            raise InvalidInputError(f"Sample rate must be positive, got {buffer.sample_rate}")
        if len(buffer) < self.window.hop_size:
            raise InsufficientDataError(
                f"Audio too short: {len(buffer)} samples, need at least {self.window.hop_size}"
            )

