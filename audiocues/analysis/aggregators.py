"""Fold per-hop detector verdicts into feature summaries."""

import math

from audiocues.analysis.correction import correct_bpm
from audiocues.analysis.detectors import TempoDetector
from audiocues.analysis.models import PitchSample, TempoEstimate
from audiocues.errors import InsufficientDataError


class TempoAggregator:
    """Mean of corrected BPM and confidence over confirmed-beat hops."""

    def __init__(self, hop_size: int) -> None:
        self.hop_size = hop_size
        self.sum_bpm = 0.0
        self.sum_confidence = 0.0
        self.count = 0

    def update(self, confirmed: bool, detector: TempoDetector) -> None:
        # The detector's running estimate is only trusted on beat hops.
        if not confirmed:
            return
        self.sum_bpm += correct_bpm(detector.bpm(), self.hop_size)
        self.sum_confidence += detector.confidence()
        self.count += 1

    def result(self) -> TempoEstimate:
        """Return the averaged estimate.

        Raises ``InsufficientDataError`` when no beat was confirmed or the
        mean is not finite.
        """
        if self.count == 0:
            raise InsufficientDataError("No beats detected; clip is too short or silent")
        bpm = self.sum_bpm / self.count
        confidence = self.sum_confidence / self.count
        if not (math.isfinite(bpm) and math.isfinite(confidence)):
            raise InsufficientDataError("Tempo estimate is not finite")
        return TempoEstimate(bpm=bpm, confidence=confidence)


class OnsetAggregator:
    def __init__(self, sample_rate: int) -> None:
        self.sample_rate = sample_rate
        self.onsets: list[float] = []

    def update(self, offset: int, detected: bool) -> None:
        if detected:
            self.onsets.append(offset / self.sample_rate)

    def result(self) -> list[float]:
        return list(self.onsets)


class PitchAggregator:
    """Time series of voiced hops; unvoiced (0 Hz) hops are skipped."""

    def __init__(self, sample_rate: int) -> None:
        self.sample_rate = sample_rate
        self.pitches: list[PitchSample] = []

    def update(self, offset: int, frequency: float) -> None:
        # `> 0` also rejects NaN
        if frequency > 0:
            self.pitches.append(PitchSample(time=offset / self.sample_rate, frequency=frequency))

    def result(self) -> list[PitchSample]:
        return list(self.pitches)
