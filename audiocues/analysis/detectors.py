"""Per-hop tempo, onset and pitch detectors.

The pipeline only relies on the small protocols below. ``AubioDetectorFactory``
builds them on top of aubio. Every detector is stateful across hops, so a
fresh instance is built for every analysis call and never shared.
"""

from typing import Protocol

import numpy as np

from audiocues.analysis.models import DetectionParams, WindowConfig


class TempoDetector(Protocol):
    def process(self, hop: np.ndarray) -> bool:
        """Feed one hop. True when a beat was confirmed on it."""

    def bpm(self) -> float:
        """Running BPM estimate after the most recent hop."""

    def confidence(self) -> float:
        """Running confidence (0-1) after the most recent hop."""


class OnsetDetector(Protocol):
    def process(self, hop: np.ndarray) -> bool:
        """Feed one hop. True when an onset was detected on it."""


class PitchDetector(Protocol):
    def process(self, hop: np.ndarray) -> float:
        """Feed one hop. Returns the frequency in Hz, 0 for no pitch."""


class DetectorFactory(Protocol):
    def tempo(self, window: WindowConfig, sample_rate: int) -> TempoDetector: ...

    def onset(self, window: WindowConfig, sample_rate: int, params: DetectionParams) -> OnsetDetector: ...

    def pitch(self, window: WindowConfig, sample_rate: int, method: str) -> PitchDetector: ...


def _as_fvec(hop: np.ndarray) -> np.ndarray:
    import aubio

    # aubio wants a writeable array of its own float type
    return np.array(hop, dtype=aubio.float_type)


class AubioTempo:
    def __init__(self, window: WindowConfig, sample_rate: int) -> None:
        import aubio

        self._tempo = aubio.tempo("default", window.buffer_size, window.hop_size, sample_rate)

    def process(self, hop: np.ndarray) -> bool:
        return bool(self._tempo(_as_fvec(hop))[0])

    def bpm(self) -> float:
        return float(self._tempo.get_bpm())

    def confidence(self) -> float:
        return float(self._tempo.get_confidence())


class AubioOnset:
    def __init__(self, window: WindowConfig, sample_rate: int, params: DetectionParams) -> None:
        import aubio

        self._onset = aubio.onset(params.method, window.buffer_size, window.hop_size, sample_rate)
        self._onset.set_threshold(params.threshold)
        self._onset.set_silence(params.silence)

    def process(self, hop: np.ndarray) -> bool:
        return bool(self._onset(_as_fvec(hop))[0])


class AubioPitch:
    def __init__(self, window: WindowConfig, sample_rate: int, method: str = "default") -> None:
        import aubio

        self._pitch = aubio.pitch(method, window.buffer_size, window.hop_size, sample_rate)
        self._pitch.set_unit("Hz")

    def process(self, hop: np.ndarray) -> float:
        return float(self._pitch(_as_fvec(hop))[0])


class AubioDetectorFactory:
    """Builds aubio-backed detectors."""

    def tempo(self, window: WindowConfig, sample_rate: int) -> AubioTempo:
        return AubioTempo(window, sample_rate)

    def onset(self, window: WindowConfig, sample_rate: int, params: DetectionParams) -> AubioOnset:
        return AubioOnset(window, sample_rate, params)

    def pitch(self, window: WindowConfig, sample_rate: int, method: str) -> AubioPitch:
        return AubioPitch(window, sample_rate, method)
