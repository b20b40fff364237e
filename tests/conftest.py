"""Shared test fixtures for audio analysis tests."""

import threading

import httpx
import numpy as np
import pytest
import soundfile as sf
from fastapi.testclient import TestClient

from audiocues.analysis.engine import AnalysisEngine
from audiocues.config import settings
from audiocues.main import app


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """Point transient files at a per-test directory."""
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "upload_dir", path)
    return path


def leftover_files(path) -> list:
    return list(path.iterdir()) if path.exists() else []


def generate_sine(
    freq: float = 440.0,
    duration_seconds: float = 1.0,
    sr: int = 44100,
    amplitude: float = 0.5,
) -> np.ndarray:
    t = np.arange(int(duration_seconds * sr)) / sr
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


def generate_click_track(bpm: float = 120.0, duration_seconds: float = 10.0, sr: int = 44100) -> np.ndarray:
    """Generate a synthetic click track (short decaying 1 kHz bursts)."""
    n_samples = int(duration_seconds * sr)
    audio = np.zeros(n_samples, dtype=np.float32)

    click_samples = int(0.02 * sr)
    t_click = np.arange(click_samples) / sr
    click = np.sin(2 * np.pi * 1000 * t_click) * np.exp(-t_click * 100)

    time = 0.0
    while time < duration_seconds:
        start = int(time * sr)
        end = min(start + click_samples, n_samples)
        audio[start:end] += click[:end - start]
        time += 60.0 / bpm

    return audio * 0.8


def write_wav(path, audio: np.ndarray, sr: int) -> bytes:
    sf.write(str(path), audio, sr)
    return path.read_bytes()


# ---------------------------------------------------------------------------
# Fake detectors
# ---------------------------------------------------------------------------

class FakeTempo:
    """Confirms a beat every ``beat_every`` hops at a fixed BPM."""

    def __init__(self, bpm: float = 120.0, confidence: float = 0.8, beat_every: int = 4):
        self._bpm = bpm
        self._confidence = confidence
        self.beat_every = beat_every
        self.calls = 0

    def process(self, hop):
        self.calls += 1
        return self.calls % self.beat_every == 0

    def bpm(self):
        return self._bpm

    def confidence(self):
        return self._confidence


class LoudnessTempo:
    """Running estimate that depends on every hop seen so far."""

    def __init__(self):
        self.total = 0.0
        self.calls = 0

    def process(self, hop):
        self.total += float(np.abs(hop).mean())
        self.calls += 1
        return self.calls % 2 == 0

    def bpm(self):
        return 60.0 + 100.0 * self.total / self.calls

    def confidence(self):
        return min(1.0, self.total / self.calls)


class FakeOnset:
    """Reports an onset on every rising edge of the hop peak."""

    def __init__(self, params):
        self.params = params
        self._was_loud = False

    def process(self, hop):
        loud = float(np.abs(hop).max()) > 0.1
        onset = loud and not self._was_loud
        self._was_loud = loud
        return onset


class FakePitch:
    """Returns a fixed frequency for any hop that is not silent."""

    def __init__(self, frequency: float = 440.0):
        self.frequency = frequency

    def process(self, hop):
        rms = float(np.sqrt(np.mean(np.square(hop))))
        return self.frequency if rms > 0.01 else 0.0


class FakeDetectorFactory:
    """Builds fake detectors and remembers every instance it handed out."""

    def __init__(self, tempo=FakeTempo, onset=FakeOnset, pitch=FakePitch):
        self._tempo = tempo
        self._onset = onset
        self._pitch = pitch
        self.built = []
        self._lock = threading.Lock()

    def _record(self, detector):
        with self._lock:
            self.built.append(detector)
        return detector

    def tempo(self, window, sample_rate):
        return self._record(self._tempo())

    def onset(self, window, sample_rate, params):
        return self._record(self._onset(params))

    def pitch(self, window, sample_rate, method):
        return self._record(self._pitch())


@pytest.fixture
def fake_detectors():
    return FakeDetectorFactory()


@pytest.fixture
def fake_engine(monkeypatch, fake_detectors):
    """Route requests through an engine that uses fake detectors."""
    import audiocues.api.analyze as analyze_module

    monkeypatch.setattr(
        analyze_module,
        "AnalysisEngine",
        lambda: AnalysisEngine(detectors=fake_detectors),
    )
    return fake_detectors


@pytest.fixture
def mock_fetch(monkeypatch):
    """Install an ``httpx.MockTransport`` handler for outgoing fetches."""
    real_client = httpx.AsyncClient

    def install(handler):
        transport = httpx.MockTransport(handler)

        def client_factory(*args, **kwargs):
            return real_client(*args, transport=transport, **kwargs)

        monkeypatch.setattr(httpx, "AsyncClient", client_factory)

    return install
