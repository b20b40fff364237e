"""Audio file decoding."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import librosa

from audiocues.analysis.models import SampleBuffer
from audiocues.errors import DecodeError

logger = logging.getLogger(__name__)


def decode_file(file_path: Union[str, Path]) -> SampleBuffer:
    """Decode an audio file at its native sample rate.

    Only the first channel is kept; multi-channel input is not mixed down.

    Raises
    ------
    DecodeError
        If no available backend can read the file.
    """
    try:
        audio, sample_rate = librosa.load(file_path, sr=None, mono=False)
    except Exception as exc:
        raise DecodeError(f"Could not decode audio: {exc}") from exc

    if audio.ndim > 1:
        logger.debug(f"Using channel 0 of {audio.shape[0]}")
        audio = audio[0]
    return SampleBuffer(samples=audio, sample_rate=int(sample_rate))
