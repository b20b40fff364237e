"""Non-overlapping hop iteration over a mono sample buffer."""

from collections.abc import Iterator

import numpy as np

from audiocues.analysis.models import WindowConfig


class HopScanner:
    """Walk *samples* in ``hop_size`` strides.

    Yields ``(offset, hop)`` pairs for offsets ``0, hop, 2*hop, ...`` while
    ``offset + hop_size <= len(samples)``. A trailing partial hop is dropped,
    never zero-padded. Each ``iter()`` starts a fresh scan, so one scanner
    can feed several detector passes.
    """

    def __init__(self, samples: np.ndarray, window: WindowConfig) -> None:
        self._samples = samples
        self._hop = window.hop_size

    def __len__(self) -> int:
        return len(self._samples) // self._hop

    def __iter__(self) -> Iterator[tuple[int, np.ndarray]]:
        hop = self._hop
        offset = 0
        while offset + hop <= len(self._samples):
            yield offset, self._samples[offset:offset + hop]
            offset += hop
