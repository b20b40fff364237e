"""Tests for hop scanning."""

import numpy as np

from audiocues.analysis.models import WindowConfig
from audiocues.analysis.windows import HopScanner


def test_hops_are_contiguous_and_hop_sized():
    samples = np.arange(1024, dtype=np.float32)
    scanner = HopScanner(samples, WindowConfig(buffer_size=512, hop_size=256))

    hops = list(scanner)

    assert [offset for offset, _ in hops] == [0, 256, 512, 768]
    for offset, hop in hops:
        assert len(hop) == 256
        assert hop[0] == offset


def test_partial_final_hop_is_dropped():
    samples = np.zeros(1000, dtype=np.float32)
    scanner = HopScanner(samples, WindowConfig(buffer_size=512, hop_size=256))

    offsets = [offset for offset, _ in scanner]

    assert offsets == [0, 256, 512]
    assert len(scanner) == 3
    assert all(offset + 256 <= len(samples) for offset in offsets)


def test_buffer_shorter_than_hop_yields_nothing():
    scanner = HopScanner(np.zeros(100, dtype=np.float32), WindowConfig(buffer_size=512, hop_size=256))
    assert list(scanner) == []
    assert len(scanner) == 0


def test_scanner_can_be_replayed():
    samples = np.random.default_rng(0).standard_normal(2048).astype(np.float32)
    scanner = HopScanner(samples, WindowConfig(buffer_size=1024, hop_size=512))

    first = [(o, h.copy()) for o, h in scanner]
    second = [(o, h.copy()) for o, h in scanner]

    assert [o for o, _ in first] == [o for o, _ in second]
    for (_, a), (_, b) in zip(first, second):
        np.testing.assert_array_equal(a, b)
