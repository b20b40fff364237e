"""Hop-size dependent tempo correction.

The tempo detector overestimates BPM by an amount that grows with the BPM
itself and with the hop size. Each confirmed-beat estimate is scaled by::

    bpm * (1 - (bpm / TEMPO_NORMALIZATION / 100) * (hop_size / REFERENCE_HOP))

The constants are empirical. Changing them breaks comparability with
earlier analyses.
"""

TEMPO_NORMALIZATION = 95
REFERENCE_HOP = 512


def correct_bpm(raw_bpm: float, hop_size: int) -> float:
    """Apply the hop-size correction to one raw tempo estimate."""
    return raw_bpm * (1 - (raw_bpm / TEMPO_NORMALIZATION / 100) * (hop_size / REFERENCE_HOP))
