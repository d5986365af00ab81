from __future__ import annotations

from typing import Sequence

import numpy as np

DEFAULT_BAR_COUNT = 30


def visualizer_bars(magnitudes: Sequence[float] | np.ndarray, bar_count: int = DEFAULT_BAR_COUNT) -> tuple[float, ...]:
    """
    Downsample a byte-scale (0..255) frequency magnitude frame into bar heights in [0, 1].

    Bar ``i`` samples bin ``floor(i / bar_count * len(magnitudes))``. An empty
    or unusable frame yields all-zero bars.
    """
    count = max(1, int(bar_count))
    try:
        data = np.asarray(magnitudes, dtype=np.float64).ravel()
    except (TypeError, ValueError):
        return (0.0,) * count
    if data.size == 0:
        return (0.0,) * count

    indices = np.floor(np.arange(count) / count * data.size).astype(np.int64)
    sampled = np.nan_to_num(data[indices], nan=0.0, posinf=255.0, neginf=0.0)
    bars = np.clip(sampled / 255.0, 0.0, 1.0)
    return tuple(float(value) for value in bars)
