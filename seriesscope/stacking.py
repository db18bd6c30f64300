from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Sequence

import numpy as np

from seriesscope.config import StackConfig
from seriesscope.indexing import KeyIndex
from seriesscope.series import Key


LOGGER = logging.getLogger(__name__)

Band = tuple[float, float]


@dataclass(frozen=True)
class StackRow:
    key: Key
    values: dict[Any, float | None]
    total: float


@dataclass(frozen=True)
class StackLayout:
    series_ids: tuple[Any, ...]
    rows: tuple[StackRow, ...]
    bands: dict[Any, tuple[Band | None, ...]]
    domain: tuple[float, float]

    def band(self, series_id: Any, row: int) -> Band | None:
        return self.bands[series_id][row]

    def bands_at(self, row: int) -> dict[Any, Band | None]:
        return {sid: self.bands[sid][row] for sid in self.series_ids}


def build_stack(key_index: KeyIndex, series_ids: Sequence[Any], config: StackConfig) -> StackLayout:
    """Cumulative [y0, y1] bands per key, stacked in series insertion order.

    Missing or null values count as 0 unless `config.retain_nulls`, in which case
    they stay null, get no band and are left out of the running sum.
    """

    ids = tuple(series_ids)
    column = {sid: c for c, sid in enumerate(ids)}
    n_rows = len(key_index.buckets)
    matrix = np.full((n_rows, len(ids)), np.nan, dtype=np.float64)

    for r, bucket in enumerate(key_index.buckets):
        for point in bucket.series:
            if point.value is None:
                continue
            c = column[point.id]
            if np.isnan(matrix[r, c]):
                matrix[r, c] = point.value
                continue
            LOGGER.warning("series %r has duplicate key %r; summing values for stacking", point.id, bucket.key)
            matrix[r, c] += point.value

    if not config.retain_nulls:
        matrix = np.nan_to_num(matrix, nan=0.0)
    filled = np.nan_to_num(matrix, nan=0.0)
    y1 = np.cumsum(filled, axis=1)
    y0 = y1 - filled
    totals = filled.sum(axis=1)
    missing = np.isnan(matrix)

    rows = tuple(
        StackRow(
            key=bucket.key,
            values={sid: (None if missing[r, c] else float(matrix[r, c])) for sid, c in column.items()},
            total=float(totals[r]),
        )
        for r, bucket in enumerate(key_index.buckets)
    )
    bands = {
        sid: tuple(
            None if missing[r, c] else (float(y0[r, c]), float(y1[r, c]))
            for r in range(n_rows)
        )
        for sid, c in column.items()
    }
    return StackLayout(series_ids=ids, rows=rows, bands=bands, domain=_stack_domain(y0, y1))


def _stack_domain(y0: np.ndarray, y1: np.ndarray) -> tuple[float, float]:
    if y1.size == 0:
        return (0.0, 0.0)
    lo = min(0.0, float(np.min(y0)), float(np.min(y1)))
    hi = max(0.0, float(np.max(y1)), float(np.max(y0)))
    return (lo, hi)
