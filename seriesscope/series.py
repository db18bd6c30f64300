from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Union


Key = Union[dt.datetime, float, str]


@dataclass(frozen=True)
class DataPoint:
    key: Key
    value: float | None


@dataclass(frozen=True)
class Series:
    id: Any
    label: str
    group: Any
    values: tuple[DataPoint, ...] = ()


@dataclass(frozen=True)
class FlatPoint:
    id: Any
    label: str
    group: Any
    key: Key
    value: float | None


@dataclass(frozen=True)
class KeyBucket:
    key: Key
    series: tuple[FlatPoint, ...]

    def value_for(self, series_id: Any) -> float | None:
        for point in self.series:
            if point.id == series_id:
                return point.value
        return None


@dataclass(frozen=True)
class DroppedPoint:
    series_id: Any
    index: int
    raw_key: Any
    reason: str


@dataclass(frozen=True)
class NormalizedData:
    data_by_series: tuple[Series, ...]
    flat_points: tuple[FlatPoint, ...]
    dropped: tuple[DroppedPoint, ...] = ()

    @property
    def series_ids(self) -> tuple[Any, ...]:
        return tuple(s.id for s in self.data_by_series)
