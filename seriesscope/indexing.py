from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from typing import Any, Sequence

from seriesscope.config import KeyConfig
from seriesscope.errors import AxisGroupOverflowError
from seriesscope.series import FlatPoint, Key, KeyBucket, Series


MAX_AXIS_GROUPS = 2


@dataclass(frozen=True)
class KeyIndex:
    """Ordered per-key buckets with exact and left-bisection lookup."""

    buckets: tuple[KeyBucket, ...]
    key_type: str
    _positions: dict[Key, int] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        positions: dict[Key, int] = {}
        for i, bucket in enumerate(self.buckets):
            positions.setdefault(bucket.key, i)
        object.__setattr__(self, "_positions", positions)

    def __len__(self) -> int:
        return len(self.buckets)

    @property
    def keys(self) -> tuple[Key, ...]:
        return tuple(b.key for b in self.buckets)

    def position(self, key: Key) -> int | None:
        return self._positions.get(key)

    def bisect_left(self, key: Key) -> int:
        """Index of the first bucket whose key is >= `key` (continuous key types)."""

        if self.key_type == "string":
            pos = self.position(key)
            return len(self.buckets) if pos is None else pos
        return bisect.bisect_left(self.buckets, key, key=lambda b: b.key)

    def nearest(self, key: Key | None) -> KeyBucket | None:
        if key is None or not self.buckets:
            return None
        try:
            idx = self.bisect_left(key)
        except TypeError:
            # Query key of the wrong kind (e.g. a number against time buckets).
            return None
        if idx >= len(self.buckets):
            return None
        return self.buckets[idx]


def build_key_index(flat_points: Sequence[FlatPoint], key_config: KeyConfig) -> KeyIndex:
    grouped: dict[Key, list[FlatPoint]] = {}
    for point in flat_points:
        grouped.setdefault(point.key, []).append(point)
    buckets = tuple(KeyBucket(key=key, series=tuple(points)) for key, points in grouped.items())
    return KeyIndex(buckets=buckets, key_type=key_config.key_type)


@dataclass(frozen=True)
class GroupSplit:
    primary: Any = None
    secondary: Any = None
    primary_ids: tuple[Any, ...] = ()
    secondary_ids: tuple[Any, ...] = ()

    @property
    def group_keys(self) -> tuple[Any, ...]:
        if not self.primary_ids:
            return ()
        if not self.secondary_ids:
            return (self.primary,)
        return (self.primary, self.secondary)

    @property
    def has_second_axis(self) -> bool:
        return bool(self.secondary_ids)

    def axis_for(self, series_id: Any) -> int:
        return 2 if series_id in self.secondary_ids else 1


def split_groups(data_by_series: Sequence[Series]) -> GroupSplit:
    """Assign series to axis 1 / axis 2 by the first two distinct `group` values seen."""

    order: list[Any] = []
    members: dict[int, list[Any]] = {}
    for series in data_by_series:
        slot = _slot_of(order, series.group)
        if slot is None:
            order.append(series.group)
            slot = len(order) - 1
        members.setdefault(slot, []).append(series.id)
    if len(order) > MAX_AXIS_GROUPS:
        raise AxisGroupOverflowError(tuple(order))
    if not order:
        return GroupSplit()
    if len(order) == 1:
        return GroupSplit(primary=order[0], primary_ids=tuple(members[0]))
    return GroupSplit(
        primary=order[0],
        secondary=order[1],
        primary_ids=tuple(members[0]),
        secondary_ids=tuple(members[1]),
    )


def _slot_of(order: list[Any], group: Any) -> int | None:
    for i, existing in enumerate(order):
        if existing == group:
            return i
    return None
