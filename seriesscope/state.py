from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from seriesscope.adapters.normalize import normalize_series
from seriesscope.config import ChartConfig
from seriesscope.indexing import GroupSplit, KeyIndex, build_key_index, split_groups
from seriesscope.scales import ScaleSet, build_scales
from seriesscope.series import DroppedPoint, FlatPoint, KeyBucket, NormalizedData, Series
from seriesscope.stacking import StackLayout, build_stack


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartState:
    """One fully derived chart model. Replaced wholesale on every rebuild."""

    config: ChartConfig
    normalized: NormalizedData
    key_index: KeyIndex
    groups: GroupSplit
    scales: ScaleSet
    stack: StackLayout | None = None

    @property
    def key_type(self) -> str:
        return self.config.key.key_type

    @property
    def data_by_series(self) -> tuple[Series, ...]:
        return self.normalized.data_by_series

    @property
    def data_by_key(self) -> tuple[KeyBucket, ...]:
        return self.key_index.buckets

    @property
    def flat_points(self) -> tuple[FlatPoint, ...]:
        return self.normalized.flat_points

    @property
    def dropped(self) -> tuple[DroppedPoint, ...]:
        return self.normalized.dropped


def build_chart_state(raw: Any, config: ChartConfig) -> ChartState:
    """Run normalize -> index -> split -> stack -> scales and return the snapshot.

    Raises before returning anything if any stage fails, so callers can keep
    their previous state.
    """

    normalized = normalize_series(raw, config.key)
    key_index = build_key_index(normalized.flat_points, config.key)
    groups = split_groups(normalized.data_by_series)
    stack = None
    if config.is_stacked:
        stack = build_stack(key_index, normalized.series_ids, config.stack)
    scales = build_scales(normalized, key_index, groups, config, stack=stack)
    LOGGER.debug(
        "chart rebuilt: %d series, %d keys, chart_type=%s, second_axis=%s",
        len(normalized.data_by_series),
        len(key_index),
        config.scale.chart_type,
        scales.has_second_axis,
    )
    return ChartState(
        config=config,
        normalized=normalized,
        key_index=key_index,
        groups=groups,
        scales=scales,
        stack=stack,
    )
