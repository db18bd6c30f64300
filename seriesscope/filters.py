from __future__ import annotations

from typing import Any

from seriesscope.config import KeyConfig
from seriesscope.keys import coerce_key, sort_key_for
from seriesscope.series import Key, NormalizedData, Series


def filter_by_extent(normalized: NormalizedData, extent: tuple[Any, Any], key_config: KeyConfig) -> tuple[Series, ...]:
    """Series restricted to points whose key lies inside `extent` (inclusive).

    Endpoints may be given in either order. String keys compare in the same
    order the normalizer sorts them.
    """

    order = sort_key_for(key_config)
    lo: Key = coerce_key(extent[0], key_config.key_type)
    hi: Key = coerce_key(extent[1], key_config.key_type)
    lo_rank, hi_rank = order(lo), order(hi)
    if hi_rank < lo_rank:
        lo_rank, hi_rank = hi_rank, lo_rank
    return tuple(
        Series(
            id=series.id,
            label=series.label,
            group=series.group,
            values=tuple(p for p in series.values if lo_rank <= order(p.key) <= hi_rank),
        )
        for series in normalized.data_by_series
    )
