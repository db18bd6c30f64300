from __future__ import annotations

from collections.abc import Mapping, Sequence
import logging
import math
from typing import Any

import numpy as np

from seriesscope.config import KeyConfig
from seriesscope.errors import ChartDataError, UnparsableKeyError
from seriesscope.keys import coerce_key, sort_key_for
from seriesscope.series import DataPoint, DroppedPoint, FlatPoint, NormalizedData, Series


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]

try:
    import torch
except Exception:  # pragma: no cover - optional dependency
    torch = None  # type: ignore[assignment]


LOGGER = logging.getLogger(__name__)

_FRAME_COLUMNS = ("id", "key", "value")


def normalize_series(raw: Any, key_config: KeyConfig) -> NormalizedData:
    """Clone, coerce and sort raw series into the canonical chart shape.

    `raw` may be `{"series": [...]}`, a sequence of series mappings or `Series`
    objects, or a long-format pandas DataFrame (`id`, `key`, `value` plus
    optional `label` and `group` columns). Caller data is never mutated.
    """

    entries = _resolve_input(raw)
    order = sort_key_for(key_config)
    dropped: list[DroppedPoint] = []
    seen_ids: set[Any] = set()
    data_by_series: list[Series] = []

    for pos, entry in enumerate(entries):
        series_id, label, group, pairs = _read_series(entry, pos)
        try:
            is_duplicate = series_id in seen_ids
        except TypeError as exc:
            raise ChartDataError(f"series[{pos}] id must be hashable: {series_id!r}") from exc
        if is_duplicate:
            raise ChartDataError(f"duplicate series id: {series_id!r}")
        seen_ids.add(series_id)

        points: list[DataPoint] = []
        for index, (raw_key, raw_value) in enumerate(pairs):
            try:
                key = coerce_key(raw_key, key_config.key_type)
            except (TypeError, ValueError, OverflowError) as exc:
                if key_config.invalid_key_policy == "reject":
                    raise UnparsableKeyError(series_id, index, raw_key, key_config.key_type) from exc
                LOGGER.warning(
                    "dropping point %d of series %r: unparsable %s key %r",
                    index,
                    series_id,
                    key_config.key_type,
                    raw_key,
                )
                dropped.append(DroppedPoint(series_id=series_id, index=index, raw_key=raw_key, reason=str(exc)))
                continue
            value = _coerce_value(raw_value, series_id=series_id, index=index)
            points.append(DataPoint(key=key, value=value))

        points.sort(key=lambda p: order(p.key))
        data_by_series.append(Series(id=series_id, label=label, group=group, values=tuple(points)))

    flat = [
        FlatPoint(id=s.id, label=s.label, group=s.group, key=p.key, value=p.value)
        for s in data_by_series
        for p in s.values
    ]
    flat.sort(key=lambda p: order(p.key))
    return NormalizedData(data_by_series=tuple(data_by_series), flat_points=tuple(flat), dropped=tuple(dropped))


def _resolve_input(raw: Any) -> list[Any]:
    if isinstance(raw, NormalizedData):
        return list(raw.data_by_series)
    if pd is not None and isinstance(raw, pd.DataFrame):
        return _series_from_frame(raw)
    if isinstance(raw, Mapping):
        if "series" not in raw:
            raise ChartDataError("input mapping must contain a `series` list")
        raw = raw["series"]
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise ChartDataError(f"unsupported series input type: {type(raw)!r}")
    return list(raw)


def _series_from_frame(frame: Any) -> list[dict[str, Any]]:
    missing = [c for c in _FRAME_COLUMNS if c not in frame.columns]
    if missing:
        raise ChartDataError(f"DataFrame is missing column(s): {', '.join(missing)}")
    out: dict[Any, dict[str, Any]] = {}
    has_label = "label" in frame.columns
    has_group = "group" in frame.columns
    for row in frame.itertuples(index=False):
        series_id = _scalar(getattr(row, "id"))
        entry = out.get(series_id)
        if entry is None:
            entry = {
                "id": series_id,
                "label": str(getattr(row, "label")) if has_label else str(series_id),
                "group": _frame_group(getattr(row, "group")) if has_group else None,
                "values": [],
            }
            out[series_id] = entry
        entry["values"].append({"key": getattr(row, "key"), "value": _scalar(getattr(row, "value"))})
    return list(out.values())


def _read_series(entry: Any, pos: int) -> tuple[Any, str, Any, list[tuple[Any, Any]]]:
    if isinstance(entry, Series):
        return entry.id, entry.label, entry.group, [(p.key, p.value) for p in entry.values]
    if not isinstance(entry, Mapping):
        raise ChartDataError(f"series[{pos}] must be a mapping, got {type(entry)!r}")
    if "id" not in entry:
        raise ChartDataError(f"series[{pos}] is missing `id`")
    series_id = _scalar(entry["id"])
    label = entry.get("label")
    label = str(series_id) if label is None else str(label)
    group = _scalar(entry.get("group"))

    if "keys" in entry:
        # Columnar form: parallel `keys` and `values` columns.
        keys = list(entry["keys"])
        values = _coerce_1d_numeric(entry.get("values", ()), label=f"series `{series_id}` values")
        if len(keys) != len(values):
            raise ChartDataError(f"series `{series_id}` keys and values length mismatch: {len(keys)} != {len(values)}")
        return series_id, label, group, list(zip(keys, values))

    raw_values = entry.get("values", ())
    if isinstance(raw_values, (str, bytes)) or not isinstance(raw_values, Sequence):
        raise ChartDataError(f"series `{series_id}` values must be a list")
    pairs: list[tuple[Any, Any]] = []
    for i, item in enumerate(raw_values):
        if isinstance(item, DataPoint):
            pairs.append((item.key, item.value))
        elif isinstance(item, Mapping):
            pairs.append((item.get("key"), item.get("value")))
        elif isinstance(item, Sequence) and not isinstance(item, (str, bytes)) and len(item) == 2:
            pairs.append((item[0], item[1]))
        else:
            raise ChartDataError(f"series `{series_id}` value at index {i} must be a {{key, value}} mapping")
    return series_id, label, group, pairs


def _coerce_value(raw: Any, *, series_id: Any, index: int) -> float | None:
    if raw is None:
        return None
    if torch is not None and isinstance(raw, torch.Tensor):
        raw = raw.item()
    try:
        out = float(raw)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ChartDataError(f"series `{series_id}` contains non-numeric value at index {index}: {raw!r}") from exc
    if not math.isfinite(out):
        return None
    return out


def _coerce_1d_numeric(value: Any, *, label: str) -> list[float | None]:
    if torch is not None and isinstance(value, torch.Tensor):
        tensor = value.detach()
        if tensor.ndim != 1:
            raise ChartDataError(f"{label} must be 1-D")
        if tensor.is_cuda:
            tensor = tensor.cpu()
        arr = tensor.to(torch.float64).numpy()
    elif pd is not None and isinstance(value, pd.Series):
        arr = _coerce_ndarray(value.to_numpy(), label=label)
    elif isinstance(value, np.ndarray):
        if value.ndim != 1:
            raise ChartDataError(f"{label} must be 1-D")
        arr = _coerce_ndarray(value, label=label)
    elif isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        arr = _coerce_ndarray(np.asarray(value, dtype=object), label=label)
    else:
        raise ChartDataError(f"unsupported {label} input type: {type(value)!r}")
    return [float(v) if np.isfinite(v) else None for v in arr.tolist()]


def _coerce_ndarray(arr: np.ndarray, *, label: str) -> np.ndarray:
    if arr.dtype.kind in {"i", "u", "f", "b"}:
        return arr.astype(np.float64, copy=False)

    out = np.empty(arr.shape[0], dtype=np.float64)
    for i, raw in enumerate(arr.tolist()):
        if raw is None:
            out[i] = np.nan
            continue
        try:
            out[i] = float(raw)
        except (TypeError, ValueError) as exc:
            raise ChartDataError(f"{label} contains non-numeric value at index {i}: {raw!r}") from exc
    return out


def _scalar(value: Any) -> Any:
    # numpy scalars coming out of DataFrames compare and hash like their Python values.
    if isinstance(value, np.generic):
        return value.item()
    return value


def _frame_group(value: Any) -> Any:
    if pd is not None and pd.isna(value):
        return None
    return _scalar(value)
