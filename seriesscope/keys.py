from __future__ import annotations

import datetime as dt
from decimal import Decimal
import functools
import math
import numbers
from typing import Any, Callable
import unicodedata

import numpy as np

from seriesscope.config import KeyConfig
from seriesscope.series import Key


UTC = dt.timezone.utc
_EPOCH = dt.datetime(1970, 1, 1, tzinfo=UTC)


def coerce_key(raw: Any, key_type: str) -> Key:
    """Coerce a raw key to the canonical representation for `key_type`.

    Raises ValueError when the key cannot be represented.
    """

    if raw is None:
        raise ValueError("key is missing")
    if key_type == "time":
        return _coerce_time(raw)
    if key_type == "number":
        return _coerce_number(raw)
    if key_type == "string":
        if isinstance(raw, (bytes, bytearray)):
            return raw.decode("utf-8")
        return str(raw)
    raise ValueError(f"unsupported key_type: {key_type!r}")


def time_to_ms(value: dt.datetime) -> float:
    return (value - _EPOCH).total_seconds() * 1000.0


def ms_to_time(ms: float) -> dt.datetime:
    return _EPOCH + dt.timedelta(milliseconds=float(ms))


def collation_key(value: str) -> tuple[str, str]:
    # Case and accent folding first, raw code points as the tiebreak.
    folded = unicodedata.normalize("NFKD", value)
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch)).casefold()
    return (folded, value)


@functools.total_ordering
class _Reversed:
    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _Reversed) and self.value == other.value

    def __lt__(self, other: "_Reversed") -> bool:
        return other.value < self.value

    def __hash__(self) -> int:
        return hash(self.value)


def sort_key_for(config: KeyConfig) -> Callable[[Key], Any]:
    """Return the comparator (as a sort key) for the configured key type."""

    if config.key_type in ("time", "number"):
        return _identity
    descending = config.sort_order == "descending"
    positions = {key: i for i, key in enumerate(config.category_order or ())}

    def string_key(value: Key) -> Any:
        text = str(value)
        pos = positions.get(text)
        if pos is not None:
            return (0, pos, ("", ""))
        collated = collation_key(text)
        return (1, 0, _Reversed(collated) if descending else collated)

    return string_key


def _identity(value: Key) -> Key:
    return value


def _coerce_time(raw: Any) -> dt.datetime:
    if isinstance(raw, np.datetime64):
        if np.isnat(raw):
            raise ValueError("time key is NaT")
        micros = int(raw.astype("datetime64[us]").astype(np.int64))
        return _EPOCH + dt.timedelta(microseconds=micros)
    if isinstance(raw, dt.datetime):
        if raw != raw:  # pandas.NaT
            raise ValueError("time key is NaT")
        if raw.tzinfo is None:
            return raw.replace(tzinfo=UTC)
        return raw.astimezone(UTC)
    if isinstance(raw, dt.date):
        return dt.datetime(raw.year, raw.month, raw.day, tzinfo=UTC)
    if isinstance(raw, bool):
        raise ValueError("boolean is not a time key")
    if isinstance(raw, (numbers.Real, Decimal)):
        ms = float(raw)
        if not math.isfinite(ms):
            raise ValueError("time key is not finite")
        return ms_to_time(ms)
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise ValueError("time key is empty")
        parsed = dt.datetime.fromisoformat(text)
        return _coerce_time(parsed)
    raise ValueError(f"unsupported time key type: {type(raw)!r}")


def _coerce_number(raw: Any) -> float:
    if isinstance(raw, bool):
        raise ValueError("boolean is not a number key")
    if isinstance(raw, str):
        raw = raw.strip()
    out = float(raw)
    if not math.isfinite(out):
        raise ValueError("number key is not finite")
    return out
