from __future__ import annotations

from typing import Any


class ChartConfigError(ValueError):
    """Raised when a chart configuration field holds an unsupported value."""


class InvalidKeyTypeError(ChartConfigError):
    def __init__(self, key_type: object) -> None:
        super().__init__(f"unsupported key_type: {key_type!r} (expected one of 'time', 'number', 'string')")
        self.key_type = key_type


class ChartDataError(ValueError):
    """Raised when series data cannot be turned into a chart model."""


class UnparsableKeyError(ChartDataError):
    def __init__(self, series_id: Any, index: int, raw_key: Any, key_type: str) -> None:
        super().__init__(
            f"series `{series_id}` has a key at index {index} that is not a valid {key_type} key: {raw_key!r}"
        )
        self.series_id = series_id
        self.index = index
        self.raw_key = raw_key
        self.key_type = key_type


class EmptyDomainError(ChartDataError):
    def __init__(self, axis: str) -> None:
        super().__init__(f"cannot build the {axis} scale: no data points")
        self.axis = axis


class AxisGroupOverflowError(ChartDataError):
    def __init__(self, groups: tuple[Any, ...]) -> None:
        super().__init__(
            f"at most 2 axis groups are supported, found {len(groups)}: {', '.join(repr(g) for g in groups)}"
        )
        self.groups = groups
        self.count = len(groups)
