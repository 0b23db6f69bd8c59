"""Partition schemes describing how a dataset is split across workers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

from partgraph.errors import UnsupportedPartitionError

if TYPE_CHECKING:
    from collections.abc import Sequence
else:
    from collections import abc as _abc

    Sequence = _abc.Sequence


@dataclass(frozen=True)
class PartitionHandle:
    """Locates one partition of a dataset: an index plus a slice along the cut."""

    index: int
    start: int | None = None
    stop: int | None = None


def _split_bounds(length: int, nparts: int) -> list[tuple[int, int]]:
    # Same sizing as numpy.array_split: the first ``length % nparts`` chunks
    # carry one extra element.
    base, extra = divmod(length, nparts)
    bounds = []
    start = 0
    for idx in range(nparts):
        stop = start + base + (1 if idx < extra else 0)
        bounds.append((start, stop))
        start = stop
    return bounds


def _check_nparts(nparts: int) -> None:
    if nparts < 1:
        raise ValueError(f"Partition count must be positive, got {nparts}")


@dataclass(frozen=True)
class CutDim:
    """Cut a dataset into contiguous, ordered chunks along ``axis``."""

    axis: int = 0

    def describe(self) -> str:
        return f"cutdim({self.axis})"

    def _length(self, obj: Any) -> int:
        if isinstance(obj, np.ndarray):
            if obj.ndim == 0 or not 0 <= self.axis < obj.ndim:
                raise UnsupportedPartitionError(
                    f"Cannot cut a {obj.ndim}-d array along axis {self.axis}"
                )
            return int(obj.shape[self.axis])
        if isinstance(obj, pd.DataFrame):
            if self.axis == 0:
                return len(obj)
            if self.axis == 1:
                return len(obj.columns)
            raise UnsupportedPartitionError(
                f"DataFrames can only be cut along axis 0 or 1, not {self.axis}"
            )
        if isinstance(obj, (pd.Series, Sequence)):
            if self.axis != 0:
                raise UnsupportedPartitionError(
                    f"{type(obj).__name__} can only be cut along axis 0"
                )
            return len(obj)
        raise UnsupportedPartitionError(
            f"Cannot cut dataset of type {type(obj).__name__!r}"
        )

    def partitions(self, obj: Any, nparts: int) -> list[PartitionHandle]:
        _check_nparts(nparts)
        length = self._length(obj)
        return [
            PartitionHandle(index=idx, start=start, stop=stop)
            for idx, (start, stop) in enumerate(_split_bounds(length, nparts))
        ]

    def chunk(self, obj: Any, handle: PartitionHandle) -> Any:
        window = slice(handle.start, handle.stop)
        if isinstance(obj, np.ndarray):
            return obj[(slice(None),) * self.axis + (window,)]
        if isinstance(obj, pd.DataFrame):
            if self.axis == 1:
                return obj.iloc[:, window]
            return obj.iloc[window]
        if isinstance(obj, pd.Series):
            return obj.iloc[window]
        return obj[window]


@dataclass(frozen=True)
class Bcast:
    """Replicate the whole dataset to every partition."""

    def describe(self) -> str:
        return "broadcast"

    def partitions(self, obj: Any, nparts: int) -> list[PartitionHandle]:
        _check_nparts(nparts)
        return [PartitionHandle(index=idx) for idx in range(nparts)]

    def chunk(self, obj: Any, handle: PartitionHandle) -> Any:
        return obj


PartitionScheme = CutDim | Bcast


def default_scheme(obj: Any) -> CutDim:
    """Arrays are cut along their highest dimension, everything else by rows."""

    if isinstance(obj, np.ndarray) and obj.ndim > 0:
        return CutDim(axis=obj.ndim - 1)
    return CutDim(axis=0)


class SchemeBuilder:
    """Factory for partition schemes."""

    def cut(self, axis: int = 0) -> CutDim:
        return CutDim(axis=axis)

    def broadcast(self) -> Bcast:
        return Bcast()


scheme = SchemeBuilder()


__all__ = [
    "Bcast",
    "CutDim",
    "PartitionHandle",
    "PartitionScheme",
    "default_scheme",
    "scheme",
]
