"""Single-partition algorithms run once the compute recursion bottoms out.

Every function here works on local chunks only: plain Python sequences,
numpy arrays (iterated with the cut axis outermost, the rest in C order),
pandas Series (iterated by value) and pandas DataFrames (iterated as row
tuples).
"""

from __future__ import annotations

import warnings
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

from partgraph.config import strict_zip_enabled
from partgraph.errors import (
    ChunkLengthMismatchError,
    KeyExtractionError,
    ZipLengthWarning,
)
from partgraph.ir.graph import identity

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Sequence
else:
    from collections import abc as _abc

    Callable = _abc.Callable
    Iterable = _abc.Iterable
    Iterator = _abc.Iterator
    Sequence = _abc.Sequence


def _axis_first(chunk: np.ndarray, axis: int) -> np.ndarray:
    if 0 < axis < chunk.ndim:
        return np.moveaxis(chunk, axis, 0)
    return chunk


def elements(chunk: Any, axis: int = 0) -> Sequence[Any]:
    """Return the elements of a local chunk as an indexable sequence.

    Arrays cut along ``axis`` are walked with that axis outermost, so
    concatenating the elements of consecutive chunks gives the elements of
    the whole array regardless of how many chunks there are.
    """

    if isinstance(chunk, pd.DataFrame):
        return list(chunk.itertuples(index=False, name=None))
    if isinstance(chunk, pd.Series):
        return chunk.tolist()
    if isinstance(chunk, np.ndarray):
        return _axis_first(chunk, axis).reshape(-1).tolist()
    if isinstance(chunk, Sequence):
        return chunk
    return list(chunk)


def _zipped(
    chunks: tuple[Any, ...], axes: Sequence[int] | None = None
) -> Iterator[tuple[Any, ...]]:
    if not chunks:
        raise ValueError("At least one chunk is required")
    if axes is None:
        axes = (0,) * len(chunks)
    columns = [elements(chunk, axis) for chunk, axis in zip(chunks, axes)]
    lengths = tuple(len(column) for column in columns)
    if len(set(lengths)) > 1:
        if strict_zip_enabled():
            raise ChunkLengthMismatchError(lengths)
        warnings.warn(
            f"Zipped chunks have differing lengths {list(lengths)}; "
            f"truncating to {min(lengths)}",
            category=ZipLengthWarning,
            stacklevel=3,
        )
    return zip(*columns)


def foreach_seq(
    f: Callable[..., Any], *chunks: Any, axes: Sequence[int] | None = None
) -> None:
    """Call ``f(x1[i], x2[i], ...)`` for every index, in order, for effect only."""

    for group in _zipped(chunks, axes):
        f(*group)


def map_seq(
    f: Callable[..., Any], *chunks: Any, axes: Sequence[int] | None = None
) -> Any:
    """Element-wise zipped map; the output container follows the first chunk."""

    results = [f(*group) for group in _zipped(chunks, axes)]
    first = chunks[0]
    if isinstance(first, (pd.Series, pd.DataFrame)):
        name = first.name if isinstance(first, pd.Series) else None
        return pd.Series(results, index=first.index[: len(results)], name=name)
    if isinstance(first, np.ndarray):
        out = np.asarray(results)
        if first.ndim > 1 and out.ndim == 1 and out.size == first.size:
            axis = axes[0] if axes else 0
            moved = _axis_first(first, axis)
            out = out.reshape(moved.shape)
            if moved is not first:
                out = np.moveaxis(out, 0, axis)
        return out
    return results


def filter_seq(f: Callable[[Any], Any], chunk: Any, axis: int = 0) -> Any:
    """Keep the elements of ``chunk`` for which ``f`` is truthy, in order."""

    items = elements(chunk, axis)
    mask = np.fromiter((bool(f(item)) for item in items), dtype=bool, count=len(items))
    if isinstance(chunk, (pd.Series, pd.DataFrame)):
        return chunk.iloc[mask]
    if isinstance(chunk, np.ndarray):
        return _axis_first(chunk, axis).reshape(-1)[mask]
    return [item for item, keep in zip(items, mask) if keep]


def mapreduce_seq(
    f: Callable[..., Any],
    op: Callable[[Any, Any], Any],
    v0: Any,
    *chunks: Any,
    axes: Sequence[int] | None = None,
) -> Any:
    """Left fold ``acc = op(acc, f(x1[i], x2[i], ...))`` starting from ``v0``."""

    acc = v0
    for group in _zipped(chunks, axes):
        acc = op(acc, f(*group))
    return acc


def mapreducebykey_seq(
    f: Callable[[Any], Any],
    op: Callable[[Any, Any], Any],
    v0: Any,
    itr: Iterable[Any],
    acc: dict[Any, Any] | None = None,
    axis: int = 0,
) -> dict[Any, Any]:
    """Fold ``(key, value) = f(x)`` pairs into ``acc`` per key, seeding with ``v0``.

    ``acc`` is updated in place when given; a fresh dict is used otherwise.
    """

    if acc is None:
        acc = {}
    for x in elements(itr, axis):
        pair = f(x)
        if not isinstance(pair, (tuple, list)) or len(pair) != 2:
            raise KeyExtractionError(
                f"Key extractor must return a (key, value) pair, got {pair!r}"
            )
        key, value = pair
        acc[key] = op(acc.get(key, v0), value)
    return acc


def reducebykey_seq(
    op: Callable[[Any, Any], Any],
    v0: Any,
    itr: Iterable[Any],
    acc: dict[Any, Any] | None = None,
) -> dict[Any, Any]:
    return mapreducebykey_seq(identity, op, v0, itr, acc)


__all__ = [
    "elements",
    "filter_seq",
    "foreach_seq",
    "map_seq",
    "mapreduce_seq",
    "mapreducebykey_seq",
    "reducebykey_seq",
]
