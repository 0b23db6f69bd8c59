"""Recursive evaluation of compute graphs against an execution context.

Every node type desugars into a ``MapPartNode`` over the computed chunks of
its inputs, optionally followed by a gather and a sequential combine on the
caller. Only ``Partitioned`` sources and primitive ``MapPartNode``s (whose
inputs are already ``PartitionedValue``s) reach the context.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import replace
from functools import partial, reduce
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

from partgraph.api.partitioning import Bcast, CutDim
from partgraph.errors import PartitionMismatchError
from partgraph.ir.graph import (
    ComputeNode,
    FilterNode,
    ForeachNode,
    MapNode,
    MapPartNode,
    MapReduceByKeyNode,
    MapReduceNode,
    Partitioned,
)
from partgraph.runtime.executor import get_default_context
from partgraph.runtime.sequential import (
    filter_seq,
    foreach_seq,
    map_seq,
    mapreduce_seq,
    mapreducebykey_seq,
    reducebykey_seq,
)
from partgraph.runtime.values import PartitionedValue

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from partgraph.runtime.executor import ExecutionContext
else:
    from collections import abc as _abc

    Callable = _abc.Callable
    Sequence = _abc.Sequence
    ExecutionContext = Any

log = logging.getLogger("partgraph.runtime.compute")


def _check_partition_counts(kind: str, values: Sequence[PartitionedValue]) -> None:
    counts = tuple(value.nparts for value in values)
    if len(set(counts)) > 1:
        raise PartitionMismatchError(kind, counts)


def _compute_partitioned(ctx: ExecutionContext, node: Partitioned) -> Any:
    return ctx.distribute(node)


def _computed_inputs(
    ctx: ExecutionContext, inputs: Sequence[Any]
) -> tuple[PartitionedValue, ...]:
    computed = tuple(compute(ctx, inp) for inp in inputs)
    for value in computed:
        if not isinstance(value, PartitionedValue):
            raise TypeError(
                "node inputs must compute to partitioned values, "
                f"got {type(value).__name__}"
            )
    return computed


def _cut_axes(values: Sequence[PartitionedValue]) -> tuple[int, ...]:
    return tuple(
        value.scheme.axis if isinstance(value.scheme, CutDim) else 0
        for value in values
    )


def _compute_mappart(ctx: ExecutionContext, node: MapPartNode) -> Any:
    if all(isinstance(inp, PartitionedValue) for inp in node.input):
        _check_partition_counts(node.kind, node.input)
        return ctx.run_mappart(node.f, node.input)
    return compute(ctx, MapPartNode(node.f, _computed_inputs(ctx, node.input)))


def _compute_foreach(ctx: ExecutionContext, node: ForeachNode) -> None:
    values = _computed_inputs(ctx, node.input)
    f = partial(foreach_seq, node.f, axes=_cut_axes(values))
    compute(ctx, MapPartNode(f, values))
    return None


def _compute_map(ctx: ExecutionContext, node: MapNode) -> Any:
    values = _computed_inputs(ctx, node.input)
    f = partial(map_seq, node.f, axes=_cut_axes(values))
    result = compute(ctx, MapPartNode(f, values))
    return replace(result, scheme=values[0].scheme)


def _compute_filter(ctx: ExecutionContext, node: FilterNode) -> Any:
    values = _computed_inputs(ctx, (node.input,))
    (axis,) = _cut_axes(values)
    f = partial(filter_seq, node.f, axis=axis)
    result = compute(ctx, MapPartNode(f, values))
    return replace(result, scheme=values[0].scheme)


def combine_partials(
    op: Callable[[Any, Any], Any], v0: Any, partials: Sequence[Any]
) -> Any:
    """Fold per-partition partial results left to right, in partition order."""

    return reduce(op, partials, v0)


def merge_by_key(
    op: Callable[[Any, Any], Any], v0: Any, mappings: Sequence[dict[Any, Any]]
) -> dict[Any, Any]:
    """Fold per-partition key mappings into one, applying ``op`` per key."""

    return reduce(
        lambda acc, chunk: reducebykey_seq(op, v0, chunk.items(), acc),
        mappings,
        {},
    )


def _compute_mapreduce(ctx: ExecutionContext, node: MapReduceNode) -> Any:
    values = _computed_inputs(ctx, node.input)
    f = partial(mapreduce_seq, node.f, node.op, node.v0, axes=_cut_axes(values))
    local = MapPartNode(f, values)
    partials = gather(ctx, local)
    return combine_partials(node.op, node.v0, partials)


def _compute_mapreducebykey(
    ctx: ExecutionContext, node: MapReduceByKeyNode
) -> dict[Any, Any]:
    values = _computed_inputs(ctx, (node.input,))
    (axis,) = _cut_axes(values)
    f = partial(mapreducebykey_seq, node.f, node.op, node.v0, axis=axis)
    local = MapPartNode(f, values)
    mappings = gather(ctx, local)
    return merge_by_key(node.op, node.v0, mappings)


_COMPUTE_RULES: dict[type, Callable[[ExecutionContext, Any], Any]] = {
    Partitioned: _compute_partitioned,
    MapPartNode: _compute_mappart,
    ForeachNode: _compute_foreach,
    MapNode: _compute_map,
    FilterNode: _compute_filter,
    MapReduceNode: _compute_mapreduce,
    MapReduceByKeyNode: _compute_mapreducebykey,
}


def _rule_for(node: ComputeNode) -> Callable[[ExecutionContext, Any], Any]:
    rule = _COMPUTE_RULES.get(type(node))
    if rule is not None:
        return rule
    for node_type, candidate in _COMPUTE_RULES.items():
        if isinstance(node, node_type):
            return candidate
    raise TypeError(f"No compute rule for {type(node).__name__}")


def compute(ctx: ExecutionContext | None, node: Any) -> Any:
    """Realize ``node`` on ``ctx`` (the default context when ``None``).

    Returns a ``PartitionedValue`` for partition-preserving nodes, a local
    value for reductions and ``None`` for ``foreach``.
    """

    if ctx is None:
        ctx = get_default_context()
    if isinstance(node, PartitionedValue):
        return node
    if not isinstance(node, ComputeNode):
        raise TypeError(f"Cannot compute object of type {type(node).__name__!r}")
    log.debug("compute %s", node.kind)
    return _rule_for(node)(ctx, node)


def gather(ctx: ExecutionContext | None, x: Any) -> list[Any]:
    """Compute ``x`` if needed and collect one value per partition, in order."""

    if ctx is None:
        ctx = get_default_context()
    value = compute(ctx, x)
    if not isinstance(value, PartitionedValue):
        raise TypeError(
            f"gather expects a partitioned value, got {type(value).__name__}"
        )
    log.info("gather: %d partitions", value.nparts)
    return ctx.gather(value)


def _concat(parts: list[Any], axis: int) -> Any:
    first = parts[0]
    if isinstance(first, (pd.DataFrame, pd.Series)):
        if isinstance(first, pd.Series):
            axis = 0
        return pd.concat(parts, axis=axis)
    if isinstance(first, np.ndarray):
        if first.ndim <= axis:
            axis = 0
        return np.concatenate(parts, axis=axis)
    return list(itertools.chain.from_iterable(parts))


def collect(ctx: ExecutionContext | None, x: Any) -> Any:
    """Gather ``x`` and stitch its chunks back into a single local collection.

    Broadcast values hold one replica per partition; the first replica is
    returned. Values with no source layout, such as ``mappart`` results, are
    returned as the gathered list.
    """

    if ctx is None:
        ctx = get_default_context()
    value = compute(ctx, x)
    parts = gather(ctx, value)
    if value.scheme is None:
        return parts
    if isinstance(value.scheme, Bcast):
        return parts[0]
    axis = value.scheme.axis if isinstance(value.scheme, CutDim) else 0
    return _concat(parts, axis)


__all__ = [
    "collect",
    "combine_partials",
    "compute",
    "gather",
    "merge_by_key",
]
