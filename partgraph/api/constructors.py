"""Pure graph constructors.

Nothing here evaluates anything: each function only wraps its arguments in a
node. Plain datasets passed where a node is expected are wrapped with
``partition`` using the default scheme.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from partgraph.api.partitioning import Bcast, default_scheme
from partgraph.ir.graph import (
    ComputeNode,
    FilterNode,
    ForeachNode,
    MapNode,
    MapPartNode,
    MapReduceByKeyNode,
    MapReduceNode,
    Partitioned,
    identity,
)
from partgraph.runtime.values import PartitionedValue

if TYPE_CHECKING:
    from collections.abc import Callable

    from partgraph.api.partitioning import PartitionScheme
else:
    from collections import abc as _abc

    Callable = _abc.Callable
    PartitionScheme = Any


def _ensure_callable(value: Any, role: str) -> None:
    if not callable(value):
        raise TypeError(f"{role} must be callable, got {type(value).__name__}")


def _as_input(value: Any) -> Any:
    if isinstance(value, (ComputeNode, PartitionedValue)):
        return value
    return partition(value)


def _as_inputs(kind: str, nodes: tuple[Any, ...]) -> tuple[Any, ...]:
    if (
        len(nodes) == 1
        and isinstance(nodes[0], tuple)
        and nodes[0]
        and all(isinstance(node, (ComputeNode, PartitionedValue)) for node in nodes[0])
    ):
        nodes = nodes[0]
    if not nodes:
        raise ValueError(f"{kind} requires at least one input")
    return tuple(_as_input(node) for node in nodes)


def partition(x: Any, scheme: PartitionScheme | None = None) -> Partitioned:
    """Wrap ``x`` as a data source; arrays default to cutting their last axis."""

    if isinstance(x, Partitioned):
        return x
    return Partitioned(x, scheme if scheme is not None else default_scheme(x))


def broadcast(x: Any) -> Partitioned:
    """Wrap ``x`` so that every partition sees the whole object."""

    return Partitioned(x, Bcast())


def mappart(f: Callable[..., Any], *nodes: Any) -> MapPartNode:
    """Apply ``f`` to the corresponding chunks of ``nodes``.

    ``f`` receives one chunk per input, for each partition. A single tuple of
    nodes is accepted in place of varargs.
    """

    _ensure_callable(f, "mappart function")
    return MapPartNode(f, _as_inputs("mappart", nodes))


def foreach(f: Callable[..., Any], *nodes: Any) -> ForeachNode:
    """Call ``f`` on every zipped element of ``nodes`` for its side effects."""

    _ensure_callable(f, "foreach function")
    return ForeachNode(f, _as_inputs("foreach", nodes))


def map(f: Callable[..., Any], *nodes: Any) -> MapNode:
    _ensure_callable(f, "map function")
    return MapNode(f, _as_inputs("map", nodes))


def mapreduce(
    f: Callable[..., Any], op: Callable[[Any, Any], Any], v0: Any, *nodes: Any
) -> MapReduceNode:
    """Fused map and fold.

    ``op`` must be associative; it need not be commutative, since partials are
    combined in partition order. ``v0`` seeds every partition's fold as well
    as the final combine.
    """

    _ensure_callable(f, "mapreduce function")
    _ensure_callable(op, "mapreduce operator")
    return MapReduceNode(f, op, v0, _as_inputs("mapreduce", nodes))


def reduce(op: Callable[[Any, Any], Any], v0: Any, node: Any) -> MapReduceNode:
    return mapreduce(identity, op, v0, node)


def filter(f: Callable[[Any], Any], node: Any) -> FilterNode:
    _ensure_callable(f, "filter predicate")
    return FilterNode(f, _as_input(node))


def mapreducebykey(
    f: Callable[[Any], Any], op: Callable[[Any, Any], Any], v0: Any, node: Any
) -> MapReduceByKeyNode:
    """Group ``f(x) -> (key, value)`` and fold each key's values with ``op``.

    ``v0`` seeds each key independently, both within a partition and when the
    per-partition mappings are merged.
    """

    _ensure_callable(f, "key extractor")
    _ensure_callable(op, "mapreducebykey operator")
    return MapReduceByKeyNode(f, op, v0, _as_input(node))


def reducebykey(
    op: Callable[[Any, Any], Any], v0: Any, node: Any
) -> MapReduceByKeyNode:
    return mapreducebykey(identity, op, v0, node)


__all__ = [
    "broadcast",
    "filter",
    "foreach",
    "map",
    "mappart",
    "mapreduce",
    "mapreducebykey",
    "partition",
    "reduce",
    "reducebykey",
]
