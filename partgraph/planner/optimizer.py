"""Graph rewrite passes that fuse adjacent element-wise nodes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from partgraph.ir.graph import (
    ComputeNode,
    FilterNode,
    MapNode,
    MapReduceNode,
    Partitioned,
)
from partgraph.ir.serialize import callable_name

if TYPE_CHECKING:
    from collections.abc import Callable
else:
    from collections import abc as _abc

    Callable = _abc.Callable

log = logging.getLogger("partgraph.planner.optimizer")


@dataclass(frozen=True)
class ComposedFunction:
    """``outer(inner(*args))``."""

    outer: Callable[[Any], Any]
    inner: Callable[..., Any]

    def __call__(self, *args: Any) -> Any:
        return self.outer(self.inner(*args))

    @property
    def __name__(self) -> str:
        return f"{callable_name(self.outer)}.{callable_name(self.inner)}"


@dataclass(frozen=True)
class ConjoinedPredicate:
    """True when ``first`` and then ``second`` both hold."""

    first: Callable[[Any], Any]
    second: Callable[[Any], Any]

    def __call__(self, x: Any) -> bool:
        return bool(self.first(x)) and bool(self.second(x))

    @property
    def __name__(self) -> str:
        return f"{callable_name(self.first)}&{callable_name(self.second)}"


def _fuse_filters(node: ComputeNode) -> tuple[ComputeNode, bool]:
    if isinstance(node, FilterNode) and isinstance(node.input, FilterNode):
        inner = node.input
        return FilterNode(ConjoinedPredicate(inner.f, node.f), inner.input), True
    return node, False


def _fuse_maps(node: ComputeNode) -> tuple[ComputeNode, bool]:
    if (
        isinstance(node, MapNode)
        and len(node.input) == 1
        and isinstance(node.input[0], MapNode)
    ):
        inner = node.input[0]
        return MapNode(ComposedFunction(node.f, inner.f), inner.input), True
    return node, False


def _fuse_map_into_mapreduce(node: ComputeNode) -> tuple[ComputeNode, bool]:
    if (
        isinstance(node, MapReduceNode)
        and len(node.input) == 1
        and isinstance(node.input[0], MapNode)
    ):
        inner = node.input[0]
        fused = MapReduceNode(
            ComposedFunction(node.f, inner.f), node.op, node.v0, inner.input
        )
        return fused, True
    return node, False


_PASSES = (_fuse_filters, _fuse_maps, _fuse_map_into_mapreduce)


def _with_inputs(node: ComputeNode, inputs: tuple[Any, ...]) -> ComputeNode:
    if isinstance(node, FilterNode) or not isinstance(node.input, tuple):
        return replace(node, input=inputs[0])
    return replace(node, input=inputs)


def _optimize_once(node: Any) -> tuple[Any, bool]:
    if not isinstance(node, ComputeNode) or isinstance(node, Partitioned):
        return node, False
    changed = False
    new_inputs = []
    for inp in node.inputs:
        optimized, did_change = _optimize_once(inp)
        new_inputs.append(optimized)
        changed = changed or did_change
    if changed:
        node = _with_inputs(node, tuple(new_inputs))
    for rewrite in _PASSES:
        node, did_change = rewrite(node)
        changed = changed or did_change
    return node, changed


def optimize_graph(node: Any) -> Any:
    """Apply fusion passes until the graph stops changing.

    Rewrites never change computed values; they only reduce the number of
    per-partition passes over the data.
    """

    changed = True
    rounds = 0
    while changed:
        node, changed = _optimize_once(node)
        rounds += 1
    log.debug("optimize_graph converged after %d rounds", rounds)
    return node


__all__ = ["ComposedFunction", "ConjoinedPredicate", "optimize_graph"]
