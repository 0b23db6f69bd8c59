"""Compute node definitions and graph inspection helpers."""

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

__all__ = [
    "ComputeNode",
    "FilterNode",
    "ForeachNode",
    "MapNode",
    "MapPartNode",
    "MapReduceByKeyNode",
    "MapReduceNode",
    "Partitioned",
]
