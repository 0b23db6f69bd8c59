"""Public API surface for building compute graphs."""

from partgraph.api.constructors import (
    broadcast,
    filter,
    foreach,
    map,
    mappart,
    mapreduce,
    mapreducebykey,
    partition,
    reduce,
    reducebykey,
)
from partgraph.api.partitioning import Bcast, CutDim, PartitionHandle, scheme

__all__ = [
    "Bcast",
    "CutDim",
    "PartitionHandle",
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
    "scheme",
]
