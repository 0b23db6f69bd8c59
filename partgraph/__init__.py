"""Top-level partgraph exports."""

from partgraph.api import (
    Bcast,
    CutDim,
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
    scheme,
)
from partgraph.errors import (
    ChunkLengthMismatchError,
    KeyExtractionError,
    PartGraphError,
    PartitionMismatchError,
    UnsupportedPartitionError,
    ZipLengthWarning,
)
from partgraph.runtime import (
    PartitionedValue,
    SerialContext,
    ThreadPoolContext,
    collect,
    compute,
    gather,
    get_default_context,
)

__all__ = [
    "Bcast",
    "ChunkLengthMismatchError",
    "CutDim",
    "KeyExtractionError",
    "PartGraphError",
    "PartitionMismatchError",
    "PartitionedValue",
    "SerialContext",
    "ThreadPoolContext",
    "UnsupportedPartitionError",
    "ZipLengthWarning",
    "broadcast",
    "collect",
    "compute",
    "filter",
    "foreach",
    "gather",
    "get_default_context",
    "map",
    "mappart",
    "mapreduce",
    "mapreducebykey",
    "partition",
    "reduce",
    "reducebykey",
    "scheme",
]
