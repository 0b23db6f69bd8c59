"""Runtime helpers for partgraph."""

from partgraph.runtime.compute import collect, compute, gather
from partgraph.runtime.executor import (
    ExecutionContext,
    SerialContext,
    ThreadPoolContext,
    default_context_name,
    get_default_context,
    reset_default_context,
)
from partgraph.runtime.values import PartitionedValue

__all__ = [
    "ExecutionContext",
    "PartitionedValue",
    "SerialContext",
    "ThreadPoolContext",
    "collect",
    "compute",
    "default_context_name",
    "gather",
    "get_default_context",
    "reset_default_context",
]
