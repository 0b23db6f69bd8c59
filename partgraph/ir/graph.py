"""Deferred compute nodes making up a partition-parallel job."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from collections.abc import Callable

    from partgraph.api.partitioning import PartitionScheme
else:
    from collections import abc as _abc

    Callable = _abc.Callable
    PartitionScheme = Any


def identity(x: Any) -> Any:
    return x


@dataclass(frozen=True, eq=False)
class ComputeNode:
    """Base class for nodes that can be realized by ``compute``."""

    kind: ClassVar[str] = "node"

    @property
    def inputs(self) -> tuple[Any, ...]:
        return ()


@dataclass(frozen=True, eq=False)
class Partitioned(ComputeNode):
    """A root data source split according to ``scheme``."""

    kind: ClassVar[str] = "partitioned"

    obj: Any
    scheme: PartitionScheme


@dataclass(frozen=True)
class MapPartNode(ComputeNode):
    """Apply ``f`` to the positionally zipped chunks of every input."""

    kind: ClassVar[str] = "mappart"

    f: Callable[..., Any]
    input: tuple[Any, ...]

    @property
    def inputs(self) -> tuple[Any, ...]:
        return self.input


@dataclass(frozen=True)
class ForeachNode(ComputeNode):
    kind: ClassVar[str] = "foreach"

    f: Callable[..., Any]
    input: tuple[Any, ...]

    @property
    def inputs(self) -> tuple[Any, ...]:
        return self.input


@dataclass(frozen=True)
class MapNode(ComputeNode):
    kind: ClassVar[str] = "map"

    f: Callable[..., Any]
    input: tuple[Any, ...]

    @property
    def inputs(self) -> tuple[Any, ...]:
        return self.input


@dataclass(frozen=True)
class MapReduceNode(ComputeNode):
    """Map then fold each partition with ``op`` from ``v0``, then fold the partials."""

    kind: ClassVar[str] = "mapreduce"

    f: Callable[..., Any]
    op: Callable[[Any, Any], Any]
    v0: Any
    input: tuple[Any, ...]

    @property
    def inputs(self) -> tuple[Any, ...]:
        return self.input


@dataclass(frozen=True)
class FilterNode(ComputeNode):
    kind: ClassVar[str] = "filter"

    f: Callable[[Any], Any]
    input: Any

    @property
    def inputs(self) -> tuple[Any, ...]:
        return (self.input,)


@dataclass(frozen=True)
class MapReduceByKeyNode(ComputeNode):
    """Group ``f(x) -> (key, value)`` pairs and fold each key's values with ``op``."""

    kind: ClassVar[str] = "mapreducebykey"

    f: Callable[[Any], Any]
    op: Callable[[Any, Any], Any]
    v0: Any
    input: Any

    @property
    def inputs(self) -> tuple[Any, ...]:
        return (self.input,)


__all__ = [
    "ComputeNode",
    "FilterNode",
    "ForeachNode",
    "MapNode",
    "MapPartNode",
    "MapReduceByKeyNode",
    "MapReduceNode",
    "Partitioned",
    "identity",
]
