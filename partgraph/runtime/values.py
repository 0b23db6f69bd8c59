"""Materialized per-partition results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator

    from partgraph.api.partitioning import PartitionScheme
else:
    PartitionScheme = Any


@dataclass(frozen=True, eq=False)
class PartitionedValue:
    """One value per partition, ordered by partition index.

    ``scheme`` records how the chunks were originally cut so that they can be
    stitched back together; it is ``None`` once a per-partition function has
    produced values with no relation to the source layout.
    """

    chunks: tuple[Any, ...]
    scheme: PartitionScheme | None = None

    @property
    def nparts(self) -> int:
        return len(self.chunks)

    def __len__(self) -> int:
        return len(self.chunks)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.chunks)


__all__ = ["PartitionedValue"]
