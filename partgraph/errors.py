"""Exception types raised while evaluating compute graphs."""

from __future__ import annotations


class PartGraphError(Exception):
    """Base class for structural errors detected by partgraph."""


class PartitionMismatchError(PartGraphError, ValueError):
    """Inputs of one node partition into different numbers of chunks."""

    def __init__(self, node_kind: str, counts: tuple[int, ...]) -> None:
        self.node_kind = node_kind
        self.counts = counts
        super().__init__(
            f"{node_kind} inputs have differing partition counts: {list(counts)}"
        )


class ChunkLengthMismatchError(PartGraphError, ValueError):
    """Zipped local chunks within one partition have different lengths."""

    def __init__(self, lengths: tuple[int, ...]) -> None:
        self.lengths = lengths
        super().__init__(f"Zipped chunks have differing lengths: {list(lengths)}")


class UnsupportedPartitionError(PartGraphError, TypeError):
    """A partition scheme cannot split the given dataset."""


class KeyExtractionError(PartGraphError, TypeError):
    """A key extractor produced something other than a (key, value) pair."""


class ZipLengthWarning(UserWarning):
    """Zipped chunks were truncated to the shortest length."""


__all__ = [
    "ChunkLengthMismatchError",
    "KeyExtractionError",
    "PartGraphError",
    "PartitionMismatchError",
    "UnsupportedPartitionError",
    "ZipLengthWarning",
]
