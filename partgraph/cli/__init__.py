"""Command-line entry points for partgraph tooling."""

from __future__ import annotations

from partgraph.cli import reduce_by_key

__all__ = ["reduce_by_key"]
