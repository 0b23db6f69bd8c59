"""Planner utilities."""

from partgraph.planner.optimizer import optimize_graph

__all__ = ["optimize_graph"]
