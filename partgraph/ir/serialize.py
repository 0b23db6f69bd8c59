"""Describe compute graphs as plain dictionaries and text, and rebuild them.

User functions and datasets are never embedded. Functions are recorded by
name and datasets by type and length; callers rebind both by name when
loading a graph back with ``node_from_dict``.
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Any

from partgraph.api.partitioning import Bcast, CutDim
from partgraph.ir.graph import (
    ComputeNode,
    FilterNode,
    ForeachNode,
    MapNode,
    MapPartNode,
    MapReduceByKeyNode,
    MapReduceNode,
    Partitioned,
    identity,
)
from partgraph.runtime.values import PartitionedValue

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable, Mapping
else:  # pragma: no cover
    from collections import abc as _abc

    Callable = _abc.Callable
    Mapping = _abc.Mapping

_PLAIN_TYPES = (int, float, str, bool, type(None))

_ZIPPED_KINDS = {
    "mappart": MapPartNode,
    "foreach": ForeachNode,
    "map": MapNode,
}


def callable_name(f: Callable[..., Any]) -> str:
    if isinstance(f, partial):
        return callable_name(f.func)
    name = getattr(f, "__qualname__", None) or getattr(f, "__name__", None)
    return str(name) if name else type(f).__name__


def _scheme_to_dict(scheme: Any) -> dict[str, Any]:
    if isinstance(scheme, CutDim):
        return {"kind": "cutdim", "axis": scheme.axis}
    if isinstance(scheme, Bcast):
        return {"kind": "broadcast"}
    return {"kind": type(scheme).__name__}


def _scheme_from_dict(data: Mapping[str, Any]) -> Any:
    kind = data.get("kind")
    if kind == "cutdim":
        return CutDim(axis=int(data.get("axis", 0)))
    if kind == "broadcast":
        return Bcast()
    raise ValueError(f"Unknown partition scheme kind: {kind!r}")


def _dataset_summary(obj: Any) -> dict[str, Any]:
    summary: dict[str, Any] = {"type": type(obj).__name__}
    try:
        summary["length"] = len(obj)
    except TypeError:
        summary["length"] = None
    return summary


def _seed_to_json(v0: Any) -> Any:
    return v0 if isinstance(v0, _PLAIN_TYPES) else repr(v0)


def node_to_dict(node: Any) -> dict[str, Any]:
    if isinstance(node, PartitionedValue):
        return {"kind": "value", "nparts": node.nparts}
    if isinstance(node, Partitioned):
        return {
            "kind": "partitioned",
            "scheme": _scheme_to_dict(node.scheme),
            "dataset": _dataset_summary(node.obj),
            # Callers may set a tag to rebind the dataset on load
            "source_tag": None,
        }
    if isinstance(node, (MapReduceNode, MapReduceByKeyNode)):
        return {
            "kind": node.kind,
            "f": callable_name(node.f),
            "op": callable_name(node.op),
            "v0": _seed_to_json(node.v0),
            "inputs": [node_to_dict(inp) for inp in node.inputs],
        }
    if isinstance(node, ComputeNode):
        return {
            "kind": node.kind,
            "f": callable_name(node.f),
            "inputs": [node_to_dict(inp) for inp in node.inputs],
        }
    raise TypeError(f"Unsupported node for serialization: {type(node)!r}")


def _lookup(table: Mapping[str, Any] | None, name: Any, what: str) -> Any:
    if what == "function" and name == "identity":
        return identity
    if table is None or name not in table:
        raise KeyError(f"No {what} bound for {name!r}")
    return table[name]


def node_from_dict(
    data: Mapping[str, Any],
    *,
    functions: Mapping[str, Callable[..., Any]] | None = None,
    sources: Mapping[str, Any] | None = None,
) -> ComputeNode:
    """Rebuild a graph, resolving functions and tagged sources by name."""

    kind = data.get("kind")
    if kind == "partitioned":
        obj = _lookup(sources, data.get("source_tag"), "source")
        return Partitioned(obj, _scheme_from_dict(data.get("scheme", {})))
    if kind == "value":
        raise ValueError("Materialized partitioned values cannot be restored")

    inputs = tuple(
        node_from_dict(item, functions=functions, sources=sources)
        for item in data.get("inputs", ())
    )
    f = _lookup(functions, data.get("f"), "function")
    if kind in _ZIPPED_KINDS:
        return _ZIPPED_KINDS[kind](f, inputs)
    if kind == "filter":
        return FilterNode(f, inputs[0])
    op = _lookup(functions, data.get("op"), "function")
    if kind == "mapreduce":
        return MapReduceNode(f, op, data.get("v0"), inputs)
    if kind == "mapreducebykey":
        return MapReduceByKeyNode(f, op, data.get("v0"), inputs[0])
    raise ValueError(f"Unknown node kind: {kind!r}")


def _label(data: Mapping[str, Any]) -> str:
    kind = data["kind"]
    if kind == "partitioned":
        dataset = data["dataset"]
        length = dataset.get("length")
        size = f"[{length}]" if length is not None else ""
        scheme = data["scheme"]
        layout = (
            f"cutdim({scheme['axis']})"
            if scheme["kind"] == "cutdim"
            else scheme["kind"]
        )
        return f"partitioned({dataset['type']}{size}, {layout})"
    if kind == "value":
        return f"value(nparts={data['nparts']})"
    if "op" in data:
        return f"{kind}(f={data['f']}, op={data['op']}, v0={data['v0']!r})"
    return f"{kind}(f={data['f']})"


def describe(node: Any) -> list[str]:
    """One line per node, children indented under their consumer."""

    lines: list[str] = []

    def visit(data: Mapping[str, Any], depth: int) -> None:
        lines.append("  " * depth + _label(data))
        for child in data.get("inputs", ()):
            visit(child, depth + 1)

    visit(node_to_dict(node), 0)
    return lines


__all__ = [
    "callable_name",
    "describe",
    "node_from_dict",
    "node_to_dict",
]
