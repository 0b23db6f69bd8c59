"""Reference execution contexts that hold partitions in local memory."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from partgraph.config import load_settings
from partgraph.errors import UnsupportedPartitionError
from partgraph.runtime.diagnostics import ComputeDiagnostics
from partgraph.runtime.values import PartitionedValue

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from partgraph.ir.graph import Partitioned
else:
    from collections import abc as _abc

    Callable = _abc.Callable
    Sequence = _abc.Sequence
    Partitioned = Any

log = logging.getLogger("partgraph.runtime.executor")


class ExecutionContext(Protocol):
    name: str
    nworkers: int

    def distribute(self, node: Partitioned) -> PartitionedValue:
        """Split a data source into one chunk per partition."""

    def run_mappart(
        self, f: Callable[..., Any], inputs: Sequence[PartitionedValue]
    ) -> PartitionedValue:
        """Apply ``f`` to the zipped chunks of every partition."""

    def gather(self, value: PartitionedValue) -> list[Any]:
        """Collect one value per partition, in partition order."""


class _LocalContext:
    name = "local"

    def __init__(self, nworkers: int) -> None:
        if nworkers < 1:
            raise ValueError(f"nworkers must be positive, got {nworkers}")
        self.nworkers = int(nworkers)
        self.diagnostics = ComputeDiagnostics()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(nworkers={self.nworkers})"

    def _run(self, tasks: list[Callable[[], Any]]) -> list[Any]:
        raise NotImplementedError

    def distribute(self, node: Partitioned) -> PartitionedValue:
        scheme = node.scheme
        if not (hasattr(scheme, "partitions") and hasattr(scheme, "chunk")):
            raise UnsupportedPartitionError(
                f"Unsupported partition scheme {scheme!r}"
            )
        handles = scheme.partitions(node.obj, self.nworkers)
        chunks = tuple(scheme.chunk(node.obj, handle) for handle in handles)
        describe = getattr(scheme, "describe", None)
        label = describe() if callable(describe) else type(scheme).__name__
        self.diagnostics.add(f"distribute: {label} x{len(chunks)}")
        return PartitionedValue(chunks=chunks, scheme=scheme)

    def run_mappart(
        self, f: Callable[..., Any], inputs: Sequence[PartitionedValue]
    ) -> PartitionedValue:
        if not inputs:
            raise ValueError("run_mappart requires at least one input")
        nparts = inputs[0].nparts

        def task_for(index: int) -> Callable[[], Any]:
            return lambda: f(*(inp.chunks[index] for inp in inputs))

        results = self._run([task_for(index) for index in range(nparts)])
        self.diagnostics.add(f"mappart: {nparts} partitions")
        return PartitionedValue(chunks=tuple(results))

    def gather(self, value: PartitionedValue) -> list[Any]:
        self.diagnostics.add(f"gather: {value.nparts} values")
        return list(value.chunks)


class SerialContext(_LocalContext):
    """Runs partitions one after another, in index order."""

    name = "serial"

    def _run(self, tasks: list[Callable[[], Any]]) -> list[Any]:
        return [task() for task in tasks]


class ThreadPoolContext(_LocalContext):
    """Runs partitions concurrently on a thread pool.

    Results are returned in partition order; the first failing partition (by
    index) re-raises its exception once every task has finished.
    """

    name = "threads"

    def __init__(self, nworkers: int, *, max_threads: int | None = None) -> None:
        super().__init__(nworkers)
        self.max_threads = max_threads or self.nworkers

    def _run(self, tasks: list[Callable[[], Any]]) -> list[Any]:
        if not tasks:
            return []
        with ThreadPoolExecutor(max_workers=self.max_threads) as pool:
            futures = [pool.submit(task) for task in tasks]
        return [future.result() for future in futures]


@dataclass
class ContextHandle:
    context: ExecutionContext
    source: str


_ACTIVE_CONTEXT: ContextHandle | None = None
_CONTEXT_LOCK = threading.Lock()


def _choose_context() -> ContextHandle:
    settings = load_settings()
    requested = settings.executor
    if requested == "auto":
        requested = "threads" if settings.workers > 1 else "serial"
    if requested == "threads":
        context: ExecutionContext = ThreadPoolContext(settings.workers)
    else:
        context = SerialContext(settings.workers)
    log.debug("default context: %r (executor=%s)", context, settings.executor)
    return ContextHandle(context=context, source=settings.executor)


def get_default_context() -> ExecutionContext:
    global _ACTIVE_CONTEXT
    with _CONTEXT_LOCK:
        if _ACTIVE_CONTEXT is None:
            _ACTIVE_CONTEXT = _choose_context()
        return _ACTIVE_CONTEXT.context


def default_context_name() -> str:
    return get_default_context().name


def reset_default_context() -> None:
    global _ACTIVE_CONTEXT
    with _CONTEXT_LOCK:
        _ACTIVE_CONTEXT = None


__all__ = [
    "ContextHandle",
    "ExecutionContext",
    "SerialContext",
    "ThreadPoolContext",
    "default_context_name",
    "get_default_context",
    "reset_default_context",
]
