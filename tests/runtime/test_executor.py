from __future__ import annotations

import threading
import time

import pytest
from partgraph.api import partition
from partgraph.config import load_settings
from partgraph.runtime import executor as runtime_executor
from partgraph.runtime.executor import SerialContext, ThreadPoolContext
from partgraph.runtime.values import PartitionedValue


def test_env_selects_serial_context(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARTGRAPH_EXECUTOR", "serial")
    monkeypatch.setenv("PARTGRAPH_WORKERS", "3")
    ctx = runtime_executor.get_default_context()
    assert isinstance(ctx, SerialContext)
    assert ctx.nworkers == 3
    assert runtime_executor.default_context_name() == "serial"


def test_env_selects_thread_context(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARTGRAPH_EXECUTOR", "threads")
    monkeypatch.setenv("PARTGRAPH_WORKERS", "2")
    ctx = runtime_executor.get_default_context()
    assert isinstance(ctx, ThreadPoolContext)
    assert ctx.nworkers == 2


@pytest.mark.parametrize(("workers", "expected"), [("1", "serial"), ("4", "threads")])
def test_auto_depends_on_worker_count(monkeypatch, workers, expected) -> None:
    monkeypatch.setenv("PARTGRAPH_WORKERS", workers)
    assert runtime_executor.default_context_name() == expected


def test_unknown_executor_warns_and_falls_back(monkeypatch) -> None:
    monkeypatch.setenv("PARTGRAPH_EXECUTOR", "gpu")
    monkeypatch.setenv("PARTGRAPH_WORKERS", "1")
    with pytest.warns(UserWarning, match="Unknown PARTGRAPH_EXECUTOR"):
        ctx = runtime_executor.get_default_context()
    assert isinstance(ctx, SerialContext)


@pytest.mark.parametrize("raw", ["zero", "0", "-2"])
def test_invalid_worker_count_warns(monkeypatch, raw) -> None:
    monkeypatch.setenv("PARTGRAPH_WORKERS", raw)
    with pytest.warns(UserWarning, match="Invalid PARTGRAPH_WORKERS"):
        settings = load_settings()
    assert settings.workers >= 1


def test_settings_snapshot(monkeypatch) -> None:
    monkeypatch.setenv("PARTGRAPH_EXECUTOR", "THREADS")
    monkeypatch.setenv("PARTGRAPH_WORKERS", "5")
    monkeypatch.setenv("PARTGRAPH_STRICT_ZIP", "0")
    settings = load_settings()
    assert settings.executor == "threads"
    assert settings.workers == 5
    assert settings.strict_zip is False


def test_default_context_is_cached_until_reset(monkeypatch) -> None:
    monkeypatch.setenv("PARTGRAPH_EXECUTOR", "serial")
    monkeypatch.setenv("PARTGRAPH_WORKERS", "2")
    first = runtime_executor.get_default_context()
    assert runtime_executor.get_default_context() is first
    runtime_executor.reset_default_context()
    monkeypatch.setenv("PARTGRAPH_WORKERS", "4")
    second = runtime_executor.get_default_context()
    assert second is not first
    assert second.nworkers == 4


def test_context_requires_positive_workers() -> None:
    with pytest.raises(ValueError):
        SerialContext(0)
    with pytest.raises(ValueError):
        ThreadPoolContext(-1)


def test_distribute_and_gather_roundtrip() -> None:
    ctx = SerialContext(2)
    value = ctx.distribute(partition([1, 2, 3]))
    assert isinstance(value, PartitionedValue)
    assert value.chunks == ([1, 2], [3])
    assert ctx.gather(value) == [[1, 2], [3]]


def test_thread_pool_runs_partitions_concurrently_in_order() -> None:
    ctx = ThreadPoolContext(4)
    source = ctx.distribute(partition([4, 3, 2, 1]))
    barrier = threading.Barrier(4, timeout=5)

    def work(chunk):
        # every partition must be running at once to pass the barrier
        barrier.wait()
        time.sleep(chunk[0] * 0.01)
        return chunk[0]

    result = ctx.run_mappart(work, [source])
    assert result.chunks == (4, 3, 2, 1)


def test_thread_pool_reraises_first_failing_partition() -> None:
    ctx = ThreadPoolContext(3)
    source = ctx.distribute(partition([0, 1, 2]))

    def work(chunk):
        if chunk[0] >= 1:
            raise RuntimeError(f"partition {chunk[0]}")
        return chunk[0]

    with pytest.raises(RuntimeError, match="partition 1"):
        ctx.run_mappart(work, [source])


def test_default_context_is_built_once_across_threads(monkeypatch) -> None:
    monkeypatch.setenv("PARTGRAPH_EXECUTOR", "serial")
    seen = []
    barrier = threading.Barrier(8, timeout=5)

    def grab() -> None:
        barrier.wait()
        seen.append(runtime_executor.get_default_context())

    threads = [threading.Thread(target=grab) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert len(seen) == 8
    assert all(ctx is seen[0] for ctx in seen)


def test_run_mappart_requires_inputs() -> None:
    with pytest.raises(ValueError):
        SerialContext(1).run_mappart(len, [])
