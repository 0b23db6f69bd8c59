"""Environment-driven settings for default execution contexts."""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass

_EXECUTORS = {"auto", "serial", "threads"}


@dataclass(frozen=True)
class Settings:
    executor: str
    workers: int
    strict_zip: bool


def _default_workers() -> int:
    return max(1, os.cpu_count() or 1)


def _read_workers() -> int:
    raw = os.environ.get("PARTGRAPH_WORKERS")
    if raw is None or not raw.strip():
        return _default_workers()
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        warnings.warn(
            f"Invalid PARTGRAPH_WORKERS={raw!r}; using {_default_workers()}",
            stacklevel=3,
        )
        return _default_workers()
    return value


def _read_executor() -> str:
    requested = os.environ.get("PARTGRAPH_EXECUTOR", "auto").lower()
    if requested not in _EXECUTORS:
        warnings.warn(
            f"Unknown PARTGRAPH_EXECUTOR={requested!r}; defaulting to auto",
            stacklevel=3,
        )
        requested = "auto"
    return requested


def strict_zip_enabled() -> bool:
    return os.environ.get("PARTGRAPH_STRICT_ZIP", "1") != "0"


def load_settings() -> Settings:
    """Snapshot the PARTGRAPH_* environment variables."""

    return Settings(
        executor=_read_executor(),
        workers=_read_workers(),
        strict_zip=strict_zip_enabled(),
    )


__all__ = ["Settings", "load_settings", "strict_zip_enabled"]
