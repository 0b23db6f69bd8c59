"""Event notes recorded by execution contexts."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
else:
    from collections import abc as _abc

    Iterable = _abc.Iterable


@dataclass
class ComputeDiagnostics:
    notes: list[str] = field(default_factory=list)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def add(self, message: str) -> None:
        with self._lock:
            self.notes.append(message)

    def extend(self, messages: Iterable[str]) -> None:
        with self._lock:
            self.notes.extend(messages)

    def describe(self) -> list[str]:
        with self._lock:
            return list(self.notes)

    def clear(self) -> None:
        with self._lock:
            self.notes.clear()

    def count(self, prefix: str) -> int:
        """Number of notes starting with ``prefix`` (e.g. ``"gather"``)."""

        return sum(1 for note in self.describe() if note.startswith(prefix))


__all__ = ["ComputeDiagnostics"]
