# core/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class DrainResult:
    nbytes: int
    error: Optional[OSError] = None   # None = EOF limpo

    @property
    def clean(self) -> bool:
        return self.error is None

    @property
    def outcome(self) -> str:
        return "EOF" if self.error is None else str(self.error)


@dataclass
class WorkerStats:
    """
    Contadores de um worker. Só o próprio worker escreve;
    dispatcher/CLI apenas leem (resumo e relatórios).
    """
    label: str
    transport: str          # "tcp" | "udp"

    dials: int = 0
    dial_failures: int = 0
    writes: int = 0
    write_failures: int = 0
    bytes_sent: int = 0
    bytes_drained: int = 0
    clean_closes: int = 0
    read_errors: int = 0

    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    crashed: bool = False

    @property
    def running(self) -> bool:
        return self.started_at is not None and self.finished_at is None

    @property
    def state(self) -> str:
        if self.crashed:
            return "crashed"
        if self.started_at is None:
            return "pending"
        return "running" if self.finished_at is None else "finished"


@dataclass
class RunTotals:
    workers: int = 0
    running: int = 0
    dials: int = 0
    dial_failures: int = 0
    writes: int = 0
    write_failures: int = 0
    bytes_sent: int = 0
    bytes_drained: int = 0
    per_transport: dict[str, int] = field(default_factory=dict)


def summarize(stats: list[WorkerStats]) -> RunTotals:
    t = RunTotals()
    for s in stats:
        t.workers += 1
        t.running += int(s.running)
        t.dials += s.dials
        t.dial_failures += s.dial_failures
        t.writes += s.writes
        t.write_failures += s.write_failures
        t.bytes_sent += s.bytes_sent
        t.bytes_drained += s.bytes_drained
        t.per_transport[s.transport] = t.per_transport.get(s.transport, 0) + 1
    return t
