from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path
from typing import Iterable

from core.config import TrafficConfig, format_duration
from core.models import WorkerStats

STATS_FIELDS = [
    "worker", "transport", "state",
    "dials", "dial_failures",
    "writes", "write_failures", "bytes_sent",
    "bytes_drained", "clean_closes", "read_errors",
]


def write_stats_csv(
    filepath: str | Path,
    cfg: TrafficConfig,
    stats: Iterable[WorkerStats],
    started_at: datetime,
    finished_at: datetime,
) -> Path:
    """
    Escreve um CSV com metadados da execução e uma linha por worker.
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    duration = finished_at - started_at

    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)

        # Bloco de metadata em key,value
        w.writerow(["meta_key", "meta_value"])
        w.writerow(["endpoint", cfg.endpoint])
        w.writerow(["transports", "+".join(cfg.transports)])
        w.writerow(["concurrency", cfg.concurrency])
        w.writerow(["payload_bytes", len(cfg.payload)])
        w.writerow(["packet_interval", format_duration(cfg.packet_interval_s)])
        w.writerow(["started_at", started_at.isoformat(timespec="seconds")])
        w.writerow(["finished_at", finished_at.isoformat(timespec="seconds")])
        w.writerow(["duration", str(duration)])
        w.writerow([])

        w.writerow(STATS_FIELDS)
        for s in stats:
            w.writerow([
                s.label, s.transport, s.state,
                s.dials, s.dial_failures,
                s.writes, s.write_failures, s.bytes_sent,
                s.bytes_drained, s.clean_closes, s.read_errors,
            ])

    return path
