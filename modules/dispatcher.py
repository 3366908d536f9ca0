# modules/dispatcher.py
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from core.config import TrafficConfig
from core.logging_utils import worker_logger
from core.models import WorkerStats
from modules.tcp_worker import BACKOFF_S, tcp_worker
from modules.udp_worker import udp_worker


@dataclass
class Worker:
    label: str
    thread: threading.Thread
    stats: WorkerStats


def _guarded(target: Callable[[], None], stats: WorkerStats, logger: logging.LoggerAdapter) -> Callable[[], None]:
    # Uma exceção inesperada num worker não pode afetar os outros nem o join
    def run() -> None:
        try:
            target()
        except Exception:
            stats.crashed = True
            if stats.finished_at is None:
                stats.finished_at = datetime.now()
            logger.exception("Worker crashed")
    return run


def launch(
    cfg: TrafficConfig,
    logger: Optional[logging.Logger] = None,
    stop: Optional[threading.Event] = None,
    backoff_s: float = BACKOFF_S,
) -> List[Worker]:
    """
    Lança cfg.concurrency workers por transporte ativo (TCP e/ou UDP).
    Não espera: devolve os handles para join().
    """
    log = logger or logging.getLogger("netload")
    log.info(
        f"Starting {cfg.worker_count} worker(s) -> {cfg.endpoint} "
        f"({'+'.join(cfg.transports)}, concurrency={cfg.concurrency}, payload={len(cfg.payload)} bytes)"
    )

    workers: List[Worker] = []
    for transport in cfg.transports:
        for i in range(cfg.concurrency):
            label = f"{transport}-{i}"
            stats = WorkerStats(label=label, transport=transport)
            wlog = worker_logger(log, label)

            if transport == "tcp":
                def target(stats=stats, wlog=wlog) -> None:
                    tcp_worker(cfg.endpoint, cfg.payload, wlog, stop=stop, stats=stats, backoff_s=backoff_s)
            else:
                def target(stats=stats, wlog=wlog) -> None:
                    udp_worker(cfg.endpoint, cfg.payload, cfg.packet_interval_s, wlog, stop=stop, stats=stats)

            t = threading.Thread(target=_guarded(target, stats, wlog), name=label, daemon=True)
            workers.append(Worker(label=label, thread=t, stats=stats))

    for w in workers:
        w.thread.start()

    return workers


def join(workers: List[Worker]) -> None:
    for w in workers:
        w.thread.join()


def run(
    cfg: TrafficConfig,
    logger: Optional[logging.Logger] = None,
    stop: Optional[threading.Event] = None,
    backoff_s: float = BACKOFF_S,
) -> List[WorkerStats]:
    """
    Lança todos os workers e bloqueia até terminarem.
    Com TCP ativo isto, na prática, nunca retorna (só com `stop` ou kill).
    """
    log = logger or logging.getLogger("netload")
    workers = launch(cfg, logger=log, stop=stop, backoff_s=backoff_s)
    join(workers)
    log.info("All workers finished")
    return [w.stats for w in workers]
