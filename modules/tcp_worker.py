# modules/tcp_worker.py
from __future__ import annotations

import socket
import threading
from datetime import datetime
from typing import Optional

from core.errors import DialError, WriteError
from core.logging_utils import LoggerLike
from core.models import DrainResult, WorkerStats
from core.net import dial_tcp

BACKOFF_S = 5.0
DRAIN_CHUNK = 32 * 1024


def drain(sock: socket.socket, chunk_size: int = DRAIN_CHUNK) -> DrainResult:
    """
    Lê e descarta tudo até o peer fechar (EOF) ou dar erro de leitura.
    """
    n = 0
    while True:
        try:
            data = sock.recv(chunk_size)
        except OSError as e:
            return DrainResult(nbytes=n, error=e)
        if not data:
            return DrainResult(nbytes=n)
        n += len(data)


def _write(sock: socket.socket, endpoint: str, payload: bytes) -> None:
    try:
        sock.sendall(payload)
    except OSError as e:
        raise WriteError("tcp", endpoint, e) from e


def _cycle(
    sock: socket.socket,
    endpoint: str,
    payload: bytes,
    logger: LoggerLike,
    stats: WorkerStats,
) -> bool:
    """
    Uma ligação: write (se houver payload) + drain.
    Devolve True se o ciclo terminou em erro (=> backoff).
    """
    if payload:
        try:
            _write(sock, endpoint, payload)
        except WriteError as e:
            stats.write_failures += 1
            logger.warning(str(e))
            return True
        stats.writes += 1
        stats.bytes_sent += len(payload)

    res = drain(sock)
    stats.bytes_drained += res.nbytes
    if res.clean:
        stats.clean_closes += 1
        logger.info(f"Read {res.nbytes} bytes from {endpoint} ({res.outcome})")
        return False

    stats.read_errors += 1
    logger.warning(f"Read {res.nbytes} bytes from {endpoint} with error: {res.outcome}")
    return True


def tcp_worker(
    endpoint: str,
    payload: bytes,
    logger: LoggerLike,
    stop: Optional[threading.Event] = None,
    stats: Optional[WorkerStats] = None,
    backoff_s: float = BACKOFF_S,
) -> None:
    """
    Dial -> write? -> drain -> close, para sempre.
    Backoff só depois de falha de dial/write ou drain com erro;
    EOF limpo volta logo ao dial.
    """
    stop = stop or threading.Event()
    stats = stats or WorkerStats(label="tcp", transport="tcp")
    stats.started_at = datetime.now()
    logger.debug(f"TCP worker started -> {endpoint}")

    try:
        while not stop.is_set():
            stats.dials += 1
            try:
                sock = dial_tcp(endpoint)
            except DialError as e:
                stats.dial_failures += 1
                logger.warning(str(e))
                if stop.wait(backoff_s):
                    break
                continue

            with sock:
                failed = _cycle(sock, endpoint, payload, logger, stats)

            if failed and stop.wait(backoff_s):
                break
    finally:
        stats.finished_at = datetime.now()
        logger.debug("TCP worker stopped")
