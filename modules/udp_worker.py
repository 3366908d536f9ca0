from __future__ import annotations

import socket
import threading
from datetime import datetime
from typing import Optional

from core.errors import DialError, WriteError
from core.logging_utils import LoggerLike
from core.models import WorkerStats
from core.net import dial_udp


def _send(sock: socket.socket, endpoint: str, payload: bytes) -> None:
    try:
        sock.send(payload)
    except OSError as e:
        raise WriteError("udp", endpoint, e) from e


def udp_worker(
    endpoint: str,
    payload: bytes,
    interval_s: float,
    logger: LoggerLike,
    stop: Optional[threading.Event] = None,
    stats: Optional[WorkerStats] = None,
) -> None:
    """
    Envia o payload para o peer a cada `interval_s`, indefinidamente.
    Falha no dial termina o worker (sem retry); falha de envio só é registada.
    """
    stop = stop or threading.Event()
    stats = stats or WorkerStats(label="udp", transport="udp")
    stats.started_at = datetime.now()

    try:
        stats.dials += 1
        try:
            sock = dial_udp(endpoint)
        except DialError as e:
            stats.dial_failures += 1
            logger.error(str(e))
            return

        logger.debug(f"UDP worker started -> {endpoint}")
        with sock:
            while True:
                try:
                    _send(sock, endpoint, payload)
                    stats.writes += 1
                    stats.bytes_sent += len(payload)
                except WriteError as e:
                    stats.write_failures += 1
                    logger.warning(str(e))

                if stop.wait(interval_s):
                    break
    finally:
        stats.finished_at = datetime.now()
        logger.debug("UDP worker stopped")
