from __future__ import annotations

import socket
import threading
import time
from typing import Callable, List, Optional, Tuple

import pytest


class TcpServer:
    """
    Listener local: aceita, lê `read_n` bytes (se > 0), envia `reply`, fecha.
    Regista (instante do accept, bytes recebidos) por ligação.
    """

    def __init__(self, read_n: int = 0, reply: bytes = b"") -> None:
        self.read_n = read_n
        self.reply = reply
        self.accepts: List[Tuple[float, bytes]] = []
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(64)
        self._sock.settimeout(0.1)
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._loop, daemon=True)
        self._thread.start()

    @property
    def endpoint(self) -> str:
        host, port = self._sock.getsockname()
        return f"{host}:{port}"

    def _recv_exact(self, conn: socket.socket, n: int) -> bytes:
        buf = b""
        while len(buf) < n:
            chunk = conn.recv(n - len(buf))
            if not chunk:
                break
            buf += chunk
        return buf

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                conn, _ = self._sock.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            with conn:
                conn.settimeout(2.0)
                t = time.monotonic()
                try:
                    data = self._recv_exact(conn, self.read_n) if self.read_n else b""
                    if self.reply:
                        conn.sendall(self.reply)
                except OSError:
                    data = b""
                self.accepts.append((t, data))

    def close(self) -> None:
        self._stop.set()
        self._thread.join(timeout=2)
        self._sock.close()


class UdpSink:
    def __init__(self) -> None:
        self.packets: List[Tuple[float, bytes, tuple]] = []
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.settimeout(0.1)
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._loop, daemon=True)
        self._thread.start()

    @property
    def endpoint(self) -> str:
        host, port = self._sock.getsockname()
        return f"{host}:{port}"

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                data, addr = self._sock.recvfrom(65535)
            except socket.timeout:
                continue
            except OSError:
                break
            self.packets.append((time.monotonic(), data, addr))

    def close(self) -> None:
        self._stop.set()
        self._thread.join(timeout=2)
        self._sock.close()


class FakeConn:
    """Socket TCP falso: `chunks` são devolvidos por recv; exceções são lançadas."""

    def __init__(self, chunks=(), send_error: Optional[OSError] = None) -> None:
        self.chunks = list(chunks)
        self.send_error = send_error
        self.sent: List[bytes] = []
        self.send_times: List[float] = []
        self.closed = False

    def sendall(self, data: bytes) -> None:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(data)

    def send(self, data: bytes) -> int:
        self.send_times.append(time.monotonic())
        self.sendall(data)
        return len(data)

    def recv(self, n: int) -> bytes:
        if not self.chunks:
            return b""
        item = self.chunks.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeConn":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


@pytest.fixture
def tcp_server_factory():
    servers: List[TcpServer] = []

    def make(read_n: int = 0, reply: bytes = b"") -> TcpServer:
        s = TcpServer(read_n=read_n, reply=reply)
        servers.append(s)
        return s

    yield make
    for s in servers:
        s.close()


@pytest.fixture
def udp_sink():
    sink = UdpSink()
    yield sink
    sink.close()


@pytest.fixture
def refused_endpoint() -> str:
    # Porto livre sem listener: connect() -> ECONNREFUSED
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return f"127.0.0.1:{port}"


@pytest.fixture
def stop():
    evt = threading.Event()
    yield evt
    evt.set()


@pytest.fixture
def run_in_thread(stop):
    """Corre `fn` numa thread; no fim do teste faz stop + join."""
    threads: List[threading.Thread] = []

    def start(fn: Callable[[], None]) -> threading.Thread:
        t = threading.Thread(target=fn, daemon=True)
        threads.append(t)
        t.start()
        return t

    yield start
    stop.set()
    for t in threads:
        t.join(timeout=5)


def _wait_until(cond: Callable[[], bool], timeout: float = 3.0, step: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if cond():
            return True
        time.sleep(step)
    return cond()


@pytest.fixture
def wait_until():
    return _wait_until
