from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass

from core.errors import ConfigurationError

DEFAULT_PACKET_INTERVAL_S = 5.0

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # U+00B5
    "μs": 1e-6,  # U+03BC
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


@dataclass(frozen=True)
class TrafficConfig:
    endpoint: str
    payload: bytes = b""
    use_tcp: bool = False
    use_udp: bool = False
    concurrency: int = 1
    packet_interval_s: float = DEFAULT_PACKET_INTERVAL_S

    def __post_init__(self) -> None:
        if not self.use_tcp and not self.use_udp:
            raise ConfigurationError("Use of either TCP or UDP is required.")
        if self.concurrency < 1:
            raise ConfigurationError("Concurrency must be at least 1.")
        if self.packet_interval_s <= 0:
            raise ConfigurationError("Packet interval must be positive.")

    @property
    def transports(self) -> list[str]:
        out: list[str] = []
        if self.use_tcp:
            out.append("tcp")
        if self.use_udp:
            out.append("udp")
        return out

    @property
    def worker_count(self) -> int:
        return self.concurrency * len(self.transports)


def decode_payload(spec: str) -> bytes:
    """
    Base64 (alfabeto standard, com padding) -> bytes.
    String vazia devolve b"" (modo só-drain em TCP).
    """
    spec = spec.strip()
    if not spec:
        return b""
    try:
        return base64.b64decode(spec, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ConfigurationError(f"Failed to decode payload: {e}") from e


def encode_payload(payload: bytes) -> str:
    return base64.b64encode(payload).decode("ascii")


def parse_duration(spec: str) -> float:
    """
    Aceita durações no formato Go e devolve segundos:
      "5s", "250ms", "1m30s", "1.5h", "-2s", "0"
    Valores sem unidade (exceto "0") são rejeitados.
    """
    s = spec.strip()
    if not s:
        raise ConfigurationError("Invalid duration: empty string.")

    sign = 1.0
    if s[0] in "+-":
        if s[0] == "-":
            sign = -1.0
        s = s[1:]

    if s == "0":
        return 0.0
    if not s:
        raise ConfigurationError(f"Invalid duration: {spec!r}")

    total = 0.0
    pos = 0
    while pos < len(s):
        m = _DURATION_PART.match(s, pos)
        if not m:
            raise ConfigurationError(f"Invalid duration: {spec!r}")
        total += float(m.group(1)) * _DURATION_UNITS[m.group(2)]
        pos = m.end()

    return sign * total


def format_duration(seconds: float) -> str:
    if seconds >= 1 and float(seconds).is_integer():
        return f"{int(seconds)}s"
    return f"{seconds * 1000:g}ms"
