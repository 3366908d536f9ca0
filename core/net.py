# core/net.py
from __future__ import annotations

import socket
from typing import Optional, Tuple

from core.errors import DialError


def split_host_port(endpoint: str) -> Tuple[str, str]:
    """
    Separa "host:port" / "[ipv6]:port" em (host, port).
    O porto fica em string (aceita nomes de serviço, ex: "http").
    Lança ValueError com a mesma mensagem para todos os formatos inválidos.
    """
    def _bad(why: str) -> ValueError:
        return ValueError(f"address {endpoint}: {why}")

    if endpoint.startswith("["):
        end = endpoint.find("]")
        if end < 0:
            raise _bad("missing ']' in address")
        if end + 1 == len(endpoint):
            raise _bad("missing port in address")
        if endpoint[end + 1] != ":":
            if "]" in endpoint[end + 1:]:
                raise _bad("unexpected ']' in address")
            raise _bad("missing port in address")
        host = endpoint[1:end]
        port = endpoint[end + 2:]
        if "[" in host:
            raise _bad("unexpected '[' in address")
    else:
        i = endpoint.rfind(":")
        if i < 0:
            raise _bad("missing port in address")
        host, port = endpoint[:i], endpoint[i + 1:]
        if ":" in host:
            raise _bad("too many colons in address")
        if "[" in host:
            raise _bad("unexpected '[' in address")
        if "]" in host:
            raise _bad("unexpected ']' in address")

    if "[" in port or "]" in port:
        raise _bad("unexpected bracket in port")
    if not port:
        raise _bad("missing port in address")
    if port.isascii() and port.isdigit() and not 0 <= int(port) <= 65535:
        raise _bad("invalid port")
    return host, port


def _dial(transport: str, endpoint: str, timeout: Optional[float]) -> socket.socket:
    socktype = socket.SOCK_STREAM if transport == "tcp" else socket.SOCK_DGRAM

    try:
        host, port = split_host_port(endpoint)
        infos = socket.getaddrinfo(host or None, port, type=socktype)
    except (ValueError, OSError, UnicodeError) as e:
        # socket.gaierror é subclasse de OSError
        raise DialError(transport, endpoint, e) from e

    last_err: Optional[OSError] = None
    for family, stype, proto, _canon, addr in infos:
        try:
            s = socket.socket(family, stype, proto)
        except OSError as e:
            # ex: EMFILE com concorrência acima do ulimit
            last_err = e
            continue
        try:
            s.settimeout(timeout)
            s.connect(addr)
            # Depois de ligado, I/O bloqueante sem timeout
            s.settimeout(None)
            return s
        except OSError as e:
            s.close()
            last_err = e

    cause: OSError = last_err or OSError(f"no addresses for {endpoint!r}")
    raise DialError(transport, endpoint, cause) from last_err


def dial_tcp(endpoint: str, timeout: Optional[float] = None) -> socket.socket:
    return _dial("tcp", endpoint, timeout)


def dial_udp(endpoint: str) -> socket.socket:
    """
    "Dial" UDP = socket com peer fixo (connect). Não envia nada;
    só falha por endpoint inválido, resolução ou bind local.
    """
    return _dial("udp", endpoint, None)
