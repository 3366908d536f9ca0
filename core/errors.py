# core/errors.py
from __future__ import annotations


class NetloadError(Exception):
    pass


class ConfigurationError(NetloadError):
    """Configuração inválida. Fatal: o processo sai antes de lançar workers."""


class DialError(NetloadError):
    def __init__(self, transport: str, endpoint: str, cause: BaseException) -> None:
        super().__init__(f"Failed to dial {transport} {endpoint!r}: {cause}")
        self.transport = transport
        self.endpoint = endpoint
        self.cause = cause


class WriteError(NetloadError):
    def __init__(self, transport: str, endpoint: str, cause: BaseException) -> None:
        super().__init__(f"Failed to write to {transport} {endpoint!r}: {cause}")
        self.transport = transport
        self.endpoint = endpoint
        self.cause = cause
