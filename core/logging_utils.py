from __future__ import annotations

import logging
from typing import Any, MutableMapping, Optional, Tuple, Union

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

LoggerLike = Union[logging.Logger, logging.LoggerAdapter]


def configure_logging(level: str = "INFO") -> logging.Logger:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    return logging.getLogger("netload")


class WorkerLogAdapter(logging.LoggerAdapter):
    """Prefixa cada linha com o label do worker: "[tcp-3] ..."."""

    def __init__(self, logger: logging.Logger, label: str) -> None:
        super().__init__(logger, {"worker": label})
        self.label = label

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs.setdefault("extra", {}).update(self.extra)
        return f"[{self.label}] {msg}", kwargs


def worker_logger(base: Optional[logging.Logger], label: str) -> WorkerLogAdapter:
    return WorkerLogAdapter(base or logging.getLogger("netload"), label)
