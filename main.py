#!/usr/bin/env python3
"""
netload - Gerador de tráfego TCP/UDP concorrente
- Flags -> TrafficConfig (validação)
- Dispatcher: N workers por transporte, até o processo ser morto
"""


from __future__ import annotations

import argparse
import sys
from datetime import datetime
from typing import Optional

from core.config import (
    TrafficConfig,
    decode_payload,
    format_duration,
    parse_duration,
)
from core.csv_utils import write_stats_csv
from core.errors import ConfigurationError
from core.logging_utils import LOG_LEVELS, configure_logging
from core.models import WorkerStats, summarize
from core.pdf_report import write_stats_pdf
from modules import dispatcher


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="netload",
        description="Maintain N concurrent TCP and/or UDP connections to one endpoint.",
    )
    p.add_argument("--endpoint", default="", help="Network endpoint address (host:port)")
    p.add_argument("--payload", default="", help="TCP payload or UDP message in base64 encoding")
    p.add_argument("--tcp", action="store_true", help="Use TCP transport")
    p.add_argument("--udp", action="store_true", help="Use UDP transport")
    p.add_argument("--concurrency", type=int, default=1, help="Number of concurrent connections to maintain")
    p.add_argument("--packet-interval", "--packetInterval", dest="packet_interval", default="5s",
                   help="Interval for sending UDP packets (ex: 5s, 250ms, 1m30s)")
    p.add_argument("--log-level", default="INFO", choices=LOG_LEVELS, type=str.upper)
    p.add_argument("--csv", metavar="PATH", help="Write a per-worker summary CSV on exit")
    p.add_argument("--pdf", metavar="PATH", help="Write a per-worker summary PDF on exit")
    return p


def parse_config(args: argparse.Namespace) -> TrafficConfig:
    if not args.tcp and not args.udp:
        raise ConfigurationError("Use of either TCP or UDP is required.")

    if args.concurrency < 1:
        raise ConfigurationError("Concurrency must be at least 1.")

    payload = decode_payload(args.payload)
    interval = parse_duration(args.packet_interval)

    return TrafficConfig(
        endpoint=args.endpoint,
        payload=payload,
        use_tcp=args.tcp,
        use_udp=args.udp,
        concurrency=args.concurrency,
        packet_interval_s=interval,
    )


def print_summary(cfg: TrafficConfig, stats: list[WorkerStats], started_at: datetime, finished_at: datetime) -> None:
    t = summarize(stats)
    print("=" * 60)
    print(f"Endpoint: {cfg.endpoint} ({'+'.join(cfg.transports)}, "
          f"intervalo UDP {format_duration(cfg.packet_interval_s)})")
    print(f"Tempo total: {finished_at - started_at}")
    print(f"Workers: {t.workers} (ainda ativos: {t.running})")
    print(f"Dials: {t.dials} (falhados: {t.dial_failures})")
    print(f"Writes: {t.writes} (falhados: {t.write_failures})")
    print(f"Bytes enviados: {t.bytes_sent} | drenados: {t.bytes_drained}")
    print("-" * 60)


def write_reports(
    args: argparse.Namespace,
    cfg: TrafficConfig,
    stats: list[WorkerStats],
    started_at: datetime,
    finished_at: datetime,
) -> None:
    if args.csv:
        try:
            path = write_stats_csv(args.csv, cfg, stats, started_at, finished_at)
            print(f"[+] CSV guardado em: {path}")
        except OSError as e:
            print(f"[!] Erro a guardar CSV: {e}")

    if args.pdf:
        try:
            path = write_stats_pdf(args.pdf, cfg, stats, started_at, finished_at)
            print(f"[+] PDF guardado em: {path}")
        except OSError as e:
            print(f"[!] Erro a guardar PDF: {e}")


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        cfg = parse_config(args)
    except ConfigurationError as e:
        print(f"[!] {e}")
        parser.print_usage(sys.stderr)
        return 1

    logger = configure_logging(args.log_level)

    started_at = datetime.now()
    workers = dispatcher.launch(cfg, logger=logger)

    code = 0
    try:
        # TCP: nunca termina; só UDP com dial falhado deixa o join acabar
        dispatcher.join(workers)
        logger.info("All workers finished")
    except KeyboardInterrupt:
        print("\n[!] Interrompido. A sair.")
        code = 130

    finished_at = datetime.now()
    stats = [w.stats for w in workers]
    print_summary(cfg, stats, started_at, finished_at)
    write_reports(args, cfg, stats, started_at, finished_at)
    return code


if __name__ == "__main__":
    raise SystemExit(main())
