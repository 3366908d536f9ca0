# core/pdf_report.py
from __future__ import annotations

from datetime import datetime
from pathlib import Path

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import cm
from reportlab.pdfgen import canvas

from core.config import TrafficConfig, format_duration
from core.models import WorkerStats, summarize


def write_stats_pdf(
    filepath: str | Path,
    cfg: TrafficConfig,
    stats: list[WorkerStats],
    started_at: datetime,
    finished_at: datetime,
) -> Path:
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    totals = summarize(stats)

    c = canvas.Canvas(str(path), pagesize=A4)
    w, h = A4

    c.setFont("Helvetica-Bold", 16)
    c.drawString(2*cm, h-2*cm, "Relatório de Tráfego (netload)")

    c.setFont("Helvetica", 10)
    c.drawString(2*cm, h-2.8*cm, f"Gerado em: {datetime.now().isoformat(timespec='seconds')}")
    c.drawString(2*cm, h-3.3*cm, f"Endpoint: {cfg.endpoint}  ({'+'.join(cfg.transports)})")
    c.drawString(2*cm, h-3.8*cm, f"Concurrency: {cfg.concurrency}  Payload: {len(cfg.payload)} bytes  "
                                 f"Intervalo UDP: {format_duration(cfg.packet_interval_s)}")
    c.drawString(2*cm, h-4.3*cm, f"Duração: {finished_at - started_at}")

    y = h-5.3*cm
    c.setFont("Helvetica-Bold", 12)
    c.drawString(2*cm, y, "Totais")
    y -= 0.6*cm

    c.setFont("Helvetica", 10)
    for line in (
        f"Workers: {totals.workers} (ainda ativos: {totals.running})",
        f"Dials: {totals.dials} (falhados: {totals.dial_failures})",
        f"Writes: {totals.writes} (falhados: {totals.write_failures})",
        f"Bytes enviados: {totals.bytes_sent}",
        f"Bytes drenados: {totals.bytes_drained}",
    ):
        c.drawString(2.2*cm, y, line)
        y -= 0.45*cm

    y -= 0.4*cm
    c.setFont("Helvetica-Bold", 12)
    c.drawString(2*cm, y, "Workers")
    y -= 0.7*cm

    c.setFont("Helvetica", 9)
    for s in stats:
        line = (f"[{s.state}] {s.label}: dials={s.dials}/{s.dial_failures} fail  "
                f"writes={s.writes}/{s.write_failures} fail  sent={s.bytes_sent}  drained={s.bytes_drained}")
        if y < 2*cm:
            c.showPage()
            y = h-2*cm
            c.setFont("Helvetica", 9)
        c.drawString(2*cm, y, line[:120])
        y -= 0.42*cm

    c.save()
    return path
