from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from jinja2 import Template

from .models import ColumnEvent, EvaluationResult, EventKind, HaplotypeCounters
from .utils import open_textmaybe_gzip

logger = logging.getLogger(__name__)


def format_event(event: ColumnEvent) -> str:
    """Render one human-readable event line (1-based position)."""
    pos = event.position
    hap = event.haplotype
    if event.kind is EventKind.SWITCH:
        return f"Test haplotype {hap} switches at position {pos}"
    if event.kind is EventKind.BAD_CALL:
        return f"Test haplotype {hap} doesn't match either true haplotype at position {pos}"
    if event.kind is EventKind.FALSE_SNP:
        return f"False SNP at position {pos}"
    if event.kind is EventKind.FALSE_INDEL:
        return f"False indel at position {pos}"
    if event.kind is EventKind.TRUE_INDEL:
        return f"True indel at position {pos}"
    return f"False SNP due to test haplotype {hap} at position {pos}"


def summary_lines(result: EvaluationResult) -> List[str]:
    """The eight summary lines, in their fixed order."""
    a = result.test1
    b = result.test2
    return [
        f"Haplotype switches for test haplotype 1: {a.switches}",
        f"Haplotype switches for test haplotype 2: {b.switches}",
        f"False SNPs in haplotype 1: {a.false_snps}",
        f"False SNPs in haplotype 2: {b.false_snps}",
        f"False indels in haplotype 1: {a.false_indels}",
        f"False indels in haplotype 2: {b.false_indels}",
        f"Bad base calls in haplotype 1: {a.bad_calls}",
        f"Bad base calls in haplotype 2: {b.bad_calls}",
    ]


def _counters_to_dict(c: HaplotypeCounters) -> Dict[str, Any]:
    d = asdict(c)
    d["phase"] = c.phase.name
    return d


def result_to_dict(
    result: EvaluationResult,
    *,
    alignment_path: Optional[str] = None,
    true_prefix: Optional[str] = None,
) -> Dict[str, Any]:
    """Machine-readable summary (written as summary.json)."""
    return {
        "alignment_path": alignment_path,
        "true_prefix": true_prefix,
        "headers": dict(result.headers),
        "columns": {
            "total": result.length,
            "homozygous": result.homozygous_columns,
            "het_snp": result.het_snp_columns,
            "indel": result.indel_columns,
        },
        "events_total": result.events_total,
        "test1": _counters_to_dict(result.test1),
        "test2": _counters_to_dict(result.test2),
    }


def write_events_tsv(path: str | Path, events: Iterable[ColumnEvent]) -> int:
    """Write events as TSV (gzip if the path ends in .gz); return the row count."""
    n = 0
    with open_textmaybe_gzip(path, "wt") as fh:
        fh.write("position\tkind\thaplotype\n")
        for ev in events:
            hap = "" if ev.haplotype is None else str(ev.haplotype)
            fh.write(f"{ev.position}\t{ev.kind.value}\t{hap}\n")
            n += 1
    return n


_REPORT_TEMPLATE = Template(
    """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>HapSNPeval Report</title>
  <style>
    body { font-family: Arial, Helvetica, sans-serif; margin: 24px; }
    code, pre { background: #f6f8fa; padding: 2px 4px; border-radius: 4px; }
    h1, h2, h3 { margin-top: 1.2em; }
    table { border-collapse: collapse; margin-top: 0.6em; }
    th, td { border: 1px solid #ddd; padding: 8px; }
    th { background: #f2f2f2; text-align: left; }
    .grid { display: grid; grid-template-columns: 1fr 1fr; gap: 16px; }
    .card { border: 1px solid #ddd; border-radius: 8px; padding: 12px; }
    .small { color: #666; font-size: 0.9em; }
    img { max-width: 100%; height: auto; border: 1px solid #eee; border-radius: 6px; }
  </style>
</head>
<body>

<h1>HapSNPeval Report</h1>
<p class="small">Generated: {{ generated_at }}</p>

<h2>Inputs</h2>
<div class="grid">
  <div class="card">
    <h3>Alignment</h3>
    <table>
      <tr><th>File</th><td><code>{{ summary.alignment_path }}</code></td></tr>
      <tr><th>True prefix</th><td><code>{{ summary.true_prefix }}</code></td></tr>
      <tr><th>True haplotype 1</th><td><code>{{ summary.headers.true1 }}</code></td></tr>
      <tr><th>True haplotype 2</th><td><code>{{ summary.headers.true2 }}</code></td></tr>
      <tr><th>Test haplotype 1</th><td><code>{{ summary.headers.test1 }}</code></td></tr>
      <tr><th>Test haplotype 2</th><td><code>{{ summary.headers.test2 }}</code></td></tr>
    </table>
  </div>
  <div class="card">
    <h3>Columns</h3>
    <table>
      <tr><th>Aligned columns</th><td>{{ summary.columns.total }}</td></tr>
      <tr><th>Homozygous</th><td>{{ summary.columns.homozygous }}</td></tr>
      <tr><th>Heterozygous SNP</th><td>{{ summary.columns.het_snp }}</td></tr>
      <tr><th>Indel</th><td>{{ summary.columns.indel }}</td></tr>
    </table>
  </div>
</div>

<h2>Accuracy</h2>
<table>
  <tr><th></th><th>Test haplotype 1</th><th>Test haplotype 2</th></tr>
  <tr><th>Phase switches</th><td>{{ summary.test1.switches }}</td><td>{{ summary.test2.switches }}</td></tr>
  <tr><th>False SNPs</th><td>{{ summary.test1.false_snps }}</td><td>{{ summary.test2.false_snps }}</td></tr>
  <tr><th>&nbsp;&nbsp;of which at true indels</th><td>{{ summary.test1.indel_site_mismatches }}</td><td>{{ summary.test2.indel_site_mismatches }}</td></tr>
  <tr><th>False indels</th><td>{{ summary.test1.false_indels }}</td><td>{{ summary.test2.false_indels }}</td></tr>
  <tr><th>Bad base calls</th><td>{{ summary.test1.bad_calls }}</td><td>{{ summary.test2.bad_calls }}</td></tr>
  <tr><th>Final phase</th><td>{{ summary.test1.phase }}</td><td>{{ summary.test2.phase }}</td></tr>
</table>

{% if plots.event_positions %}
<h2>Event positions</h2>
<img src="{{ plots.event_positions }}" alt="event positions">
{% endif %}

<h2>Outputs</h2>
<ul>
  <li><code>summary.json</code> (machine-readable summary)</li>
  <li><code>{{ events_tsv }}</code> (one row per column event)</li>
</ul>

<h2>Interpretation notes</h2>
<ul>
  <li>Only heterozygous SNP columns update phase; the first one a test haplotype matches never counts as a switch.</li>
  <li>Mismatches at true indel columns are counted as false SNPs and listed separately above.</li>
  <li>Base comparison is case-sensitive.</li>
</ul>

<hr>
<p class="small">HapSNPeval {{ version }}</p>
</body>
</html>"""
)


def render_report(
    *,
    outdir: str | Path,
    version: str,
    summary: Dict[str, Any],
    events_tsv: str,
    plots: Dict[str, str],
) -> Path:
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    html = _REPORT_TEMPLATE.render(
        generated_at=_dt.datetime.now().isoformat(timespec="seconds"),
        version=version,
        summary=summary,
        events_tsv=events_tsv,
        plots=plots,
    )

    out_path = outdir / "report.html"
    out_path.write_text(html, encoding="utf-8")
    return out_path
