from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List

import matplotlib.pyplot as plt
import numpy as np

from .models import ColumnEvent, EventKind

logger = logging.getLogger(__name__)

_PLOTTED_KINDS = [
    EventKind.SWITCH,
    EventKind.FALSE_SNP,
    EventKind.FALSE_INDEL,
    EventKind.BAD_CALL,
    EventKind.INDEL_SITE_MISMATCH,
]


def positions_by_kind(events: Iterable[ColumnEvent]) -> Dict[EventKind, List[int]]:
    out: Dict[EventKind, List[int]] = {k: [] for k in _PLOTTED_KINDS}
    for ev in events:
        if ev.kind in out:
            out[ev.kind].append(ev.position)
    return out


def plot_event_positions(
    *,
    events: Iterable[ColumnEvent],
    length: int,
    out_png: str | Path,
    n_bins: int = 50,
    title: str = "Error events along the alignment",
) -> None:
    """Stacked histogram of event positions, one layer per event kind."""
    out_png = Path(out_png)
    out_png.parent.mkdir(parents=True, exist_ok=True)

    by_kind = positions_by_kind(events)
    bin_edges = np.linspace(1, max(length, 1) + 1, min(n_bins, max(length, 1)) + 1)
    widths = np.diff(bin_edges)

    plt.figure(figsize=(8, 3.5))
    bottom = np.zeros(len(bin_edges) - 1, dtype=np.int64)
    for kind in _PLOTTED_KINDS:
        counts, _ = np.histogram(by_kind[kind], bins=bin_edges)
        plt.bar(bin_edges[:-1], counts, width=widths, bottom=bottom, align="edge", label=kind.value)
        bottom += counts
    plt.xlabel("Alignment column")
    plt.ylabel("Events")
    plt.title(title)
    plt.legend(fontsize="small")
    plt.tight_layout()
    plt.savefig(out_png, dpi=160)
    plt.close()
