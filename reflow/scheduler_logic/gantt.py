"""Gantt chart of a reflow result, rendered to PNG bytes."""

from __future__ import annotations

from datetime import timedelta
from io import BytesIO
from typing import Sequence

import matplotlib
matplotlib.use("Agg")

import matplotlib.dates as mdates  # noqa: E402
import matplotlib.patches as mpatches  # noqa: E402
import matplotlib.pyplot as plt  # noqa: E402

from reflow.shared.models import ReflowResult, WorkCenter, WorkOrder

from .constants import (
    MAINTENANCE_ORDER_COLOR,
    MAINTENANCE_WINDOW_COLOR,
    MOVED_COLOR,
    PRODUCTION_COLOR,
)
from .working_clock import working_segments


def _rows(result: ReflowResult) -> list[WorkOrder]:
    """Orders grouped by work center, then by start."""
    return sorted(result.updated_work_orders, key=lambda wo: (wo.work_center_id, wo.start))


def _segments(wo: WorkOrder, centers: dict[str, WorkCenter]):
    wc = centers.get(wo.work_center_id)
    if wo.is_maintenance or wc is None or not wc.shifts:
        return [(wo.start, wo.end)]
    return [(s.start, s.end) for s in working_segments(wo.start, wo.end, wc)] or [(wo.start, wo.end)]


def generate_gantt_image(
    result: ReflowResult,
    work_centers: Sequence[WorkCenter],
) -> bytes:
    """Render one bar row per work order, grouped by work center."""
    rows = _rows(result)
    if not rows:
        return b""

    centers = {wc.id: wc for wc in work_centers}
    moved = {c.work_order_id for c in result.changes if c.from_start != c.to_start or c.delta_minutes}

    fig, ax = plt.subplots(figsize=(18, max(4, len(rows) * 0.55)))
    fig.patch.set_facecolor("#0d1117")
    ax.set_facecolor("#161b22")
    ax.tick_params(colors="#8b949e", labelsize=9)
    for spine in ax.spines.values():
        spine.set_edgecolor("#30363d")

    earliest = min(wo.start for wo in rows)
    latest = max(wo.end for wo in rows)

    for i, wo in enumerate(rows):
        wc = centers.get(wo.work_center_id)
        if wc is not None:
            for mw in wc.maintenance_windows:
                if mw.end <= earliest or mw.start >= latest:
                    continue
                ms, me = mdates.date2num(mw.start), mdates.date2num(mw.end)
                ax.barh(i, me - ms, left=ms, height=0.9, color=MAINTENANCE_WINDOW_COLOR, alpha=0.6)

        if wo.is_maintenance:
            color, hatch = MAINTENANCE_ORDER_COLOR, "//"
        elif wo.id in moved:
            color, hatch = MOVED_COLOR, None
        else:
            color, hatch = PRODUCTION_COLOR, None

        for seg_s, seg_e in _segments(wo, centers):
            ps, pe = mdates.date2num(seg_s), mdates.date2num(seg_e)
            ax.barh(
                i, pe - ps, left=ps, height=0.62,
                color=color, alpha=0.88, hatch=hatch,
                edgecolor="#0d1117", linewidth=0.4,
            )

        ax.text(
            mdates.date2num(wo.end) + 0.02, i,
            f"  {wo.id}  |  {wo.duration_minutes} min",
            va="center", ha="left", fontsize=7.8,
            color="#c9d1d9", fontfamily="monospace",
        )

    ax.set_yticks(range(len(rows)))
    ax.set_yticklabels(
        [wo.work_center_id for wo in rows],
        color="#58a6ff", fontsize=9, fontweight="bold",
    )

    ax.xaxis_date()
    ax.xaxis.set_major_formatter(mdates.DateFormatter("%b %d %H:%M"))
    plt.setp(ax.xaxis.get_majorticklabels(), rotation=45, ha="right", color="#8b949e")
    ax.set_xlim(
        mdates.date2num(earliest - timedelta(hours=2)),
        mdates.date2num(latest + timedelta(hours=6)),
    )

    ax.invert_yaxis()
    ax.xaxis.grid(True, color="#21262d", linewidth=0.7)
    ax.set_axisbelow(True)

    legend_els = [
        mpatches.Patch(facecolor=PRODUCTION_COLOR, label="Unchanged"),
        mpatches.Patch(facecolor=MOVED_COLOR, label="Moved"),
        mpatches.Patch(facecolor=MAINTENANCE_ORDER_COLOR, hatch="//", label="Maintenance order"),
        mpatches.Patch(facecolor=MAINTENANCE_WINDOW_COLOR, label="Maintenance window"),
    ]
    ax.legend(
        handles=legend_els, loc="lower right", fontsize=8,
        facecolor="#21262d", edgecolor="#30363d", labelcolor="#c9d1d9",
        ncol=2, framealpha=0.9,
    )

    status = "Valid" if result.validation.is_valid else "Validation errors"
    ax.set_title(
        f"Production Reflow  ·  {result.moved_count}/{len(rows)} moved  ·  {status}",
        fontsize=13, fontweight="bold", color="#c9d1d9", pad=12,
    )
    ax.set_xlabel("Time (UTC)", color="#8b949e", fontsize=10)
    ax.set_ylabel("Work center", color="#8b949e", fontsize=10)

    plt.tight_layout()
    buf = BytesIO()
    fig.savefig(buf, format="png", dpi=120, bbox_inches="tight", facecolor="#0d1117")
    plt.close(fig)
    buf.seek(0)
    return buf.getvalue()
