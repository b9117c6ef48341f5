"""
Dashboard metrics and charts.

The KPI cards are computed from the workspace records; the two charts are
rendered server-side with matplotlib and embedded as base64 PNG images.
"""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass
from typing import Dict, List, Optional

import matplotlib

matplotlib.use("Agg")  # Use non-interactive backend for server
import matplotlib.pyplot as plt

from guardian.awareness import AwarenessBoard
from guardian.incidents import SEVERITY_LABELS, IncidentLog, IncidentSeverity, IncidentStatus
from guardian.ropa import RopaRegister
from guardian.tenants import Tenant

SEVERITY_COLORS = {
    IncidentSeverity.LOW: "#10B981",
    IncidentSeverity.MEDIUM: "#F59E0B",
    IncidentSeverity.HIGH: "#F97316",
    IncidentSeverity.CRITICAL: "#EF4444",
}


@dataclass
class DashboardMetrics:
    mapped_processes: int
    processes_this_week: int
    open_incidents: int
    critical_incidents: int
    awareness_level: Optional[float]
    dpo_status: str


def compute_metrics(ropa: RopaRegister, incidents: IncidentLog, awareness: AwarenessBoard, tenant: Tenant) -> DashboardMetrics:
    items = list(incidents)
    return DashboardMetrics(
        mapped_processes=len(ropa),
        processes_this_week=len(ropa.updated_since(days=7)),
        # anything not yet resolved counts as open
        open_incidents=sum(1 for i in items if i.status != IncidentStatus.RESOLVED),
        critical_incidents=sum(1 for i in items if i.severity == IncidentSeverity.CRITICAL),
        awareness_level=awareness.awareness_level(),
        dpo_status="Active" if tenant.settings.dpo_name else "Not appointed",
    )


def severity_distribution(incidents: IncidentLog) -> List[Dict[str, object]]:
    """Incident counts per severity; severities without incidents are dropped."""
    data = []
    for severity in IncidentSeverity:
        count = sum(1 for i in incidents if i.severity == severity)
        if count:
            data.append({"name": SEVERITY_LABELS[severity], "value": count, "color": SEVERITY_COLORS[severity]})
    return data


def department_distribution(ropa: RopaRegister) -> List[Dict[str, object]]:
    return [{"name": name, "value": count} for name, count in ropa.department_counts().items()]


def _figure_to_base64(fig) -> str:
    buf = io.BytesIO()
    fig.savefig(buf, format="png", bbox_inches="tight")
    plt.close(fig)
    buf.seek(0)
    return base64.b64encode(buf.read()).decode("utf-8")


def department_chart(ropa: RopaRegister) -> Optional[str]:
    """Bar chart of processes per department, or ``None`` when the register is empty."""
    data = department_distribution(ropa)
    if not data:
        return None
    fig, ax = plt.subplots(figsize=(6, 3.2))
    ax.bar([d["name"] for d in data], [d["value"] for d in data], color="#6366f1", width=0.5)
    ax.set_title("Processes by Department")
    ax.set_ylabel("Processes")
    ax.yaxis.get_major_locator().set_params(integer=True)
    ax.spines[["top", "right"]].set_visible(False)
    return _figure_to_base64(fig)


def severity_chart(incidents: IncidentLog) -> Optional[str]:
    """Donut chart of incidents by severity, or ``None`` without incidents."""
    data = severity_distribution(incidents)
    if not data:
        return None
    fig, ax = plt.subplots(figsize=(4, 3.2))
    ax.pie(
        [d["value"] for d in data],
        labels=[d["name"] for d in data],
        colors=[d["color"] for d in data],
        wedgeprops={"width": 0.4},
        startangle=90,
    )
    ax.set_title("Incidents by Severity")
    return _figure_to_base64(fig)
