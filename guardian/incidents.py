"""
Incident Log
============

Security incidents involving personal data are reported here, triaged by
severity and followed through a small set of statuses. Every incident keeps
an append-only history of what happened to it and who did it, which is what
the per-incident audit export prints. The LGPD incident regulation asks
controllers to keep incident records for at least five years, so the log can
also be narrowed to that window.

Status changes are not validated: any status can follow any other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

import pandas as pd
from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta
from reportlab.lib.units import inch

from guardian.exports import (
    AUDIT_HEADER_COLOR,
    INCIDENT_HEADER_COLOR,
    build_table_pdf,
    dataframe_to_excel,
    generated_on,
)
from guardian.ids import new_id, now_iso


class IncidentSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IncidentStatus(str, Enum):
    OPEN = "open"
    INVESTIGATING = "investigating"
    MITIGATED = "mitigated"
    RESOLVED = "resolved"
    FALSE_POSITIVE = "false_positive"


STATUS_LABELS = {
    IncidentStatus.OPEN: "Open",
    IncidentStatus.INVESTIGATING: "Investigating",
    IncidentStatus.MITIGATED: "Mitigated",
    IncidentStatus.RESOLVED: "Resolved",
    IncidentStatus.FALSE_POSITIVE: "False Positive",
}

SEVERITY_LABELS = {
    IncidentSeverity.LOW: "Low",
    IncidentSeverity.MEDIUM: "Medium",
    IncidentSeverity.HIGH: "High",
    IncidentSeverity.CRITICAL: "Critical",
}

RECORD_RETENTION_YEARS = 5


def status_label(status: IncidentStatus) -> str:
    return STATUS_LABELS[IncidentStatus(status)]


def _display_date(iso_value: str, with_time: bool = False) -> str:
    parsed = isoparse(iso_value)
    return parsed.strftime("%d/%m/%Y %H:%M:%S" if with_time else "%d/%m/%Y")


@dataclass(frozen=True)
class IncidentHistoryEntry:
    """One line of the audit trail."""
    date: str
    action: str
    description: str
    actor: str


@dataclass
class Incident:
    id: str
    tenant_id: str
    title: str
    description: str
    severity: IncidentSeverity
    status: IncidentStatus = IncidentStatus.OPEN
    date_reported: str = field(default_factory=now_iso)
    analysis_report: Optional[str] = None
    history: List[IncidentHistoryEntry] = field(default_factory=list)

    @property
    def status_label(self) -> str:
        return status_label(self.status)


class IncidentLog:
    """In-memory list of incidents, newest first."""

    def __init__(self) -> None:
        self.incidents: List[Incident] = []

    def __iter__(self):
        return iter(self.incidents)

    def __len__(self) -> int:
        return len(self.incidents)

    def report(
        self,
        tenant_id: str,
        title: str,
        description: str,
        severity: IncidentSeverity,
        actor: str,
        analysis: Optional[str] = None,
    ) -> Incident:
        """Open a new incident with its initial history entry."""
        if not title or not title.strip():
            raise ValueError("Title is required")
        if not description or not description.strip():
            raise ValueError("Description is required")
        reported_at = now_iso()
        incident = Incident(
            id=new_id(),
            tenant_id=tenant_id,
            title=title.strip(),
            description=description.strip(),
            severity=IncidentSeverity(severity),
            status=IncidentStatus.OPEN,
            date_reported=reported_at,
            analysis_report=analysis,
            history=[
                IncidentHistoryEntry(
                    date=reported_at,
                    action="Incident reported",
                    description="Initial incident record.",
                    actor=actor,
                )
            ],
        )
        self.incidents.insert(0, incident)
        return incident

    def get(self, incident_id: str) -> Incident:
        for incident in self.incidents:
            if incident.id == incident_id:
                return incident
        raise KeyError(incident_id)

    def replace(self, incident: Incident) -> None:
        for idx, existing in enumerate(self.incidents):
            if existing.id == incident.id:
                self.incidents[idx] = incident
                return
        raise KeyError(incident.id)

    def change_status(self, incident_id: str, new_status: IncidentStatus, actor: str, note: str = "") -> Incident:
        """Set the status and append the change to the history."""
        incident = self.get(incident_id)
        new_status = IncidentStatus(new_status)
        incident.status = new_status
        incident.history.append(
            IncidentHistoryEntry(
                date=now_iso(),
                action=f"Status changed to {status_label(new_status)}",
                description=note.strip() or "Status change.",
                actor=actor,
            )
        )
        return incident

    def get_recent(self, years: int = RECORD_RETENTION_YEARS, now: Optional[datetime] = None) -> List[Incident]:
        """Return incidents reported within the last ``years`` years."""
        cutoff = (now or datetime.now()) - relativedelta(years=years)
        return [i for i in self.incidents if isoparse(i.date_reported) >= cutoff]

    def _rows(self) -> List[List[str]]:
        return [
            [
                _display_date(i.date_reported),
                i.title,
                i.severity.value.upper(),
                status_label(i.status),
            ]
            for i in self.incidents
        ]

    def to_dataframe(self) -> pd.DataFrame:
        """Convert the log to a pandas DataFrame."""
        return pd.DataFrame(self._rows(), columns=["Date", "Title", "Severity", "Status"])

    def to_excel(self) -> bytes:
        return dataframe_to_excel(self.to_dataframe(), "Incidents", header_color=INCIDENT_HEADER_COLOR)

    def to_pdf(self) -> bytes:
        """General incident report."""
        return build_table_pdf(
            title="General Incident Report",
            subtitle_lines=[generated_on()],
            columns=["Date", "Title", "Severity", "Status"],
            rows=self._rows(),
            header_color=INCIDENT_HEADER_COLOR,
            col_widths=[1.0 * inch, 3.6 * inch, 1.1 * inch, 1.3 * inch],
        )

    @staticmethod
    def audit_pdf(incident: Incident) -> bytes:
        """Audit trail of a single incident."""
        rows = [
            [_display_date(h.date, with_time=True), h.actor, h.action, h.description]
            for h in incident.history
        ]
        return build_table_pdf(
            title=f"Incident Audit: {incident.title}",
            subtitle_lines=[
                f"ID: {incident.id}",
                f"Reported on: {_display_date(incident.date_reported, with_time=True)}",
                f"Current status: {status_label(incident.status)}",
            ],
            columns=["Date/Time", "User", "Action", "Details"],
            rows=rows,
            header_color=AUDIT_HEADER_COLOR,
            col_widths=[1.3 * inch, 1.3 * inch, 1.7 * inch, 2.7 * inch],
        )
