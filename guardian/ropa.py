"""
ROPA (Record of Processing Activities)
======================================

LGPD Art. 37 requires controllers to keep a record of the personal data
processing operations they carry out. Each entry captures the name of the
process, the department that owns it, the categories of personal data
involved, the data subjects, the legal basis relied on and the retention
period. The register is kept in memory and can be exported to a pandas
DataFrame, an Excel workbook or a PDF table.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Dict, List, Optional

import pandas as pd
from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta
from reportlab.lib.units import inch

from guardian.exports import ROPA_HEADER_COLOR, build_table_pdf, dataframe_to_excel, generated_on
from guardian.ids import new_id, now_iso

# Legal bases for processing under LGPD Art. 7
LEGAL_BASES = [
    "Consent",
    "Legal Obligation",
    "Contract Performance",
    "Legitimate Interest",
    "Regular Exercise of Rights",
    "Protection of Life",
]

COLUMNS = ["Process", "Dept", "Data Types", "Data Subjects", "Legal Basis", "Retention"]


@dataclass
class RopaEntry:
    """A single processing activity in the register."""
    id: str
    tenant_id: str
    process_name: str
    department: str
    data_types: List[str] = field(default_factory=list)
    data_subjects: str = ""
    legal_basis: str = ""
    retention_period: str = ""
    security_measures: str = ""
    updated_at: str = field(default_factory=now_iso)


_EDITABLE_FIELDS = {f.name for f in fields(RopaEntry)} - {"id", "tenant_id", "updated_at"}


def parse_data_types(raw: str) -> List[str]:
    """Split the comma separated form field into a clean list."""
    return [part.strip() for part in (raw or "").split(",") if part.strip()]


class RopaRegister:
    """In-memory storage of processing activities."""

    def __init__(self) -> None:
        self.entries: List[RopaEntry] = []

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def add(
        self,
        tenant_id: str,
        process_name: str,
        department: str,
        data_types: List[str],
        data_subjects: str,
        legal_basis: str,
        retention_period: str,
        security_measures: str = "",
    ) -> RopaEntry:
        """Add a processing activity to the register."""
        if not process_name or not process_name.strip():
            raise ValueError("Process name is required")
        entry = RopaEntry(
            id=new_id(),
            tenant_id=tenant_id,
            process_name=process_name.strip(),
            department=department.strip(),
            data_types=list(data_types),
            data_subjects=data_subjects.strip(),
            legal_basis=legal_basis,
            retention_period=retention_period.strip(),
            security_measures=security_measures.strip(),
        )
        self.entries.append(entry)
        return entry

    def get(self, entry_id: str) -> RopaEntry:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        raise KeyError(entry_id)

    def update(self, entry_id: str, **changes) -> RopaEntry:
        """Merge ``changes`` into the entry and refresh its timestamp."""
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown ROPA fields: {', '.join(sorted(unknown))}")
        if "process_name" in changes and not (changes["process_name"] or "").strip():
            raise ValueError("Process name is required")
        entry = self.get(entry_id)
        for key, value in changes.items():
            setattr(entry, key, list(value) if key == "data_types" else value)
        entry.updated_at = now_iso()
        return entry

    def delete(self, entry_id: str) -> None:
        self.entries = [e for e in self.entries if e.id != entry_id]

    def department_counts(self) -> Dict[str, int]:
        """Number of mapped processes per department, in first-seen order."""
        counts: Dict[str, int] = {}
        for entry in self.entries:
            counts[entry.department] = counts.get(entry.department, 0) + 1
        return counts

    def updated_since(self, days: int = 7, now: Optional[datetime] = None) -> List[RopaEntry]:
        cutoff = (now or datetime.now()) - relativedelta(days=days)
        return [e for e in self.entries if isoparse(e.updated_at) >= cutoff]

    def _rows(self) -> List[List[str]]:
        return [
            [
                e.process_name,
                e.department,
                ", ".join(e.data_types),
                e.data_subjects,
                e.legal_basis,
                e.retention_period,
            ]
            for e in self.entries
        ]

    def to_dataframe(self) -> pd.DataFrame:
        """Return the register as a pandas DataFrame."""
        return pd.DataFrame(self._rows(), columns=COLUMNS)

    def to_excel(self) -> bytes:
        """Export the register to an Excel file and return its bytes."""
        return dataframe_to_excel(self.to_dataframe(), "ROPA", header_color=ROPA_HEADER_COLOR)

    def to_pdf(self) -> bytes:
        """Export the register as a PDF table."""
        return build_table_pdf(
            title="ROPA - Record of Processing Activities",
            subtitle_lines=[generated_on(), "LGPD compliance report (Art. 37)"],
            columns=COLUMNS,
            rows=self._rows(),
            header_color=ROPA_HEADER_COLOR,
            col_widths=[2.0 * inch, 1.1 * inch, 2.2 * inch, 1.5 * inch, 1.5 * inch, 1.4 * inch],
            wide=True,
        )
