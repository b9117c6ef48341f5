from datetime import datetime

import pytest
from dateutil.relativedelta import relativedelta

from guardian.incidents import IncidentLog, IncidentSeverity, IncidentStatus, status_label


def make_log():
    log = IncidentLog()
    log.report("tenant-1", "Lost laptop", "Unencrypted laptop lost in a taxi.", IncidentSeverity.HIGH, "Alice")
    log.report("tenant-1", "Phishing", "Phishing e-mail clicked by an employee.", IncidentSeverity.MEDIUM, "Bob")
    return log


def test_report_seeds_history_and_orders_newest_first():
    log = make_log()
    newest = log.incidents[0]
    assert newest.title == "Phishing"
    assert newest.status == IncidentStatus.OPEN
    assert len(newest.history) == 1
    entry = newest.history[0]
    assert entry.action == "Incident reported"
    assert entry.description == "Initial incident record."
    assert entry.actor == "Bob"


def test_report_requires_title_and_description():
    log = IncidentLog()
    with pytest.raises(ValueError):
        log.report("tenant-1", "", "desc", IncidentSeverity.LOW, "Alice")
    with pytest.raises(ValueError):
        log.report("tenant-1", "title", " ", IncidentSeverity.LOW, "Alice")


def test_change_status_appends_history():
    log = make_log()
    incident = log.incidents[1]
    log.change_status(incident.id, IncidentStatus.INVESTIGATING, "Carol", "Forensics started")
    log.change_status(incident.id, "resolved", "Carol")
    assert incident.status == IncidentStatus.RESOLVED
    assert [h.action for h in incident.history] == [
        "Incident reported",
        "Status changed to Investigating",
        "Status changed to Resolved",
    ]
    assert incident.history[1].description == "Forensics started"
    assert incident.history[2].description == "Status change."


def test_any_status_can_follow_any_other():
    log = make_log()
    incident = log.incidents[0]
    log.change_status(incident.id, IncidentStatus.RESOLVED, "Alice")
    log.change_status(incident.id, IncidentStatus.OPEN, "Alice")
    assert incident.status == IncidentStatus.OPEN
    assert incident.status_label == "Open"
    assert status_label(IncidentStatus.FALSE_POSITIVE) == "False Positive"


def test_get_and_replace():
    log = make_log()
    incident = log.incidents[0]
    assert log.get(incident.id) is incident
    incident.title = "Phishing wave"
    log.replace(incident)
    assert log.get(incident.id).title == "Phishing wave"
    with pytest.raises(KeyError):
        log.get("missing")


def test_get_recent_uses_retention_window():
    log = make_log()
    log.incidents[1].date_reported = (datetime.now() - relativedelta(years=6)).isoformat(timespec="seconds")
    recent = log.get_recent()
    assert [i.title for i in recent] == ["Phishing"]


def test_exports():
    log = make_log()
    df = log.to_dataframe()
    assert list(df.columns) == ["Date", "Title", "Severity", "Status"]
    assert df.iloc[0]["Severity"] == "MEDIUM"
    assert log.to_pdf().startswith(b"%PDF")
    assert log.to_excel()[:2] == b"PK"
    assert IncidentLog.audit_pdf(log.incidents[0]).startswith(b"%PDF")
