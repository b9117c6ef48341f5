import base64

from guardian import dashboard
from guardian.awareness import AwarenessBoard
from guardian.incidents import IncidentLog, IncidentSeverity, IncidentStatus
from guardian.ropa import RopaRegister


def make_incidents():
    log = IncidentLog()
    resolved = log.report("t", "A", "a", IncidentSeverity.CRITICAL, "Alice")
    false_alarm = log.report("t", "B", "b", IncidentSeverity.LOW, "Alice")
    log.report("t", "C", "c", IncidentSeverity.CRITICAL, "Alice")
    log.change_status(resolved.id, IncidentStatus.RESOLVED, "Alice")
    log.change_status(false_alarm.id, IncidentStatus.FALSE_POSITIVE, "Alice")
    return log


def test_compute_metrics(tenant):
    ropa = RopaRegister()
    ropa.add("t", "Payroll", "HR", ["Name"], "Employees", "Contract Performance", "5 Years")
    metrics = dashboard.compute_metrics(ropa, make_incidents(), AwarenessBoard(), tenant)
    assert metrics.mapped_processes == 1
    assert metrics.processes_this_week == 1
    # false positives are not resolved, so they still count as open
    assert metrics.open_incidents == 2
    assert metrics.critical_incidents == 2
    assert metrics.awareness_level is None
    assert metrics.dpo_status == "Active"


def test_dpo_not_appointed(tenant):
    tenant.settings.dpo_name = ""
    metrics = dashboard.compute_metrics(RopaRegister(), IncidentLog(), AwarenessBoard(), tenant)
    assert metrics.dpo_status == "Not appointed"
    assert metrics.open_incidents == 0


def test_severity_distribution_drops_empty_buckets():
    data = dashboard.severity_distribution(make_incidents())
    assert [(d["name"], d["value"]) for d in data] == [("Low", 1), ("Critical", 2)]


def test_charts():
    assert dashboard.department_chart(RopaRegister()) is None
    assert dashboard.severity_chart(IncidentLog()) is None

    chart = dashboard.severity_chart(make_incidents())
    assert base64.b64decode(chart).startswith(b"\x89PNG")

    ropa = RopaRegister()
    ropa.add("t", "Payroll", "HR", [], "", "Consent", "")
    ropa.add("t", "Ads", "Marketing", [], "", "Consent", "")
    assert dashboard.department_distribution(ropa) == [{"name": "HR", "value": 1}, {"name": "Marketing", "value": 1}]
    assert base64.b64decode(dashboard.department_chart(ropa)).startswith(b"\x89PNG")
