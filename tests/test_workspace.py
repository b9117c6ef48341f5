from datetime import datetime, timedelta

import pytest

from guardian import sample_data
from guardian.incidents import IncidentSeverity, IncidentStatus
from guardian.tenants import UserRole
from guardian.workspace import Workspace, WorkspaceManager


def make_workspace():
    now = datetime.now().isoformat()
    return Workspace(workspace_id="ws-1", created_at=now, last_accessed=now)


def test_login_seeds_demo_tenant():
    ws = make_workspace()
    user = ws.login()
    assert user.email == sample_data.DEMO_ADMIN_EMAIL
    assert user.role == UserRole.COMPANY_ADMIN
    assert user.last_login is not None
    assert ws.tenant.cnpj == sample_data.DEMO_CNPJ
    assert len(ws.users) == 3
    assert len(ws.ropa) == 2
    assert len(ws.documents) == 1
    assert len(ws.awareness) == 2
    assert all(p.quiz.correct_answer_index == 2 for p in ws.awareness)


def test_login_as_other_user_and_no_double_seeding():
    ws = make_workspace()
    ws.login()
    ws.logout()
    user = ws.login("carol@acmecorp.com")
    assert user.role == UserRole.DPO
    assert len(ws.ropa) == 2


def test_login_rejects_unknown_and_inactive_users():
    ws = make_workspace()
    with pytest.raises(ValueError):
        ws.login("nobody@acmecorp.com")
    bob = ws.users.find_by_email("bob@acmecorp.com")
    ws.users.update(bob.id, is_active=False)
    with pytest.raises(ValueError):
        ws.login("bob@acmecorp.com")


def test_logout_keeps_records():
    ws = make_workspace()
    ws.login()
    ws.tenant.update_branding("#000000", "#111111", "#222222")
    ws.incidents.report(ws.tenant.id, "Leak", "Leaked file", IncidentSeverity.HIGH, ws.actor)
    ws.logout()
    assert ws.tenant is None
    assert ws.current_user is None
    assert len(ws.incidents) == 1
    ws.login()
    assert ws.tenant.settings.theme.primary_color == "#000000"


def test_expiry_follows_tenant_timeout():
    ws = make_workspace()
    ws.login()
    ws.tenant.update_security(False, 10, "standard")
    assert not ws.is_expired(now=datetime.now() + timedelta(minutes=5))
    assert ws.is_expired(now=datetime.now() + timedelta(minutes=11))


def test_manager_drops_expired_workspaces():
    manager = WorkspaceManager()
    ws = manager.create_workspace()
    assert manager.get_workspace(ws.workspace_id) is ws
    ws.last_accessed = (datetime.now() - timedelta(days=2)).isoformat()
    assert manager.get_workspace(ws.workspace_id) is None
    assert len(manager) == 0
    assert manager.get_workspace(None) is None


def test_manager_caps_workspace_count():
    manager = WorkspaceManager(max_workspaces=2)
    first = manager.create_workspace()
    first.last_accessed = (datetime.now() - timedelta(minutes=5)).isoformat()
    manager.create_workspace()
    manager.create_workspace()
    assert len(manager) == 2
    assert manager.get_workspace(first.workspace_id) is None


def test_export_import_roundtrip():
    manager = WorkspaceManager()
    ws = manager.create_workspace()
    ws.login()
    incident = ws.incidents.report(ws.tenant.id, "Leak", "Leaked file", IncidentSeverity.CRITICAL, ws.actor)
    ws.incidents.change_status(incident.id, IncidentStatus.MITIGATED, ws.actor, "Access revoked")
    ws.tenant.add_committee_member("Joana", "Legal", "joana@acmecorp.com")

    imported = manager.import_workspace(manager.export_workspace(ws))

    assert imported is not None
    assert imported.workspace_id != ws.workspace_id
    assert not imported.is_authenticated
    restored = imported.incidents.get(incident.id)
    assert restored.severity == IncidentSeverity.CRITICAL
    assert restored.status == IncidentStatus.MITIGATED
    assert restored.history[-1].description == "Access revoked"
    assert imported.awareness.posts[0].quiz is not None

    user = imported.login()
    assert user.email == sample_data.DEMO_ADMIN_EMAIL
    assert len(imported.ropa) == 2
    assert [m.name for m in imported.tenant.settings.privacy_committee][-1] == "Joana"


def test_import_rejects_bad_data():
    manager = WorkspaceManager()
    assert manager.import_workspace("not json") is None
    assert manager.import_workspace('{"nothing": true}') is None
    assert manager.import_workspace('{"data": {"ropa": [{"bogus": 1}]}}') is None
    assert manager.import_workspace('{"data": []}') is None
    assert manager.import_workspace('{"data": {"tenant": "acme"}}') is None
    assert manager.import_workspace('{"data": {"users": ["alice"]}}') is None
    assert manager.import_workspace("[1, 2]") is None
    assert len(manager) == 0
