import pytest

from guardian.tenants import UserDirectory, UserRole, allowed_views, assignable_roles, can_access


def test_regular_user_sees_only_shared_views():
    views = [item["id"] for item in allowed_views(UserRole.USER)]
    assert views == ["dashboard", "incidents", "awareness"]


def test_settings_limited_to_admins():
    assert can_access(UserRole.COMPANY_ADMIN, "settings")
    assert can_access(UserRole.SUPER_ADMIN, "settings")
    assert not can_access(UserRole.DPO, "settings")
    assert not can_access(UserRole.USER, "settings")


def test_assignable_roles_stop_at_own_rank():
    assert assignable_roles(UserRole.SUPER_ADMIN) == [UserRole.SUPER_ADMIN, UserRole.COMPANY_ADMIN, UserRole.DPO, UserRole.USER]
    assert assignable_roles(UserRole.COMPANY_ADMIN) == [UserRole.COMPANY_ADMIN, UserRole.DPO, UserRole.USER]
    assert assignable_roles("user") == [UserRole.USER]
    assert can_access(UserRole.DPO, "ropa")
    assert not can_access(UserRole.SUPER_ADMIN, "ropa")


def test_update_profile_keeps_theme_colours(tenant):
    tenant.update_branding("#111111", "#222222", "#333333")
    tenant.update_profile("New Name", "new@test.co", "Bruno", "bruno@test.co", logo_url="https://cdn.test.co/logo.png")
    assert tenant.name == "New Name"
    assert tenant.settings.dpo_name == "Bruno"
    assert tenant.settings.theme.primary_color == "#111111"
    assert tenant.settings.theme.logo_url == "https://cdn.test.co/logo.png"


def test_update_profile_requires_name(tenant):
    with pytest.raises(ValueError):
        tenant.update_profile("  ")


def test_update_branding_validates_and_keeps_logo(tenant):
    tenant.settings.theme.logo_url = "logo.png"
    with pytest.raises(ValueError):
        tenant.update_branding("red", "#000000", "#ffffff")
    tenant.update_branding("#abcdef", "#000000", "#ffffff")
    assert tenant.settings.theme.primary_color == "#abcdef"
    assert tenant.settings.theme.logo_url == "logo.png"


def test_committee_members(tenant):
    member = tenant.add_committee_member("Maria", "HR", "maria@test.co")
    assert tenant.settings.privacy_committee == [member]
    with pytest.raises(ValueError):
        tenant.add_committee_member("Carlos", "", "carlos@test.co")
    with pytest.raises(ValueError):
        tenant.add_committee_member("   ", "CTO", "carlos@test.co")
    with pytest.raises(ValueError):
        tenant.add_committee_member("Carlos", "CTO", " \t")
    assert tenant.settings.privacy_committee == [member]
    tenant.remove_committee_member(member.id)
    assert tenant.settings.privacy_committee == []


def test_update_security(tenant):
    tenant.update_security(True, 15, "strong")
    assert tenant.settings.security.mfa_enabled is True
    assert tenant.settings.security.session_timeout_minutes == 15
    with pytest.raises(ValueError):
        tenant.update_security(False, 0, "standard")
    with pytest.raises(ValueError):
        tenant.update_security(False, 30, "weak")


def test_user_directory_crud():
    directory = UserDirectory()
    user = directory.add("tenant-1", "Bob", "Bob@Test.co", UserRole.DPO)
    assert user.is_active and user.role_label == "DPO"
    assert directory.find_by_email("bob@test.co") is user
    with pytest.raises(ValueError):
        directory.add("tenant-1", "  ", "carol@test.co")

    directory.update(user.id, role="user", is_active=False)
    assert user.role == UserRole.USER
    assert directory.active_users() == []
    assert directory.role_counts() == {"User": 1}

    with pytest.raises(ValueError):
        directory.update(user.id, tenant_id="other")

    directory.delete(user.id)
    assert len(directory) == 0
    with pytest.raises(KeyError):
        directory.get(user.id)
