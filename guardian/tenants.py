"""
Tenants, Users and Access Levels
================================

Each customer organisation is a ``Tenant`` identified by its CNPJ. A tenant
carries its DPO contact, the members of its privacy committee, the branding
used by the dashboard, and the security policy applied to sessions. Users
belong to a tenant and hold one of four fixed roles which decide the pages
they can open.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Dict, List, Optional

from guardian.ids import new_id, now_iso


class UserRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    COMPANY_ADMIN = "company_admin"
    DPO = "dpo"
    USER = "user"


class PlanStatus(str, Enum):
    ACTIVE = "active"
    TRIAL = "trial"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"


ROLE_LABELS = {
    UserRole.SUPER_ADMIN: "Super Admin",
    UserRole.COMPANY_ADMIN: "Admin",
    UserRole.DPO: "DPO",
    UserRole.USER: "User",
}

_ALL_ROLES = [UserRole.SUPER_ADMIN, UserRole.COMPANY_ADMIN, UserRole.DPO, UserRole.USER]

# higher ranks may grant any role up to their own
ROLE_RANK = {
    UserRole.USER: 0,
    UserRole.DPO: 1,
    UserRole.COMPANY_ADMIN: 2,
    UserRole.SUPER_ADMIN: 3,
}

NAVIGATION_ITEMS = [
    {"id": "dashboard", "label": "Dashboard", "roles": _ALL_ROLES},
    {"id": "ropa", "label": "ROPA Mapping", "roles": [UserRole.COMPANY_ADMIN, UserRole.DPO]},
    {"id": "incidents", "label": "Incidents", "roles": [UserRole.COMPANY_ADMIN, UserRole.DPO, UserRole.USER]},
    {"id": "documents", "label": "Documents", "roles": [UserRole.COMPANY_ADMIN, UserRole.DPO]},
    {"id": "awareness", "label": "Awareness", "roles": [UserRole.COMPANY_ADMIN, UserRole.DPO, UserRole.USER]},
    {"id": "settings", "label": "Settings", "roles": [UserRole.COMPANY_ADMIN, UserRole.SUPER_ADMIN]},
]

PASSWORD_POLICIES = ("standard", "strong")

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


def assignable_roles(role: UserRole) -> List[UserRole]:
    """Roles a user holding ``role`` may grant, highest first."""
    return [r for r in _ALL_ROLES if ROLE_RANK[r] <= ROLE_RANK[UserRole(role)]]


def allowed_views(role: UserRole) -> List[dict]:
    """Navigation entries visible to ``role``, in menu order."""
    return [item for item in NAVIGATION_ITEMS if UserRole(role) in item["roles"]]


def can_access(role: UserRole, view: str) -> bool:
    return any(item["id"] == view for item in allowed_views(role))


@dataclass
class ThemeConfig:
    primary_color: str = "#10b981"
    sidebar_color: str = "#0f172a"
    sidebar_text_color: str = "#ffffff"
    logo_url: str = ""


@dataclass
class SecurityConfig:
    mfa_enabled: bool = False
    session_timeout_minutes: int = 30
    password_policy: str = "standard"


@dataclass
class CommitteeMember:
    id: str
    name: str
    function: str
    email: str


@dataclass
class TenantSettings:
    dpo_name: str = ""
    dpo_email: str = ""
    privacy_committee: List[CommitteeMember] = field(default_factory=list)
    theme: ThemeConfig = field(default_factory=ThemeConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)


@dataclass
class Tenant:
    id: str
    cnpj: str
    name: str
    plan_status: PlanStatus = PlanStatus.ACTIVE
    contact_email: str = ""
    settings: TenantSettings = field(default_factory=TenantSettings)
    created_at: str = field(default_factory=now_iso)

    def update_profile(
        self,
        name: str,
        contact_email: str = "",
        dpo_name: str = "",
        dpo_email: str = "",
        logo_url: Optional[str] = None,
    ) -> None:
        """Replace the company profile. Theme colours are kept; only the logo may change."""
        if not name or not name.strip():
            raise ValueError("Company name is required")
        self.name = name.strip()
        self.contact_email = contact_email.strip()
        self.settings.dpo_name = dpo_name.strip()
        self.settings.dpo_email = dpo_email.strip()
        if logo_url is not None:
            self.settings.theme.logo_url = logo_url

    def add_committee_member(self, name: str, function: str, email: str) -> CommitteeMember:
        name, function, email = (name or "").strip(), (function or "").strip(), (email or "").strip()
        if not (name and function and email):
            raise ValueError("Name, function and e-mail are required for committee members")
        member = CommitteeMember(id=new_id(), name=name, function=function, email=email)
        self.settings.privacy_committee.append(member)
        return member

    def remove_committee_member(self, member_id: str) -> None:
        self.settings.privacy_committee = [m for m in self.settings.privacy_committee if m.id != member_id]

    def update_branding(self, primary_color: str, sidebar_color: str, sidebar_text_color: str) -> None:
        """Replace the dashboard colours, keeping the uploaded logo."""
        for value in (primary_color, sidebar_color, sidebar_text_color):
            if not _HEX_COLOR.match(value or ""):
                raise ValueError(f"Invalid colour '{value}', expected #rrggbb")
        self.settings.theme = ThemeConfig(
            primary_color=primary_color,
            sidebar_color=sidebar_color,
            sidebar_text_color=sidebar_text_color,
            logo_url=self.settings.theme.logo_url,
        )

    def update_security(self, mfa_enabled: bool, session_timeout_minutes: int, password_policy: str) -> None:
        if session_timeout_minutes <= 0:
            raise ValueError("Session timeout must be a positive number of minutes")
        if password_policy not in PASSWORD_POLICIES:
            raise ValueError(f"Unknown password policy '{password_policy}'")
        self.settings.security = SecurityConfig(
            mfa_enabled=bool(mfa_enabled),
            session_timeout_minutes=int(session_timeout_minutes),
            password_policy=password_policy,
        )


@dataclass
class User:
    id: str
    tenant_id: str
    email: str
    name: str
    role: UserRole = UserRole.USER
    is_active: bool = True
    avatar_url: str = ""
    last_login: Optional[str] = None

    @property
    def role_label(self) -> str:
        return ROLE_LABELS[UserRole(self.role)]


_EDITABLE_USER_FIELDS = {f.name for f in fields(User)} - {"id", "tenant_id"}


class UserDirectory:
    """In-memory list of the tenant's users."""

    def __init__(self) -> None:
        self.users: List[User] = []

    def __iter__(self):
        return iter(self.users)

    def __len__(self) -> int:
        return len(self.users)

    def add(self, tenant_id: str, name: str, email: str, role: UserRole = UserRole.USER) -> User:
        name, email = (name or "").strip(), (email or "").strip()
        if not name or not email:
            raise ValueError("Name and e-mail are required")
        user = User(id=new_id(), tenant_id=tenant_id, email=email, name=name, role=UserRole(role))
        self.users.append(user)
        return user

    def get(self, user_id: str) -> User:
        for user in self.users:
            if user.id == user_id:
                return user
        raise KeyError(user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        wanted = (email or "").strip().lower()
        return next((u for u in self.users if u.email.lower() == wanted), None)

    def update(self, user_id: str, **changes) -> User:
        unknown = set(changes) - _EDITABLE_USER_FIELDS
        if unknown:
            raise ValueError(f"Unknown user fields: {', '.join(sorted(unknown))}")
        user = self.get(user_id)
        if "role" in changes:
            changes["role"] = UserRole(changes["role"])
        for key, value in changes.items():
            setattr(user, key, value)
        return user

    def delete(self, user_id: str) -> None:
        self.users = [u for u in self.users if u.id != user_id]

    def active_users(self) -> List[User]:
        return [u for u in self.users if u.is_active]

    def role_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for user in self.users:
            counts[user.role_label] = counts.get(user.role_label, 0) + 1
        return counts
