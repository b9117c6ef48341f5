"""
Workspace Management Module for LGPD Guardian

A workspace holds everything one browser session works on: the signed-in
tenant and user, and the in-memory books (users, ROPA, incidents, documents,
awareness posts). It includes:
- Simulated sign-in that seeds the demo tenant on first use
- Idle expiry driven by the tenant's session timeout
- Workspace export/import as JSON
- A capped registry of live workspaces
"""

from __future__ import annotations

import json
import logging
import secrets
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from guardian import sample_data
from guardian.ai_service import AwarenessDraft, IncidentAnalysis
from guardian.awareness import AwarenessBoard, AwarenessCategory, AwarenessPost, Quiz
from guardian.config import config
from guardian.incidents import Incident, IncidentHistoryEntry, IncidentLog, IncidentSeverity, IncidentStatus
from guardian.legal_documents import DocType, DocumentLibrary, LegalDocument
from guardian.ropa import RopaEntry, RopaRegister
from guardian.tenants import (
    CommitteeMember,
    PlanStatus,
    SecurityConfig,
    Tenant,
    TenantSettings,
    ThemeConfig,
    User,
    UserDirectory,
    UserRole,
)

logger = logging.getLogger(__name__)

# Idle limit for a workspace nobody is signed in to
SIGNED_OUT_TIMEOUT_MINUTES = 24 * 60


@dataclass
class Workspace:
    """Complete state of one browser session"""
    workspace_id: str
    created_at: str
    last_accessed: str

    organization: Optional[Tenant] = None
    current_user: Optional[User] = None
    seeded: bool = False

    users: UserDirectory = field(default_factory=UserDirectory)
    ropa: RopaRegister = field(default_factory=RopaRegister)
    incidents: IncidentLog = field(default_factory=IncidentLog)
    documents: DocumentLibrary = field(default_factory=DocumentLibrary)
    awareness: AwarenessBoard = field(default_factory=AwarenessBoard)

    # Drafts produced by the model and waiting for the user to confirm them
    pending_analysis: Optional[IncidentAnalysis] = None
    pending_post: Optional[AwarenessDraft] = None
    pending_post_category: Optional[AwarenessCategory] = None

    @property
    def tenant(self) -> Optional[Tenant]:
        """The tenant of the signed-in user, ``None`` when signed out."""
        return self.organization if self.current_user is not None else None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    @property
    def actor(self) -> str:
        return self.current_user.name if self.current_user else "System"

    def _seed(self) -> None:
        sample_data.seed_users(self.users)
        sample_data.seed_ropa(self.ropa)
        sample_data.seed_documents(self.documents)
        sample_data.seed_awareness(self.awareness)
        self.seeded = True

    def login(self, email: Optional[str] = None) -> User:
        """Simulated sign-in. Without an e-mail the demo administrator is used."""
        if self.organization is None:
            self.organization = sample_data.demo_tenant()
        if not self.seeded:
            self._seed()

        user = self.users.find_by_email(email or sample_data.DEMO_ADMIN_EMAIL)
        if user is None:
            raise ValueError("No user with this e-mail in the tenant")
        if not user.is_active:
            raise ValueError("This account is disabled")

        user.last_login = datetime.now().isoformat(timespec="seconds")
        self.current_user = user
        self.touch()
        logger.info("User %s signed in to %s", user.email, self.organization.name)
        return user

    def logout(self) -> None:
        """Sign out. The records stay in the workspace."""
        if self.current_user is not None:
            logger.info("User %s signed out", self.current_user.email)
        self.current_user = None
        self.pending_analysis = None
        self.pending_post = None
        self.pending_post_category = None

    def timeout_minutes(self) -> int:
        if self.tenant is not None:
            return self.tenant.settings.security.session_timeout_minutes
        return SIGNED_OUT_TIMEOUT_MINUTES

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        last_access = datetime.fromisoformat(self.last_accessed)
        return (now or datetime.now()) > last_access + timedelta(minutes=self.timeout_minutes())

    def touch(self) -> None:
        self.last_accessed = datetime.now().isoformat()


class WorkspaceManager:
    """In-process registry of workspaces keyed by an unguessable id"""

    def __init__(self, max_workspaces: int = config.MAX_WORKSPACES):
        self.max_workspaces = max_workspaces
        self._workspaces: Dict[str, Workspace] = {}

    def __len__(self) -> int:
        return len(self._workspaces)

    def _generate_workspace_id(self) -> str:
        return secrets.token_urlsafe(32)

    def create_workspace(self) -> Workspace:
        now = datetime.now().isoformat()
        workspace = Workspace(workspace_id=self._generate_workspace_id(), created_at=now, last_accessed=now)
        self._workspaces[workspace.workspace_id] = workspace
        self._cleanup_old_workspaces()
        return workspace

    def get_workspace(self, workspace_id: Optional[str]) -> Optional[Workspace]:
        """Return a live workspace and refresh its idle timer; expired ones are dropped."""
        if not workspace_id:
            return None
        workspace = self._workspaces.get(workspace_id)
        if workspace is None:
            return None
        if workspace.is_expired():
            logger.info("Workspace %s expired", workspace_id[:8])
            self.delete_workspace(workspace_id)
            return None
        workspace.touch()
        return workspace

    def delete_workspace(self, workspace_id: str) -> bool:
        return self._workspaces.pop(workspace_id, None) is not None

    def _cleanup_old_workspaces(self) -> None:
        """Remove expired workspaces and limit the total number kept"""
        for workspace_id in [w.workspace_id for w in self._workspaces.values() if w.is_expired()]:
            del self._workspaces[workspace_id]

        if len(self._workspaces) > self.max_workspaces:
            by_age = sorted(self._workspaces.values(), key=lambda w: w.last_accessed)
            for workspace in by_age[: len(self._workspaces) - self.max_workspaces]:
                del self._workspaces[workspace.workspace_id]

    def get_stats(self) -> Dict[str, Any]:
        active = [w for w in self._workspaces.values() if not w.is_expired()]
        return {
            "total_workspaces": len(self._workspaces),
            "active_workspaces": len(active),
            "signed_in": sum(1 for w in active if w.is_authenticated),
        }

    def export_workspace(self, workspace: Workspace) -> str:
        """Export the workspace records as a JSON string"""
        export_data = {
            "exported_at": datetime.now().isoformat(),
            "guardian_version": config.APP_VERSION,
            "data": {
                "tenant": asdict(workspace.organization) if workspace.organization else None,
                "users": [asdict(u) for u in workspace.users],
                "ropa": [asdict(e) for e in workspace.ropa],
                "incidents": [asdict(i) for i in workspace.incidents],
                "documents": [asdict(d) for d in workspace.documents],
                "awareness": [asdict(p) for p in workspace.awareness],
            },
        }
        return json.dumps(export_data, indent=2, ensure_ascii=False)

    def import_workspace(self, json_data: str) -> Optional[Workspace]:
        """Import workspace records into a new, signed-out workspace"""
        try:
            import_data = json.loads(json_data)
            data = import_data["data"]
            if not isinstance(data, dict):
                raise TypeError("Workspace data must be a JSON object")

            workspace = Workspace(workspace_id="", created_at="", last_accessed="")
            if data.get("tenant"):
                workspace.organization = self._dict_to_tenant(data["tenant"])
            workspace.users.users = [self._dict_to_user(u) for u in data.get("users", [])]
            workspace.ropa.entries = [self._dict_to_ropa_entry(e) for e in data.get("ropa", [])]
            workspace.incidents.incidents = [self._dict_to_incident(i) for i in data.get("incidents", [])]
            workspace.documents.documents = [self._dict_to_document(d) for d in data.get("documents", [])]
            workspace.awareness.posts = [self._dict_to_post(p) for p in data.get("awareness", [])]
            workspace.seeded = True
        except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Rejected workspace import: %s", e)
            return None

        now = datetime.now().isoformat()
        workspace.workspace_id = self._generate_workspace_id()
        workspace.created_at = now
        workspace.last_accessed = now
        self._workspaces[workspace.workspace_id] = workspace
        self._cleanup_old_workspaces()
        logger.info("Imported workspace %s", workspace.workspace_id[:8])
        return workspace

    # Helper methods for data conversion
    def _dict_to_tenant(self, data: Dict[str, Any]) -> Tenant:
        settings = data.get("settings") or {}
        return Tenant(
            id=data["id"],
            cnpj=data["cnpj"],
            name=data["name"],
            plan_status=PlanStatus(data.get("plan_status", PlanStatus.ACTIVE)),
            contact_email=data.get("contact_email", ""),
            created_at=data.get("created_at", ""),
            settings=TenantSettings(
                dpo_name=settings.get("dpo_name", ""),
                dpo_email=settings.get("dpo_email", ""),
                privacy_committee=[CommitteeMember(**m) for m in settings.get("privacy_committee", [])],
                theme=ThemeConfig(**settings.get("theme", {})),
                security=SecurityConfig(**settings.get("security", {})),
            ),
        )

    def _dict_to_user(self, data: Dict[str, Any]) -> User:
        return User(
            id=data["id"],
            tenant_id=data["tenant_id"],
            email=data["email"],
            name=data["name"],
            role=UserRole(data.get("role", UserRole.USER)),
            is_active=data.get("is_active", True),
            avatar_url=data.get("avatar_url", ""),
            last_login=data.get("last_login"),
        )

    def _dict_to_ropa_entry(self, data: Dict[str, Any]) -> RopaEntry:
        return RopaEntry(**data)

    def _dict_to_incident(self, data: Dict[str, Any]) -> Incident:
        return Incident(
            id=data["id"],
            tenant_id=data["tenant_id"],
            title=data["title"],
            description=data["description"],
            severity=IncidentSeverity(data["severity"]),
            status=IncidentStatus(data.get("status", IncidentStatus.OPEN)),
            date_reported=data["date_reported"],
            analysis_report=data.get("analysis_report"),
            history=[IncidentHistoryEntry(**h) for h in data.get("history", [])],
        )

    def _dict_to_document(self, data: Dict[str, Any]) -> LegalDocument:
        return LegalDocument(
            id=data["id"],
            tenant_id=data["tenant_id"],
            title=data["title"],
            content=data["content"],
            type=DocType(data.get("type", DocType.OTHER)),
            version=data.get("version", 1),
            is_published=data.get("is_published", False),
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )

    def _dict_to_post(self, data: Dict[str, Any]) -> AwarenessPost:
        quiz = data.get("quiz")
        return AwarenessPost(
            id=data["id"],
            tenant_id=data["tenant_id"],
            title=data["title"],
            content=data["content"],
            category=AwarenessCategory(data["category"]),
            is_published=data.get("is_published", True),
            view_count=data.get("view_count", 0),
            date=data["date"],
            quiz=Quiz.from_dict(quiz) if quiz else None,
            quiz_attempts=data.get("quiz_attempts", 0),
            quiz_correct=data.get("quiz_correct", 0),
        )


# Global workspace manager instance
_workspace_manager = None


def get_workspace_manager() -> WorkspaceManager:
    """Get global workspace manager instance"""
    global _workspace_manager
    if _workspace_manager is None:
        _workspace_manager = WorkspaceManager()
    return _workspace_manager
