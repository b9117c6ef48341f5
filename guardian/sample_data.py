"""Demo tenant and seed records used by the simulated sign-in."""

from __future__ import annotations

from datetime import datetime, timedelta

from guardian.awareness import AwarenessBoard, AwarenessCategory, AwarenessPost, Quiz
from guardian.legal_documents import DocType, DocumentLibrary, LegalDocument
from guardian.ropa import RopaRegister
from guardian.tenants import (
    CommitteeMember,
    PlanStatus,
    Tenant,
    TenantSettings,
    ThemeConfig,
    User,
    UserDirectory,
    UserRole,
)

DEMO_TENANT_ID = "550e8400-e29b-41d4-a716-446655440000"
DEMO_CNPJ = "12.345.678/0001-90"
DEMO_ADMIN_EMAIL = "admin@acmecorp.com"


def _days_ago(days: int) -> str:
    return (datetime.now() - timedelta(days=days)).isoformat(timespec="seconds")


def demo_tenant() -> Tenant:
    return Tenant(
        id=DEMO_TENANT_ID,
        cnpj=DEMO_CNPJ,
        name="Acme Corp Ltda.",
        plan_status=PlanStatus.ACTIVE,
        contact_email="contact@acmecorp.com",
        settings=TenantSettings(
            dpo_name="Dr. João Silva",
            dpo_email="dpo@acmecorp.com",
            privacy_committee=[
                CommitteeMember(id="cm-1", name="Maria Souza", function="HR", email="maria.rh@acmecorp.com"),
                CommitteeMember(id="cm-2", name="Carlos Tech", function="CTO", email="carlos.ti@acmecorp.com"),
            ],
            theme=ThemeConfig(primary_color="#059669", sidebar_color="#1e293b", sidebar_text_color="#ffffff"),
        ),
    )


def seed_users(directory: UserDirectory) -> None:
    directory.users.extend([
        User(id="user-1", tenant_id=DEMO_TENANT_ID, email=DEMO_ADMIN_EMAIL, name="Alice Admin", role=UserRole.COMPANY_ADMIN),
        User(id="user-2", tenant_id=DEMO_TENANT_ID, email="bob@acmecorp.com", name="Bob Silva", role=UserRole.USER),
        User(id="user-3", tenant_id=DEMO_TENANT_ID, email="carol@acmecorp.com", name="Carol DPO", role=UserRole.DPO),
    ])


def seed_ropa(register: RopaRegister) -> None:
    register.add(
        tenant_id=DEMO_TENANT_ID,
        process_name="Payroll",
        department="HR",
        data_types=["Name", "CPF", "Bank Details"],
        data_subjects="Employees",
        legal_basis="Contract Performance",
        retention_period="5 Years",
    )
    register.add(
        tenant_id=DEMO_TENANT_ID,
        process_name="E-mail Marketing",
        department="Marketing",
        data_types=["E-mail", "Name"],
        data_subjects="Leads",
        legal_basis="Consent",
        retention_period="Until Revoked",
    )


def seed_documents(library: DocumentLibrary) -> None:
    library.documents.append(LegalDocument(
        id="doc-1",
        tenant_id=DEMO_TENANT_ID,
        title="Privacy Policy v1",
        content="# Privacy Policy\n\nThis is a draft version...",
        type=DocType.PRIVACY_POLICY,
        version=1,
        is_published=False,
        created_at=_days_ago(1),
        updated_at=_days_ago(1),
    ))


def seed_awareness(board: AwarenessBoard) -> None:
    board.posts.extend([
        AwarenessPost(
            id="post-1",
            tenant_id=DEMO_TENANT_ID,
            title="🔒 Why Strong Passwords Matter",
            content=(
                "## Protect your credentials\n\n"
                'Did you know that "123456" is still one of the most common passwords? '
                "To keep company data (and your own) safe, follow these tips:\n\n"
                "- Use at least 12 characters.\n"
                "- Mix upper and lower case letters, numbers and symbols.\n"
                "- Never reuse work passwords on personal sites.\n\n"
                "**Stay safe!**"
            ),
            category=AwarenessCategory.SECURITY,
            is_published=True,
            view_count=42,
            date=_days_ago(2),
            quiz=Quiz(
                question="What is the recommended minimum length for a strong password?",
                options=["4 characters", "8 characters", "12 characters", "6 characters"],
                correct_answer_index=2,
                explanation="Passwords with 12 or more characters are exponentially harder to crack.",
            ),
        ),
        AwarenessPost(
            id="post-2",
            tenant_id=DEMO_TENANT_ID,
            title="🎣 Phishing Alert: Stay Alert",
            content=(
                "## Don't take the bait!\n\n"
                "We have received reports of suspicious e-mails pretending to be from IT support. Remember:\n\n"
                "1. Always check the sender.\n"
                "2. Do not click strange links.\n"
                "3. We will never ask for your password by e-mail.\n\n"
                "When in doubt, contact the DPO."
            ),
            category=AwarenessCategory.SECURITY,
            is_published=True,
            view_count=15,
            date=_days_ago(0),
            quiz=Quiz(
                question="What should you do when you receive a suspicious e-mail asking for your password?",
                options=[
                    "Reply with your old password",
                    "Click the link to check it",
                    "Ignore it and report it to the DPO/IT",
                    "Forward it to all colleagues",
                ],
                correct_answer_index=2,
                explanation="Never share passwords. Report it to the security team immediately.",
            ),
        ),
    ])
    # newest first
    board.posts.sort(key=lambda p: p.date, reverse=True)
