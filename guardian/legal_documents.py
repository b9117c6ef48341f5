"""
Legal Document Library
======================

The catalogue of LGPD documents a controller is expected to keep, the
documents drafted for a tenant (AI-generated or started from a manual
skeleton), their versioned saves and publication state, and PDF export.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable, Dict, List, Optional

from guardian import ai_service
from guardian.exports import build_markdown_pdf
from guardian.ids import new_id, now_iso
from guardian.tenants import Tenant


class DocType(str, Enum):
    PRIVACY_POLICY = "privacy_policy"
    TERMS_OF_USE = "terms_of_use"
    INCIDENT_PLAN = "incident_plan"
    DPIA = "dpia"
    ROPA_REPORT = "ropa_report"
    OTHER = "other"


# Document catalogue offered by the generator, with the type each one files under
DOC_TYPES: Dict[str, DocType] = {
    "Privacy Policy": DocType.PRIVACY_POLICY,
    "Terms of Use": DocType.TERMS_OF_USE,
    "Cookie Policy": DocType.PRIVACY_POLICY,
    "Employee Privacy Notice": DocType.PRIVACY_POLICY,
    "Data Protection Impact Assessment (DPIA/RIPD)": DocType.DPIA,
    "Data Processing Agreement (DPA)": DocType.OTHER,
    "Data Retention and Disposal Policy": DocType.OTHER,
    "Incident Response Plan": DocType.INCIDENT_PLAN,
    "Legitimate Interest Assessment (LIA)": DocType.OTHER,
    "Information Security Policy": DocType.OTHER,
    "Image Use Consent Form": DocType.OTHER,
    "BYOD Policy (Bring Your Own Device)": DocType.OTHER,
    "Standard Contractual Clauses (LGPD)": DocType.OTHER,
    "Vendor Compliance Report": DocType.OTHER,
    "ROPA Report": DocType.ROPA_REPORT,
}

DEFAULT_INDUSTRY = "Technology and Services"
DEFAULT_DATA_TYPES = ["Name", "E-mail", "CPF", "IP Address", "Cookies", "Bank Details"]

SKELETON_HEADER = """# {title}

**Controller:** {company_name} | **CNPJ:** {cnpj}
**Data Protection Officer (DPO):** {dpo_name} ({dpo_email})"""

SKELETON_SECTIONS = [
    "Definitions",
    "Purpose of Processing",
    "Legal Bases",
    "Data Subject Rights",
    "Security",
    "Retention",
    "DPO Contact",
]

SKELETON_PLACEHOLDER = "Type the content of your document here..."

DocumentGenerator = Callable[[str, str, str, List[str]], str]


def doc_type_for(title: str) -> DocType:
    return DOC_TYPES.get(title, DocType.OTHER)


def draft_skeleton(title: str, tenant: Tenant) -> str:
    """Blank document pre-filled with the controller block and standard LGPD sections."""
    header = SKELETON_HEADER.format(
        title=title,
        company_name=tenant.name,
        cnpj=tenant.cnpj,
        dpo_name=tenant.settings.dpo_name or "not appointed",
        dpo_email=tenant.settings.dpo_email or "-",
    )
    sections = [f"## {i}. {name}\n{SKELETON_PLACEHOLDER}" for i, name in enumerate(SKELETON_SECTIONS, start=1)]
    return "\n\n".join([header] + sections)


@dataclass
class LegalDocument:
    id: str
    tenant_id: str
    title: str
    content: str
    type: DocType
    version: int = 1
    is_published: bool = False
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)


class DocumentLibrary:
    """In-memory list of the tenant's legal documents, newest first."""

    def __init__(self) -> None:
        self.documents: List[LegalDocument] = []

    def __iter__(self):
        return iter(self.documents)

    def __len__(self) -> int:
        return len(self.documents)

    def _save_new(self, tenant: Tenant, title: str, content: str, doc_type: DocType) -> LegalDocument:
        document = LegalDocument(
            id=new_id(),
            tenant_id=tenant.id,
            title=title,
            content=content,
            type=doc_type,
        )
        self.documents.insert(0, document)
        return document

    def generate(
        self,
        title: str,
        tenant: Tenant,
        industry: str = DEFAULT_INDUSTRY,
        data_types: Optional[List[str]] = None,
        generator: Optional[DocumentGenerator] = None,
    ) -> LegalDocument:
        """Draft a document with the generative model and store it as an unpublished v1."""
        if not title or not title.strip():
            raise ValueError("Document title is required")
        title = title.strip()
        generator = generator or ai_service.generate_legal_document
        content = generator(title, tenant.name, industry, data_types or DEFAULT_DATA_TYPES)
        stamped = f"{title} - {date.today().strftime('%d/%m/%Y')}"
        return self._save_new(tenant, stamped, content, doc_type_for(title))

    def create_manual(self, title: str, tenant: Tenant) -> LegalDocument:
        if not title or not title.strip():
            raise ValueError("Document title is required")
        title = title.strip()
        stamped = f"{title} (Manual) - {date.today().strftime('%d/%m/%Y')}"
        return self._save_new(tenant, stamped, draft_skeleton(title, tenant), doc_type_for(title))

    def get(self, doc_id: str) -> LegalDocument:
        for document in self.documents:
            if document.id == doc_id:
                return document
        raise KeyError(doc_id)

    def save_content(self, doc_id: str, content: str) -> LegalDocument:
        """Replace the text of a document; each save is a new version."""
        document = self.get(doc_id)
        document.content = content
        document.version += 1
        document.updated_at = now_iso()
        return document

    def set_published(self, doc_id: str, published: bool) -> LegalDocument:
        document = self.get(doc_id)
        document.is_published = published
        document.updated_at = now_iso()
        return document

    def delete(self, doc_id: str) -> None:
        self.documents = [d for d in self.documents if d.id != doc_id]


def document_to_pdf(document: LegalDocument, tenant: Tenant) -> bytes:
    """Export a document with the company header and page numbers."""
    return build_markdown_pdf(
        title=document.title or "Legal Document",
        header_lines=[
            f"Company: {tenant.name} | CNPJ: {tenant.cnpj}",
            f"Generated on: {date.today().strftime('%d/%m/%Y')}",
        ],
        markdown_text=document.content,
    )


def pdf_filename(document: LegalDocument) -> str:
    slug = "_".join((document.title or "document").split()).lower().replace("/", "-")
    return f"{slug}.pdf"
