"""
LGPD Guardian core package.

This package contains the core functionality for the LGPD Guardian dashboard:
- tenants: Tenants, users, roles and the views each role may open
- ropa: Record of Processing Activities register with Excel/PDF export
- incidents: Incident log with status history and audit trail export
- legal_documents: LGPD document library, AI drafts and manual skeletons
- awareness: Security awareness posts with quizzes
- ai_service: Gemini calls for document drafts, incident triage and posts

Supporting modules:
- dashboard: KPI figures and matplotlib charts
- exports: Shared reportlab/openpyxl report builders
- workspace: Per-session state, simulated sign-in and JSON export/import
- sample_data: Demo tenant and seed records
- config / logger / ids: Environment settings, logging setup and identifiers
"""
