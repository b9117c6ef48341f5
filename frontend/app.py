"""
Flask-based frontend for LGPD Guardian.

This web application exposes the compliance workspace (ROPA register,
incident log, legal document library, awareness board and tenant settings)
through a multi-page interface. Every browser gets its own in-memory
workspace; signing in seeds it with the demo tenant.

To run the app locally, install the dependencies and execute:

    python frontend/app.py

The server will start on http://0.0.0.0:8000 by default.
"""

import os
import sys
from datetime import date
from functools import wraps

from flask import Flask, Response, abort, g, redirect, render_template, request, session, url_for

# Make sure the parent directory (repository root) is in sys.path so that
# ``import guardian`` works even when running this script from within the
# ``frontend`` directory.
PARENT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if PARENT_DIR not in sys.path:
    sys.path.insert(0, PARENT_DIR)

from guardian import ai_service, dashboard  # type: ignore
from guardian.awareness import AwarenessCategory  # type: ignore
from guardian.config import config  # type: ignore
from guardian.incidents import STATUS_LABELS, IncidentStatus  # type: ignore
from guardian.legal_documents import DEFAULT_DATA_TYPES, DEFAULT_INDUSTRY, DOC_TYPES, document_to_pdf, pdf_filename  # type: ignore
from guardian.logger import setup_logging  # type: ignore
from guardian.ropa import LEGAL_BASES, parse_data_types  # type: ignore
from guardian.tenants import PASSWORD_POLICIES, ROLE_LABELS, UserRole, allowed_views, assignable_roles, can_access  # type: ignore
from guardian.workspace import get_workspace_manager  # type: ignore

logger = setup_logging()

app = Flask(__name__)

# Session configuration
app.secret_key = config.SECRET_KEY
app.config['SESSION_PERMANENT'] = True
app.config['PERMANENT_SESSION_LIFETIME'] = 86400  # 24 hours

workspace_manager = get_workspace_manager()

PDF_MIMETYPE = 'application/pdf'
EXCEL_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def get_or_create_workspace():
    """Get or create the workspace for the current browser"""
    workspace_id = session.get('guardian_workspace_id')

    if workspace_id:
        workspace = workspace_manager.get_workspace(workspace_id)
        if workspace:
            return workspace

    workspace = workspace_manager.create_workspace()
    session['guardian_workspace_id'] = workspace.workspace_id
    session.permanent = True
    return workspace


def view_required(view_id):
    """Require a signed-in user whose role may open ``view_id``."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            workspace = get_or_create_workspace()
            if not workspace.is_authenticated:
                return redirect(url_for('index'))
            if not can_access(workspace.current_user.role, view_id):
                logger.warning("User %s denied access to %s", workspace.current_user.email, view_id)
                abort(403)
            g.workspace = workspace
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def _can_manage_content():
    return g.workspace.current_user.role != UserRole.USER


def _download(data, mimetype, filename):
    return Response(
        data,
        mimetype=mimetype,
        headers={'Content-Disposition': f'attachment; filename={filename}'},
    )


@app.context_processor
def inject_layout():
    workspace = getattr(g, 'workspace', None)
    if workspace is None or not workspace.is_authenticated:
        return {'app_name': config.APP_NAME, 'nav_items': [], 'tenant': None, 'current_user': None}
    return {
        'app_name': config.APP_NAME,
        'nav_items': allowed_views(workspace.current_user.role),
        'tenant': workspace.tenant,
        'current_user': workspace.current_user,
    }


@app.errorhandler(403)
def forbidden(e):
    return render_template("error.html", code=403, message="You do not have access to this page."), 403


@app.errorhandler(404)
def not_found(e):
    return render_template("error.html", code=404, message="Page not found."), 404


@app.errorhandler(KeyError)
def record_not_found(e):
    logger.info("Record not found: %s", e)
    return render_template("error.html", code=404, message="Record not found."), 404


# -------------------------------------------------------------------------
# Sign-in
# -------------------------------------------------------------------------
@app.route("/")
def index():
    """Login page; signed-in users go straight to the dashboard."""
    workspace = get_or_create_workspace()
    if workspace.is_authenticated:
        return redirect(url_for('dashboard_view'))
    return render_template("login.html")


@app.route("/login", methods=["POST"])
def login():
    workspace = get_or_create_workspace()
    email = request.form.get("email", "").strip() or None
    try:
        workspace.login(email)
    except ValueError as e:
        return render_template("login.html", error=str(e), email=email), 400
    return redirect(url_for('dashboard_view'))


@app.route("/logout")
def logout():
    workspace = get_or_create_workspace()
    workspace.logout()
    return redirect(url_for('index'))


# -------------------------------------------------------------------------
# Dashboard
# -------------------------------------------------------------------------
@app.route("/dashboard")
@view_required("dashboard")
def dashboard_view():
    ws = g.workspace
    metrics = dashboard.compute_metrics(ws.ropa, ws.incidents, ws.awareness, ws.tenant)
    return render_template(
        "dashboard.html",
        metrics=metrics,
        department_chart=dashboard.department_chart(ws.ropa),
        severity_chart=dashboard.severity_chart(ws.incidents),
        recent_incidents=list(ws.incidents)[:5],
    )


# -------------------------------------------------------------------------
# ROPA
# -------------------------------------------------------------------------
def _ropa_form_fields():
    return {
        'process_name': request.form.get("process_name", ""),
        'department': request.form.get("department", ""),
        'data_types': parse_data_types(request.form.get("data_types", "")),
        'data_subjects': request.form.get("data_subjects", ""),
        'legal_basis': request.form.get("legal_basis", LEGAL_BASES[0]),
        'retention_period': request.form.get("retention_period", ""),
        'security_measures': request.form.get("security_measures", ""),
    }


def _render_ropa(error=None, editing=None, status=200):
    return render_template(
        "ropa.html",
        entries=list(g.workspace.ropa),
        legal_bases=LEGAL_BASES,
        editing=editing,
        error=error,
    ), status


@app.route("/ropa")
@view_required("ropa")
def ropa():
    return _render_ropa()


@app.route("/ropa/add", methods=["POST"])
@view_required("ropa")
def ropa_add():
    ws = g.workspace
    try:
        entry = ws.ropa.add(ws.tenant.id, **_ropa_form_fields())
    except ValueError as e:
        return _render_ropa(error=str(e), status=400)
    logger.info("ROPA entry %s added by %s", entry.id, ws.actor)
    return redirect(url_for('ropa'))


@app.route("/ropa/<entry_id>/edit", methods=["GET", "POST"])
@view_required("ropa")
def ropa_edit(entry_id):
    ws = g.workspace
    entry = ws.ropa.get(entry_id)
    if request.method == "POST":
        try:
            ws.ropa.update(entry_id, **_ropa_form_fields())
        except ValueError as e:
            return _render_ropa(error=str(e), editing=entry, status=400)
        return redirect(url_for('ropa'))
    return _render_ropa(editing=entry)


@app.route("/ropa/<entry_id>/delete", methods=["POST"])
@view_required("ropa")
def ropa_delete(entry_id):
    g.workspace.ropa.delete(entry_id)
    return redirect(url_for('ropa'))


@app.route("/ropa/export/pdf")
@view_required("ropa")
def ropa_export_pdf():
    """Export the ROPA register as PDF"""
    pdf_data = g.workspace.ropa.to_pdf()
    return _download(pdf_data, PDF_MIMETYPE, f"ropa_lgpd_{date.today().isoformat()}.pdf")


@app.route("/ropa/export/excel")
@view_required("ropa")
def ropa_export_excel():
    """Export the ROPA register as Excel"""
    excel_data = g.workspace.ropa.to_excel()
    return _download(excel_data, EXCEL_MIMETYPE, f"ropa_lgpd_{date.today().isoformat()}.xlsx")


# -------------------------------------------------------------------------
# Incidents
# -------------------------------------------------------------------------
def _render_incidents(error=None, form=None, status=200):
    return render_template(
        "incidents.html",
        incidents=list(g.workspace.incidents),
        analysis=g.workspace.pending_analysis,
        form=form or {},
        error=error,
    ), status


@app.route("/incidents")
@view_required("incidents")
def incidents():
    return _render_incidents()


@app.route("/incidents/analyze", methods=["POST"])
@view_required("incidents")
def incidents_analyze():
    """Ask the model for a severity suggestion before the incident is filed."""
    form = {'title': request.form.get("title", ""), 'description': request.form.get("description", "")}
    if not form['description'].strip():
        return _render_incidents(error="Describe the incident before analysing it.", form=form, status=400)
    g.workspace.pending_analysis = ai_service.analyze_incident(form['description'])
    return _render_incidents(form=form)


@app.route("/incidents/report", methods=["POST"])
@view_required("incidents")
def incidents_report():
    ws = g.workspace
    form = {'title': request.form.get("title", ""), 'description': request.form.get("description", "")}
    if not form['title'].strip() or not form['description'].strip():
        return _render_incidents(error="Title and description are required.", form=form, status=400)

    analysis = ws.pending_analysis or ai_service.analyze_incident(form['description'])
    incident = ws.incidents.report(
        tenant_id=ws.tenant.id,
        title=form['title'],
        description=form['description'],
        severity=analysis.severity,
        actor=ws.actor,
        analysis=analysis.analysis,
    )
    ws.pending_analysis = None
    logger.info("Incident %s reported with severity %s", incident.id, incident.severity.value)
    return redirect(url_for('incident_detail', incident_id=incident.id))


@app.route("/incidents/discard", methods=["POST"])
@view_required("incidents")
def incidents_discard():
    g.workspace.pending_analysis = None
    return redirect(url_for('incidents'))


@app.route("/incidents/<incident_id>")
@view_required("incidents")
def incident_detail(incident_id):
    incident = g.workspace.incidents.get(incident_id)
    return render_template("incident_detail.html", incident=incident, statuses=STATUS_LABELS)


@app.route("/incidents/<incident_id>/status", methods=["POST"])
@view_required("incidents")
def incident_status(incident_id):
    ws = g.workspace
    incident = ws.incidents.get(incident_id)
    try:
        new_status = IncidentStatus(request.form.get("status", ""))
    except ValueError:
        return render_template(
            "incident_detail.html", incident=incident, statuses=STATUS_LABELS, error="Unknown status."
        ), 400
    ws.incidents.change_status(incident_id, new_status, actor=ws.actor, note=request.form.get("note", ""))
    return redirect(url_for('incident_detail', incident_id=incident_id))


@app.route("/incidents/<incident_id>/audit.pdf")
@view_required("incidents")
def incident_audit_pdf(incident_id):
    incident = g.workspace.incidents.get(incident_id)
    pdf_data = g.workspace.incidents.audit_pdf(incident)
    return _download(pdf_data, PDF_MIMETYPE, f"audit_incident_{incident.id}.pdf")


@app.route("/incidents/export/pdf")
@view_required("incidents")
def incidents_export_pdf():
    pdf_data = g.workspace.incidents.to_pdf()
    return _download(pdf_data, PDF_MIMETYPE, f"incidents_report_{date.today().isoformat()}.pdf")


@app.route("/incidents/export/excel")
@view_required("incidents")
def incidents_export_excel():
    excel_data = g.workspace.incidents.to_excel()
    return _download(excel_data, EXCEL_MIMETYPE, f"incidents_report_{date.today().isoformat()}.xlsx")


# -------------------------------------------------------------------------
# Legal documents
# -------------------------------------------------------------------------
def _render_documents(error=None, status=200):
    return render_template(
        "documents.html",
        documents=list(g.workspace.documents),
        doc_titles=list(DOC_TYPES),
        default_industry=DEFAULT_INDUSTRY,
        default_data_types=", ".join(DEFAULT_DATA_TYPES),
        error=error,
    ), status


@app.route("/documents")
@view_required("documents")
def documents():
    return _render_documents()


@app.route("/documents/generate", methods=["POST"])
@view_required("documents")
def documents_generate():
    """Draft a document with the model and open it in the editor."""
    ws = g.workspace
    try:
        document = ws.documents.generate(
            title=request.form.get("title", ""),
            tenant=ws.tenant,
            industry=request.form.get("industry", "").strip() or DEFAULT_INDUSTRY,
            data_types=parse_data_types(request.form.get("data_types", "")) or None,
        )
    except ValueError as e:
        return _render_documents(error=str(e), status=400)
    return redirect(url_for('document_detail', doc_id=document.id))


@app.route("/documents/manual", methods=["POST"])
@view_required("documents")
def documents_manual():
    ws = g.workspace
    try:
        document = ws.documents.create_manual(request.form.get("title", ""), ws.tenant)
    except ValueError as e:
        return _render_documents(error=str(e), status=400)
    return redirect(url_for('document_detail', doc_id=document.id))


@app.route("/documents/<doc_id>")
@view_required("documents")
def document_detail(doc_id):
    document = g.workspace.documents.get(doc_id)
    return render_template("document_detail.html", document=document)


@app.route("/documents/<doc_id>/save", methods=["POST"])
@view_required("documents")
def document_save(doc_id):
    g.workspace.documents.save_content(doc_id, request.form.get("content", ""))
    return redirect(url_for('document_detail', doc_id=doc_id))


@app.route("/documents/<doc_id>/publish", methods=["POST"])
@view_required("documents")
def document_publish(doc_id):
    published = request.form.get("published") == "1"
    g.workspace.documents.set_published(doc_id, published)
    return redirect(url_for('document_detail', doc_id=doc_id))


@app.route("/documents/<doc_id>/delete", methods=["POST"])
@view_required("documents")
def document_delete(doc_id):
    g.workspace.documents.delete(doc_id)
    return redirect(url_for('documents'))


@app.route("/documents/<doc_id>/pdf")
@view_required("documents")
def document_pdf(doc_id):
    ws = g.workspace
    document = ws.documents.get(doc_id)
    return _download(document_to_pdf(document, ws.tenant), PDF_MIMETYPE, pdf_filename(document))


# -------------------------------------------------------------------------
# Awareness
# -------------------------------------------------------------------------
def _render_awareness(error=None, status=200):
    ws = g.workspace
    category = request.args.get("category") or None
    try:
        selected = AwarenessCategory(category) if category else None
    except ValueError:
        selected = None
    posts = ws.awareness.filter(category=selected, published_only=not _can_manage_content())
    return render_template(
        "awareness.html",
        posts=posts,
        categories=list(AwarenessCategory),
        selected_category=selected,
        draft=ws.pending_post,
        draft_category=ws.pending_post_category,
        can_manage=_can_manage_content(),
        error=error,
    ), status


@app.route("/awareness")
@view_required("awareness")
def awareness():
    return _render_awareness()


@app.route("/awareness/generate", methods=["POST"])
@view_required("awareness")
def awareness_generate():
    ws = g.workspace
    if not _can_manage_content():
        abort(403)
    topic = request.form.get("topic", "").strip()
    if not topic:
        return _render_awareness(error="Enter a topic for the post.", status=400)
    try:
        category = AwarenessCategory(request.form.get("category", ""))
    except ValueError:
        return _render_awareness(error="Unknown category.", status=400)
    ws.pending_post = ai_service.generate_awareness_post(topic, category)
    ws.pending_post_category = category
    return redirect(url_for('awareness'))


@app.route("/awareness/publish", methods=["POST"])
@view_required("awareness")
def awareness_publish():
    """Publish the pending draft, with any edits made to its title and text."""
    ws = g.workspace
    if not _can_manage_content():
        abort(403)
    draft = ws.pending_post
    if draft is None:
        return redirect(url_for('awareness'))
    try:
        post = ws.awareness.add_post(
            tenant_id=ws.tenant.id,
            title=request.form.get("title", draft.title),
            content=request.form.get("content", draft.content),
            category=ws.pending_post_category or AwarenessCategory.SECURITY,
            quiz=draft.quiz,
        )
    except ValueError as e:
        return _render_awareness(error=str(e), status=400)
    ws.pending_post = None
    ws.pending_post_category = None
    logger.info("Awareness post %s published by %s", post.id, ws.actor)
    return redirect(url_for('awareness_detail', post_id=post.id))


@app.route("/awareness/discard", methods=["POST"])
@view_required("awareness")
def awareness_discard():
    g.workspace.pending_post = None
    g.workspace.pending_post_category = None
    return redirect(url_for('awareness'))


@app.route("/awareness/<post_id>")
@view_required("awareness")
def awareness_detail(post_id):
    ws = g.workspace
    post = ws.awareness.get(post_id)
    if not post.is_published and not _can_manage_content():
        abort(404)
    ws.awareness.record_view(post_id)
    return render_template("awareness_detail.html", post=post, can_manage=_can_manage_content())


@app.route("/awareness/<post_id>/quiz", methods=["POST"])
@view_required("awareness")
def awareness_quiz(post_id):
    ws = g.workspace
    post = ws.awareness.get(post_id)
    try:
        result = ws.awareness.answer_quiz(post_id, int(request.form.get("option", "")))
    except ValueError:
        return render_template(
            "awareness_detail.html", post=post, can_manage=_can_manage_content(), error="Choose one of the options."
        ), 400
    return render_template("awareness_detail.html", post=post, can_manage=_can_manage_content(), result=result)


@app.route("/awareness/<post_id>/visibility", methods=["POST"])
@view_required("awareness")
def awareness_visibility(post_id):
    if not _can_manage_content():
        abort(403)
    g.workspace.awareness.set_published(post_id, request.form.get("published") == "1")
    return redirect(url_for('awareness_detail', post_id=post_id))


@app.route("/awareness/<post_id>/delete", methods=["POST"])
@view_required("awareness")
def awareness_delete(post_id):
    if not _can_manage_content():
        abort(403)
    g.workspace.awareness.delete_post(post_id)
    return redirect(url_for('awareness'))


# -------------------------------------------------------------------------
# Settings
# -------------------------------------------------------------------------
SETTINGS_TABS = ("profile", "users", "branding", "security")


def _grantable_roles():
    return {role: ROLE_LABELS[role] for role in assignable_roles(g.workspace.current_user.role)}


def _requested_role(default=""):
    """Role from the submitted form, limited to what the signed-in user may grant."""
    role = UserRole(request.form.get("role", default))
    if role not in _grantable_roles():
        raise ValueError(f"You cannot grant the {ROLE_LABELS[role]} role.")
    return role


def _render_settings(tab="profile", error=None, status=200):
    return render_template(
        "settings.html",
        tab=tab if tab in SETTINGS_TABS else "profile",
        tabs=SETTINGS_TABS,
        users=list(g.workspace.users),
        roles=_grantable_roles(),
        password_policies=PASSWORD_POLICIES,
        error=error,
    ), status


@app.route("/settings")
@view_required("settings")
def settings():
    return _render_settings(request.args.get("tab", "profile"))


@app.route("/settings/profile", methods=["POST"])
@view_required("settings")
def settings_profile():
    try:
        g.workspace.tenant.update_profile(
            name=request.form.get("name", ""),
            contact_email=request.form.get("contact_email", ""),
            dpo_name=request.form.get("dpo_name", ""),
            dpo_email=request.form.get("dpo_email", ""),
            logo_url=request.form.get("logo_url"),
        )
    except ValueError as e:
        return _render_settings("profile", error=str(e), status=400)
    return redirect(url_for('settings', tab="profile"))


@app.route("/settings/committee", methods=["POST"])
@view_required("settings")
def settings_committee_add():
    try:
        g.workspace.tenant.add_committee_member(
            request.form.get("name", ""), request.form.get("function", ""), request.form.get("email", "")
        )
    except ValueError as e:
        return _render_settings("profile", error=str(e), status=400)
    return redirect(url_for('settings', tab="profile"))


@app.route("/settings/committee/<member_id>/delete", methods=["POST"])
@view_required("settings")
def settings_committee_delete(member_id):
    g.workspace.tenant.remove_committee_member(member_id)
    return redirect(url_for('settings', tab="profile"))


@app.route("/settings/branding", methods=["POST"])
@view_required("settings")
def settings_branding():
    try:
        g.workspace.tenant.update_branding(
            request.form.get("primary_color", ""),
            request.form.get("sidebar_color", ""),
            request.form.get("sidebar_text_color", ""),
        )
    except ValueError as e:
        return _render_settings("branding", error=str(e), status=400)
    return redirect(url_for('settings', tab="branding"))


@app.route("/settings/users", methods=["POST"])
@view_required("settings")
def settings_user_add():
    ws = g.workspace
    try:
        ws.users.add(
            tenant_id=ws.tenant.id,
            name=request.form.get("name", ""),
            email=request.form.get("email", ""),
            role=_requested_role(UserRole.USER.value),
        )
    except ValueError as e:
        return _render_settings("users", error=str(e), status=400)
    return redirect(url_for('settings', tab="users"))


@app.route("/settings/users/<user_id>", methods=["POST"])
@view_required("settings")
def settings_user_update(user_id):
    ws = g.workspace
    if user_id == ws.current_user.id:
        return _render_settings("users", error="You cannot change your own role or status.", status=400)
    if ws.users.get(user_id).role not in _grantable_roles():
        return _render_settings("users", error="You cannot modify a user with a higher role.", status=403)
    try:
        ws.users.update(
            user_id,
            role=_requested_role(),
            is_active=request.form.get("is_active") == "1",
        )
    except ValueError as e:
        return _render_settings("users", error=str(e), status=400)
    return redirect(url_for('settings', tab="users"))


@app.route("/settings/users/<user_id>/delete", methods=["POST"])
@view_required("settings")
def settings_user_delete(user_id):
    ws = g.workspace
    if user_id == ws.current_user.id:
        return _render_settings("users", error="You cannot remove your own account.", status=400)
    if ws.users.get(user_id).role not in _grantable_roles():
        return _render_settings("users", error="You cannot remove a user with a higher role.", status=403)
    ws.users.delete(user_id)
    return redirect(url_for('settings', tab="users"))


@app.route("/settings/security", methods=["POST"])
@view_required("settings")
def settings_security():
    try:
        g.workspace.tenant.update_security(
            mfa_enabled=bool(request.form.get("mfa_enabled")),
            session_timeout_minutes=int(request.form.get("session_timeout_minutes", "30")),
            password_policy=request.form.get("password_policy", "standard"),
        )
    except ValueError as e:
        return _render_settings("security", error=str(e), status=400)
    return redirect(url_for('settings', tab="security"))


# -------------------------------------------------------------------------
# Workspace export / import
# -------------------------------------------------------------------------
@app.route("/workspace/export")
@view_required("settings")
def export_workspace():
    """Export current workspace records as JSON"""
    export_data = workspace_manager.export_workspace(g.workspace)
    filename = f"lgpd_guardian_workspace_{date.today().isoformat()}.json"
    return _download(export_data, 'application/json', filename)


@app.route("/workspace/import", methods=["POST"])
def import_workspace():
    """Import workspace records from a JSON file; the new workspace starts signed out"""
    upload = request.files.get('workspace_file')
    if not upload or upload.filename == '':
        return render_template("login.html", error="Choose a workspace file to import."), 400

    try:
        json_data = upload.read().decode('utf-8')
    except UnicodeDecodeError:
        return render_template("login.html", error="The workspace file must be UTF-8 JSON."), 400

    imported = workspace_manager.import_workspace(json_data)
    if imported is None:
        return render_template("login.html", error="Failed to import workspace. Please check the file format."), 400

    old_id = session.get('guardian_workspace_id')
    if old_id:
        workspace_manager.delete_workspace(old_id)
    session['guardian_workspace_id'] = imported.workspace_id
    session.permanent = True
    return redirect(url_for('index'))


if __name__ == "__main__":
    # Run on port 8000, bind to all interfaces
    app.run(host="0.0.0.0", port=8000, debug=not config.is_production)
