# This project was developed with assistance from AI tools.
"""
SQLAdmin configuration for database administration UI

Access the admin panel at: http://localhost:8000/admin

When AUTH_DISABLED=false, requires admin credentials via login form.
When AUTH_DISABLED=true, admin panel is open (dev mode).
"""

from homestay_db import (
    Application,
    AuditEvent,
    DemoDataManifest,
    Document,
    Grievance,
    InspectionOrder,
    InspectionReport,
    Notification,
    Payment,
    PortalUser,
)
from sqladmin import Admin, ModelView
from sqladmin.authentication import AuthenticationBackend
from sqlalchemy import create_engine
from starlette.requests import Request
from starlette.responses import Response

from .core.config import settings

# SQLAdmin requires a sync engine; derive from the async DATABASE_URL
_sync_url = settings.DATABASE_URL.replace("+asyncpg", "").replace("+aiosqlite", "")
engine = create_engine(_sync_url, echo=False)


class AdminAuth(AuthenticationBackend):
    """Session-based auth gate for SQLAdmin.

    When AUTH_DISABLED=true, authenticate() always returns True (dev mode).
    """

    async def login(self, request: Request) -> bool:
        form = await request.form()
        username = form.get("username")
        password = form.get("password")
        if username == settings.SQLADMIN_USER and password == settings.SQLADMIN_PASSWORD:
            request.session.update({"admin_authenticated": True})
            return True
        return False

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> Response | bool:
        if settings.AUTH_DISABLED:
            return True
        return request.session.get("admin_authenticated", False)


class PortalUserAdmin(ModelView, model=PortalUser):
    column_list = [
        PortalUser.id,
        PortalUser.full_name,
        PortalUser.role,
        PortalUser.district,
        PortalUser.is_active,
        PortalUser.created_at,
    ]
    column_searchable_list = [PortalUser.full_name, PortalUser.email, PortalUser.keycloak_user_id]
    column_sortable_list = [PortalUser.id, PortalUser.role, PortalUser.district]
    column_details_exclude_list = [PortalUser.aadhaar]
    name = "User"
    name_plural = "Users"
    icon = "fa-solid fa-user"


class ApplicationAdmin(ModelView, model=Application):
    column_list = [
        Application.id,
        Application.application_number,
        Application.application_kind,
        Application.property_name,
        Application.district,
        Application.status,
        Application.total_fee,
        Application.updated_at,
    ]
    column_searchable_list = [
        Application.application_number,
        Application.property_name,
        Application.owner_name,
    ]
    column_sortable_list = [Application.id, Application.status, Application.district, Application.updated_at]
    column_default_sort = [(Application.updated_at, True)]
    column_details_exclude_list = [Application.owner_aadhaar]
    # Status changes must go through the workflow so they are audited.
    can_create = False
    form_excluded_columns = [Application.status, Application.version]
    name = "Application"
    name_plural = "Applications"
    icon = "fa-solid fa-house"


class DocumentAdmin(ModelView, model=Document):
    column_list = [
        Document.id,
        Document.application_id,
        Document.doc_type,
        Document.verification_status,
        Document.uploaded_by,
        Document.created_at,
    ]
    column_sortable_list = [Document.id, Document.doc_type, Document.verification_status]
    column_default_sort = [(Document.created_at, True)]
    can_create = False
    name = "Document"
    name_plural = "Documents"
    icon = "fa-solid fa-file-upload"


class InspectionOrderAdmin(ModelView, model=InspectionOrder):
    column_list = [
        InspectionOrder.id,
        InspectionOrder.application_id,
        InspectionOrder.district,
        InspectionOrder.assigned_to,
        InspectionOrder.inspection_date,
        InspectionOrder.status,
    ]
    column_sortable_list = [InspectionOrder.id, InspectionOrder.inspection_date, InspectionOrder.status]
    column_default_sort = [(InspectionOrder.inspection_date, True)]
    can_create = False
    name = "Inspection Order"
    name_plural = "Inspection Orders"
    icon = "fa-solid fa-clipboard-list"


class InspectionReportAdmin(ModelView, model=InspectionReport):
    column_list = [
        InspectionReport.id,
        InspectionReport.application_id,
        InspectionReport.actual_inspection_date,
        InspectionReport.recommendation,
        InspectionReport.submitted_by,
    ]
    can_create = False
    can_edit = False
    name = "Inspection Report"
    name_plural = "Inspection Reports"
    icon = "fa-solid fa-clipboard-check"


class PaymentAdmin(ModelView, model=Payment):
    column_list = [
        Payment.id,
        Payment.application_id,
        Payment.transaction_id,
        Payment.amount,
        Payment.status,
        Payment.paid_at,
    ]
    column_searchable_list = [Payment.transaction_id]
    column_default_sort = [(Payment.created_at, True)]
    can_create = False
    can_edit = False
    name = "Payment"
    name_plural = "Payments"
    icon = "fa-solid fa-indian-rupee-sign"


class GrievanceAdmin(ModelView, model=Grievance):
    column_list = [
        Grievance.id,
        Grievance.ticket_number,
        Grievance.ticket_type,
        Grievance.category,
        Grievance.priority,
        Grievance.status,
        Grievance.created_at,
    ]
    column_searchable_list = [Grievance.ticket_number, Grievance.subject]
    column_sortable_list = [Grievance.id, Grievance.priority, Grievance.status, Grievance.created_at]
    column_default_sort = [(Grievance.created_at, True)]
    can_create = False
    name = "Grievance"
    name_plural = "Grievances"
    icon = "fa-solid fa-headset"


class NotificationAdmin(ModelView, model=Notification):
    column_list = [
        Notification.id,
        Notification.user_id,
        Notification.type,
        Notification.title,
        Notification.is_read,
        Notification.created_at,
    ]
    column_default_sort = [(Notification.created_at, True)]
    can_create = False
    can_edit = False
    name = "Notification"
    name_plural = "Notifications"
    icon = "fa-solid fa-bell"


class AuditEventAdmin(ModelView, model=AuditEvent):
    column_list = [
        AuditEvent.id,
        AuditEvent.timestamp,
        AuditEvent.event_type,
        AuditEvent.user_id,
        AuditEvent.user_role,
        AuditEvent.application_id,
        AuditEvent.grievance_id,
    ]
    column_sortable_list = [AuditEvent.id, AuditEvent.timestamp, AuditEvent.event_type]
    column_default_sort = [(AuditEvent.timestamp, True)]
    can_create = False
    can_edit = False
    can_delete = False
    name = "Audit Event"
    name_plural = "Audit Events"
    icon = "fa-solid fa-shield-alt"


class DemoDataManifestAdmin(ModelView, model=DemoDataManifest):
    column_list = [DemoDataManifest.id, DemoDataManifest.seeded_at, DemoDataManifest.config_hash]
    can_create = False
    can_edit = False
    can_delete = False
    name = "Seed Manifest"
    name_plural = "Seed Manifests"
    icon = "fa-solid fa-database"


def setup_admin(app):
    """Set up SQLAdmin and mount it to the FastAPI app."""
    auth_backend = AdminAuth(
        secret_key=settings.SQLADMIN_SECRET_KEY,
    )
    admin = Admin(app, engine, title="HP Homestay Admin", authentication_backend=auth_backend)

    admin.add_view(PortalUserAdmin)
    admin.add_view(ApplicationAdmin)
    admin.add_view(DocumentAdmin)
    admin.add_view(InspectionOrderAdmin)
    admin.add_view(InspectionReportAdmin)
    admin.add_view(PaymentAdmin)
    admin.add_view(GrievanceAdmin)
    admin.add_view(NotificationAdmin)
    admin.add_view(AuditEventAdmin)
    admin.add_view(DemoDataManifestAdmin)

    return admin
