# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, SessionLocal, engine, get_db
from .enums import (
    ApplicationKind,
    ApplicationStatus,
    DocumentStatus,
    DocumentType,
    GrievanceCategory,
    GrievancePriority,
    GrievanceStatus,
    GrievanceType,
    InspectionRecommendation,
    InspectionStatus,
    PaymentStatus,
    PropertyCategory,
    UserRole,
    WorkflowAction,
)
from .models import (
    Application,
    AuditEvent,
    DemoDataManifest,
    Document,
    Grievance,
    GrievanceComment,
    InspectionOrder,
    InspectionReport,
    Notification,
    Payment,
    PortalUser,
)

__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_db",
    "__version__",
    # Enums
    "ApplicationStatus",
    "ApplicationKind",
    "WorkflowAction",
    "UserRole",
    "PropertyCategory",
    "DocumentType",
    "DocumentStatus",
    "InspectionStatus",
    "InspectionRecommendation",
    "PaymentStatus",
    "GrievanceType",
    "GrievanceCategory",
    "GrievancePriority",
    "GrievanceStatus",
    # Models
    "Application",
    "AuditEvent",
    "DemoDataManifest",
    "Document",
    "Grievance",
    "GrievanceComment",
    "InspectionOrder",
    "InspectionReport",
    "Notification",
    "Payment",
    "PortalUser",
]
