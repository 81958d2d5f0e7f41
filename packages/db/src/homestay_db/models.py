# This project was developed with assistance from AI tools.
"""
HP Tourism homestay registration -- domain models

Registration lifecycle models covering owners and officers, applications,
documents, inspections, payments, grievances, notifications, and the
append-only audit trail.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
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
    OwnerGender,
    PaymentPurpose,
    PaymentStatus,
    PropertyCategory,
    UserRole,
)


def _str_enum(enum_cls, name):
    """Non-native enum column persisted by member value ('draft', not 'DRAFT')."""
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        values_callable=lambda members: [m.value for m in members],
    )


class PortalUser(Base):
    """Owner or officer profile linked to Keycloak identity."""

    __tablename__ = "portal_users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    keycloak_user_id = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=True, index=True)
    mobile = Column(String(20), nullable=True, index=True)
    aadhaar = Column(String(20), nullable=True)
    role = Column(_str_enum(UserRole, "user_role"), nullable=False)
    district = Column(String(100), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    applications = relationship("Application", back_populates="owner")

    def __repr__(self):
        return f"<PortalUser(id={self.id}, role='{self.role}', name='{self.full_name}')>"


class Application(Base):
    """Homestay registration application (or a service request on an RC)."""

    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_number = Column(String(50), unique=True, nullable=False, index=True)
    owner_id = Column(
        Integer, ForeignKey("portal_users.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    application_kind = Column(
        _str_enum(ApplicationKind, "application_kind"),
        nullable=False,
        default=ApplicationKind.NEW_REGISTRATION,
    )
    parent_application_id = Column(
        Integer, ForeignKey("applications.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    status = Column(
        _str_enum(ApplicationStatus, "application_status"),
        nullable=False,
        default=ApplicationStatus.DRAFT,
        index=True,
    )

    # Property
    property_name = Column(String(255), nullable=False)
    district = Column(String(100), nullable=False, index=True)
    tehsil = Column(String(100), nullable=True)
    address = Column(Text, nullable=True)
    pincode = Column(String(10), nullable=True)
    category = Column(
        _str_enum(PropertyCategory, "property_category"),
        nullable=False,
        default=PropertyCategory.SILVER,
    )
    total_rooms = Column(Integer, nullable=False, default=1)
    requested_rooms = Column(Integer, nullable=True)
    requested_category = Column(
        _str_enum(PropertyCategory, "property_category"),
        nullable=True,
    )
    is_pangi_sub_division = Column(Boolean, nullable=False, default=False)
    certificate_validity_years = Column(Integer, nullable=False, default=1)

    # Owner snapshot at submission time
    owner_name = Column(String(200), nullable=True)
    owner_mobile = Column(String(20), nullable=True)
    owner_email = Column(String(255), nullable=True)
    owner_aadhaar = Column(String(20), nullable=True)
    owner_gender = Column(
        _str_enum(OwnerGender, "owner_gender"),
        nullable=True,
    )

    # Fees
    base_fee = Column(Numeric(12, 2), nullable=True)
    validity_discount = Column(Numeric(12, 2), nullable=True)
    female_owner_discount = Column(Numeric(12, 2), nullable=True)
    pangi_discount = Column(Numeric(12, 2), nullable=True)
    total_fee = Column(Numeric(12, 2), nullable=True)
    payment_status = Column(
        _str_enum(PaymentStatus, "payment_status"),
        nullable=True,
    )

    # Review cycle
    revert_count = Column(Integer, nullable=False, default=0)
    dtdo_revert_count = Column(Integer, nullable=False, default=0)
    correction_submission_count = Column(Integer, nullable=False, default=0)
    da_id = Column(String(255), nullable=True, index=True)
    da_remarks = Column(Text, nullable=True)
    da_forwarded_date = Column(DateTime(timezone=True), nullable=True)
    dtdo_id = Column(String(255), nullable=True, index=True)
    dtdo_remarks = Column(Text, nullable=True)
    dtdo_review_date = Column(DateTime(timezone=True), nullable=True)
    clarification_requested = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    # Inspection
    site_inspection_scheduled_date = Column(DateTime(timezone=True), nullable=True)
    site_inspection_completed_date = Column(DateTime(timezone=True), nullable=True)
    site_inspection_outcome = Column(String(50), nullable=True)
    site_inspection_notes = Column(Text, nullable=True)

    # Certificate
    certificate_number = Column(String(50), unique=True, nullable=True)
    certificate_issued_date = Column(DateTime(timezone=True), nullable=True)
    certificate_expiry_date = Column(DateTime(timezone=True), nullable=True)

    submitted_at = Column(DateTime(timezone=True), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __mapper_args__ = {"version_id_col": version}

    owner = relationship("PortalUser", back_populates="applications")
    documents = relationship(
        "Document", back_populates="application", cascade="all, delete-orphan", passive_deletes=True,
    )
    inspection_orders = relationship(
        "InspectionOrder", back_populates="application", cascade="all, delete-orphan", passive_deletes=True,
    )
    payments = relationship(
        "Payment", back_populates="application", cascade="all, delete-orphan", passive_deletes=True,
    )

    def __repr__(self):
        return f"<Application(id={self.id}, number='{self.application_number}', status='{self.status}')>"


class Document(Base):
    """Uploaded supporting document with DA verification state."""

    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    doc_type = Column(
        _str_enum(DocumentType, "document_type"),
        nullable=False,
    )
    file_name = Column(String(255), nullable=True)
    file_path = Column(String(500), nullable=True)
    content_type = Column(String(100), nullable=True)
    file_size = Column(Integer, nullable=True)
    verification_status = Column(
        _str_enum(DocumentStatus, "document_status"),
        nullable=False,
        default=DocumentStatus.PENDING,
    )
    verification_notes = Column(Text, nullable=True)
    verified_by = Column(String(255), nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    uploaded_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("Application", back_populates="documents")

    def __repr__(self):
        return f"<Document(id={self.id}, type='{self.doc_type}', status='{self.verification_status}')>"


class InspectionOrder(Base):
    """Site inspection scheduled by a DTDO and carried out by a DA."""

    __tablename__ = "inspection_orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    scheduled_by = Column(String(255), nullable=False)
    assigned_to = Column(String(255), nullable=False, index=True)
    district = Column(String(100), nullable=False, index=True)
    inspection_date = Column(DateTime(timezone=True), nullable=False)
    inspection_address = Column(Text, nullable=True)
    special_instructions = Column(Text, nullable=True)
    status = Column(
        _str_enum(InspectionStatus, "inspection_status"),
        nullable=False,
        default=InspectionStatus.SCHEDULED,
    )
    owner_acknowledged_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    application = relationship("Application", back_populates="inspection_orders")
    report = relationship(
        "InspectionReport", back_populates="order", uselist=False, cascade="all, delete-orphan", passive_deletes=True,
    )

    def __repr__(self):
        return f"<InspectionOrder(id={self.id}, app_id={self.application_id}, status='{self.status}')>"


class InspectionReport(Base):
    """Field report filed by the DA after a site inspection."""

    __tablename__ = "inspection_reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    inspection_order_id = Column(
        Integer, ForeignKey("inspection_orders.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    application_id = Column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    submitted_by = Column(String(255), nullable=False)
    actual_inspection_date = Column(Date, nullable=False)
    room_count_verified = Column(Boolean, nullable=False, default=False)
    actual_room_count = Column(Integer, nullable=True)
    category_meets_standards = Column(Boolean, nullable=False, default=False)
    recommended_category = Column(
        _str_enum(PropertyCategory, "property_category"),
        nullable=True,
    )
    checklist = Column(JSON, nullable=True)
    observations = Column(Text, nullable=True)
    recommendation = Column(
        _str_enum(InspectionRecommendation, "inspection_recommendation"),
        nullable=False,
    )
    early_inspection_override = Column(Boolean, nullable=False, default=False)
    early_inspection_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    order = relationship("InspectionOrder", back_populates="report")

    def __repr__(self):
        return f"<InspectionReport(id={self.id}, recommendation='{self.recommendation}')>"


class Payment(Base):
    """Registration fee payment attempt."""

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    amount = Column(Numeric(12, 2), nullable=False)
    purpose = Column(
        _str_enum(PaymentPurpose, "payment_purpose"),
        nullable=False,
        default=PaymentPurpose.REGISTRATION,
    )
    gateway = Column(String(50), nullable=False, default="himkosh")
    transaction_id = Column(String(100), unique=True, nullable=False, index=True)
    status = Column(
        _str_enum(PaymentStatus, "payment_status"),
        nullable=False,
        default=PaymentStatus.INITIATED,
    )
    paid_at = Column(DateTime(timezone=True), nullable=True)
    gateway_response = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("Application", back_populates="payments")

    def __repr__(self):
        return f"<Payment(id={self.id}, txn='{self.transaction_id}', status='{self.status}')>"


class Grievance(Base):
    """Owner grievance or internal officer ticket."""

    __tablename__ = "grievances"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_number = Column(String(30), unique=True, nullable=False, index=True)
    ticket_type = Column(
        _str_enum(GrievanceType, "grievance_type"),
        nullable=False,
        default=GrievanceType.OWNER_GRIEVANCE,
    )
    user_id = Column(
        Integer, ForeignKey("portal_users.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    application_id = Column(
        Integer, ForeignKey("applications.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    category = Column(
        _str_enum(GrievanceCategory, "grievance_category"),
        nullable=False,
    )
    priority = Column(
        _str_enum(GrievancePriority, "grievance_priority"),
        nullable=False,
        default=GrievancePriority.MEDIUM,
    )
    status = Column(
        _str_enum(GrievanceStatus, "grievance_status"),
        nullable=False,
        default=GrievanceStatus.OPEN,
        index=True,
    )
    subject = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    assigned_to = Column(String(255), nullable=True)
    resolution_notes = Column(Text, nullable=True)
    last_comment_at = Column(DateTime(timezone=True), nullable=True)
    last_read_by_owner = Column(DateTime(timezone=True), nullable=True)
    last_read_by_officer = Column(DateTime(timezone=True), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    comments = relationship(
        "GrievanceComment", back_populates="grievance", cascade="all, delete-orphan", passive_deletes=True,
    )

    def __repr__(self):
        return f"<Grievance(id={self.id}, ticket='{self.ticket_number}', status='{self.status}')>"


class GrievanceComment(Base):
    """Reply on a grievance thread. Internal comments are officer-only."""

    __tablename__ = "grievance_comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    grievance_id = Column(
        Integer, ForeignKey("grievances.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    user_id = Column(
        Integer, ForeignKey("portal_users.id", ondelete="CASCADE"), nullable=False,
    )
    author_role = Column(String(50), nullable=True)
    comment = Column(Text, nullable=False)
    is_internal = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    grievance = relationship("Grievance", back_populates="comments")

    def __repr__(self):
        return f"<GrievanceComment(id={self.id}, grievance_id={self.grievance_id})>"


class Notification(Base):
    """In-app notification for a portal user."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer, ForeignKey("portal_users.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    application_id = Column(Integer, nullable=True, index=True)
    grievance_id = Column(Integer, nullable=True, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    channels = Column(JSON, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Notification(id={self.id}, type='{self.type}', read={self.is_read})>"


class AuditEvent(Base):
    """Append-only audit trail. INSERT + SELECT only -- no UPDATE or DELETE."""

    __tablename__ = "audit_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    prev_hash = Column(String(64), nullable=True)
    user_id = Column(String(255), nullable=True)
    user_role = Column(String(50), nullable=True)
    event_type = Column(String(100), nullable=False, index=True)
    application_id = Column(Integer, nullable=True, index=True)
    grievance_id = Column(Integer, nullable=True, index=True)
    event_data = Column(JSON, nullable=True)

    def __repr__(self):
        return f"<AuditEvent(id={self.id}, type='{self.event_type}')>"


class DemoDataManifest(Base):
    """Tracks demo data seeding so the seeder stays idempotent."""

    __tablename__ = "demo_data_manifest"

    id = Column(Integer, primary_key=True, autoincrement=True)
    seeded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    config_hash = Column(String(64), nullable=False)
    summary = Column(Text, nullable=True)

    def __repr__(self):
        return f"<DemoDataManifest(id={self.id}, seeded_at='{self.seeded_at}')>"
