# This project was developed with assistance from AI tools.
"""
Domain enums for the homestay registration lifecycle.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class ApplicationStatus(str, enum.Enum):
    DRAFT = "draft"
    PAID_PENDING_SUBMIT = "paid_pending_submit"
    SUBMITTED = "submitted"
    UNDER_SCRUTINY = "under_scrutiny"
    REVERTED_TO_APPLICANT = "reverted_to_applicant"
    SENT_BACK_FOR_CORRECTIONS = "sent_back_for_corrections"
    FORWARDED_TO_DTDO = "forwarded_to_dtdo"
    DTDO_REVIEW = "dtdo_review"
    REVERTED_BY_DTDO = "reverted_by_dtdo"
    OBJECTION_RAISED = "objection_raised"
    INSPECTION_SCHEDULED = "inspection_scheduled"
    INSPECTION_UNDER_REVIEW = "inspection_under_review"
    INSPECTION_COMPLETED = "inspection_completed"
    VERIFIED_FOR_PAYMENT = "verified_for_payment"
    PAYMENT_FAILED = "payment_failed"
    APPROVED = "approved"
    REJECTED = "rejected"
    CERTIFICATE_CANCELLED = "certificate_cancelled"
    SUPERSEDED = "superseded"

    @classmethod
    def terminal_statuses(cls) -> frozenset["ApplicationStatus"]:
        """Statuses with no outgoing transitions."""
        return frozenset({cls.REJECTED, cls.CERTIFICATE_CANCELLED, cls.SUPERSEDED})

    @classmethod
    def correction_statuses(cls) -> frozenset["ApplicationStatus"]:
        """Statuses where the owner is expected to fix and resubmit."""
        return frozenset(
            {
                cls.SENT_BACK_FOR_CORRECTIONS,
                cls.REVERTED_TO_APPLICANT,
                cls.REVERTED_BY_DTDO,
                cls.OBJECTION_RAISED,
            }
        )

    @classmethod
    def valid_transitions(cls) -> dict["ApplicationStatus", frozenset["ApplicationStatus"]]:
        """Allowed status transitions in the registration lifecycle."""
        correction_exits = frozenset({cls.UNDER_SCRUTINY, cls.DTDO_REVIEW})
        inspection_exits = frozenset(
            {cls.VERIFIED_FOR_PAYMENT, cls.APPROVED, cls.REJECTED, cls.OBJECTION_RAISED}
        )
        return {
            cls.DRAFT: frozenset({cls.SUBMITTED, cls.PAID_PENDING_SUBMIT}),
            cls.PAID_PENDING_SUBMIT: frozenset({cls.SUBMITTED}),
            cls.SUBMITTED: frozenset({cls.UNDER_SCRUTINY}),
            cls.UNDER_SCRUTINY: frozenset(
                {cls.FORWARDED_TO_DTDO, cls.REVERTED_TO_APPLICANT, cls.REJECTED}
            ),
            cls.REVERTED_TO_APPLICANT: correction_exits,
            cls.SENT_BACK_FOR_CORRECTIONS: correction_exits,
            cls.REVERTED_BY_DTDO: correction_exits,
            cls.OBJECTION_RAISED: correction_exits,
            cls.FORWARDED_TO_DTDO: frozenset(
                {cls.DTDO_REVIEW, cls.REVERTED_BY_DTDO, cls.REJECTED, cls.CERTIFICATE_CANCELLED}
            ),
            cls.DTDO_REVIEW: frozenset(
                {
                    cls.INSPECTION_SCHEDULED,
                    cls.REVERTED_BY_DTDO,
                    cls.REJECTED,
                    cls.CERTIFICATE_CANCELLED,
                }
            ),
            cls.INSPECTION_SCHEDULED: frozenset({cls.INSPECTION_UNDER_REVIEW}),
            cls.INSPECTION_UNDER_REVIEW: inspection_exits,
            cls.INSPECTION_COMPLETED: inspection_exits,
            cls.VERIFIED_FOR_PAYMENT: frozenset({cls.APPROVED, cls.PAYMENT_FAILED}),
            cls.PAYMENT_FAILED: frozenset({cls.APPROVED}),
            cls.APPROVED: frozenset({cls.CERTIFICATE_CANCELLED, cls.SUPERSEDED}),
            cls.REJECTED: frozenset(),
            cls.CERTIFICATE_CANCELLED: frozenset(),
            cls.SUPERSEDED: frozenset(),
        }


class WorkflowAction(str, enum.Enum):
    SUBMIT = "submit"
    RECORD_UPFRONT_PAYMENT = "record_upfront_payment"
    START_SCRUTINY = "start_scrutiny"
    FORWARD_TO_DTDO = "forward_to_dtdo"
    SEND_BACK = "send_back"
    AUTO_REJECT = "auto_reject"
    RESUBMIT_CORRECTION = "resubmit_correction"
    DTDO_ACCEPT = "dtdo_accept"
    DTDO_REJECT = "dtdo_reject"
    DTDO_REVERT = "dtdo_revert"
    SCHEDULE_INSPECTION = "schedule_inspection"
    SUBMIT_INSPECTION_REPORT = "submit_inspection_report"
    APPROVE_INSPECTION = "approve_inspection"
    REJECT_INSPECTION = "reject_inspection"
    RAISE_OBJECTION = "raise_objection"
    CONFIRM_PAYMENT = "confirm_payment"
    FAIL_PAYMENT = "fail_payment"
    APPROVE_CANCELLATION = "approve_cancellation"
    REVOKE_CERTIFICATE = "revoke_certificate"
    SUPERSEDE = "supersede"


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    PROPERTY_OWNER = "property_owner"
    DEALING_ASSISTANT = "dealing_assistant"
    DISTRICT_TOURISM_OFFICER = "district_tourism_officer"
    STATE_OFFICER = "state_officer"


class ApplicationKind(str, enum.Enum):
    NEW_REGISTRATION = "new_registration"
    ADD_ROOMS = "add_rooms"
    DELETE_ROOMS = "delete_rooms"
    CHANGE_CATEGORY = "change_category"
    CANCEL_CERTIFICATE = "cancel_certificate"


class PropertyCategory(str, enum.Enum):
    DIAMOND = "diamond"
    GOLD = "gold"
    SILVER = "silver"


class OwnerGender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class DocumentType(str, enum.Enum):
    REVENUE_PAPERS = "revenue_papers"
    AFFIDAVIT_SECTION_29 = "affidavit_section_29"
    UNDERTAKING_FORM_C = "undertaking_form_c"
    REGISTER_FOR_VERIFICATION = "register_for_verification"
    BILL_BOOK = "bill_book"
    PROPERTY_PHOTO = "property_photo"
    COMMERCIAL_ELECTRICITY_BILL = "commercial_electricity_bill"
    COMMERCIAL_WATER_BILL = "commercial_water_bill"
    FIRE_SAFETY_NOC = "fire_safety_noc"
    OTHER = "other"


class DocumentStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    NEEDS_CORRECTION = "needs_correction"
    REJECTED = "rejected"


class InspectionStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    ACKNOWLEDGED = "acknowledged"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InspectionRecommendation(str, enum.Enum):
    APPROVE = "approve"
    RAISE_OBJECTIONS = "raise_objections"
    REJECT = "reject"


class PaymentStatus(str, enum.Enum):
    INITIATED = "initiated"
    SUCCESS = "success"
    FAILED = "failed"


class PaymentPurpose(str, enum.Enum):
    REGISTRATION = "registration"
    UPGRADE = "upgrade"


class GrievanceType(str, enum.Enum):
    OWNER_GRIEVANCE = "owner_grievance"
    INTERNAL_TICKET = "internal_ticket"


class GrievanceCategory(str, enum.Enum):
    APPLICATION = "application"
    PAYMENT = "payment"
    PORTAL = "portal"
    OTHER = "other"


class GrievancePriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class GrievanceStatus(str, enum.Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"
