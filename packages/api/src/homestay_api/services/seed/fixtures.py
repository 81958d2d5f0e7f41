# This project was developed with assistance from AI tools.
"""
Demo fixture data for the HP Tourism homestay portal.

Fixtures are plain dicts so enums can be referenced directly. Keycloak user
IDs are deterministic UUIDs matching the demo realm, so seeded rows link
to the users who sign in.

Simulated for demonstration purposes -- not real owners or properties.
"""

import hashlib
import json
from datetime import UTC, datetime, timedelta

from homestay_db.enums import (
    ApplicationStatus,
    DocumentStatus,
    DocumentType,
    GrievanceCategory,
    GrievancePriority,
    GrievanceStatus,
    GrievanceType,
    InspectionStatus,
    OwnerGender,
    PropertyCategory,
    UserRole,
)

# ---------------------------------------------------------------------------
# Keycloak user references (deterministic UUIDs)
# ---------------------------------------------------------------------------

RAJESH_THAKUR_ID = "7b1e4c20-0a5d-4f3e-9c11-5a6b7c8d9e01"
ANITA_NEGI_ID = "7b1e4c20-0a5d-4f3e-9c11-5a6b7c8d9e02"
VIKRAM_CHAUHAN_ID = "7b1e4c20-0a5d-4f3e-9c11-5a6b7c8d9e03"
DA_SHIMLA_ID = "7b1e4c20-0a5d-4f3e-9c11-5a6b7c8d9e11"
DA_KULLU_ID = "7b1e4c20-0a5d-4f3e-9c11-5a6b7c8d9e12"
DTDO_SHIMLA_ID = "7b1e4c20-0a5d-4f3e-9c11-5a6b7c8d9e21"
DTDO_KULLU_ID = "7b1e4c20-0a5d-4f3e-9c11-5a6b7c8d9e22"
STATE_OFFICER_ID = "7b1e4c20-0a5d-4f3e-9c11-5a6b7c8d9e31"
ADMIN_ID = "7b1e4c20-0a5d-4f3e-9c11-5a6b7c8d9e41"


_NOW = datetime.now(UTC)


def _days_ago(n: int) -> datetime:
    return _NOW - timedelta(days=n)


def _days_from_now(n: int) -> datetime:
    return _NOW + timedelta(days=n)


# ---------------------------------------------------------------------------
# Portal users
# ---------------------------------------------------------------------------

USERS: list[dict] = [
    {
        "keycloak_user_id": RAJESH_THAKUR_ID,
        "full_name": "Rajesh Thakur",
        "email": "rajesh.thakur@example.com",
        "mobile": "9816012345",
        "aadhaar": "234567890123",
        "role": UserRole.PROPERTY_OWNER,
        "district": None,
    },
    {
        "keycloak_user_id": ANITA_NEGI_ID,
        "full_name": "Anita Negi",
        "email": "anita.negi@example.com",
        "mobile": "9418098765",
        "aadhaar": "345678901234",
        "role": UserRole.PROPERTY_OWNER,
        "district": None,
    },
    {
        "keycloak_user_id": VIKRAM_CHAUHAN_ID,
        "full_name": "Vikram Chauhan",
        "email": "vikram.chauhan@example.com",
        "mobile": "9805011223",
        "aadhaar": "456789012345",
        "role": UserRole.PROPERTY_OWNER,
        "district": None,
    },
    {
        "keycloak_user_id": DA_SHIMLA_ID,
        "full_name": "Sunita Verma",
        "email": "da.shimla@example.com",
        "mobile": "9816100001",
        "role": UserRole.DEALING_ASSISTANT,
        "district": "Shimla",
    },
    {
        "keycloak_user_id": DA_KULLU_ID,
        "full_name": "Deepak Sharma",
        "email": "da.kullu@example.com",
        "mobile": "9816100002",
        "role": UserRole.DEALING_ASSISTANT,
        "district": "Kullu",
    },
    {
        "keycloak_user_id": DTDO_SHIMLA_ID,
        "full_name": "Meera Kapoor",
        "email": "dtdo.shimla@example.com",
        "mobile": "9816200001",
        "role": UserRole.DISTRICT_TOURISM_OFFICER,
        "district": "Shimla",
    },
    {
        "keycloak_user_id": DTDO_KULLU_ID,
        "full_name": "Arjun Rana",
        "email": "dtdo.kullu@example.com",
        "mobile": "9816200002",
        "role": UserRole.DISTRICT_TOURISM_OFFICER,
        "district": "Kullu",
    },
    {
        "keycloak_user_id": STATE_OFFICER_ID,
        "full_name": "Kavita Sood",
        "email": "state.officer@example.com",
        "mobile": "9816300001",
        "role": UserRole.STATE_OFFICER,
        "district": None,
    },
    {
        "keycloak_user_id": ADMIN_ID,
        "full_name": "Portal Administrator",
        "email": "admin@example.com",
        "mobile": None,
        "role": UserRole.ADMIN,
        "district": None,
    },
]


_FULL_DOCUMENT_SET = [
    DocumentType.REVENUE_PAPERS,
    DocumentType.AFFIDAVIT_SECTION_29,
    DocumentType.UNDERTAKING_FORM_C,
    DocumentType.PROPERTY_PHOTO,
]


def _documents(status: DocumentStatus, *, flagged: DocumentType | None = None) -> list[dict]:
    docs = []
    for doc_type in _FULL_DOCUMENT_SET:
        if doc_type == flagged:
            docs.append(
                {
                    "doc_type": doc_type,
                    "status": DocumentStatus.NEEDS_CORRECTION,
                    "notes": "Scan is illegible; please upload a clearer copy.",
                }
            )
        else:
            docs.append({"doc_type": doc_type, "status": status})
    return docs


# ---------------------------------------------------------------------------
# Applications, one per interesting point in the workflow
# ---------------------------------------------------------------------------

APPLICATIONS: list[dict] = [
    {
        "ref": "pine_view",
        "owner_ref": RAJESH_THAKUR_ID,
        "property_name": "Pine View Homestay",
        "district": "Shimla",
        "tehsil": "Theog",
        "address": "Village Matiana, Theog, Shimla",
        "pincode": "171223",
        "category": PropertyCategory.GOLD,
        "total_rooms": 4,
        "owner_gender": OwnerGender.MALE,
        "status": ApplicationStatus.DRAFT,
        "documents": [{"doc_type": DocumentType.REVENUE_PAPERS, "status": DocumentStatus.PENDING}],
    },
    {
        "ref": "apple_orchard",
        "owner_ref": ANITA_NEGI_ID,
        "property_name": "Apple Orchard Cottage",
        "district": "Shimla",
        "tehsil": "Kotkhai",
        "address": "Ward 3, Kotkhai, Shimla",
        "pincode": "171202",
        "category": PropertyCategory.SILVER,
        "total_rooms": 2,
        "owner_gender": OwnerGender.FEMALE,
        "status": ApplicationStatus.SUBMITTED,
        "submitted_days_ago": 2,
        "documents": _documents(DocumentStatus.PENDING),
    },
    {
        "ref": "deodar_nest",
        "owner_ref": VIKRAM_CHAUHAN_ID,
        "property_name": "Deodar Nest",
        "district": "Shimla",
        "tehsil": "Mashobra",
        "address": "Near Craignano, Mashobra, Shimla",
        "pincode": "171007",
        "category": PropertyCategory.DIAMOND,
        "total_rooms": 6,
        "owner_gender": OwnerGender.MALE,
        "status": ApplicationStatus.REVERTED_TO_APPLICANT,
        "submitted_days_ago": 9,
        "revert_count": 1,
        "clarification_requested": "Revenue papers are not legible.",
        "da_ref": DA_SHIMLA_ID,
        "documents": _documents(DocumentStatus.VERIFIED, flagged=DocumentType.REVENUE_PAPERS),
    },
    {
        "ref": "river_song",
        "owner_ref": ANITA_NEGI_ID,
        "property_name": "River Song Homestay",
        "district": "Kullu",
        "tehsil": "Manali",
        "address": "Old Manali Road, Manali, Kullu",
        "pincode": "175131",
        "category": PropertyCategory.GOLD,
        "total_rooms": 5,
        "owner_gender": OwnerGender.FEMALE,
        "status": ApplicationStatus.FORWARDED_TO_DTDO,
        "submitted_days_ago": 12,
        "da_ref": DA_KULLU_ID,
        "da_remarks": "All documents verified. Recommended for inspection.",
        "documents": _documents(DocumentStatus.VERIFIED),
    },
    {
        "ref": "snow_peak",
        "owner_ref": RAJESH_THAKUR_ID,
        "property_name": "Snow Peak Retreat",
        "district": "Kullu",
        "tehsil": "Banjar",
        "address": "Jibhi, Banjar, Kullu",
        "pincode": "175123",
        "category": PropertyCategory.SILVER,
        "total_rooms": 3,
        "owner_gender": OwnerGender.MALE,
        "status": ApplicationStatus.INSPECTION_SCHEDULED,
        "submitted_days_ago": 20,
        "da_ref": DA_KULLU_ID,
        "dtdo_ref": DTDO_KULLU_ID,
        "documents": _documents(DocumentStatus.VERIFIED),
        "inspection": {
            "assigned_to": DA_KULLU_ID,
            "scheduled_by": DTDO_KULLU_ID,
            "inspection_date": _days_from_now(3),
            "status": InspectionStatus.SCHEDULED,
            "special_instructions": "Verify the number of guest rooms on the first floor.",
        },
    },
    {
        "ref": "valley_bloom",
        "owner_ref": VIKRAM_CHAUHAN_ID,
        "property_name": "Valley Bloom",
        "district": "Shimla",
        "tehsil": "Narkanda",
        "address": "NH-5, Narkanda, Shimla",
        "pincode": "171213",
        "category": PropertyCategory.SILVER,
        "total_rooms": 3,
        "owner_gender": OwnerGender.MALE,
        "status": ApplicationStatus.VERIFIED_FOR_PAYMENT,
        "submitted_days_ago": 30,
        "da_ref": DA_SHIMLA_ID,
        "dtdo_ref": DTDO_SHIMLA_ID,
        "documents": _documents(DocumentStatus.VERIFIED),
        "inspection_outcome": "recommended",
    },
    {
        "ref": "cedar_house",
        "owner_ref": ANITA_NEGI_ID,
        "property_name": "Cedar House",
        "district": "Shimla",
        "tehsil": "Shimla Urban",
        "address": "Jakhoo Road, Shimla",
        "pincode": "171001",
        "category": PropertyCategory.GOLD,
        "total_rooms": 4,
        "owner_gender": OwnerGender.FEMALE,
        "certificate_validity_years": 3,
        "status": ApplicationStatus.APPROVED,
        "submitted_days_ago": 60,
        "approved_days_ago": 35,
        "da_ref": DA_SHIMLA_ID,
        "dtdo_ref": DTDO_SHIMLA_ID,
        "documents": _documents(DocumentStatus.VERIFIED),
        "inspection_outcome": "recommended",
    },
    {
        "ref": "hilltop_haven",
        "owner_ref": RAJESH_THAKUR_ID,
        "property_name": "Hilltop Haven",
        "district": "Kullu",
        "tehsil": "Kullu",
        "address": "Dhalpur, Kullu",
        "pincode": "175101",
        "category": PropertyCategory.SILVER,
        "total_rooms": 2,
        "owner_gender": OwnerGender.MALE,
        "status": ApplicationStatus.REJECTED,
        "submitted_days_ago": 45,
        "revert_count": 2,
        "da_ref": DA_KULLU_ID,
        "rejection_reason": (
            "APPLICATION AUTO-REJECTED: Application was sent back twice. "
            "Original reason: Fire safety NOC missing."
        ),
        "documents": _documents(DocumentStatus.VERIFIED),
    },
]


GRIEVANCES: list[dict] = [
    {
        "ticket_number": "GRV-2026-DEMO01",
        "ticket_type": GrievanceType.OWNER_GRIEVANCE,
        "user_ref": VIKRAM_CHAUHAN_ID,
        "application_ref": "valley_bloom",
        "category": GrievanceCategory.PAYMENT,
        "priority": GrievancePriority.HIGH,
        "status": GrievanceStatus.OPEN,
        "subject": "Payment page times out",
        "description": "The payment gateway page times out before I can complete the fee payment.",
        "comments": [
            {
                "user_ref": DTDO_SHIMLA_ID,
                "comment": "We are checking with the treasury gateway team.",
                "is_internal": False,
            },
            {
                "user_ref": DTDO_SHIMLA_ID,
                "comment": "Gateway logs show the callback URL was misconfigured.",
                "is_internal": True,
            },
        ],
    },
    {
        "ticket_number": "INT-2026-DEMO02",
        "ticket_type": GrievanceType.INTERNAL_TICKET,
        "user_ref": DA_KULLU_ID,
        "application_ref": None,
        "category": GrievanceCategory.PORTAL,
        "priority": GrievancePriority.LOW,
        "status": GrievanceStatus.RESOLVED,
        "subject": "Document viewer slow on district network",
        "description": "Large PDFs take over a minute to open in the scrutiny screen.",
        "resolution_notes": "Upload size limit lowered and viewer caching enabled.",
        "comments": [],
    },
]


def compute_config_hash() -> str:
    """Compute a SHA-256 hash of the fixture data for idempotency checks."""
    content = json.dumps(
        {
            "user_ids": [u["keycloak_user_id"] for u in USERS],
            "applications": [a["ref"] for a in APPLICATIONS],
            "statuses": [a["status"].value for a in APPLICATIONS],
            "grievances": [g["ticket_number"] for g in GRIEVANCES],
        },
        sort_keys=True,
    )
    return hashlib.sha256(content.encode()).hexdigest()
