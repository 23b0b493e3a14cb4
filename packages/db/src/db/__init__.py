# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, DatabaseService, get_db, get_db_service, retry_read
from .enums import (
    AddressType,
    AllocationStatus,
    ApplicationStatus,
    BookingStatus,
    DisbursementMethod,
    DocumentType,
    FamilyRelationship,
    InterviewRecommendation,
    NotificationPriority,
    NotificationType,
    UserRole,
    VerificationStatus,
)
from .models import (
    Activity,
    Address,
    Allocation,
    Application,
    ApplicationDocument,
    Asset,
    AuditEvent,
    Budget,
    EducationRecord,
    FamilyMember,
    FinancialInfo,
    InterviewBooking,
    InterviewResult,
    InterviewSlot,
    Notification,
    PersonalInfo,
    Reference,
    Scholarship,
)

__all__ = [
    "Base",
    "DatabaseService",
    "get_db",
    "get_db_service",
    "retry_read",
    "__version__",
    # Enums
    "AddressType",
    "AllocationStatus",
    "ApplicationStatus",
    "BookingStatus",
    "DisbursementMethod",
    "DocumentType",
    "FamilyRelationship",
    "InterviewRecommendation",
    "NotificationPriority",
    "NotificationType",
    "UserRole",
    "VerificationStatus",
    # Models
    "Activity",
    "Address",
    "Allocation",
    "Application",
    "ApplicationDocument",
    "Asset",
    "AuditEvent",
    "Budget",
    "EducationRecord",
    "FamilyMember",
    "FinancialInfo",
    "InterviewBooking",
    "InterviewResult",
    "InterviewSlot",
    "Notification",
    "PersonalInfo",
    "Reference",
    "Scholarship",
]
