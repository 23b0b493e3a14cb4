# This project was developed with assistance from AI tools.
"""
Domain enums for the scholarship application lifecycle.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class ApplicationStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    DOCUMENT_PENDING = "document_pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"

    @classmethod
    def open_statuses(cls) -> frozenset["ApplicationStatus"]:
        """Statuses that block a second application for the same scholarship."""
        return frozenset(
            {cls.DRAFT, cls.SUBMITTED, cls.UNDER_REVIEW, cls.INTERVIEW_SCHEDULED}
        )

    @classmethod
    def review_targets(cls) -> frozenset["ApplicationStatus"]:
        """Statuses a reviewer may set through the review operation."""
        return frozenset(
            {
                cls.UNDER_REVIEW,
                cls.INTERVIEW_SCHEDULED,
                cls.APPROVED,
                cls.REJECTED,
            }
        )

    @classmethod
    def valid_transitions(cls) -> dict["ApplicationStatus", frozenset["ApplicationStatus"]]:
        """Allowed status transitions in the application lifecycle."""
        in_review = cls.review_targets()
        return {
            cls.DRAFT: frozenset({cls.SUBMITTED}),
            cls.SUBMITTED: in_review,
            cls.UNDER_REVIEW: in_review,
            cls.INTERVIEW_SCHEDULED: in_review,
            # Kept for stored records; no operation enters or leaves it.
            cls.DOCUMENT_PENDING: frozenset(),
            cls.APPROVED: frozenset({cls.COMPLETED}),
            cls.REJECTED: frozenset(),
            cls.COMPLETED: frozenset(),
        }


class AllocationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DISBURSED = "disbursed"


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    OFFICER = "officer"
    STUDENT = "student"

    @classmethod
    def staff_roles(cls) -> frozenset["UserRole"]:
        return frozenset({cls.ADMIN, cls.OFFICER})


class DocumentType(str, enum.Enum):
    ID_CARD = "id_card"
    TRANSCRIPT = "transcript"
    HOUSE_REGISTRATION = "house_registration"
    INCOME_CERTIFICATE = "income_certificate"
    BANK_BOOK = "bank_book"
    RECOMMENDATION_LETTER = "recommendation_letter"
    PHOTO = "photo"
    OTHER = "other"


class VerificationStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class DisbursementMethod(str, enum.Enum):
    BANK_TRANSFER = "bank_transfer"
    CHEQUE = "cheque"
    CASH = "cash"


class BookingStatus(str, enum.Enum):
    BOOKED = "booked"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    @classmethod
    def active_statuses(cls) -> frozenset["BookingStatus"]:
        """Statuses that hold a seat and block a second booking for the application."""
        return frozenset({cls.BOOKED, cls.CONFIRMED})


class InterviewRecommendation(str, enum.Enum):
    HIGHLY_RECOMMENDED = "highly_recommended"
    RECOMMENDED = "recommended"
    CONDITIONAL = "conditional"
    NOT_RECOMMENDED = "not_recommended"


class AddressType(str, enum.Enum):
    PERMANENT = "permanent"
    CURRENT = "current"
    WORK = "work"


class FamilyRelationship(str, enum.Enum):
    FATHER = "father"
    MOTHER = "mother"
    GUARDIAN = "guardian"
    SIBLING = "sibling"
    SPOUSE = "spouse"
    OTHER = "other"


class NotificationType(str, enum.Enum):
    APPLICATION_SUBMITTED = "application_submitted"
    APPLICATION_REVIEWED = "application_reviewed"
    APPLICATION_APPROVED = "application_approved"
    APPLICATION_REJECTED = "application_rejected"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEW_BOOKED = "interview_booked"
    INTERVIEW_CANCELLED = "interview_cancelled"
    ALLOCATION_CREATED = "allocation_created"
    ALLOCATION_DISBURSED = "allocation_disbursed"
    DOCUMENT_VERIFIED = "document_verified"
    ANNOUNCEMENT = "announcement"


class NotificationPriority(str, enum.Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
