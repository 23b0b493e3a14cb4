# This project was developed with assistance from AI tools.
"""
Scholarship administration -- domain models

Scholarships with their yearly budgets, student applications with their
section records and documents, fund allocations, notifications, and the
audit trail. Interview slots carry their own seat counters.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import relationship

from .database import Base
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
    VerificationStatus,
)


def _stored_in(statuses) -> str:
    """SQL list of enum members as the non-native Enum columns persist them (by name)."""
    return ", ".join(f"'{s.name}'" for s in sorted(statuses, key=lambda s: s.name))


_OPEN_STATUS_SQL = _stored_in(ApplicationStatus.open_statuses())
_ACTIVE_BOOKING_SQL = _stored_in(BookingStatus.active_statuses())


class Scholarship(Base):
    """Scholarship offering with its applicant quota."""

    __tablename__ = "scholarships"
    __table_args__ = (
        CheckConstraint(
            "available_quota >= 0 AND available_quota <= total_quota",
            name="ck_scholarship_quota_bounds",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    scholarship_type = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    total_quota = Column(Integer, nullable=False)
    available_quota = Column(Integer, nullable=False)
    application_start_date = Column(DateTime(timezone=True), nullable=False)
    application_end_date = Column(DateTime(timezone=True), nullable=False)
    eligibility_criteria = Column(JSON, nullable=True)
    required_documents = Column(JSON, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    budgets = relationship(
        "Budget", back_populates="scholarship", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Scholarship(id={self.id}, quota={self.available_quota}/{self.total_quota})>"


class Budget(Base):
    """Yearly funding ceiling for a scholarship.

    remaining_budget is stored for reporting but always rewritten in the same
    UPDATE that changes allocated_budget.
    """

    __tablename__ = "scholarship_budgets"
    __table_args__ = (
        UniqueConstraint("scholarship_id", "budget_year", name="uq_budget_scholarship_year"),
        CheckConstraint(
            "allocated_budget >= 0 AND allocated_budget <= total_budget",
            name="ck_budget_allocation_bounds",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    scholarship_id = Column(
        Integer, ForeignKey("scholarships.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    budget_year = Column(Integer, nullable=False)
    total_budget = Column(Numeric(14, 2), nullable=False)
    allocated_budget = Column(Numeric(14, 2), nullable=False, default=0)
    remaining_budget = Column(Numeric(14, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    scholarship = relationship("Scholarship", back_populates="budgets")

    def __repr__(self):
        return (
            f"<Budget(scholarship_id={self.scholarship_id}, year={self.budget_year}, "
            f"allocated={self.allocated_budget}/{self.total_budget})>"
        )


class Application(Base):
    """Scholarship application submitted by a student."""

    __tablename__ = "scholarship_applications"
    __table_args__ = (
        # One open application per (student, scholarship); closed ones may repeat.
        Index(
            "uq_open_application_per_student",
            "student_id",
            "scholarship_id",
            unique=True,
            postgresql_where=text(f"status IN ({_OPEN_STATUS_SQL})"),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(String(255), nullable=False, index=True)
    scholarship_id = Column(
        Integer, ForeignKey("scholarships.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    status = Column(
        Enum(ApplicationStatus, name="application_status", native_enum=False),
        nullable=False,
        default=ApplicationStatus.DRAFT,
    )
    application_data = Column(JSON, nullable=True)
    reference_number = Column(String(50), nullable=True, unique=True)
    terms_accepted = Column(Boolean, nullable=False, default=False)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    review_notes = Column(Text, nullable=True)
    reviewer_id = Column(String(255), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    scholarship = relationship("Scholarship")
    personal_info = relationship(
        "PersonalInfo", back_populates="application", uselist=False,
        cascade="all, delete-orphan",
    )
    addresses = relationship(
        "Address", back_populates="application", cascade="all, delete-orphan",
    )
    education_history = relationship(
        "EducationRecord", back_populates="application", cascade="all, delete-orphan",
    )
    family_members = relationship(
        "FamilyMember", back_populates="application", cascade="all, delete-orphan",
    )
    financial_info = relationship(
        "FinancialInfo", back_populates="application", uselist=False,
        cascade="all, delete-orphan",
    )
    assets = relationship(
        "Asset", back_populates="application", cascade="all, delete-orphan",
    )
    activities = relationship(
        "Activity", back_populates="application", cascade="all, delete-orphan",
    )
    references = relationship(
        "Reference", back_populates="application", cascade="all, delete-orphan",
    )
    documents = relationship(
        "ApplicationDocument", back_populates="application", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Application(id={self.id}, status='{self.status}')>"


# ---------------------------------------------------------------------------
# Application sections
# ---------------------------------------------------------------------------


class PersonalInfo(Base):
    """Applicant personal details (one per application)."""

    __tablename__ = "application_personal_info"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("scholarship_applications.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    prefix = Column(String(20), nullable=True)
    first_name_local = Column(String(100), nullable=True)
    last_name_local = Column(String(100), nullable=True)
    first_name_en = Column(String(100), nullable=True)
    last_name_en = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    date_of_birth = Column(DateTime(timezone=True), nullable=True)
    faculty = Column(String(100), nullable=True)
    department = Column(String(100), nullable=True)
    year_level = Column(Integer, nullable=True)
    gpa = Column(Numeric(3, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    application = relationship("Application", back_populates="personal_info")


class Address(Base):
    __tablename__ = "application_addresses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("scholarship_applications.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    address_type = Column(
        Enum(AddressType, name="address_type", native_enum=False),
        nullable=False,
        default=AddressType.PERMANENT,
    )
    address_line = Column(Text, nullable=False)
    subdistrict = Column(String(100), nullable=True)
    district = Column(String(100), nullable=True)
    province = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)

    application = relationship("Application", back_populates="addresses")


class EducationRecord(Base):
    __tablename__ = "application_education"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("scholarship_applications.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    education_level = Column(String(100), nullable=False)
    school_name = Column(String(255), nullable=False)
    gpa = Column(Numeric(3, 2), nullable=True)
    graduation_year = Column(Integer, nullable=True)

    application = relationship("Application", back_populates="education_history")


class FamilyMember(Base):
    """Parent, guardian or sibling of the applicant."""

    __tablename__ = "application_family_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("scholarship_applications.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    relationship_type = Column(
        Enum(FamilyRelationship, name="family_relationship", native_enum=False),
        nullable=False,
    )
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    occupation = Column(String(255), nullable=True)
    monthly_income = Column(Numeric(12, 2), nullable=True)
    is_alive = Column(Boolean, nullable=False, default=True)

    application = relationship("Application", back_populates="family_members")


class FinancialInfo(Base):
    __tablename__ = "application_financial_info"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("scholarship_applications.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    family_income = Column(Numeric(12, 2), nullable=True)
    monthly_allowance = Column(Numeric(12, 2), nullable=True)
    monthly_expenses = Column(Numeric(12, 2), nullable=True)
    debts = Column(Numeric(12, 2), nullable=True)
    siblings_count = Column(Integer, nullable=True)
    has_student_loan = Column(Boolean, nullable=False, default=False)

    application = relationship("Application", back_populates="financial_info")


class Asset(Base):
    __tablename__ = "application_assets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("scholarship_applications.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    asset_type = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    estimated_value = Column(Numeric(14, 2), nullable=True)

    application = relationship("Application", back_populates="assets")


class Activity(Base):
    __tablename__ = "application_activities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("scholarship_applications.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    activity_name = Column(String(255), nullable=False)
    role = Column(String(100), nullable=True)
    hours = Column(Float, nullable=True)
    year = Column(Integer, nullable=True)

    application = relationship("Application", back_populates="activities")


class Reference(Base):
    __tablename__ = "application_references"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("scholarship_applications.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    name = Column(String(255), nullable=False)
    position = Column(String(255), nullable=True)
    organization = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)

    application = relationship("Application", back_populates="references")


class ApplicationDocument(Base):
    """Metadata for a document uploaded against an application.

    File bytes live in external storage; only presence and verification
    status matter to the lifecycle.
    """

    __tablename__ = "application_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("scholarship_applications.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    document_type = Column(
        Enum(DocumentType, name="document_type", native_enum=False),
        nullable=False,
    )
    file_path = Column(String(500), nullable=True)
    verification_status = Column(
        Enum(VerificationStatus, name="verification_status", native_enum=False),
        nullable=False,
        default=VerificationStatus.PENDING,
    )
    verified_by = Column(String(255), nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    uploaded_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("Application", back_populates="documents")

    def __repr__(self):
        return f"<ApplicationDocument(id={self.id}, type='{self.document_type}')>"


# ---------------------------------------------------------------------------
# Allocation
# ---------------------------------------------------------------------------


class Allocation(Base):
    """Funds committed to one approved application."""

    __tablename__ = "scholarship_allocations"
    __table_args__ = (
        CheckConstraint("allocated_amount > 0", name="ck_allocation_amount_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("scholarship_applications.id", ondelete="RESTRICT"),
        nullable=False, unique=True,
    )
    scholarship_id = Column(
        Integer, ForeignKey("scholarships.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    budget_year = Column(Integer, nullable=False)
    allocated_amount = Column(Numeric(12, 2), nullable=False)
    allocation_status = Column(
        Enum(AllocationStatus, name="allocation_status", native_enum=False),
        nullable=False,
        default=AllocationStatus.PENDING,
    )
    allocation_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    disbursement_method = Column(
        Enum(DisbursementMethod, name="disbursement_method", native_enum=False),
        nullable=True,
    )
    bank_account = Column(String(50), nullable=True)
    bank_name = Column(String(255), nullable=True)
    transfer_date = Column(DateTime(timezone=True), nullable=True)
    transfer_reference = Column(String(255), nullable=True)
    allocated_by = Column(String(255), nullable=False)
    approved_by = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    application = relationship("Application")
    scholarship = relationship("Scholarship")

    def __repr__(self):
        return f"<Allocation(id={self.id}, status='{self.allocation_status}')>"


# ---------------------------------------------------------------------------
# Interviews
# ---------------------------------------------------------------------------


class InterviewSlot(Base):
    """A bookable interview time with a fixed number of seats."""

    __tablename__ = "interview_slots"
    __table_args__ = (
        CheckConstraint("max_capacity > 0", name="ck_slot_capacity_positive"),
        CheckConstraint(
            "current_bookings >= 0 AND current_bookings <= max_capacity",
            name="ck_slot_bookings_within_capacity",
        ),
        CheckConstraint("end_time > start_time", name="ck_slot_time_order"),
        Index("ix_slot_interviewer_date", "interviewer_id", "interview_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    scholarship_id = Column(
        Integer, ForeignKey("scholarships.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    interviewer_id = Column(String(255), nullable=False)
    interview_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    location = Column(String(255), nullable=True)
    max_capacity = Column(Integer, nullable=False, default=1)
    current_bookings = Column(Integer, nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True)
    notes = Column(Text, nullable=True)
    created_by = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    scholarship = relationship("Scholarship")

    def __repr__(self):
        return (
            f"<InterviewSlot(id={self.id}, date={self.interview_date}, "
            f"booked={self.current_bookings}/{self.max_capacity})>"
        )


class InterviewBooking(Base):
    """A student's seat in an interview slot."""

    __tablename__ = "interview_bookings"
    __table_args__ = (
        # One booked-or-confirmed interview per application; history may repeat.
        Index(
            "uq_active_booking_per_application",
            "application_id",
            unique=True,
            postgresql_where=text(f"booking_status IN ({_ACTIVE_BOOKING_SQL})"),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    slot_id = Column(
        Integer, ForeignKey("interview_slots.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    application_id = Column(
        Integer, ForeignKey("scholarship_applications.id", ondelete="RESTRICT"),
        nullable=False, index=True,
    )
    student_id = Column(String(255), nullable=False, index=True)
    booking_status = Column(
        Enum(BookingStatus, name="booking_status", native_enum=False),
        nullable=False,
        default=BookingStatus.BOOKED,
    )
    booked_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    rescheduled_from_slot_id = Column(Integer, nullable=True)
    student_notes = Column(Text, nullable=True)
    officer_notes = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    slot = relationship("InterviewSlot")
    application = relationship("Application")
    result = relationship("InterviewResult", back_populates="booking", uselist=False)

    def __repr__(self):
        return f"<InterviewBooking(id={self.id}, slot={self.slot_id}, status='{self.booking_status}')>"


class InterviewResult(Base):
    """Interviewer's assessment of a completed booking."""

    __tablename__ = "interview_results"
    __table_args__ = (
        CheckConstraint(
            "overall_score IS NULL OR (overall_score >= 0 AND overall_score <= 100)",
            name="ck_interview_score_range",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(
        Integer, ForeignKey("interview_bookings.id", ondelete="RESTRICT"),
        nullable=False, unique=True,
    )
    interviewer_id = Column(String(255), nullable=False)
    overall_score = Column(Numeric(5, 2), nullable=True)
    recommendation = Column(
        Enum(InterviewRecommendation, name="interview_recommendation", native_enum=False),
        nullable=False,
    )
    comments = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    booking = relationship("InterviewBooking", back_populates="result")

    def __repr__(self):
        return f"<InterviewResult(booking={self.booking_id}, recommendation='{self.recommendation}')>"


# ---------------------------------------------------------------------------
# Notifications and audit
# ---------------------------------------------------------------------------


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, index=True)
    notification_type = Column(
        Enum(NotificationType, name="notification_type", native_enum=False),
        nullable=False,
    )
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    reference_id = Column(String(100), nullable=True)
    reference_type = Column(String(50), nullable=True)
    priority = Column(
        Enum(NotificationPriority, name="notification_priority", native_enum=False),
        nullable=False,
        default=NotificationPriority.NORMAL,
    )
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Notification(id={self.id}, user='{self.user_id}', type='{self.notification_type}')>"


class AuditEvent(Base):
    """Append-only workflow trail. INSERT + SELECT only -- no UPDATE or DELETE."""

    __tablename__ = "audit_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    user_id = Column(String(255), nullable=True)
    user_role = Column(String(50), nullable=True)
    event_type = Column(String(100), nullable=False, index=True)
    application_id = Column(Integer, nullable=True, index=True)
    allocation_id = Column(Integer, nullable=True, index=True)
    event_data = Column(JSON, nullable=True)

    def __repr__(self):
        return f"<AuditEvent(id={self.id}, type='{self.event_type}')>"
