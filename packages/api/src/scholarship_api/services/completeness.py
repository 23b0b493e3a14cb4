# This project was developed with assistance from AI tools.
"""Submission completeness checking.

Collects every unmet requirement of an application before it may leave
``draft``. Checks never short-circuit: the student gets the full list in
one response. Document checks are presence only; verification status is
informational at this stage.
"""

import logging

from db import Application, Scholarship
from db.enums import DocumentType

from ..core.config import settings

logger = logging.getLogger(__name__)

# Human-readable labels for document types
_DOC_TYPE_LABELS: dict[DocumentType, str] = {
    DocumentType.ID_CARD: "National ID card",
    DocumentType.TRANSCRIPT: "Academic transcript",
    DocumentType.HOUSE_REGISTRATION: "House registration",
    DocumentType.INCOME_CERTIFICATE: "Income certificate",
    DocumentType.BANK_BOOK: "Bank book",
    DocumentType.RECOMMENDATION_LETTER: "Recommendation letter",
    DocumentType.PHOTO: "Photo",
    DocumentType.OTHER: "Other document",
}

_PERSONAL_FIELDS = (
    ("first_name_local", "First name"),
    ("last_name_local", "Last name"),
    ("email", "Email"),
)


def required_document_types(scholarship: Scholarship | None) -> list[DocumentType]:
    """Always-required types first, then the scholarship's extras, without repeats."""
    raw = list(settings.REQUIRED_DOCUMENT_TYPES)
    if scholarship is not None and scholarship.required_documents:
        raw.extend(scholarship.required_documents)

    required: list[DocumentType] = []
    for value in raw:
        try:
            doc_type = DocumentType(value)
        except ValueError:
            logger.warning("Ignoring unknown required document type %r", value)
            continue
        if doc_type not in required:
            required.append(doc_type)
    return required


def document_label(doc_type: DocumentType) -> str:
    return _DOC_TYPE_LABELS.get(doc_type, doc_type.value)


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def missing_requirements(
    application: Application,
    scholarship: Scholarship | None,
    *,
    terms_accepted: bool,
    declaration_accepted: bool,
) -> list[str]:
    """Return every reason the application cannot be submitted yet.

    An empty list means the application is complete. Section relationships
    must be loaded on ``application`` before calling.
    """
    errors: list[str] = []

    if not terms_accepted:
        errors.append("Terms and conditions must be accepted")
    if not declaration_accepted:
        errors.append("Declaration of truthfulness must be accepted")

    personal = application.personal_info
    if personal is None:
        errors.append("Personal information is required")
    else:
        for field, label in _PERSONAL_FIELDS:
            if _is_blank(getattr(personal, field)):
                errors.append(f"{label} is required")

    if not application.addresses:
        errors.append("At least one address is required")
    if not application.education_history:
        errors.append("Education history is required")
    if not application.family_members:
        errors.append("Family information is required")
    if application.financial_info is None:
        errors.append("Financial information is required")

    present = {doc.document_type for doc in application.documents or []}
    for doc_type in required_document_types(scholarship):
        if doc_type not in present:
            errors.append(f"{document_label(doc_type)} is required")

    return errors
