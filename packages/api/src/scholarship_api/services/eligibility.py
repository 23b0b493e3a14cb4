# This project was developed with assistance from AI tools.
"""Eligibility evaluation against a scholarship's criteria.

Pure functions, no I/O. Scholarship criteria are stored as a JSON object;
``parse_criteria`` turns the known keys into typed criteria and ignores the
rest. Each unmet criterion marks the student ineligible and deducts its
weight from a starting score of 100. A criterion whose student datum is
absent is reported as missing and does not fail eligibility.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from ..core.errors import ValidationError

STARTING_SCORE = 100.0


@dataclass(frozen=True)
class Criterion(ABC):
    """Base for typed eligibility criteria."""

    key = ""
    student_field = ""
    label = ""
    weight = 0.0

    @abstractmethod
    def required(self) -> Any:
        """The threshold as reported in criterion results."""

    @abstractmethod
    def passes(self, actual: Any) -> bool:
        """Whether the student datum satisfies the criterion."""


@dataclass(frozen=True)
class MinGPA(Criterion):
    value: float

    key = "min_gpa"
    student_field = "gpa"
    label = "GPA"
    weight = 20.0

    def required(self) -> float:
        return self.value

    def passes(self, actual: float) -> bool:
        return actual >= self.value


@dataclass(frozen=True)
class MaxIncome(Criterion):
    value: Decimal

    key = "max_family_income"
    student_field = "family_income"
    label = "family income"
    weight = 30.0

    def required(self) -> str:
        return str(self.value)

    def passes(self, actual: Decimal) -> bool:
        return actual <= self.value


@dataclass(frozen=True)
class AllowedFaculties(Criterion):
    values: frozenset[str]

    key = "allowed_faculties"
    student_field = "faculty"
    label = "faculty"
    weight = 25.0

    def required(self) -> list[str]:
        return sorted(self.values)

    def passes(self, actual: str) -> bool:
        return actual in self.values


@dataclass(frozen=True)
class MinYearLevel(Criterion):
    value: int

    key = "min_year_level"
    student_field = "year_level"
    label = "year level"
    weight = 15.0

    def required(self) -> int:
        return self.value

    def passes(self, actual: int) -> bool:
        return actual >= self.value


# Evaluation order is fixed so results are reproducible.
_CRITERION_ORDER = (MinGPA, MaxIncome, AllowedFaculties, MinYearLevel)


@dataclass(frozen=True)
class CriterionResult:
    criterion: str
    required: Any
    actual: Any
    passed: bool


@dataclass(frozen=True)
class EligibilityResult:
    is_eligible: bool
    score: float
    criteria_results: tuple[CriterionResult, ...] = field(default_factory=tuple)
    missing_fields: tuple[str, ...] = field(default_factory=tuple)


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, float):
        value = repr(value)
    return Decimal(str(value))


def _coerce(criterion_cls: type[Criterion], raw: Any) -> Any:
    """Normalize a raw criterion or student value to the criterion's type."""
    if criterion_cls is MinGPA:
        return float(raw)
    if criterion_cls is MaxIncome:
        return _to_decimal(raw)
    if criterion_cls is AllowedFaculties:
        return str(raw)
    return int(raw)


def parse_criteria(raw: dict | None) -> list[Criterion]:
    """Build typed criteria from a scholarship's JSON criteria object.

    Raises ValidationError listing every malformed criterion value.
    """
    if not raw:
        return []

    criteria: list[Criterion] = []
    errors: list[str] = []
    for criterion_cls in _CRITERION_ORDER:
        if raw.get(criterion_cls.key) is None:
            continue
        value = raw[criterion_cls.key]
        try:
            if criterion_cls is AllowedFaculties:
                if isinstance(value, str) or not hasattr(value, "__iter__"):
                    raise TypeError(value)
                criteria.append(AllowedFaculties(frozenset(str(v) for v in value)))
            else:
                criteria.append(criterion_cls(_coerce(criterion_cls, value)))
        except (TypeError, ValueError, InvalidOperation):
            errors.append(f"Criterion '{criterion_cls.key}' has an invalid value")
    if errors:
        raise ValidationError("Invalid eligibility criteria", errors)
    return criteria


def evaluate(criteria: list[Criterion], student_data: dict) -> EligibilityResult:
    """Evaluate declared student attributes against typed criteria.

    Raises ValidationError listing every student value that cannot be read
    as the type its criterion expects.
    """
    is_eligible = True
    score = STARTING_SCORE
    results: list[CriterionResult] = []
    missing: list[str] = []
    errors: list[str] = []

    for criterion in criteria:
        raw = student_data.get(criterion.student_field)
        if raw is None or raw == "":
            missing.append(criterion.label)
            continue
        try:
            actual = _coerce(type(criterion), raw)
        except (TypeError, ValueError, InvalidOperation):
            errors.append(f"'{criterion.student_field}' has an invalid value")
            continue

        passed = criterion.passes(actual)
        if not passed:
            is_eligible = False
            score -= criterion.weight
        results.append(
            CriterionResult(
                criterion=criterion.key,
                required=criterion.required(),
                actual=str(actual) if isinstance(actual, Decimal) else actual,
                passed=passed,
            )
        )

    if errors:
        raise ValidationError("Invalid student data", errors)

    return EligibilityResult(
        is_eligible=is_eligible,
        score=max(score, 0.0),
        criteria_results=tuple(results),
        missing_fields=tuple(missing),
    )
