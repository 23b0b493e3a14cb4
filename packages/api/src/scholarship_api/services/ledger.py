# This project was developed with assistance from AI tools.
"""Quota, budget and interview seat ledgers.

The only code allowed to write ``Scholarship.available_quota``,
``Budget.allocated_budget`` / ``Budget.remaining_budget`` and
``InterviewSlot.current_bookings``. Every mutation is a single conditional
UPDATE whose WHERE clause carries the invariant, so two concurrent
reservations can never both act on a stale snapshot: the database
serializes them on the row lock and the loser matches zero rows.

Ledgers never commit. The caller owns the transaction so a reservation can
be rolled back together with the rest of its unit of work.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from db import Budget, InterviewSlot, Scholarship
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import (
    BudgetExceededError,
    ConflictError,
    NotFoundError,
    QuotaExhaustedError,
    SlotFullError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


def to_money(amount) -> Decimal:
    """Quantize a currency amount to cents. Rejects non-positive values."""
    try:
        value = Decimal(str(amount)).quantize(_CENTS, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError("Invalid amount", [f"'{amount}' is not a valid amount"]) from exc
    if value <= 0:
        raise ValidationError("Invalid amount", ["Amount must be greater than zero"])
    return value


@dataclass(frozen=True)
class QuotaSnapshot:
    scholarship_id: int
    total_quota: int
    available_quota: int


@dataclass(frozen=True)
class BudgetSnapshot:
    scholarship_id: int
    budget_year: int
    total_budget: Decimal
    allocated_budget: Decimal
    remaining_budget: Decimal

    @property
    def utilization_rate(self) -> float:
        """Allocated share of the budget as a percentage; 0 for an empty budget."""
        if not self.total_budget:
            return 0.0
        return round(float(self.allocated_budget / self.total_budget * 100), 2)


class QuotaLedger:
    """Applicant quota of a scholarship, counted down one unit per allocation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def snapshot(self, scholarship_id: int) -> QuotaSnapshot:
        result = await self.session.execute(
            select(Scholarship.total_quota, Scholarship.available_quota).where(
                Scholarship.id == scholarship_id
            )
        )
        row = result.one_or_none()
        if row is None:
            raise NotFoundError("Scholarship not found")
        return QuotaSnapshot(scholarship_id, row.total_quota, row.available_quota)

    async def reserve(self, scholarship_id: int) -> int:
        """Take one unit of quota. Returns the quota left afterwards.

        Raises QuotaExhaustedError when no unit is left.
        """
        result = await self.session.execute(
            update(Scholarship)
            .where(Scholarship.id == scholarship_id, Scholarship.available_quota > 0)
            .values(available_quota=Scholarship.available_quota - 1)
            .returning(Scholarship.available_quota)
        )
        remaining = result.scalar_one_or_none()
        if remaining is None:
            await self.snapshot(scholarship_id)  # NotFoundError when missing
            logger.info("Quota exhausted for scholarship %s", scholarship_id)
            raise QuotaExhaustedError("No quota remaining for this scholarship")

        logger.info("Reserved quota on scholarship %s (%s left)", scholarship_id, remaining)
        return remaining

    async def release(self, scholarship_id: int) -> int:
        """Return one unit of quota. Never lifts available_quota above total_quota."""
        result = await self.session.execute(
            update(Scholarship)
            .where(
                Scholarship.id == scholarship_id,
                Scholarship.available_quota < Scholarship.total_quota,
            )
            .values(available_quota=Scholarship.available_quota + 1)
            .returning(Scholarship.available_quota)
        )
        remaining = result.scalar_one_or_none()
        if remaining is None:
            await self.snapshot(scholarship_id)
            raise ConflictError("Scholarship quota is already fully available")

        logger.info("Released quota on scholarship %s (%s left)", scholarship_id, remaining)
        return remaining


class BudgetLedger:
    """Budget of one scholarship for one budget year."""

    def __init__(self, session: AsyncSession, scholarship_id: int, budget_year: int):
        self.session = session
        self.scholarship_id = scholarship_id
        self.budget_year = budget_year

    def _scope(self):
        return (
            Budget.scholarship_id == self.scholarship_id,
            Budget.budget_year == self.budget_year,
        )

    def _to_snapshot(self, row) -> BudgetSnapshot:
        return BudgetSnapshot(
            scholarship_id=self.scholarship_id,
            budget_year=self.budget_year,
            total_budget=row.total_budget,
            allocated_budget=row.allocated_budget,
            remaining_budget=row.remaining_budget,
        )

    async def snapshot(self) -> BudgetSnapshot:
        result = await self.session.execute(
            select(
                Budget.total_budget, Budget.allocated_budget, Budget.remaining_budget
            ).where(*self._scope())
        )
        row = result.one_or_none()
        if row is None:
            raise NotFoundError("No budget defined for this scholarship and year")
        return self._to_snapshot(row)

    async def reserve(self, amount) -> BudgetSnapshot:
        """Add ``amount`` to the allocated budget if it still fits.

        Raises BudgetExceededError and leaves the row untouched otherwise.
        """
        amount = to_money(amount)
        new_allocated = Budget.allocated_budget + amount
        result = await self.session.execute(
            update(Budget)
            .where(*self._scope(), new_allocated <= Budget.total_budget)
            .values(
                allocated_budget=new_allocated,
                remaining_budget=Budget.total_budget - new_allocated,
            )
            .returning(Budget.total_budget, Budget.allocated_budget, Budget.remaining_budget)
        )
        row = result.one_or_none()
        if row is None:
            current = await self.snapshot()
            logger.info(
                "Budget exceeded: scholarship=%s year=%s requested=%s remaining=%s",
                self.scholarship_id,
                self.budget_year,
                amount,
                current.remaining_budget,
            )
            raise BudgetExceededError("Allocation exceeds the remaining scholarship budget")

        logger.info(
            "Reserved %s on scholarship %s budget %s",
            amount,
            self.scholarship_id,
            self.budget_year,
        )
        return self._to_snapshot(row)

    async def release(self, amount) -> BudgetSnapshot:
        """Give ``amount`` back. Never drives allocated_budget below zero."""
        amount = to_money(amount)
        new_allocated = Budget.allocated_budget - amount
        result = await self.session.execute(
            update(Budget)
            .where(*self._scope(), Budget.allocated_budget >= amount)
            .values(
                allocated_budget=new_allocated,
                remaining_budget=Budget.total_budget - new_allocated,
            )
            .returning(Budget.total_budget, Budget.allocated_budget, Budget.remaining_budget)
        )
        row = result.one_or_none()
        if row is None:
            await self.snapshot()
            raise ConflictError("Release exceeds the allocated budget")
        return self._to_snapshot(row)


@dataclass(frozen=True)
class SlotSnapshot:
    slot_id: int
    max_capacity: int
    current_bookings: int
    is_available: bool

    @property
    def seats_left(self) -> int:
        return self.max_capacity - self.current_bookings


class SlotLedger:
    """Seats of interview slots, counted up one per active booking."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def snapshot(self, slot_id: int) -> SlotSnapshot:
        result = await self.session.execute(
            select(
                InterviewSlot.max_capacity,
                InterviewSlot.current_bookings,
                InterviewSlot.is_available,
            ).where(InterviewSlot.id == slot_id)
        )
        row = result.one_or_none()
        if row is None:
            raise NotFoundError("Interview slot not found")
        return SlotSnapshot(slot_id, row.max_capacity, row.current_bookings, row.is_available)

    async def reserve(self, slot_id: int) -> int:
        """Take one seat. Returns the number of seats booked afterwards.

        Raises SlotFullError when every seat is taken and ConflictError when
        the slot has been closed for booking.
        """
        result = await self.session.execute(
            update(InterviewSlot)
            .where(
                InterviewSlot.id == slot_id,
                InterviewSlot.is_available.is_(True),
                InterviewSlot.current_bookings < InterviewSlot.max_capacity,
            )
            .values(current_bookings=InterviewSlot.current_bookings + 1)
            .returning(InterviewSlot.current_bookings)
        )
        booked = result.scalar_one_or_none()
        if booked is None:
            current = await self.snapshot(slot_id)
            if not current.is_available:
                raise ConflictError("Interview slot is closed for booking")
            logger.info("Interview slot %s is full (%s seats)", slot_id, current.max_capacity)
            raise SlotFullError("Interview slot is fully booked")

        logger.info("Reserved seat on interview slot %s (%s booked)", slot_id, booked)
        return booked

    async def release(self, slot_id: int) -> int:
        """Give one seat back. Never drives current_bookings below zero."""
        result = await self.session.execute(
            update(InterviewSlot)
            .where(InterviewSlot.id == slot_id, InterviewSlot.current_bookings > 0)
            .values(current_bookings=InterviewSlot.current_bookings - 1)
            .returning(InterviewSlot.current_bookings)
        )
        booked = result.scalar_one_or_none()
        if booked is None:
            await self.snapshot(slot_id)
            raise ConflictError("Interview slot has no booked seats to release")

        logger.info("Released seat on interview slot %s (%s booked)", slot_id, booked)
        return booked
