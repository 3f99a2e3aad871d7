"""Bill status engine - due-date arithmetic, classification and bill list mutations"""

import logging
import math
import numbers
import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Union

from nudgepal.domain.exceptions import NotFoundError, ValidationError
from nudgepal.domain.models import (
    BILL_STATUSES,
    FREQUENCIES,
    STATUS_OVERDUE,
    STATUS_PAID,
    STATUS_UPCOMING,
    STATUS_URGENT,
    Bill,
    PaymentRecord,
)
from nudgepal.utils.date_utils import as_date, parse_iso_date

logger = logging.getLogger(__name__)

DayLike = Union[date, datetime]

UPDATABLE_FIELDS = {"name", "amount", "due_date", "frequency", "reminder_days", "notes", "is_active"}


def get_days_until_due(bill: Bill, today: DayLike) -> int:
    """
    Whole days from today until the bill's due date.

    Both sides are compared as calendar dates, so the time of day carried by
    `today` never changes the result. Negative means overdue by that many days.
    """
    return (as_date(bill.due_date) - as_date(today)).days


def classify(bill: Bill, today: DayLike) -> str:
    """
    Classify a bill relative to today.

    - paid:     any payment recorded, regardless of date
    - overdue:  due today or earlier
    - urgent:   due within reminder_days
    - upcoming: everything else
    """
    if bill.is_paid:
        return STATUS_PAID

    days_until = get_days_until_due(bill, today)
    if days_until <= 0:
        return STATUS_OVERDUE
    elif days_until <= bill.reminder_days:
        return STATUS_URGENT
    else:
        return STATUS_UPCOMING


def filter_by_status(bills: List[Bill], status: str, today: DayLike) -> List[Bill]:
    """Active bills whose classification matches status"""
    if status not in BILL_STATUSES:
        logger.warning("Unknown bill status filter", extra={"status": status})
        return []

    result = []
    for bill in bills:
        if not bill.is_active or classify(bill, today) != status:
            continue
        if status == STATUS_URGENT and get_days_until_due(bill, today) <= 0:
            continue
        result.append(bill)
    return result


def filter_upcoming_within_days(bills: List[Bill], window_days: int, today: DayLike) -> List[Bill]:
    """Active bills due in 1..window_days days, paid or not"""
    return [
        bill
        for bill in bills
        if bill.is_active and 0 < get_days_until_due(bill, today) <= window_days
    ]


def filter_for_date(bills: List[Bill], day: DayLike) -> List[Bill]:
    target = as_date(day)
    return [bill for bill in bills if bill.is_active and as_date(bill.due_date) == target]


def group_bills_by_status(bills: List[Bill], today: DayLike) -> Dict[str, List[Bill]]:
    """Bucket active bills by classification, each bucket sorted by due date"""
    grouped: Dict[str, List[Bill]] = {status: [] for status in BILL_STATUSES}
    for bill in bills:
        if bill.is_active:
            grouped[classify(bill, today)].append(bill)

    for status in grouped:
        grouped[status].sort(key=lambda b: b.due_date)
    return grouped


def status_context_text(bill: Bill, today: DayLike) -> str:
    """Short label such as 'Due today', '3 days left' or 'Overdue 2 days'"""
    days_until = get_days_until_due(bill, today)
    if days_until == 0:
        return "Due today"
    if days_until > 0:
        return f"{days_until} day{'s' if days_until > 1 else ''} left"
    overdue = abs(days_until)
    return f"Overdue {overdue} day{'s' if overdue > 1 else ''}"


def reminder_date(bill: Bill) -> date:
    """Day the reminder for this bill should fire"""
    return as_date(bill.due_date) - timedelta(days=bill.reminder_days)


def bills_in_reminder_window(bills: List[Bill], today: DayLike) -> List[Bill]:
    """Bills the notification side should currently be reminding about"""
    return filter_by_status(bills, STATUS_URGENT, today)


def mark_as_paid(bill: Bill, today: DayLike) -> Bill:
    """
    Record a payment of the bill's full amount dated today.

    Not idempotent: each call is a distinct payment event.
    """
    history = list(bill.payment_history)
    history.append(PaymentRecord(date=as_date(today), amount=bill.amount))
    return replace(bill, payment_history=history)


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value)


def _validate_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Validate and normalize bill fields, returning the cleaned values"""
    cleaned = dict(fields)

    if "name" in cleaned:
        name = cleaned["name"]
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Bill name must not be empty")
        cleaned["name"] = name.strip()

    if "amount" in cleaned:
        amount = cleaned["amount"]
        if not _is_number(amount) or amount < 0:
            raise ValidationError(f"Bill amount must be non-negative, got {amount}")
        cleaned["amount"] = float(amount)

    if "due_date" in cleaned:
        cleaned["due_date"] = parse_iso_date(cleaned["due_date"])

    if "frequency" in cleaned and cleaned["frequency"] not in FREQUENCIES:
        raise ValidationError(f"Unknown frequency: {cleaned['frequency']}")

    if "reminder_days" in cleaned:
        reminder_days = cleaned["reminder_days"]
        if not _is_number(reminder_days) or int(reminder_days) != reminder_days or reminder_days < 0:
            raise ValidationError(f"Reminder days must be a non-negative integer, got {reminder_days}")
        cleaned["reminder_days"] = int(reminder_days)

    if "notes" in cleaned and cleaned["notes"] is None:
        cleaned["notes"] = ""

    return cleaned


def create_bill(
    name: str,
    amount: float,
    due_date: Union[str, date],
    created_at: datetime,
    frequency: str = "monthly",
    reminder_days: int = 3,
    notes: str = "",
    is_active: bool = True,
) -> Bill:
    """
    Build a new bill with a fresh id and empty payment history.

    Raises:
        ValidationError: Empty name, negative amount/reminder days, bad date or frequency
    """
    cleaned = _validate_fields(
        {
            "name": name,
            "amount": amount,
            "due_date": due_date,
            "frequency": frequency,
            "reminder_days": reminder_days,
            "notes": notes,
        }
    )
    return Bill(
        id=uuid.uuid4().hex,
        is_active=is_active,
        payment_history=[],
        created_at=created_at,
        **cleaned,
    )


def add_bill(bills: List[Bill], bill: Bill) -> List[Bill]:
    if any(existing.id == bill.id for existing in bills):
        raise ValidationError(f"Bill {bill.id} already exists")
    return [*bills, bill]


def find_bill(bills: List[Bill], bill_id: str) -> Bill:
    for bill in bills:
        if bill.id == bill_id:
            return bill
    raise NotFoundError(f"Bill {bill_id} not found")


def update_bill(bills: List[Bill], bill_id: str, changes: Dict[str, Any]) -> List[Bill]:
    """
    Patch fields of one bill.

    id, payment history and creation time cannot be patched.

    Raises:
        NotFoundError: No bill with bill_id
        ValidationError: Unknown field or invalid value
    """
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

    bill = find_bill(bills, bill_id)
    updated = replace(bill, **_validate_fields(changes))
    return [updated if b.id == bill_id else b for b in bills]


def delete_bill(bills: List[Bill], bill_id: str) -> List[Bill]:
    find_bill(bills, bill_id)
    return [b for b in bills if b.id != bill_id]


def mark_bill_paid(bills: List[Bill], bill_id: str, today: DayLike) -> List[Bill]:
    bill = find_bill(bills, bill_id)
    paid = mark_as_paid(bill, today)
    return [paid if b.id == bill_id else b for b in bills]
