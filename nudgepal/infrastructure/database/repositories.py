"""Data access layer: JSON records in the key-value store mapped to domain models"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from nudgepal.infrastructure.database.models import KeyValueEntry
from nudgepal.domain.models import (
    NOT_CONFIGURED,
    Bill,
    DailySpending,
    PaymentRecord,
    ProfileState,
    SpendingProfile,
)

logger = logging.getLogger(__name__)

BILLS_KEY = "@nudgepal_bills"
SPENDING_PROFILE_KEY = "spendingProfile_overspending"
DAILY_SPENDING_KEY = "dailySpending_overspending"


class KeyValueStore:
    """Opaque get/set store; changes are flushed, the caller commits"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[Any]:
        entry = self.db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
        return entry.value if entry else None

    def set(self, key: str, value: Any) -> None:
        entry = self.db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
        if entry is None:
            self.db.add(KeyValueEntry(key=key, value=value))
        else:
            entry.value = value
        self.db.flush()

    def delete(self, key: str) -> None:
        self.db.query(KeyValueEntry).filter(KeyValueEntry.key == key).delete()
        self.db.flush()


def bill_to_record(bill: Bill) -> Dict[str, Any]:
    return {
        "id": bill.id,
        "name": bill.name,
        "amount": bill.amount,
        "dueDate": bill.due_date.isoformat(),
        "frequency": bill.frequency,
        "reminderDays": bill.reminder_days,
        "notes": bill.notes,
        "isActive": bill.is_active,
        "paymentHistory": [
            {"date": payment.date.isoformat(), "amount": payment.amount}
            for payment in bill.payment_history
        ],
        "createdAt": bill.created_at.isoformat() if bill.created_at else None,
    }


def bill_from_record(record: Dict[str, Any]) -> Bill:
    """Raises KeyError/ValueError/TypeError on malformed records"""
    created_at = record.get("createdAt")
    return Bill(
        id=str(record["id"]),
        name=record["name"],
        amount=float(record["amount"]),
        due_date=date.fromisoformat(record["dueDate"].split("T")[0]),
        frequency=record.get("frequency", "monthly"),
        reminder_days=int(record.get("reminderDays", 0)),
        is_active=bool(record.get("isActive", True)),
        payment_history=[
            PaymentRecord(
                date=date.fromisoformat(payment["date"].split("T")[0]),
                amount=float(payment["amount"]),
            )
            for payment in record.get("paymentHistory") or []
        ],
        notes=record.get("notes") or "",
        created_at=datetime.fromisoformat(created_at) if created_at else None,
    )


def profile_to_record(profile: SpendingProfile) -> Dict[str, Any]:
    return {
        "monthlyIncome": profile.monthly_income,
        "fixedExpenses": profile.fixed_expenses,
        "loanPayment": profile.loan_payment,
        "monthlySavingsGoal": profile.monthly_savings_goal,
        "disposableIncome": profile.disposable_income,
        "dailyBudget": profile.daily_budget,
        "expenseBreakdown": dict(profile.expense_breakdown),
        "createdAt": profile.created_at,
        "setupCompleted": True,
    }


def profile_from_record(record: Dict[str, Any]) -> SpendingProfile:
    return SpendingProfile(
        monthly_income=float(record["monthlyIncome"]),
        fixed_expenses=float(record["fixedExpenses"]),
        loan_payment=float(record.get("loanPayment", 0)),
        monthly_savings_goal=float(record.get("monthlySavingsGoal", 0)),
        disposable_income=float(record["disposableIncome"]),
        daily_budget=float(record["dailyBudget"]),
        expense_breakdown={k: float(v) for k, v in (record.get("expenseBreakdown") or {}).items()},
        created_at=record.get("createdAt"),
    )


def spending_to_record(entry: DailySpending) -> Dict[str, Any]:
    record = {
        "amount": entry.amount,
        "budgetStatus": entry.budget_status,
        "savedAmount": entry.saved_amount,
        "timestamp": entry.timestamp,
    }
    if entry.feeling is not None:
        record["feeling"] = entry.feeling
    return record


def spending_from_record(day: str, record: Dict[str, Any]) -> DailySpending:
    return DailySpending(
        date=day,
        amount=float(record["amount"]),
        budget_status=record["budgetStatus"],
        saved_amount=float(record.get("savedAmount", 0)),
        feeling=record.get("feeling"),
        timestamp=record.get("timestamp"),
    )


class BillRepository:
    """Repository for the user's bill list"""

    def __init__(self, db: Session):
        self.store = KeyValueStore(db)

    def load_bills(self) -> List[Bill]:
        """Load stored bills, skipping records that cannot be parsed"""
        bills = []
        for record in self.store.get(BILLS_KEY) or []:
            try:
                bills.append(bill_from_record(record))
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                logger.warning("Skipping malformed bill record", extra={"error": str(e)})
        return bills

    def save_bills(self, bills: List[Bill]) -> None:
        self.store.set(BILLS_KEY, [bill_to_record(bill) for bill in bills])


class SpendingRepository:
    """Repository for the spending profile and daily check-ins"""

    def __init__(self, db: Session):
        self.store = KeyValueStore(db)

    def load_profile(self) -> ProfileState:
        record = self.store.get(SPENDING_PROFILE_KEY)
        if not record:
            return NOT_CONFIGURED
        try:
            return profile_from_record(record)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Stored spending profile is unreadable", extra={"error": str(e)})
            return NOT_CONFIGURED

    def save_profile(self, profile: SpendingProfile) -> None:
        self.store.set(SPENDING_PROFILE_KEY, profile_to_record(profile))

    def load_daily_spending(self) -> Dict[str, DailySpending]:
        """Load check-ins keyed by ISO date, skipping unreadable entries"""
        entries = {}
        for day, record in (self.store.get(DAILY_SPENDING_KEY) or {}).items():
            try:
                entries[day] = spending_from_record(day, record)
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                logger.warning("Skipping malformed spending entry", extra={"day": day, "error": str(e)})
        return entries

    def save_daily_spending(self, entries: Dict[str, DailySpending]) -> None:
        self.store.set(DAILY_SPENDING_KEY, {day: spending_to_record(entry) for day, entry in entries.items()})

    def delete_tracker(self) -> None:
        """Remove profile and all check-ins; both deletes share the caller's transaction"""
        self.store.delete(SPENDING_PROFILE_KEY)
        self.store.delete(DAILY_SPENDING_KEY)
