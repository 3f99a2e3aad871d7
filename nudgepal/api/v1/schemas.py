"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from nudgepal.domain.models import Bill, BudgetHealth, DailySpending, SpendingProfile

Frequency = Literal["one-time", "monthly", "quarterly", "yearly"]


class PaymentSchema(BaseModel):
    date: date
    amount: float


class BillCreateRequest(BaseModel):
    """Request body for POST /v1/bills"""

    name: str = Field(..., min_length=1, description="Display name")
    amount: float = Field(..., ge=0, description="Amount due")
    due_date: date
    frequency: Frequency = "monthly"
    reminder_days: int = Field(3, ge=0, description="Days before due date that count as urgent")
    notes: str = ""
    is_active: bool = True


class BillUpdateRequest(BaseModel):
    """Request body for PATCH /v1/bills/{bill_id}; only provided fields change"""

    name: Optional[str] = Field(None, min_length=1)
    amount: Optional[float] = Field(None, ge=0)
    due_date: Optional[date] = None
    frequency: Optional[Frequency] = None
    reminder_days: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class BillResponse(BaseModel):
    """Bill with its status relative to today"""

    id: str
    name: str
    amount: float
    due_date: date
    frequency: str
    reminder_days: int
    notes: str
    is_active: bool
    payment_history: List[PaymentSchema]
    created_at: Optional[datetime] = None
    status: str
    days_until_due: int
    status_text: str

    @classmethod
    def from_bill(cls, bill: Bill, status: str, days_until_due: int, status_text: str) -> "BillResponse":
        return cls(
            id=bill.id,
            name=bill.name,
            amount=bill.amount,
            due_date=bill.due_date,
            frequency=bill.frequency,
            reminder_days=bill.reminder_days,
            notes=bill.notes,
            is_active=bill.is_active,
            payment_history=[PaymentSchema(date=p.date, amount=p.amount) for p in bill.payment_history],
            created_at=bill.created_at,
            status=status,
            days_until_due=days_until_due,
            status_text=status_text,
        )


class BillListResponse(BaseModel):
    bills: List[BillResponse]


class GroupedBillsResponse(BaseModel):
    """Active bills bucketed by status"""

    urgent: List[BillResponse]
    upcoming: List[BillResponse]
    overdue: List[BillResponse]
    paid: List[BillResponse]


class ProfileRequest(BaseModel):
    """Request body for PUT /v1/budget/profile (setup or edit)"""

    monthly_income: float = Field(..., ge=0)
    expenses: Dict[str, float] = Field(default_factory=dict, description="Itemized fixed expenses")
    loan_payment: float = Field(0, ge=0)
    monthly_savings_goal: float = Field(0, ge=0)


class ProfileResponse(BaseModel):
    monthly_income: float
    fixed_expenses: float
    loan_payment: float
    monthly_savings_goal: float
    disposable_income: float
    daily_budget: float
    expense_breakdown: Dict[str, float]
    created_at: Optional[str] = None

    @classmethod
    def from_profile(cls, profile: SpendingProfile) -> "ProfileResponse":
        return cls(
            monthly_income=profile.monthly_income,
            fixed_expenses=profile.fixed_expenses,
            loan_payment=profile.loan_payment,
            monthly_savings_goal=profile.monthly_savings_goal,
            disposable_income=profile.disposable_income,
            daily_budget=profile.daily_budget,
            expense_breakdown=profile.expense_breakdown,
            created_at=profile.created_at,
        )


class CheckInRequest(BaseModel):
    """Request body for POST /v1/budget/check-in"""

    amount: float = Field(..., ge=0, description="Total spent today")


class FeelingRequest(BaseModel):
    feeling: str = Field(..., min_length=1, description="planned, impulse_regret, necessary, treat, ...")


class SpendingEntrySchema(BaseModel):
    date: str
    amount: float
    budget_status: str
    saved_amount: float
    feeling: Optional[str] = None
    timestamp: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: DailySpending) -> "SpendingEntrySchema":
        return cls(
            date=entry.date,
            amount=entry.amount,
            budget_status=entry.budget_status,
            saved_amount=entry.saved_amount,
            feeling=entry.feeling,
            timestamp=entry.timestamp,
        )


class SpendingListResponse(BaseModel):
    entries: List[SpendingEntrySchema]


class BudgetHealthResponse(BaseModel):
    """Response for GET /v1/budget/health"""

    status: str
    percentage_used: float
    remaining_balance: float
    days_left: int
    days_elapsed: int
    adaptive_daily_budget: float
    total_spent_this_month: float
    spendable_income: float
    recovery_message: Optional[str] = None
    saving_opportunities: List[str]
    health_score: float
    trend: str
    recommendations: List[str]

    @classmethod
    def from_health(cls, health: BudgetHealth, recommendations: List[str]) -> "BudgetHealthResponse":
        return cls(
            status=health.status,
            percentage_used=health.percentage_used,
            remaining_balance=health.remaining_balance,
            days_left=health.days_left,
            days_elapsed=health.days_elapsed,
            adaptive_daily_budget=health.adaptive_daily_budget,
            total_spent_this_month=health.total_spent_this_month,
            spendable_income=health.spendable_income,
            recovery_message=health.recovery_message,
            saving_opportunities=health.saving_opportunities,
            health_score=health.health_score,
            trend=health.trend,
            recommendations=recommendations,
        )


class SavingsProjectionResponse(BaseModel):
    on_track: bool
    projected_savings: float
    message: str


class BestDaySchema(BaseModel):
    date: str
    saved: float


class WeeklyStatsResponse(BaseModel):
    days_on_budget: int
    total_overspent: float
    total_saved: float
    best_day: Optional[BestDaySchema] = None
