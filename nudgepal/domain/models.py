"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Union

# Bill frequencies (informational, no recurrence generation)
FREQUENCIES = ("one-time", "monthly", "quarterly", "yearly")

# Bill classification buckets
STATUS_PAID = "paid"
STATUS_OVERDUE = "overdue"
STATUS_URGENT = "urgent"
STATUS_UPCOMING = "upcoming"
BILL_STATUSES = (STATUS_URGENT, STATUS_UPCOMING, STATUS_OVERDUE, STATUS_PAID)

# Daily check-in outcome
BUDGET_UNDER = "under"
BUDGET_WITHIN_RANGE = "within_range"
BUDGET_OVER = "over"


@dataclass
class PaymentRecord:
    """Single payment made against a bill"""

    date: date
    amount: float


@dataclass
class Bill:
    """Bill tracked by the user"""

    id: str
    name: str
    amount: float
    due_date: date
    frequency: str = "monthly"  # one-time | monthly | quarterly | yearly
    reminder_days: int = 3
    is_active: bool = True
    payment_history: List[PaymentRecord] = field(default_factory=list)
    notes: str = ""
    created_at: Optional[datetime] = None

    @property
    def is_paid(self) -> bool:
        return len(self.payment_history) > 0


@dataclass
class DailySpending:
    """One day's spending check-in, keyed by ISO date"""

    date: str
    amount: float
    budget_status: str  # under | within_range | over
    saved_amount: float
    feeling: Optional[str] = None
    timestamp: Optional[str] = None


@dataclass
class SpendingProfile:
    """Monthly budget profile captured at setup time"""

    monthly_income: float
    fixed_expenses: float
    loan_payment: float
    monthly_savings_goal: float
    disposable_income: float
    daily_budget: float
    expense_breakdown: Dict[str, float] = field(default_factory=dict)
    created_at: Optional[str] = None


@dataclass(frozen=True)
class NotConfigured:
    """Budget tracker has not been set up yet"""


NOT_CONFIGURED = NotConfigured()

ProfileState = Union[SpendingProfile, NotConfigured]


@dataclass
class BudgetHealth:
    """Live financial health snapshot for the current month"""

    status: str  # excellent | good | warning | critical
    percentage_used: float
    remaining_balance: float
    days_left: int
    days_elapsed: int
    adaptive_daily_budget: float
    total_spent_this_month: float
    spendable_income: float
    recovery_message: Optional[str]
    saving_opportunities: List[str]
    health_score: float
    trend: str  # improving | stable | declining


@dataclass
class SavingsProjection:
    """Month-end savings extrapolated from the current pace"""

    on_track: bool
    projected_savings: float
    message: str


@dataclass
class BestDay:
    date: str
    saved: float


@dataclass
class WeeklyStats:
    """Summary of the current Sunday-started week"""

    days_on_budget: int
    total_overspent: float
    total_saved: float
    best_day: Optional[BestDay]
