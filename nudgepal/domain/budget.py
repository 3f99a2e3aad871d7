"""Adaptive budget engine - live daily budget, spending health and check-in logic"""

import math
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Union

from nudgepal.domain.exceptions import NotFoundError, ValidationError
from nudgepal.domain.models import (
    BUDGET_OVER,
    BUDGET_UNDER,
    BUDGET_WITHIN_RANGE,
    BestDay,
    BudgetHealth,
    DailySpending,
    NotConfigured,
    SavingsProjection,
    SpendingProfile,
    WeeklyStats,
)
from nudgepal.utils.date_utils import (
    as_date,
    days_in_month,
    generate_date_range,
    try_parse_iso_date,
    week_start,
)

MIN_DAILY_BUDGET = 10
DEFAULT_DAILY_BUDGET = 40
SETUP_MESSAGE = "Set up your budget to track spending"

# Check-in bands relative to the static daily budget
UNDER_BUDGET_RATIO = 0.75
WITHIN_RANGE_RATIO = 1.125

# Health score per status. Each tier is capped at the lowest score of the
# tier below it so more spending never yields a higher score.
EXCELLENT_SCORE = 90
GOOD_SCORE = 75
WARNING_SCORE_FLOOR = 20
CRITICAL_SCORE_CEILING = 100 - (100 - 85) * 3

TREND_MIN_ENTRIES = 14
TREND_WINDOW = 7

ProfileArg = Union[SpendingProfile, NotConfigured, None]


def _is_configured(profile: ProfileArg) -> bool:
    return isinstance(profile, SpendingProfile)


def days_left_in_month(today: date) -> int:
    """Days remaining including today, never below 1"""
    return max(1, days_in_month(today) - today.day + 1)


def days_elapsed_in_month(today: date) -> int:
    """Completed days before today, floored at 1 to keep averages finite"""
    return max(1, today.day - 1)


def spendable_income(profile: SpendingProfile) -> float:
    return max(0.0, profile.disposable_income - profile.monthly_savings_goal)


def total_spent_in_month(spending_history: Iterable[DailySpending], today: date) -> float:
    """Sum of entries dated in today's month; unparseable dates are skipped"""
    total = 0.0
    for entry in spending_history:
        spent_on = try_parse_iso_date(entry.date)
        if spent_on is None:
            continue
        if spent_on.year == today.year and spent_on.month == today.month:
            total += entry.amount or 0
    return total


def spending_history(entries: Dict[str, DailySpending]) -> List[DailySpending]:
    """Date-ordered history from the date-keyed check-in map"""
    return [entries[key] for key in sorted(entries)]


def calculate_spending_trend(spending_history: List[DailySpending]) -> str:
    """
    Compare the first and last week of history.

    Needs at least 14 entries; a last-week mean below 90% of the first-week
    mean is improving, above 110% is declining.
    """
    if len(spending_history) < TREND_MIN_ENTRIES:
        return "stable"

    first_avg = sum(e.amount or 0 for e in spending_history[:TREND_WINDOW]) / TREND_WINDOW
    last_avg = sum(e.amount or 0 for e in spending_history[-TREND_WINDOW:]) / TREND_WINDOW

    if last_avg < first_avg * 0.9:
        return "improving"
    elif last_avg > first_avg * 1.1:
        return "declining"
    return "stable"


def _neutral_health() -> BudgetHealth:
    return BudgetHealth(
        status="excellent",
        percentage_used=0,
        remaining_balance=0,
        days_left=0,
        days_elapsed=0,
        adaptive_daily_budget=0,
        total_spent_this_month=0,
        spendable_income=0,
        recovery_message=SETUP_MESSAGE,
        saving_opportunities=[],
        health_score=100,
        trend="stable",
    )


def calculate_budget_health(
    profile: ProfileArg,
    spending_history: List[DailySpending],
    today: Union[date, datetime],
) -> BudgetHealth:
    """
    Compute the live budget health snapshot for today's month.

    The adaptive daily budget spreads what is left of the spendable income
    over the remaining days, so it shrinks after overspending and grows after
    frugal days. Classification uses the unclamped percentage of spendable
    income already spent:

    - > 100%: critical (any spending when nothing is spendable)
    - > 85%:  warning
    - > 60%:  good
    - else:   excellent

    Never raises: a missing profile yields a neutral record with a setup prompt.
    """
    if not _is_configured(profile) or not profile.disposable_income:
        return _neutral_health()

    today = as_date(today)
    days_left = days_left_in_month(today)
    days_elapsed = days_elapsed_in_month(today)

    spent = total_spent_in_month(spending_history, today)
    spendable = spendable_income(profile)
    remaining = spendable - spent
    adaptive_daily_budget = remaining / days_left if spendable > 0 and days_left > 0 else 0
    if spendable > 0:
        percentage_used = (spent / spendable) * 100
    elif spent > 0:
        # Any spending exceeds a zero spendable income
        percentage_used = math.inf
    else:
        percentage_used = 0
    daily_avg = spent / days_elapsed

    recovery_message: Optional[str] = None
    saving_opportunities: List[str] = []

    if percentage_used > 100:
        status = "critical"
        health_score = min(CRITICAL_SCORE_CEILING, max(0, 100 - (percentage_used - 100) * 2))
        overspent = spent - spendable
        daily_recovery = overspent / days_left
        recovery_message = (
            f"CRITICAL: You're {overspent:.2f} over budget! You need to reduce spending by "
            f"{daily_recovery:.2f}/day for the next {days_left} days to recover."
        )
        saving_opportunities.append("Cut non-essential spending immediately")
        saving_opportunities.append("Review daily purchases and postpone discretionary items")
        saving_opportunities.append("Look for quick wins: cancel subscriptions, reduce dining out")
    elif percentage_used > 85:
        status = "warning"
        health_score = min(GOOD_SCORE, max(WARNING_SCORE_FLOOR, 100 - (percentage_used - 85) * 3))
        recovery_message = (
            f"WARNING: You've used {percentage_used:.1f}% of your budget. "
            f"Only {remaining:.2f} left for {days_left} days!"
        )
        saving_opportunities.append("Slow down spending - be mindful of purchases")
        saving_opportunities.append(f"Target: {remaining / days_left:.2f}/day to finish month on budget")
    elif percentage_used > 60:
        status = "good"
        health_score = GOOD_SCORE
        saving_opportunities.append("You're on track! Maintain current pace.")
        saving_opportunities.append(f"Current daily average: {daily_avg:.2f}")
    else:
        status = "excellent"
        health_score = EXCELLENT_SCORE
        extra_savings = max(0.0, spendable - spent)
        saving_opportunities.append(f"Excellent control! You could save an extra {extra_savings:.2f} this month.")
        saving_opportunities.append(f"At current pace: {daily_avg:.2f}/day")

    ordered = sorted(
        (e for e in spending_history if try_parse_iso_date(e.date) is not None),
        key=lambda e: try_parse_iso_date(e.date),
    )

    return BudgetHealth(
        status=status,
        percentage_used=min(max(0, percentage_used), 100),
        remaining_balance=max(remaining, 0),
        days_left=days_left,
        days_elapsed=days_elapsed,
        adaptive_daily_budget=max(adaptive_daily_budget, 0),
        total_spent_this_month=spent,
        spendable_income=spendable,
        recovery_message=recovery_message,
        saving_opportunities=saving_opportunities,
        health_score=max(0, min(100, health_score)),
        trend=calculate_spending_trend(ordered),
    )


def get_smart_recommendations(health: BudgetHealth, spending_history: List[DailySpending]) -> List[str]:
    """Status-tiered advice plus checks on recent over-budget days"""
    recommendations: List[str] = []

    if health.status == "critical":
        recommendations.append("EMERGENCY MODE: Reduce daily spending immediately")
        recommendations.append(f"You need to spend max {health.adaptive_daily_budget:.2f}/day")
    elif health.status == "warning":
        recommendations.append("Be extra careful with purchases")
        recommendations.append(f"Recommended daily spend: {health.adaptive_daily_budget:.2f}")
    elif health.status == "good":
        recommendations.append("On track! Continue current habits")
    else:
        recommendations.append("Excellent! You could increase savings")

    if spending_history:
        if spending_history[-1].budget_status == BUDGET_OVER:
            recommendations.append("Last purchase exceeded daily limit - adjust next time")

        over_budget_days = sum(1 for s in spending_history if s.budget_status == BUDGET_OVER)
        if over_budget_days > len(spending_history) / 2:
            recommendations.append("More than half your days exceeded budget - time to reset habits")

    return recommendations


def calculate_savings_projection(
    profile: ProfileArg,
    spending_history: List[DailySpending],
    today: Union[date, datetime],
) -> SavingsProjection:
    """
    Extrapolate month-to-date spending linearly to month end.

    On track when the projected leftover reaches 90% of the savings goal.
    """
    if not _is_configured(profile):
        return SavingsProjection(on_track=False, projected_savings=0, message=SETUP_MESSAGE)

    today = as_date(today)
    spent = total_spent_in_month(spending_history, today)
    projected_spend = spent / days_elapsed_in_month(today) * days_in_month(today)

    projected_savings = (profile.disposable_income - profile.monthly_savings_goal) - projected_spend
    on_track = projected_savings >= profile.monthly_savings_goal * 0.9

    if on_track:
        message = f"On track to save {projected_savings:.2f} this month!"
    else:
        deficit = profile.monthly_savings_goal - projected_savings
        message = f"Projected savings short by {deficit:.2f} at current pace"

    return SavingsProjection(on_track=on_track, projected_savings=max(projected_savings, 0), message=message)


def calculate_daily_budget(disposable_income: float, savings_goal: float, today: date) -> float:
    """Static daily budget snapshot: spendable income over days left, at least 10"""
    spendable = max(0.0, disposable_income - savings_goal)
    if spendable <= 0:
        return MIN_DAILY_BUDGET
    return max(MIN_DAILY_BUDGET, math.floor(spendable / days_left_in_month(today)))


def create_profile(
    monthly_income: float,
    expenses: Dict[str, float],
    loan_payment: float,
    savings_goal: float,
    today: Union[date, datetime],
    created_at: Optional[str] = None,
) -> SpendingProfile:
    """
    Build the spending profile from the setup form.

    The loan payment counts as a fixed expense.

    Raises:
        ValidationError: Any negative amount
    """
    for label, value in [("monthly income", monthly_income), ("loan payment", loan_payment), ("savings goal", savings_goal)]:
        if value is None or value < 0:
            raise ValidationError(f"{label.capitalize()} must be non-negative, got {value}")
    for category, value in expenses.items():
        if value is None or value < 0:
            raise ValidationError(f"Expense '{category}' must be non-negative, got {value}")

    fixed_expenses = sum(expenses.values()) + loan_payment
    disposable = monthly_income - fixed_expenses

    return SpendingProfile(
        monthly_income=float(monthly_income),
        fixed_expenses=float(fixed_expenses),
        loan_payment=float(loan_payment),
        monthly_savings_goal=float(savings_goal),
        disposable_income=float(disposable),
        daily_budget=calculate_daily_budget(disposable, savings_goal, as_date(today)),
        expense_breakdown={k: float(v) for k, v in expenses.items()},
        created_at=created_at,
    )


def classify_check_in(amount: float, daily_budget: float) -> str:
    """Budget band of a day's spending against the static daily budget"""
    if amount <= daily_budget * UNDER_BUDGET_RATIO:
        return BUDGET_UNDER
    elif amount <= daily_budget * WITHIN_RANGE_RATIO:
        return BUDGET_WITHIN_RANGE
    return BUDGET_OVER


def record_check_in(
    entries: Dict[str, DailySpending],
    profile: ProfileArg,
    amount: float,
    day: Union[date, datetime],
    timestamp: Optional[str] = None,
) -> Dict[str, DailySpending]:
    """
    Record the day's spending, replacing any earlier check-in for that date.

    Classification uses the profile's static daily budget, not the adaptive one.

    Raises:
        ValidationError: Negative amount or tracker not set up
    """
    if not _is_configured(profile):
        raise ValidationError("Budget tracker is not set up")
    if amount is None or amount < 0:
        raise ValidationError(f"Spending amount must be non-negative, got {amount}")

    key = as_date(day).isoformat()
    updated = dict(entries)
    updated[key] = DailySpending(
        date=key,
        amount=float(amount),
        budget_status=classify_check_in(amount, profile.daily_budget),
        saved_amount=profile.daily_budget - amount,
        timestamp=timestamp,
    )
    return updated


def record_feeling(
    entries: Dict[str, DailySpending],
    day: Union[date, datetime],
    feeling: str,
) -> Dict[str, DailySpending]:
    """
    Attach the follow-up feeling tag to an existing check-in.

    Raises:
        NotFoundError: No check-in for that day
        ValidationError: Empty feeling
    """
    if not feeling or not feeling.strip():
        raise ValidationError("Feeling must not be empty")

    key = as_date(day).isoformat()
    if key not in entries:
        raise NotFoundError(f"No check-in recorded for {key}")

    existing = entries[key]
    updated = dict(entries)
    updated[key] = DailySpending(
        date=existing.date,
        amount=existing.amount,
        budget_status=existing.budget_status,
        saved_amount=existing.saved_amount,
        feeling=feeling.strip(),
        timestamp=existing.timestamp,
    )
    return updated


def get_weekly_stats(
    profile: ProfileArg,
    entries: Dict[str, DailySpending],
    today: Union[date, datetime],
) -> WeeklyStats:
    """
    Summarize check-ins for the week (Sunday through Saturday) containing today.

    Overspending is measured against the static daily budget.
    """
    daily_budget = profile.daily_budget if _is_configured(profile) else DEFAULT_DAILY_BUDGET
    start = week_start(as_date(today))

    days_on_budget = 0
    total_overspent = 0.0
    total_saved = 0.0
    best_day: Optional[BestDay] = None

    for day in generate_date_range(start, start + timedelta(days=6)):
        key = day.isoformat()
        spending = entries.get(key)
        if spending is None:
            continue

        if spending.budget_status != BUDGET_OVER:
            days_on_budget += 1
        else:
            total_overspent += max(0.0, spending.amount - daily_budget)
        total_saved += max(0.0, spending.saved_amount)

        if best_day is None or spending.saved_amount > best_day.saved:
            best_day = BestDay(date=key, saved=spending.saved_amount)

    return WeeklyStats(
        days_on_budget=days_on_budget,
        total_overspent=total_overspent,
        total_saved=total_saved,
        best_day=best_day,
    )
