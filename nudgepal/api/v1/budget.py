"""/v1/budget - spending profile, daily check-ins and adaptive budget health"""

import time
from datetime import date
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from nudgepal.api.v1.schemas import (
    BestDaySchema,
    BudgetHealthResponse,
    CheckInRequest,
    FeelingRequest,
    ProfileRequest,
    ProfileResponse,
    SavingsProjectionResponse,
    SpendingEntrySchema,
    SpendingListResponse,
    WeeklyStatsResponse,
)
from nudgepal.api.dependencies import get_clock, get_request_id
from nudgepal.domain import budget as engine
from nudgepal.domain.exceptions import DomainException, NotFoundError
from nudgepal.domain.models import SpendingProfile
from nudgepal.infrastructure.database.repositories import SpendingRepository
from nudgepal.infrastructure.database.session import get_db
from nudgepal.infrastructure.observability.logging import log_health_snapshot
from nudgepal.infrastructure.observability.metrics import record_check_in, record_health
from nudgepal.utils.clock import Clock

router = APIRouter()


@router.get("/budget/profile", response_model=ProfileResponse)
def get_profile(db: Session = Depends(get_db)):
    profile = SpendingRepository(db).load_profile()
    if not isinstance(profile, SpendingProfile):
        raise NotFoundError("Budget tracker is not set up")
    return ProfileResponse.from_profile(profile)


@router.put("/budget/profile", response_model=ProfileResponse)
def save_profile(
    request_body: ProfileRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Set up or edit the budget profile.

    The profile is replaced wholesale and its daily budget recomputed from
    the days left in the current month. Existing check-ins are kept.
    """
    repo = SpendingRepository(db)

    try:
        profile = engine.create_profile(
            monthly_income=request_body.monthly_income,
            expenses=request_body.expenses,
            loan_payment=request_body.loan_payment,
            savings_goal=request_body.monthly_savings_goal,
            today=clock.today(),
            created_at=clock.now().isoformat(),
        )
        repo.save_profile(profile)
        db.commit()
    except DomainException:
        db.rollback()
        raise

    return ProfileResponse.from_profile(profile)


@router.delete("/budget", status_code=204)
def delete_tracker(db: Session = Depends(get_db)):
    """Delete the profile and every check-in together"""
    SpendingRepository(db).delete_tracker()
    db.commit()


@router.post("/budget/check-in", response_model=SpendingEntrySchema)
def check_in(
    request_body: CheckInRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Record today's total spending, overwriting an earlier check-in for today"""
    repo = SpendingRepository(db)
    today = clock.today()

    try:
        entries = engine.record_check_in(
            repo.load_daily_spending(),
            repo.load_profile(),
            request_body.amount,
            today,
            timestamp=clock.now().isoformat(),
        )
        repo.save_daily_spending(entries)
        db.commit()
    except DomainException:
        db.rollback()
        raise

    entry = entries[today.isoformat()]
    record_check_in(entry.budget_status)
    return SpendingEntrySchema.from_entry(entry)


@router.post("/budget/check-in/{day}/feeling", response_model=SpendingEntrySchema)
def add_feeling(day: date, request_body: FeelingRequest, db: Session = Depends(get_db)):
    repo = SpendingRepository(db)

    try:
        entries = engine.record_feeling(repo.load_daily_spending(), day, request_body.feeling)
        repo.save_daily_spending(entries)
        db.commit()
    except DomainException:
        db.rollback()
        raise

    return SpendingEntrySchema.from_entry(entries[day.isoformat()])


@router.get("/budget/spending", response_model=SpendingListResponse)
def list_spending(db: Session = Depends(get_db)):
    history = engine.spending_history(SpendingRepository(db).load_daily_spending())
    return SpendingListResponse(entries=[SpendingEntrySchema.from_entry(entry) for entry in history])


@router.get("/budget/health", response_model=BudgetHealthResponse)
def get_budget_health(
    request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Live budget health with recommendations.

    Works before setup: an unconfigured tracker yields a neutral record.
    """
    start_time = time.time()
    repo = SpendingRepository(db)
    history = engine.spending_history(repo.load_daily_spending())

    health = engine.calculate_budget_health(repo.load_profile(), history, clock.today())
    recommendations = engine.get_smart_recommendations(health, history)

    record_health(health.status)
    log_health_snapshot(
        get_request_id(request),
        health.status,
        health.health_score,
        health.percentage_used,
        (time.time() - start_time) * 1000,
    )
    return BudgetHealthResponse.from_health(health, recommendations)


@router.get("/budget/projection", response_model=SavingsProjectionResponse)
def get_savings_projection(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    repo = SpendingRepository(db)
    history = engine.spending_history(repo.load_daily_spending())
    projection = engine.calculate_savings_projection(repo.load_profile(), history, clock.today())
    return SavingsProjectionResponse(
        on_track=projection.on_track,
        projected_savings=projection.projected_savings,
        message=projection.message,
    )


@router.get("/budget/weekly", response_model=WeeklyStatsResponse)
def get_weekly_stats(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    repo = SpendingRepository(db)
    stats = engine.get_weekly_stats(repo.load_profile(), repo.load_daily_spending(), clock.today())
    return WeeklyStatsResponse(
        days_on_budget=stats.days_on_budget,
        total_overspent=stats.total_overspent,
        total_saved=stats.total_saved,
        best_day=BestDaySchema(date=stats.best_day.date, saved=stats.best_day.saved) if stats.best_day else None,
    )
