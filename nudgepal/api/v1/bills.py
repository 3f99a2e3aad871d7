"""/v1/bills - bill CRUD, payments and status views"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy.orm import Session

from nudgepal.api.v1.schemas import (
    BillCreateRequest,
    BillListResponse,
    BillResponse,
    BillUpdateRequest,
    GroupedBillsResponse,
)
from nudgepal.api.dependencies import get_clock, get_reminder_client, get_request_id
from nudgepal.config import settings
from nudgepal.domain import bills as engine
from nudgepal.domain.exceptions import DomainException
from nudgepal.domain.models import Bill
from nudgepal.infrastructure.clients.reminders import ReminderClient
from nudgepal.infrastructure.database.repositories import BillRepository
from nudgepal.infrastructure.database.session import get_db
from nudgepal.infrastructure.observability.logging import log_bill_event
from nudgepal.infrastructure.observability.metrics import record_bill_event
from nudgepal.utils.clock import Clock

router = APIRouter()

# Fields that decide when, or whether, a bill's reminder fires
REMINDER_FIELDS = {"due_date", "reminder_days", "is_active"}


def _to_response(bill: Bill, today: date) -> BillResponse:
    return BillResponse.from_bill(
        bill,
        status=engine.classify(bill, today),
        days_until_due=engine.get_days_until_due(bill, today),
        status_text=engine.status_context_text(bill, today),
    )


def _list_response(bills, today: date) -> BillListResponse:
    return BillListResponse(bills=[_to_response(bill, today) for bill in bills])


@router.get("/bills", response_model=BillListResponse)
def list_bills(
    status: Optional[str] = Query(None, description="urgent | upcoming | overdue | paid"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    List bills, optionally only active bills with the given status.

    Without a status filter every bill is returned, inactive ones included.
    """
    today = clock.today()
    bills = BillRepository(db).load_bills()
    if status is not None:
        bills = engine.filter_by_status(bills, status, today)
    return _list_response(bills, today)


@router.get("/bills/upcoming", response_model=BillListResponse)
def list_upcoming_bills(
    days: int = Query(settings.upcoming_window_days, ge=0, description="Look-ahead window in days"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    today = clock.today()
    bills = engine.filter_upcoming_within_days(BillRepository(db).load_bills(), days, today)
    return _list_response(bills, today)


@router.get("/bills/due", response_model=BillListResponse)
def list_bills_due_on(
    on: date = Query(..., description="Calendar date (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    bills = engine.filter_for_date(BillRepository(db).load_bills(), on)
    return _list_response(bills, clock.today())


@router.get("/bills/grouped", response_model=GroupedBillsResponse)
def group_bills(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    today = clock.today()
    grouped = engine.group_bills_by_status(BillRepository(db).load_bills(), today)
    return GroupedBillsResponse(
        **{status: [_to_response(bill, today) for bill in bills] for status, bills in grouped.items()}
    )


@router.get("/bills/reminders", response_model=BillListResponse)
def list_bills_in_reminder_window(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    """Bills the notification service should currently remind about"""
    today = clock.today()
    bills = engine.bills_in_reminder_window(BillRepository(db).load_bills(), today)
    return _list_response(bills, today)


@router.post("/bills/reminders/reschedule", response_model=BillListResponse)
def reschedule_reminders(
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    reminder_client: ReminderClient = Depends(get_reminder_client),
):
    """
    Cancel all pending reminders and schedule them again from current bill state.

    Meant to run daily so bills entering their reminder window get scheduled.
    Returns the bills that will be reminded about.
    """
    today = clock.today()
    bills = BillRepository(db).load_bills()

    background_tasks.add_task(reminder_client.reschedule_all, bills, today)

    record_bill_event("reminders_rescheduled")
    log_bill_event(get_request_id(request), "reminders_rescheduled")
    return _list_response(engine.bills_in_reminder_window(bills, today), today)


@router.post("/bills", response_model=BillResponse, status_code=201)
def add_bill(
    request_body: BillCreateRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    reminder_client: ReminderClient = Depends(get_reminder_client),
):
    """Create a bill and schedule its reminder when it is already due soon"""
    repo = BillRepository(db)
    today = clock.today()

    try:
        bill = engine.create_bill(
            name=request_body.name,
            amount=request_body.amount,
            due_date=request_body.due_date,
            created_at=clock.now(),
            frequency=request_body.frequency,
            reminder_days=request_body.reminder_days,
            notes=request_body.notes,
            is_active=request_body.is_active,
        )
        repo.save_bills(engine.add_bill(repo.load_bills(), bill))
        db.commit()
    except DomainException:
        db.rollback()
        raise

    background_tasks.add_task(reminder_client.schedule_reminder, bill, today)

    record_bill_event("added")
    log_bill_event(get_request_id(request), "added", bill.id)
    return _to_response(bill, today)


@router.get("/bills/{bill_id}", response_model=BillResponse)
def get_bill(bill_id: str, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    bill = engine.find_bill(BillRepository(db).load_bills(), bill_id)
    return _to_response(bill, clock.today())


@router.patch("/bills/{bill_id}", response_model=BillResponse)
def update_bill(
    bill_id: str,
    request_body: BillUpdateRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    reminder_client: ReminderClient = Depends(get_reminder_client),
):
    """Patch bill fields; a changed schedule replaces the bill's pending reminder"""
    repo = BillRepository(db)
    today = clock.today()

    try:
        changes = request_body.model_dump(exclude_unset=True, exclude_none=True)
        bills = engine.update_bill(repo.load_bills(), bill_id, changes)
        repo.save_bills(bills)
        db.commit()
    except DomainException:
        db.rollback()
        raise

    bill = engine.find_bill(bills, bill_id)
    if REMINDER_FIELDS & changes.keys():
        background_tasks.add_task(reminder_client.reschedule_reminder, bill, today)

    record_bill_event("updated")
    log_bill_event(get_request_id(request), "updated", bill_id)
    return _to_response(bill, today)


@router.post("/bills/{bill_id}/pay", response_model=BillResponse)
def mark_bill_paid(
    bill_id: str,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    reminder_client: ReminderClient = Depends(get_reminder_client),
):
    """Record a full payment dated today and cancel the bill's pending reminder"""
    repo = BillRepository(db)
    today = clock.today()

    try:
        bills = engine.mark_bill_paid(repo.load_bills(), bill_id, today)
        repo.save_bills(bills)
        db.commit()
    except DomainException:
        db.rollback()
        raise

    background_tasks.add_task(reminder_client.cancel_reminder, bill_id)

    record_bill_event("paid")
    log_bill_event(get_request_id(request), "paid", bill_id)
    return _to_response(engine.find_bill(bills, bill_id), today)


@router.delete("/bills/{bill_id}", status_code=204)
def delete_bill(
    bill_id: str,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    reminder_client: ReminderClient = Depends(get_reminder_client),
):
    repo = BillRepository(db)

    try:
        repo.save_bills(engine.delete_bill(repo.load_bills(), bill_id))
        db.commit()
    except DomainException:
        db.rollback()
        raise

    background_tasks.add_task(reminder_client.cancel_reminder, bill_id)

    record_bill_event("deleted")
    log_bill_event(get_request_id(request), "deleted", bill_id)
