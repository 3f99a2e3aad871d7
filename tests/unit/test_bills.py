"""Unit tests for bill status engine"""

import pytest
from datetime import date, datetime, timedelta
from nudgepal.domain.bills import (
    add_bill,
    bills_in_reminder_window,
    classify,
    create_bill,
    delete_bill,
    filter_by_status,
    filter_for_date,
    filter_upcoming_within_days,
    find_bill,
    get_days_until_due,
    group_bills_by_status,
    mark_as_paid,
    mark_bill_paid,
    reminder_date,
    status_context_text,
    update_bill,
)
from nudgepal.domain.exceptions import NotFoundError, ValidationError
from nudgepal.domain.models import Bill, PaymentRecord

TODAY = date(2025, 6, 15)


def test_days_until_due_ignores_time_of_day(make_bill):
    """Bill due today is 0 days away at any clock time"""
    bill = make_bill(due_in_days=0)

    assert get_days_until_due(bill, TODAY) == 0
    assert get_days_until_due(bill, datetime(2025, 6, 15, 0, 0, 1)) == 0
    assert get_days_until_due(bill, datetime(2025, 6, 15, 23, 59, 59)) == 0


def test_days_until_due_sign(make_bill):
    assert get_days_until_due(make_bill(due_in_days=5), TODAY) == 5
    assert get_days_until_due(make_bill(due_in_days=-2), TODAY) == -2


def test_bill_due_today_is_overdue():
    """Due-today counts as overdue, not urgent"""
    bill = Bill(id="b", name="Rent", amount=900, due_date=date(2025, 6, 15), reminder_days=3)

    assert get_days_until_due(bill, date(2025, 6, 15)) == 0
    assert classify(bill, date(2025, 6, 15)) == "overdue"


def test_classify_boundaries(make_bill):
    assert classify(make_bill(due_in_days=-1), TODAY) == "overdue"
    assert classify(make_bill(due_in_days=1, reminder_days=3), TODAY) == "urgent"
    assert classify(make_bill(due_in_days=3, reminder_days=3), TODAY) == "urgent"
    assert classify(make_bill(due_in_days=4, reminder_days=3), TODAY) == "upcoming"
    # Zero lead time: never urgent
    assert classify(make_bill(due_in_days=1, reminder_days=0), TODAY) == "upcoming"


def test_classify_unpaid_is_total_partition(make_bill):
    """Every unpaid bill lands in exactly one of urgent/upcoming/overdue"""
    bills = [make_bill(bill_id=str(d), due_in_days=d) for d in range(-5, 15)]

    for bill in bills:
        matches = [s for s in ("urgent", "upcoming", "overdue") if bill in filter_by_status(bills, s, TODAY)]
        assert len(matches) == 1
        assert matches[0] == classify(bill, TODAY)


def test_paid_takes_priority_over_dates(make_bill):
    overdue = mark_as_paid(make_bill(due_in_days=-10), TODAY)
    upcoming = mark_as_paid(make_bill(due_in_days=30), TODAY)

    assert classify(overdue, TODAY) == "paid"
    assert classify(upcoming, TODAY) == "paid"


def test_mark_as_paid_appends_each_call(make_bill):
    bill = make_bill(amount=42.5)

    once = mark_as_paid(bill, TODAY)
    twice = mark_as_paid(once, datetime(2025, 6, 16, 8, 30))

    assert bill.payment_history == []  # Original untouched
    assert once.payment_history == [PaymentRecord(date=TODAY, amount=42.5)]
    assert len(twice.payment_history) == 2
    assert twice.payment_history[1] == PaymentRecord(date=date(2025, 6, 16), amount=42.5)
    assert classify(once, TODAY) == "paid"
    assert classify(twice, TODAY) == "paid"


def test_inactive_bills_never_filtered(make_bill):
    inactive = [
        make_bill(bill_id="a", due_in_days=-3, is_active=False),
        make_bill(bill_id="b", due_in_days=2, is_active=False),
        make_bill(bill_id="c", due_in_days=20, is_active=False),
        mark_as_paid(make_bill(bill_id="d", is_active=False), TODAY),
    ]

    for status in ("urgent", "upcoming", "overdue", "paid"):
        assert filter_by_status(inactive, status, TODAY) == []
    assert filter_upcoming_within_days(inactive, 30, TODAY) == []
    assert filter_for_date(inactive, TODAY + timedelta(days=2)) == []


def test_filter_by_status_unknown_status_returns_empty(make_bill):
    assert filter_by_status([make_bill()], "due_today", TODAY) == []


def test_filter_upcoming_within_days_includes_paid(make_bill):
    bills = [
        make_bill(bill_id="today", due_in_days=0),
        make_bill(bill_id="soon", due_in_days=3),
        mark_as_paid(make_bill(bill_id="paid", due_in_days=7), TODAY),
        make_bill(bill_id="later", due_in_days=8),
    ]

    result = filter_upcoming_within_days(bills, 7, TODAY)

    assert [b.id for b in result] == ["soon", "paid"]


def test_filter_for_date_matches_calendar_date(make_bill):
    bills = [make_bill(bill_id="a", due_in_days=1), make_bill(bill_id="b", due_in_days=2)]

    result = filter_for_date(bills, datetime(2025, 6, 16, 18, 0))

    assert [b.id for b in result] == ["a"]


def test_group_bills_by_status_sorted_by_due_date(make_bill):
    bills = [
        make_bill(bill_id="late", due_in_days=-1),
        make_bill(bill_id="later", due_in_days=20),
        make_bill(bill_id="soon", due_in_days=10),
        make_bill(bill_id="urgent", due_in_days=2),
        make_bill(bill_id="hidden", due_in_days=2, is_active=False),
    ]

    grouped = group_bills_by_status(bills, TODAY)

    assert [b.id for b in grouped["upcoming"]] == ["soon", "later"]
    assert [b.id for b in grouped["urgent"]] == ["urgent"]
    assert [b.id for b in grouped["overdue"]] == ["late"]
    assert grouped["paid"] == []


def test_status_context_text(make_bill):
    assert status_context_text(make_bill(due_in_days=0), TODAY) == "Due today"
    assert status_context_text(make_bill(due_in_days=1), TODAY) == "1 day left"
    assert status_context_text(make_bill(due_in_days=3), TODAY) == "3 days left"
    assert status_context_text(make_bill(due_in_days=-1), TODAY) == "Overdue 1 day"
    assert status_context_text(make_bill(due_in_days=-4), TODAY) == "Overdue 4 days"


def test_reminder_window(make_bill):
    bills = [make_bill(bill_id="a", due_in_days=2), make_bill(bill_id="b", due_in_days=9)]

    assert reminder_date(bills[0]) == date(2025, 6, 14)
    assert [b.id for b in bills_in_reminder_window(bills, TODAY)] == ["a"]


def test_create_bill_assigns_id_and_empty_history():
    created = datetime(2025, 6, 15, 9, 0)
    bill = create_bill("  Phone ", 30, "2025-07-01", created_at=created, frequency="yearly")

    assert bill.id
    assert bill.name == "Phone"
    assert bill.due_date == date(2025, 7, 1)
    assert bill.payment_history == []
    assert bill.created_at == created
    assert create_bill("Phone", 30, "2025-07-01", created_at=created).id != bill.id


@pytest.mark.parametrize(
    "kwargs",
    [
        {"name": ""},
        {"name": "   "},
        {"amount": -1},
        {"due_date": "2025-13-40"},
        {"due_date": "next week"},
        {"frequency": "weekly"},
        {"reminder_days": -1},
        {"amount": "5"},
        {"amount": None},
        {"reminder_days": "abc"},
        {"reminder_days": 1.5},
    ],
)
def test_create_bill_validation(kwargs):
    fields = {"name": "Water", "amount": 20, "due_date": "2025-07-01", "created_at": datetime(2025, 6, 15)}
    fields.update(kwargs)

    with pytest.raises(ValidationError):
        create_bill(**fields)


def test_add_bill_rejects_duplicate_id(make_bill):
    bills = add_bill([], make_bill())

    with pytest.raises(ValidationError):
        add_bill(bills, make_bill())


def test_update_bill_patches_fields(make_bill):
    bills = [make_bill(bill_id="a"), make_bill(bill_id="b")]

    updated = update_bill(bills, "a", {"amount": 75, "due_date": "2025-06-20", "is_active": False})

    bill = find_bill(updated, "a")
    assert bill.amount == 75.0
    assert bill.due_date == date(2025, 6, 20)
    assert bill.is_active is False
    assert find_bill(updated, "b") == bills[1]


def test_update_bill_rejects_immutable_fields(make_bill):
    with pytest.raises(ValidationError):
        update_bill([make_bill()], "bill_1", {"id": "other"})
    with pytest.raises(ValidationError):
        update_bill([make_bill()], "bill_1", {"payment_history": []})


def test_update_bill_rejects_invalid_values(make_bill):
    with pytest.raises(ValidationError):
        update_bill([make_bill()], "bill_1", {"amount": -5})
    with pytest.raises(ValidationError):
        update_bill([make_bill()], "bill_1", {"reminder_days": "3"})


def test_unknown_bill_id_raises_not_found(make_bill):
    bills = [make_bill()]

    with pytest.raises(NotFoundError):
        find_bill(bills, "missing")
    with pytest.raises(NotFoundError):
        update_bill(bills, "missing", {"name": "x"})
    with pytest.raises(NotFoundError):
        delete_bill(bills, "missing")
    with pytest.raises(NotFoundError):
        mark_bill_paid(bills, "missing", TODAY)


def test_delete_and_mark_paid_by_id(make_bill):
    bills = [make_bill(bill_id="a"), make_bill(bill_id="b")]

    assert [b.id for b in delete_bill(bills, "a")] == ["b"]

    paid = mark_bill_paid(bills, "b", TODAY)
    assert classify(find_bill(paid, "b"), TODAY) == "paid"
    assert find_bill(paid, "a").payment_history == []
