"""Unit tests for reminder webhook client"""

import asyncio
import json
import httpx
import pytest
from datetime import date
from nudgepal.infrastructure.clients.reminders import ReminderClient

TODAY = date(2025, 6, 15)


class RecordingTransport:
    """Mock transport answering with queued status codes"""

    def __init__(self, statuses):
        self.statuses = list(statuses)
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        return httpx.Response(self.statuses.pop(0) if self.statuses else 200)

    def client(self, max_retries: int = 3) -> ReminderClient:
        return ReminderClient(
            webhook_url="http://reminders.test/hook",
            max_retries=max_retries,
            backoff_base=0,
            transport=httpx.MockTransport(self.handler),
        )


def test_schedule_reminder_for_urgent_bill(make_bill):
    transport = RecordingTransport([200])
    bill = make_bill(bill_id="b1", due_in_days=2, reminder_days=3, name="Rent")

    sent = asyncio.run(transport.client().schedule_reminder(bill, TODAY))

    assert sent is True
    assert transport.requests == [
        {
            "event": "BILL_REMINDER_SCHEDULED",
            "bill_id": "b1",
            "title": "Bill Reminder",
            "body": "Rent is due in 3 days",
            "due_date": "2025-06-17",
            "remind_on": "2025-06-14",
        }
    ]


def test_schedule_reminder_skips_bills_outside_window(make_bill):
    transport = RecordingTransport([])

    assert asyncio.run(transport.client().schedule_reminder(make_bill(due_in_days=10), TODAY)) is False
    assert asyncio.run(transport.client().schedule_reminder(make_bill(due_in_days=0), TODAY)) is False
    assert transport.requests == []


def test_cancel_reminder_retries_until_success():
    transport = RecordingTransport([503, 500, 200])

    asyncio.run(transport.client(max_retries=3).cancel_reminder("b1"))

    assert len(transport.requests) == 3
    assert transport.requests[-1] == {"event": "BILL_REMINDER_CANCELLED", "bill_id": "b1"}


def test_cancel_reminder_raises_after_final_retry():
    transport = RecordingTransport([500, 500])

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(transport.client(max_retries=2).cancel_reminder("b1"))
    assert len(transport.requests) == 2


def test_schedule_reminder_skips_inactive_bills(make_bill):
    transport = RecordingTransport([])

    assert asyncio.run(transport.client().schedule_reminder(make_bill(due_in_days=2, is_active=False), TODAY)) is False
    assert transport.requests == []


def test_reschedule_reminder_cancels_then_schedules(make_bill):
    transport = RecordingTransport([])

    sent = asyncio.run(transport.client().reschedule_reminder(make_bill(bill_id="b1", due_in_days=2), TODAY))

    assert sent is True
    assert [r["event"] for r in transport.requests] == ["BILL_REMINDER_CANCELLED", "BILL_REMINDER_SCHEDULED"]


def test_reschedule_all_schedules_only_bills_in_window(make_bill):
    transport = RecordingTransport([])
    bills = [
        make_bill(bill_id="soon", due_in_days=2),
        make_bill(bill_id="later", due_in_days=10),
        make_bill(bill_id="paused", due_in_days=2, is_active=False),
    ]

    scheduled = asyncio.run(transport.client().reschedule_all(bills, TODAY))

    assert scheduled == ["soon"]
    assert [(r["event"], r["bill_id"]) for r in transport.requests] == [
        ("BILL_REMINDER_CANCELLED", "soon"),
        ("BILL_REMINDER_CANCELLED", "later"),
        ("BILL_REMINDER_CANCELLED", "paused"),
        ("BILL_REMINDER_SCHEDULED", "soon"),
    ]
