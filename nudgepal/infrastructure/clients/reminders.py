"""Reminder webhook client with exponential backoff retry logic"""

import httpx
import asyncio
from datetime import date
from typing import Dict, Any, List
from nudgepal.config import settings
from nudgepal.domain.bills import bills_in_reminder_window, classify, reminder_date
from nudgepal.domain.models import Bill, STATUS_URGENT
from nudgepal.infrastructure.observability.metrics import webhook_latency_histogram, webhook_failure_counter


class ReminderClient:
    """Client for handing bill reminder events to the notification service"""

    def __init__(
        self,
        webhook_url: str | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.webhook_url = webhook_url or settings.reminder_webhook_url
        self.max_retries = max_retries if max_retries is not None else settings.webhook_max_retries
        self.backoff_base = backoff_base if backoff_base is not None else settings.webhook_backoff_base
        self.timeout = settings.http_timeout_seconds
        self.transport = transport

    async def schedule_reminder(self, bill: Bill, today: date) -> bool:
        """
        Schedule a reminder for an active bill inside its reminder window.

        Returns:
            True if an event was sent, False if the bill is inactive or not urgent
        """
        if not bill.is_active or classify(bill, today) != STATUS_URGENT:
            return False

        await self._send(
            {
                "event": "BILL_REMINDER_SCHEDULED",
                "bill_id": bill.id,
                "title": "Bill Reminder",
                "body": f"{bill.name} is due in {bill.reminder_days} days",
                "due_date": bill.due_date.isoformat(),
                "remind_on": reminder_date(bill).isoformat(),
            }
        )
        return True

    async def cancel_reminder(self, bill_id: str) -> None:
        """Cancel any pending reminder for a paid or deleted bill"""
        await self._send({"event": "BILL_REMINDER_CANCELLED", "bill_id": bill_id})

    async def reschedule_reminder(self, bill: Bill, today: date) -> bool:
        """Drop the bill's pending reminder and schedule it again from its current fields"""
        await self.cancel_reminder(bill.id)
        return await self.schedule_reminder(bill, today)

    async def reschedule_all(self, bills: List[Bill], today: date) -> List[str]:
        """
        Cancel every bill's reminder, then schedule the ones now in their window.

        Returns:
            Ids of the bills a reminder was scheduled for
        """
        for bill in bills:
            await self.cancel_reminder(bill.id)

        scheduled = []
        for bill in bills_in_reminder_window(bills, today):
            if await self.schedule_reminder(bill, today):
                scheduled.append(bill.id)
        return scheduled

    async def _send(self, payload: Dict[str, Any]) -> None:
        """
        Post an event with retry logic.

        Retry strategy:
        - Exponential backoff: 1s, 2s, 4s, 8s (base * 2^attempt)
        - Retries on 4xx/5xx errors and network failures
        - Tracks latency histogram and failure counter
        """
        attempt = 0
        async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
            while attempt < self.max_retries:
                try:
                    with webhook_latency_histogram.time():
                        response = await client.post(self.webhook_url, json=payload)
                        response.raise_for_status()
                        return  # Success

                except (httpx.HTTPStatusError, httpx.RequestError):
                    attempt += 1
                    webhook_failure_counter.inc()

                    if attempt >= self.max_retries:
                        # Final failure after all retries
                        raise

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)
