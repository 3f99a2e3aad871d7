"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from nudgepal.infrastructure.clients.reminders import ReminderClient
from nudgepal.utils.clock import Clock, SystemClock


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_clock() -> Clock:
    """Provide the clock that supplies 'today' to engine calls"""
    return SystemClock()


def get_reminder_client() -> ReminderClient:
    """Provide reminder webhook client instance"""
    return ReminderClient()


