"""
Shared fixtures: an in-memory stand-in for the Supabase client.

``FakeSupabase.table(name)`` hands out a query builder that records every
chained call and answers ``execute()`` with the next canned response queued
for that table, then the ``always`` response, then empty data.
"""

import os
import sys
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


class FakeQuery:
    def __init__(self, table, response=None, error=None):
        self.table_name = table
        self.calls = []
        self._response = response
        self._error = error

    def __getattr__(self, name):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return method

    def called(self, name):
        return [c for c in self.calls if c[0] == name]

    def execute(self):
        if self._error is not None:
            raise self._error
        return self._response


class FakeSupabase:
    def __init__(self):
        self.auth = MagicMock()
        self.queries = []
        self._queued = {}
        self._fallback = {}

    def respond(self, table, data=None, count=None, error=None):
        response = SimpleNamespace(data=data if data is not None else [], count=count)
        self._queued.setdefault(table, []).append((response, error))
        return self

    def always(self, table, data=None, count=None):
        """Answer every call on ``table`` with this once its queue is empty."""
        self._fallback[table] = SimpleNamespace(data=data if data is not None else [], count=count)
        return self

    def table(self, name):
        queue = self._queued.get(name) or []
        if queue:
            response, error = queue.pop(0)
        else:
            response, error = self._fallback.get(name, SimpleNamespace(data=[], count=None)), None
        query = FakeQuery(name, response, error)
        self.queries.append(query)
        return query

    def queries_for(self, table):
        return [q for q in self.queries if q.table_name == table]


class ProviderError(Exception):
    """Mimics postgrest/gotrue errors, which carry a ``message`` attribute."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


@pytest.fixture
def supabase():
    return FakeSupabase()


def package_row(**overrides):
    row = {
        "id": "pkg-1",
        "title": "Himalayan Trek",
        "description": "Ten days in the high mountains",
        "destination": "Nepal",
        "price": 500,
        "itinerary": "Day 1: Arrival",
        "images": ["https://example.com/a.jpg"],
        "inclusions": "Meals\nGuide\n",
        "exclusions": "Flights",
        "available_dates": ["2030-05-01", "2030-06-01"],
        "created_at": "2024-01-01T00:00:00+00:00",
    }
    row.update(overrides)
    return row


def booking_row(**overrides):
    row = {
        "id": "bk-1",
        "user_id": "user-1",
        "package_id": "pkg-1",
        "full_name": "Asha Rao",
        "email": "asha@example.com",
        "phone": "+91 98765 43210",
        "persons": 3,
        "travel_date": "2030-05-01",
        "special_requests": "",
        "booking_reference": "NT-LQ2X8K9A-7F3Q",
        "status": "pending",
        "created_at": "2024-02-01T00:00:00+00:00",
        "package": {"title": "Himalayan Trek", "destination": "Nepal", "price": 500, "images": []},
    }
    row.update(overrides)
    return row
