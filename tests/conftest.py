"""Shared fixtures: in-memory storage, a ledger store and a service."""

import asyncio
from types import SimpleNamespace

import pytest

from milkyway.models.record import MilkRecord
from milkyway.orchestrator import LedgerService
from milkyway.services.storage import InMemoryKeyValueStore, LedgerStore


class FakeGeminiModel:
    """Stands in for genai.GenerativeModel; records every prompt it gets."""
    
    def __init__(self, text="**All good.**", error=None, delay=0.0):
        self.text = text
        self.error = error
        self.delay = delay
        self.prompts = []
    
    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def store(kv):
    return LedgerStore(kv)


@pytest.fixture
def service(store):
    return LedgerService(store)


@pytest.fixture
def make_record():
    """Build a MilkRecord with sensible defaults."""
    def _make(day="2024-03-01", quantity=1.0, price=50.0, paid=0.0, notes=None):
        return MilkRecord(
            date=day,
            quantity=quantity,
            price_per_unit=price,
            payment_amount=paid,
            notes=notes,
        ).reconciled()
    return _make
