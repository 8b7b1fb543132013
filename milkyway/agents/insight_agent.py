"""
AI Insight Agent for MilkyWay Ledger

Produces a friendly markdown summary of recent deliveries and payments.

CRITICAL BOUNDARIES:
- CAN: Read a snapshot of records handed to it
- CANNOT: Write to the ledger (it holds no store reference)
- CANNOT: Raise into the caller. Missing credentials, remote errors,
  timeouts and empty answers all come back as a user-facing string.

The model only ever sees a projection of the most recent records:
{date, qty, cost, paidAmount}. Prices, notes and settings history stay local.
"""

import asyncio
import json
from typing import Iterable, Optional

import google.generativeai as genai
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from milkyway.config import GeminiSettings, get_settings
from milkyway.logs import LedgerEventLogger
from milkyway.models.record import LedgerSettings, MilkRecord


MISSING_KEY_MESSAGE = "API Key is missing. Please set the GEMINI_API_KEY environment variable."
NO_RECORDS_MESSAGE = "There are no records to analyze yet. Add a few days first."
NO_INSIGHT_MESSAGE = "Could not generate insights at this time."
FAILURE_MESSAGE = (
    "Sorry, I encountered an error while analyzing your data. Please try again later."
)


class RemoteAnalysisError(Exception):
    """The model call finished but produced no usable text."""
    pass


def build_insight_payload(records: Iterable[MilkRecord], limit: int = 90) -> list[dict]:
    """
    Project the most recent `limit` records (by date) for the model.

    Output is ascending by date so the model reads the history in order.
    """
    ordered = sorted(records, key=lambda record: record.date_key)
    recent = ordered[-limit:] if limit > 0 else []
    return [
        {
            "date": record.date_key,
            "qty": record.quantity,
            "cost": record.quantity * record.price_per_unit,
            "paidAmount": record.payment_amount,
        }
        for record in recent
    ]


def build_prompt(payload: list[dict], settings: LedgerSettings) -> str:
    """Instructions plus the serialized projection, as one prompt."""
    return f"""You are a smart assistant for a milk/grocery tracking app.
Analyze the provided JSON data of milk purchases and payments.
Provide a concise, friendly summary in markdown.
Focus on:
1. Total spending vs total payments made.
2. Current balance (if they owe money or have credit).
3. Average daily consumption.
4. Any interesting patterns (e.g., "You tend to buy more on weekends").
5. A customized tip for saving money.

The currency is {settings.currency_symbol} and unit is {settings.unit_label}.
Keep the tone helpful and encouraging.
Do not output JSON, output readable Markdown.

Here is my milk purchase history and payment log:
{json.dumps(payload)}

Please analyze this."""


class InsightAgent:
    """
    Gemini-backed summary of the ledger.

    A model object can be injected (anything with an async
    generate_content_async(prompt) returning an object with .text).
    Without an injected model and without an API key the agent is
    disabled and answers with MISSING_KEY_MESSAGE.
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model=None,
        event_logger: Optional[LedgerEventLogger] = None,
    ):
        self._settings = settings or get_settings().gemini
        self._events = event_logger or LedgerEventLogger()
        self._model = model
        if self._model is None and self._settings.is_configured:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    @property
    def is_enabled(self) -> bool:
        return self._model is not None

    async def _generate(self, prompt: str) -> str:
        """Call the model with retries; raise RemoteAnalysisError on empty text."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._settings.retry_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
            reraise=True,
        ):
            with attempt:
                response = await self._model.generate_content_async(prompt)
                text = (response.text or "").strip()
                if not text:
                    raise RemoteAnalysisError("Model returned no text")
                return text
        raise RemoteAnalysisError("Model was never called")

    async def analyze(
        self,
        records: Iterable[MilkRecord],
        settings: LedgerSettings,
    ) -> str:
        """
        Summarize the records. Always returns a string.

        The records are copied on entry, so later ledger edits do not
        affect an analysis already in flight.
        """
        if not self.is_enabled:
            return MISSING_KEY_MESSAGE

        snapshot = list(records)
        if not snapshot:
            return NO_RECORDS_MESSAGE

        payload = build_insight_payload(snapshot, self._settings.insight_record_limit)
        prompt = build_prompt(payload, settings)

        try:
            return await asyncio.wait_for(
                self._generate(prompt),
                timeout=self._settings.timeout_seconds,
            )
        except RemoteAnalysisError as e:
            self._events.log_insight_failed("empty_response", str(e))
            return NO_INSIGHT_MESSAGE
        except asyncio.TimeoutError:
            self._events.log_insight_failed(
                "timeout", f"No answer within {self._settings.timeout_seconds}s"
            )
            return FAILURE_MESSAGE
        except Exception as e:
            self._events.log_insight_failed(type(e).__name__, str(e))
            return FAILURE_MESSAGE
