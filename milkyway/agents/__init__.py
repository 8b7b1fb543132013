"""AI Agents package."""

from milkyway.agents.insight_agent import (
    FAILURE_MESSAGE,
    MISSING_KEY_MESSAGE,
    NO_INSIGHT_MESSAGE,
    NO_RECORDS_MESSAGE,
    InsightAgent,
    RemoteAnalysisError,
    build_insight_payload,
    build_prompt,
)

__all__ = [
    "FAILURE_MESSAGE",
    "MISSING_KEY_MESSAGE",
    "NO_INSIGHT_MESSAGE",
    "NO_RECORDS_MESSAGE",
    "InsightAgent",
    "RemoteAnalysisError",
    "build_insight_payload",
    "build_prompt",
]
