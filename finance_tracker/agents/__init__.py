"""AI Agents package."""

from finance_tracker.agents.ai_agents import (
    ANALYSIS_ERROR_FALLBACK,
    EMPTY_ANALYSIS_FALLBACK,
    EMPTY_DATA_HINT,
    NO_INPUT_ERROR,
    PROCESSING_ERROR,
    FinancialCommandAgent,
    FinancialInsightsAgent,
    strip_code_fences,
)

__all__ = [
    "ANALYSIS_ERROR_FALLBACK",
    "EMPTY_ANALYSIS_FALLBACK",
    "EMPTY_DATA_HINT",
    "NO_INPUT_ERROR",
    "PROCESSING_ERROR",
    "FinancialCommandAgent",
    "FinancialInsightsAgent",
    "strip_code_fences",
]
