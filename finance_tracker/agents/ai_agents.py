"""
AI Agents for Finance Tracker

CRITICAL BOUNDARIES:

1. COMMAND AGENT:
   - CAN: Turn a spoken or typed sentence into a transaction/subscription draft
   - CANNOT: Persist anything (the tracker decides what to store)
   - CANNOT: Invent enum values (unrecognized values make the command UNKNOWN)

2. INSIGHTS AGENT:
   - CAN: Write a short analysis FROM the data it is given
   - CAN: Suggest a category for a name/description pair
   - CANNOT: Fail loudly (every failure becomes a fixed fallback)

The LLM is a TRANSLATOR, not an ORACLE.
Neither agent ever raises to its caller.
"""

import base64
import binascii
import json
from datetime import date
from typing import Any, Optional, Sequence

import google.generativeai as genai
import structlog

from finance_tracker.aggregation import recent_transactions
from finance_tracker.audit import AuditLogger
from finance_tracker.config import get_settings
from finance_tracker.models.audit import AuditEventBuilder
from finance_tracker.models.commands import ParsedCommand
from finance_tracker.models.finance import (
    Category,
    Frequency,
    Subscription,
    Transaction,
    TransactionType,
)
from finance_tracker.validation import CommandValidator


logger = structlog.get_logger(__name__)

GEMINI_SERVICE = "gemini"
AUDIO_MIME_TYPE = "audio/wav"

NO_INPUT_ERROR = "No text or audio was provided."
PROCESSING_ERROR = "Something went wrong while processing the request."

EMPTY_DATA_HINT = (
    "Add some transactions or subscriptions first so there is something to analyze."
)
EMPTY_ANALYSIS_FALLBACK = "An analysis could not be generated right now."
ANALYSIS_ERROR_FALLBACK = (
    "The financial assistant could not be reached. "
    "Please check your connection or try again later."
)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences the model sometimes wraps JSON in."""
    return text.replace("```json", "").replace("```", "").strip()


def _report_service_error(
    audit_logger: Optional[AuditLogger],
    event: str,
    error: Exception,
    **context,
) -> None:
    logger.error(event, error=str(error), **context)
    if audit_logger:
        audit_logger.log(
            AuditEventBuilder.external_service_error(GEMINI_SERVICE, str(error))
        )


def _build_model(model_name: str, max_tokens: Optional[int] = None):
    settings = get_settings().gemini
    genai.configure(api_key=settings.api_key)
    return genai.GenerativeModel(
        model_name=model_name,
        generation_config={
            "temperature": settings.temperature,
            "max_output_tokens": max_tokens or settings.max_tokens,
        }
    )


class FinancialCommandAgent:
    """
    Parses natural language finance commands.

    FLOW:
    1. Text or audio → model (JSON response mode)
    2. JSON → CommandValidator (deterministic)
    3. ParsedCommand back to the caller

    Models can be injected; otherwise they are built from GeminiSettings
    on first use.
    """

    def __init__(
        self,
        model=None,
        audio_model=None,
        today: Optional[date] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._model = model
        self._audio_model = audio_model
        self._today = today
        self._audit_logger = audit_logger

    @property
    def today(self) -> date:
        return self._today or date.today()

    def _text_model(self):
        if self._model is None:
            self._model = _build_model(get_settings().gemini.model_name)
        return self._model

    def _voice_model(self):
        if self._audio_model is None:
            self._audio_model = _build_model(get_settings().gemini.audio_model_name)
        return self._audio_model

    def build_system_prompt(self) -> str:
        categories = ", ".join(c.value for c in Category)
        frequencies = ", ".join(f.value for f in Frequency)
        types = ", ".join(t.value for t in TransactionType)

        return f"""You are a smart personal finance assistant. Extract structured data from the user's input (text or audio) to create either a one-off transaction or a recurring subscription.

TODAY'S DATE: {self.today.isoformat()}

ALLOWED VALUES:
Categories: [{categories}]
Frequencies: [{frequencies}]
Transaction types: [{types}]

RULES:
1. Decide whether the user is recording a single income/expense (TRANSACTION) or a recurring subscription (SUBSCRIPTION).
2. For a subscription, find name, amount, frequency and next payment date.
3. For a transaction, find description, amount, type (expense by default), category and date.
4. Resolve relative dates like "yesterday", "today" or "last Friday" against today's date.
5. If the category is missing, infer it from the description.
6. Use the allowed values EXACTLY as written.
7. Return ONLY a valid JSON object.

EXPECTED JSON SCHEMA:
{{
  "intent": "TRANSACTION" | "SUBSCRIPTION" | "UNKNOWN",
  "data": {{
    "type": "income" | "expense",
    "amount": number,
    "category": string,
    "date": "YYYY-MM-DD",
    "description": string,
    "name": string,
    "frequency": string,
    "nextPaymentDate": "YYYY-MM-DD"
  }},
  "error": "Why the request could not be understood (optional)"
}}"""

    def _build_contents(
        self,
        text: Optional[str],
        audio_base64: Optional[str],
    ) -> Optional[list[Any]]:
        prompt = self.build_system_prompt()
        if audio_base64:
            audio = base64.b64decode(audio_base64, validate=True)
            return [
                prompt,
                {"mime_type": AUDIO_MIME_TYPE, "data": audio},
                "Analyze this audio and extract the financial information.",
            ]
        if text and text.strip():
            return [prompt, text.strip()]
        return None

    async def parse_command(
        self,
        text: Optional[str] = None,
        audio_base64: Optional[str] = None,
    ) -> ParsedCommand:
        """
        Parse a typed or spoken command.

        Audio wins when both are given. Never raises: every failure
        comes back as an UNKNOWN command with an error message.
        """
        source = "audio" if audio_base64 else "text"

        try:
            contents = self._build_contents(text, audio_base64)
        except (binascii.Error, ValueError) as e:
            logger.warning("command_audio_invalid", error=str(e))
            return ParsedCommand.unknown(PROCESSING_ERROR)

        if contents is None:
            return ParsedCommand.unknown(NO_INPUT_ERROR)

        model = self._voice_model() if audio_base64 else self._text_model()

        try:
            response = await model.generate_content_async(
                contents,
                generation_config={"response_mime_type": "application/json"},
            )
            raw = json.loads(strip_code_fences(response.text or "{}"))
        except Exception as e:
            _report_service_error(
                self._audit_logger, "command_parse_failed", e, source=source
            )
            return ParsedCommand.unknown(PROCESSING_ERROR)

        command, issues = CommandValidator(today=self.today).validate(raw)
        if issues:
            logger.info(
                "command_validation_issues",
                source=source,
                intent=command.intent.value,
                issues=[issue.message for issue in issues],
            )
        return command


class FinancialInsightsAgent:
    """
    Generates a prose analysis of the user's finances.

    The model only sees the subscriptions and the most recent
    transactions it is given. Output is shown to the user as-is.
    """

    def __init__(
        self,
        model=None,
        transaction_limit: Optional[int] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._model = model
        self._transaction_limit = transaction_limit
        self._audit_logger = audit_logger

    def _text_model(self):
        if self._model is None:
            self._model = _build_model(get_settings().gemini.model_name)
        return self._model

    @property
    def transaction_limit(self) -> int:
        if self._transaction_limit is None:
            self._transaction_limit = get_settings().app.analysis_transaction_limit
        return self._transaction_limit

    def build_analysis_prompt(
        self,
        subscriptions: Sequence[Subscription],
        transactions: Sequence[Transaction],
    ) -> str:
        subs_text = "\n".join(
            f"- [Subscription] {s.name}: {s.amount} {s.currency} "
            f"({s.frequency.value}), Category: {s.category.value}"
            for s in subscriptions
        )
        recent_text = "\n".join(
            f"- [{'Income' if t.type == TransactionType.INCOME else 'Expense'}] "
            f"{t.transaction_date.isoformat()}: {t.description} - {t.amount} "
            f"({t.category.value})"
            for t in recent_transactions(transactions, self.transaction_limit)
        )

        return f"""Act as an expert personal financial advisor.
Analyze the following financial information.

RECURRING SUBSCRIPTIONS (fixed costs):
{subs_text or "None"}

RECENT MOVEMENTS (income and variable expenses):
{recent_text or "None"}

Give a short but insightful analysis in Markdown:
1. Evaluate cash flow (income vs expenses).
2. Point out unnecessary spending, both subscriptions and variable expenses.
3. Suggest concrete ways to save.
4. Comment on how spending is distributed.

Keep the tone professional, encouraging and direct. Use bold for key points."""

    async def analyze_finances(
        self,
        subscriptions: Sequence[Subscription],
        transactions: Sequence[Transaction],
    ) -> str:
        """Return a Markdown analysis, or a fixed message on any failure."""
        if not subscriptions and not transactions:
            return EMPTY_DATA_HINT

        prompt = self.build_analysis_prompt(subscriptions, transactions)
        try:
            response = await self._text_model().generate_content_async(prompt)
            text = (response.text or "").strip()
        except Exception as e:
            _report_service_error(self._audit_logger, "analysis_failed", e)
            return ANALYSIS_ERROR_FALLBACK

        return text or EMPTY_ANALYSIS_FALLBACK

    async def suggest_category(self, name: str, description: str = "") -> Category:
        """
        Suggest a category for a transaction or subscription.

        Returns Category.OTHER when the model is unreachable or answers
        with anything outside the category list.
        """
        categories = ", ".join(c.value for c in Category)
        prompt = (
            f'Given the transaction or subscription "{name}" with description '
            f'"{description}", pick the most appropriate category from this list: '
            f"{categories}. Return ONLY the category name."
        )

        try:
            response = await self._text_model().generate_content_async(prompt)
            answer = strip_code_fences(response.text or "").strip().strip('"').lower()
        except Exception as e:
            _report_service_error(self._audit_logger, "category_suggestion_failed", e)
            return Category.OTHER

        try:
            return Category(answer)
        except ValueError:
            logger.info("category_suggestion_unrecognized", answer=answer)
            return Category.OTHER
