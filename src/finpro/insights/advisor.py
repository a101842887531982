"""Gemini-backed financial insights.

The advisor is an optional collaborator: every failure (missing key, network
error, quota, unusable reply) is logged and turned into a fallback value, so
the ledger never depends on it.
"""

from __future__ import annotations

import json
from datetime import date as date_type
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

import google.generativeai as genai
import structlog
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from finpro.config import GeminiSettings, get_settings
from finpro.domain.entities import (
    Account,
    Budget,
    Category,
    Debt,
    LedgerSnapshot,
    Transaction,
    TransactionType,
)
from finpro.domain.errors import ExternalServiceError

logger = structlog.get_logger(__name__)

UNAVAILABLE_MESSAGE = (
    "No pude realizar el análisis en este momento. Por favor, intenta más tarde."
)


class TransactionDraft(BaseModel):
    """Transaction proposed from a spoken or typed sentence.

    Nothing is recorded until the caller confirms the draft and passes it to
    ``TransactionService.create_transaction``.
    """

    amount: Decimal = Field(gt=0)
    category_id: str
    account_id: str
    description: str = ""
    date: date_type = Field(default_factory=date_type.today)
    type: TransactionType = TransactionType.EXPENSE


def _json_default(value: Any) -> str:
    return str(value) if isinstance(value, Decimal) else value.isoformat()


def _transaction_row(txn: Transaction) -> dict:
    return {
        "date": txn.date,
        "type": txn.type.value,
        "amount": txn.amount,
        "category_id": txn.category_id,
        "description": txn.description,
    }


def _budget_row(budget: Budget, categories: dict[str, str]) -> dict:
    return {"category": categories.get(budget.category_id, budget.category_id), "limit": budget.limit}


def _debt_row(debt: Debt) -> dict:
    return {
        "name": debt.name,
        "type": debt.type.value,
        "total": debt.total_amount,
        "remaining": debt.remaining_amount,
        "interest_rate": debt.interest_rate,
    }


def extract_json(text: str) -> dict:
    """Return the first JSON object embedded in a model reply.

    Raises:
        ValueError: If the reply holds no JSON object
    """
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        raise ValueError("No JSON object in reply")
    return json.loads(text[start:end])


class FinancialAdvisor:
    """Client for the Gemini model used for insights and voice drafts."""

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Any = None,
        recent_transactions: Optional[int] = None,
        wait=None,
    ):
        """Initialize the advisor.

        Args:
            settings: Gemini configuration (defaults to get_settings().gemini)
            model: Object with ``generate_content(prompt)``; built from the
                settings on first use when omitted
            recent_transactions: How many recent transactions to analyze
            wait: tenacity wait strategy between attempts
        """
        self._settings = settings or get_settings().gemini
        self._model = model
        self._recent = recent_transactions or get_settings().recent_transactions_for_insights
        self._wait = wait or wait_exponential(multiplier=1, min=1, max=10)

    def _get_model(self, api_key: Optional[str]):
        if self._model is not None:
            return self._model
        key = api_key or self._settings.api_key
        if not key:
            raise ExternalServiceError("No Gemini API key configured")
        genai.configure(api_key=key)
        return genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_output_tokens,
            },
        )

    def _generate(self, prompt: str, api_key: Optional[str] = None) -> str:
        """Send a prompt with bounded retries.

        Raises:
            ExternalServiceError: If every attempt failed or the reply is empty
        """
        model = self._get_model(api_key)
        retrying = Retrying(
            stop=stop_after_attempt(self._settings.max_attempts),
            wait=self._wait,
            retry=retry_if_exception_type(ExternalServiceError),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                try:
                    response = model.generate_content(prompt)
                    text = response.text
                except Exception as e:
                    logger.warning(
                        "advisor.request_failed",
                        attempt=attempt.retry_state.attempt_number,
                        error=str(e),
                    )
                    raise ExternalServiceError(f"Gemini request failed: {e}") from e
        if not text or not text.strip():
            raise ExternalServiceError("Gemini returned an empty reply")
        return text.strip()

    def build_analysis_prompt(self, snapshot: LedgerSnapshot) -> str:
        categories = {c.id: c.name for c in snapshot.categories}
        recent = [_transaction_row(t) for t in snapshot.transactions[: self._recent]]
        budgets = [_budget_row(b, categories) for b in snapshot.budgets]
        debts = [_debt_row(d) for d in snapshot.debts]
        return (
            "Como asesor financiero, analiza estos datos y da consejos accionables.\n\n"
            f"Movimientos recientes: {json.dumps(recent, default=_json_default, ensure_ascii=False)}\n"
            f"Categorías: {json.dumps(categories, ensure_ascii=False)}\n"
            f"Presupuestos: {json.dumps(budgets, default=_json_default, ensure_ascii=False)}\n"
            f"Deudas: {json.dumps(debts, default=_json_default, ensure_ascii=False)}\n"
            f"Moneda: {snapshot.settings.currency}\n\n"
            "Incluye: estado de salud financiera, patrones de gasto inusuales, "
            "tres consejos para reducir gastos y un comentario sobre las deudas. "
            "Responde en Markdown, máximo 300 palabras."
        )

    def analyze_finances(self, snapshot: LedgerSnapshot) -> str:
        """Return a Markdown analysis of the ledger, or UNAVAILABLE_MESSAGE."""
        try:
            return self._generate(
                self.build_analysis_prompt(snapshot), api_key=snapshot.settings.ai_api_key
            )
        except ExternalServiceError as e:
            logger.warning("advisor.analysis_unavailable", error=str(e))
            return UNAVAILABLE_MESSAGE

    def build_voice_prompt(
        self,
        text: str,
        categories: Sequence[Category],
        accounts: Sequence[Account],
        currency: str = "$",
        today: Optional[date_type] = None,
    ) -> str:
        today = today or date_type.today()
        category_list = [{"id": c.id, "name": c.name} for c in categories]
        account_list = [{"id": a.id, "name": a.name} for a in accounts]
        types = ", ".join(t.value for t in TransactionType if t != TransactionType.TRANSFER)
        return (
            "Convierte la frase del usuario en un movimiento financiero.\n"
            f'Frase: "{text}"\n'
            f"Moneda: {currency}\n"
            f"Hoy: {today.isoformat()}\n"
            f"Categorías: {json.dumps(category_list, ensure_ascii=False)}\n"
            f"Cuentas: {json.dumps(account_list, ensure_ascii=False)}\n\n"
            "Responde SOLO con un objeto JSON con este formato:\n"
            '{"amount": 12.5, "category_id": "<id>", "account_id": "<id>", '
            f'"description": "texto", "date": "YYYY-MM-DD", "type": "<uno de: {types}>"}}'
        )

    def parse_voice_command(
        self,
        text: str,
        categories: Iterable[Category],
        accounts: Iterable[Account],
        currency: str = "$",
        api_key: Optional[str] = None,
    ) -> Optional[TransactionDraft]:
        """Turn a sentence into a transaction draft.

        Returns:
            The draft, or None if the service failed or the reply did not name
            a known category and account
        """
        categories = list(categories)
        accounts = list(accounts)
        try:
            reply = self._generate(
                self.build_voice_prompt(text, categories, accounts, currency), api_key=api_key
            )
            draft = TransactionDraft.model_validate(extract_json(reply))
        except ExternalServiceError as e:
            logger.warning("advisor.voice_unavailable", error=str(e))
            return None
        except (ValueError, PydanticValidationError) as e:
            logger.warning("advisor.voice_unparseable", error=str(e))
            return None

        if draft.category_id not in {c.id for c in categories}:
            logger.warning("advisor.voice_unknown_category", category_id=draft.category_id)
            return None
        if draft.account_id not in {a.id for a in accounts}:
            logger.warning("advisor.voice_unknown_account", account_id=draft.account_id)
            return None
        return draft
