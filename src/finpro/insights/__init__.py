"""AI-generated insights for finpro."""

from finpro.insights.advisor import UNAVAILABLE_MESSAGE, FinancialAdvisor, TransactionDraft

__all__ = ["FinancialAdvisor", "TransactionDraft", "UNAVAILABLE_MESSAGE"]
