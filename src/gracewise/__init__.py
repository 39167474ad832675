from .grace import analyze, analyze_all, cycle_end_date, resolve_due_date, summarize
from .models import Card, PortfolioSummary, StatusCategory, Transaction, TransactionAnalysis

__all__ = [
    "analyze",
    "analyze_all",
    "cycle_end_date",
    "resolve_due_date",
    "summarize",
    "Card",
    "PortfolioSummary",
    "StatusCategory",
    "Transaction",
    "TransactionAnalysis",
]
