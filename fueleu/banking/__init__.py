"""Banking ledger for surplus compliance balance."""

from .ledger import AdjustedComplianceBalance, BankingLedger, BankRecords

__all__ = ["AdjustedComplianceBalance", "BankingLedger", "BankRecords"]
