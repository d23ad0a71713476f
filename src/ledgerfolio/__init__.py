"""Ledgerfolio: brokerage ledger reconciliation and portfolio valuation."""

__version__ = "0.1.0"
