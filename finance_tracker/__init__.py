"""
Finance Tracker - Source Package

A personal finance tracker: accounts, transactions, recurring
subscriptions, savings goals and debts, with dashboard aggregates and
optional AI-assisted data entry.

DESIGN PRINCIPLES:
1. State is explicitly owned, never ambient
2. Derived figures are recomputed from a snapshot, never stored
3. Cross-entity changes are applied as one composite operation
4. AI output is decoded and validated before it touches state
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
