"""
Koinku - Personal Ledger Engine

Records income and expense events and keeps a running balance
over an ordered, durable transaction history.

DESIGN PRINCIPLES:
1. Balance is always derived, never set
2. Fail early, fail visibly
3. No silent loss of durability
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Koinku Team"
