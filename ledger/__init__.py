"""
Personal Ledger - Source Package

A per-user income/expense ledger that answers "how much did I earn
and spend this month/year?".

DESIGN PRINCIPLES:
1. Every operation is bound to the authenticated caller
2. Another user's data is indistinguishable from missing data
3. Aggregates are always recomputed, never stored
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Personal Ledger Team"
