"""
Equipment Ledger - Source Package

Accounting core of an equipment lending and rental tracker: rental
revenue, kept and lost deposits, repair costs.

DESIGN PRINCIPLES:
1. Amounts are exact decimals, never floats
2. The ledger reads; only the orchestrator writes
3. Imports are all-or-nothing and never duplicate an operation
4. Every change to the history is auditable
5. Storage and entitlements are injected, never global
"""

__version__ = "1.0.0"
__author__ = "Equipment Ledger Team"
