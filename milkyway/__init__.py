"""
MilkyWay Ledger - Source Package

Household ledger for daily milk/grocery deliveries and the payments
made against them.

DESIGN PRINCIPLES:
1. One record per calendar date; the date is the key
2. Derived state (cost, paid-status, balance) is always recomputable
3. Every mutation writes the whole collection in one atomic step
4. Reads fail soft, writes fail loudly
5. Storage and the AI collaborator are swappable
"""

__version__ = "1.0.0"
__author__ = "MilkyWay Team"
