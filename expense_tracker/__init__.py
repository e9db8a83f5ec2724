"""
Expense Tracker - Source Package

Backend for a personal expense-tracking dashboard: expense CRUD,
cached filtered listing, CSV bulk import/export and spending statistics.

DESIGN PRINCIPLES:
1. Bulk imports are all-or-nothing at the validation gate
2. Fail early, fail visibly (row-level errors are reported, never fixed)
3. The cache is best effort: it can never fail a write
4. Every write is auditable
5. Storage and cache layers are swappable (injected, never global)
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
