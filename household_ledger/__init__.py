"""
Household Ledger - Classification & Recommendation Engine

The engine behind a personal household-ledger client. It owns three
pure components that operate over an in-memory snapshot of ledger entries:

1. Name normalization - repairs corrupted or abbreviated category names
2. Category recommendation - ranks past entries to suggest a category/account
3. Recurring expenses - carries fixed expenses into the new month exactly once

DESIGN PRINCIPLES:
1. The engine proposes, the store applies
2. Never mutate an entry in place
3. Bad data is non-matching, never fatal
4. Every step that changes the ledger is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Household Ledger Team"
