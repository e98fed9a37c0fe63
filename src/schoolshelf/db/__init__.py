"""Persistence layer.

Provides:
- Pooled database gateway with explicit transactions
- Schema creation and default lookup seeding
- Repositories for users, books, assignments and lookup tables
"""

from schoolshelf.db.database import Database, DatabaseNotConnectedError, Transaction

__all__ = ["Database", "DatabaseNotConnectedError", "Transaction"]
