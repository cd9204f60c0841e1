"""
Database package initialization.

Exports commonly used components for convenient imports:
    from db import get_db, Investment, Transaction, etc.
"""

from db.models import (
    TRADABLE_CATEGORIES,
    Base,
    Investment,
    InvestmentCategory,
    Transaction,
    TransactionType,
    User,
)
from db.session import (
    DatabaseManager,
    get_db,
    init_db,
    set_db,
)
from db.repositories import (
    InvestmentRepository,
    TransactionRepository,
    UserRepository,
)

__all__ = [
    # Models
    "TRADABLE_CATEGORIES",
    "Base",
    "Investment",
    "InvestmentCategory",
    "Transaction",
    "TransactionType",
    "User",
    # Session management
    "DatabaseManager",
    "get_db",
    "init_db",
    "set_db",
    # Repositories
    "InvestmentRepository",
    "TransactionRepository",
    "UserRepository",
]
