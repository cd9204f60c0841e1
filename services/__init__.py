"""
Services layer for business logic orchestration.

Provides reusable services that can be consumed by the CLI and Streamlit.
"""

from services.auth_service import (
    AuthResult,
    authenticate,
    display_name_for,
    get_user,
    register_user,
)
from services.investment_service import (
    InvestmentResult,
    add_investment,
    get_portfolio_summary,
    list_investments,
    parse_category_filter,
    remove_investment,
    replace_investment,
)
from services.transaction_service import (
    SymbolLookup,
    TransactionResult,
    add_transaction,
    compute_total_amount,
    delete_transaction,
    list_linkable_investments,
    list_transactions,
    lookup_symbol,
    parse_ratio,
    validate_transaction,
)

__all__ = [
    # Auth service
    "AuthResult",
    "authenticate",
    "display_name_for",
    "get_user",
    "register_user",
    # Investment service
    "InvestmentResult",
    "add_investment",
    "get_portfolio_summary",
    "list_investments",
    "parse_category_filter",
    "remove_investment",
    "replace_investment",
    # Transaction service
    "SymbolLookup",
    "TransactionResult",
    "add_transaction",
    "compute_total_amount",
    "delete_transaction",
    "list_linkable_investments",
    "list_transactions",
    "lookup_symbol",
    "parse_ratio",
    "validate_transaction",
]
