"""
Repository pattern for data access operations.

Provides a clean abstraction layer between business logic and database operations.
Every read and delete is scoped by the owning user's ID.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models import (
    TRADABLE_CATEGORIES,
    Investment,
    InvestmentCategory,
    Transaction,
    TransactionType,
    User,
)


# Fields a full replacement of an investment overwrites
INVESTMENT_FIELDS: tuple[str, ...] = (
    "category",
    "name",
    "symbol",
    "amount_invested",
    "current_value",
    "units",
    "purchase_price",
    "current_price",
    "date_purchased",
    "maturity_date",
    "notes",
    "institution",
)


class UserRepository:
    """Repository for User-related operations."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, user_id: int) -> User | None:
        """Get user by ID."""
        return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> User | None:
        """Get user by email (case-insensitive)."""
        stmt = select(User).where(User.email == email.strip().lower())
        return self.session.scalar(stmt)

    def create(
        self,
        email: str,
        password_hash: str,
        display_name: str | None = None,
    ) -> User:
        """Create a new user."""
        user = User(
            email=email.strip().lower(),
            password_hash=password_hash,
            display_name=display_name,
        )
        self.session.add(user)
        self.session.flush()  # Get the ID
        return user

    def touch_login(self, user: User) -> User:
        """Record a successful sign-in."""
        user.last_login_at = datetime.now(timezone.utc)
        self.session.flush()
        return user


class InvestmentRepository:
    """Repository for Investment operations."""

    def __init__(self, session: Session):
        self.session = session

    def list_for_user(
        self,
        user_id: int,
        category: InvestmentCategory | None = None,
    ) -> Sequence[Investment]:
        """
        Get a user's investments, most recently updated first.

        Args:
            user_id: Owning user.
            category: Optional category filter (None = all).
        """
        stmt = select(Investment).where(Investment.user_id == user_id)
        if category is not None:
            stmt = stmt.where(Investment.category == category)
        stmt = stmt.order_by(Investment.updated_at.desc(), Investment.id.desc())
        return self.session.scalars(stmt).all()

    def list_tradable(self, user_id: int) -> Sequence[Investment]:
        """Get investments a transaction can be linked to, ordered by category and name."""
        stmt = (
            select(Investment)
            .where(
                Investment.user_id == user_id,
                Investment.category.in_(TRADABLE_CATEGORIES),
            )
            .order_by(Investment.category, Investment.name)
        )
        return self.session.scalars(stmt).all()

    def list_priceable(self, user_id: int | None = None) -> Sequence[Investment]:
        """Get listed holdings (Stock/ETF with symbol and units) for price refresh."""
        stmt = select(Investment).where(
            Investment.category.in_((InvestmentCategory.STOCK, InvestmentCategory.ETF)),
            Investment.symbol.is_not(None),
            Investment.units.is_not(None),
        )
        if user_id is not None:
            stmt = stmt.where(Investment.user_id == user_id)
        return self.session.scalars(stmt.order_by(Investment.id)).all()

    def get_for_user(self, user_id: int, investment_id: int) -> Investment | None:
        """Get one investment if it belongs to the user."""
        stmt = select(Investment).where(
            Investment.id == investment_id,
            Investment.user_id == user_id,
        )
        return self.session.scalar(stmt)

    def create(self, user_id: int, **fields: Any) -> Investment:
        """Create a new investment."""
        investment = Investment(user_id=user_id, **fields)
        self.session.add(investment)
        self.session.flush()
        return investment

    def replace(self, user_id: int, investment_id: int, **fields: Any) -> Investment | None:
        """
        Replace every editable field of an investment.

        Fields not supplied are reset to None, matching a full replacement.

        Returns:
            Updated investment, or None if not found for this user.
        """
        investment = self.get_for_user(user_id, investment_id)
        if investment is None:
            return None

        for name in INVESTMENT_FIELDS:
            setattr(investment, name, fields.get(name))
        investment.updated_at = datetime.now(timezone.utc)
        self.session.flush()
        return investment

    def apply_market_price(self, investment: Investment, last_price: float) -> Investment:
        """Set current price and revalue the holding at units * price."""
        investment.current_price = last_price
        investment.current_value = Decimal(str(round((investment.units or 0) * last_price, 2)))
        investment.updated_at = datetime.now(timezone.utc)
        self.session.flush()
        return investment

    def delete(self, user_id: int, investment_id: int) -> bool:
        """Delete an investment. Returns True if a row was removed."""
        investment = self.get_for_user(user_id, investment_id)
        if investment is None:
            return False
        self.session.delete(investment)
        self.session.flush()
        return True


class TransactionRepository:
    """Repository for ledger Transaction operations."""

    def __init__(self, session: Session):
        self.session = session

    def list_for_user(
        self,
        user_id: int,
        transaction_type: TransactionType | None = None,
        symbol: str | None = None,
        limit: int | None = None,
    ) -> Sequence[Transaction]:
        """
        Get a user's transactions, newest transaction date first.

        Args:
            user_id: Owning user.
            transaction_type: Optional type filter.
            symbol: Optional symbol filter.
            limit: Maximum number of rows.
        """
        stmt = select(Transaction).where(Transaction.user_id == user_id)
        if transaction_type is not None:
            stmt = stmt.where(Transaction.transaction_type == transaction_type)
        if symbol:
            stmt = stmt.where(Transaction.symbol == symbol.upper())

        stmt = stmt.order_by(Transaction.transaction_date.desc(), Transaction.id.desc())
        if limit:
            stmt = stmt.limit(limit)
        return self.session.scalars(stmt).all()

    def get_for_user(self, user_id: int, transaction_id: int) -> Transaction | None:
        """Get one transaction if it belongs to the user."""
        stmt = select(Transaction).where(
            Transaction.id == transaction_id,
            Transaction.user_id == user_id,
        )
        return self.session.scalar(stmt)

    def create(self, user_id: int, **fields: Any) -> Transaction:
        """Record a new transaction."""
        transaction = Transaction(user_id=user_id, **fields)
        self.session.add(transaction)
        self.session.flush()
        return transaction

    def delete(self, user_id: int, transaction_id: int) -> bool:
        """Delete a transaction. Returns True if a row was removed."""
        transaction = self.get_for_user(user_id, transaction_id)
        if transaction is None:
            return False
        self.session.delete(transaction)
        self.session.flush()
        return True
