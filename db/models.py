"""
SQLAlchemy ORM Models for the Portfolio Tracker.

Defines all database entities:
- Users (local email/password accounts)
- Investments (one holding per row, any asset category)
- Transactions (buy/sell/bonus/split/dividend ledger events)

Every investment and transaction is owned by exactly one user.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum as SQLEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class InvestmentCategory(str, Enum):
    """Asset class tag attached to an investment."""
    STOCK = "Stock"
    MUTUAL_FUND = "Mutual Fund"
    ETF = "ETF"
    EPF = "EPF"
    PPF = "PPF"
    FIXED_DEPOSIT = "Fixed Deposit"
    BOND = "Bond"
    CRYPTOCURRENCY = "Cryptocurrency"
    GOLD = "Gold"
    REAL_ESTATE = "Real Estate"
    NPS = "NPS"
    SAVINGS_ACCOUNT = "Savings Account"
    RECURRING_DEPOSIT = "Recurring Deposit"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: "InvestmentCategory | str") -> "InvestmentCategory":
        """
        Parse user input into a category.

        Accepts a member, its display value ("Mutual Fund") or its name
        ("MUTUAL_FUND"), case-insensitively. Spaces, hyphens and
        underscores are interchangeable.

        Raises:
            ValueError: If the value matches no category.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            raise ValueError("Category is required")

        key = _category_key(str(value))
        for member in cls:
            if key in (_category_key(member.value), _category_key(member.name)):
                return member

        valid = ", ".join(member.value for member in cls)
        raise ValueError(f"Unknown category: {value!r}. Valid categories: {valid}")

    @classmethod
    def choices(cls) -> list[str]:
        """Display values in declaration order."""
        return [member.value for member in cls]


def _category_key(value: str) -> str:
    return value.strip().upper().replace("-", " ").replace("_", " ")


# Categories a ledger transaction may be linked to
TRADABLE_CATEGORIES: tuple[InvestmentCategory, ...] = (
    InvestmentCategory.STOCK,
    InvestmentCategory.MUTUAL_FUND,
    InvestmentCategory.ETF,
    InvestmentCategory.BOND,
    InvestmentCategory.CRYPTOCURRENCY,
    InvestmentCategory.GOLD,
    InvestmentCategory.NPS,
)


class TransactionType(str, Enum):
    """Ledger event type."""
    BUY = "buy"
    SELL = "sell"
    BONUS = "bonus"
    SPLIT = "split"
    DIVIDEND = "dividend"


class User(Base):
    """
    Local user account.

    Passwords are stored as bcrypt hashes only.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    display_name: Mapped[Optional[str]] = mapped_column(String(100))
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    # Relationships
    investments: Mapped[list["Investment"]] = relationship(
        "Investment", back_populates="user", cascade="all, delete-orphan"
    )
    transactions: Mapped[list["Transaction"]] = relationship(
        "Transaction", back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r})>"


class Investment(Base):
    """
    One holding in a user's portfolio.

    Amounts are currency values; `amount_invested` and `current_value`
    are never negative. Created and replaced only by explicit user action.
    """
    __tablename__ = "investments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category: Mapped[InvestmentCategory] = mapped_column(
        SQLEnum(InvestmentCategory, native_enum=False, length=30),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    symbol: Mapped[Optional[str]] = mapped_column(String(30))
    amount_invested: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    current_value: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    units: Mapped[Optional[float]] = mapped_column(Float)
    purchase_price: Mapped[Optional[float]] = mapped_column(Float)
    current_price: Mapped[Optional[float]] = mapped_column(Float)
    date_purchased: Mapped[Optional[date]] = mapped_column(Date)
    maturity_date: Mapped[Optional[date]] = mapped_column(Date)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    institution: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, onupdate=_utcnow, nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="investments")

    __table_args__ = (
        CheckConstraint("amount_invested >= 0", name="ck_investments_amount_invested"),
        CheckConstraint("current_value >= 0", name="ck_investments_current_value"),
        Index("idx_investments_user_category", "user_id", "category"),
        Index("idx_investments_user_updated", "user_id", "updated_at"),
    )

    def __repr__(self) -> str:
        return f"<Investment(id={self.id}, category={self.category}, name={self.name!r})>"


class Transaction(Base):
    """
    One ledger event against an investment.

    Conventions:
    - BUY total = quantity * price + charges
    - SELL total = quantity * price - charges
    - SPLIT / BONUS carry a ratio string ("1:2"), DIVIDEND carries an amount

    Never mutated in place; deleted by explicit user action.
    """
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    investment_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("investments.id", ondelete="SET NULL"), nullable=True
    )
    investment_category: Mapped[Optional[InvestmentCategory]] = mapped_column(
        SQLEnum(InvestmentCategory, native_enum=False, length=30)
    )
    transaction_type: Mapped[TransactionType] = mapped_column(
        SQLEnum(TransactionType, native_enum=False, length=10),
        nullable=False,
    )
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    symbol: Mapped[str] = mapped_column(String(30), nullable=False)
    stock_name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[Optional[float]] = mapped_column(Float)
    price_per_unit: Mapped[Optional[float]] = mapped_column(Float)
    total_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2))
    split_ratio: Mapped[Optional[str]] = mapped_column(String(20))
    bonus_ratio: Mapped[Optional[str]] = mapped_column(String(20))
    brokerage_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    stt_charges: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    other_charges: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="transactions")
    investment: Mapped[Optional["Investment"]] = relationship("Investment")

    __table_args__ = (
        Index("idx_transactions_user_date", "user_id", "transaction_date"),
        Index("idx_transactions_symbol", "symbol"),
    )

    @property
    def total_charges(self) -> float:
        """Brokerage + STT + other charges."""
        return float(
            (self.brokerage_fee or 0) + (self.stt_charges or 0) + (self.other_charges or 0)
        )

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.id}, type={self.transaction_type}, "
            f"symbol={self.symbol}, quantity={self.quantity})>"
        )
