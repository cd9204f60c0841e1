"""
Auth Service - Local account registration and sign-in.

Passwords are hashed with bcrypt; only the hash is stored.
"""

import logging
from dataclasses import dataclass, field

import bcrypt

from config import config
from db import User, get_db
from db.repositories import UserRepository

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """Result of a registration or sign-in attempt."""
    success: bool
    user: User | None = None
    errors: list[str] = field(default_factory=list)
    message: str = ""


def hash_password(password: str) -> str:
    """Hash a plaintext password with bcrypt."""
    salt = bcrypt.gensalt(rounds=config.auth.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    """Verify a plaintext password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def display_name_for(user: User) -> str:
    """Display name, falling back to the email's local part."""
    if user.display_name:
        return user.display_name
    return user.email.split("@")[0] if user.email else "User"


def register_user(
    email: str,
    password: str,
    display_name: str | None = None,
) -> AuthResult:
    """
    Create a new local account.

    Args:
        email: Sign-in email (stored lower-cased, must be unique).
        password: Plaintext password (minimum length from config).
        display_name: Optional name shown on the dashboard.
    """
    email = (email or "").strip().lower()
    errors = []
    if not email or "@" not in email:
        errors.append("A valid email is required")
    if not password:
        errors.append("Password is required")
    elif len(password) < config.auth.min_password_length:
        errors.append(f"Password must be at least {config.auth.min_password_length} characters")
    if errors:
        return AuthResult(success=False, errors=errors, message="❌ " + "; ".join(errors))

    db = get_db()
    with db.session() as session:
        user_repo = UserRepository(session)
        if user_repo.get_by_email(email):
            return AuthResult(
                success=False,
                errors=["Email already registered"],
                message=f"❌ An account for {email} already exists",
            )

        user = user_repo.create(
            email=email,
            password_hash=hash_password(password),
            display_name=(display_name or "").strip() or None,
        )

    logger.info(f"Registered user #{user.id} ({email})")
    return AuthResult(success=True, user=user, message=f"✅ Account created for {email}")


def authenticate(email: str, password: str) -> AuthResult:
    """
    Verify credentials and record the sign-in time.

    Returns:
        AuthResult with the user on success.
    """
    email = (email or "").strip().lower()
    if not email or not password:
        return AuthResult(
            success=False,
            errors=["Email and password are required"],
            message="❌ Email and password are required",
        )

    db = get_db()
    with db.session() as session:
        user_repo = UserRepository(session)
        user = user_repo.get_by_email(email)
        if user is None or not check_password(password, user.password_hash):
            logger.info(f"Failed sign-in for {email}")
            return AuthResult(
                success=False,
                errors=["Invalid email or password"],
                message="❌ Invalid email or password",
            )
        user_repo.touch_login(user)

    return AuthResult(success=True, user=user, message=f"✅ Signed in as {display_name_for(user)}")


def get_user(user_id: int) -> User | None:
    """Load a user by ID."""
    db = get_db()
    with db.session() as session:
        return UserRepository(session).get_by_id(user_id)
