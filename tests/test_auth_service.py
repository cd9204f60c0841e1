from __future__ import annotations

from db.models import User
from services.auth_service import (
    authenticate,
    check_password,
    display_name_for,
    get_user,
    hash_password,
    register_user,
)


def test_register_and_sign_in(db):
    registered = register_user("  Meera@Example.com ", "hunter22", display_name="Meera")
    assert registered.success, registered.message
    assert registered.user.email == "meera@example.com"
    assert registered.user.password_hash != "hunter22"

    signed_in = authenticate("MEERA@example.com", "hunter22")
    assert signed_in.success
    assert signed_in.user.id == registered.user.id
    assert signed_in.user.last_login_at is not None
    assert "Meera" in signed_in.message


def test_register_rejects_bad_input(db):
    assert not register_user("", "hunter22").success
    assert not register_user("not-an-email", "hunter22").success
    short = register_user("a@example.com", "abc")
    assert not short.success
    assert any("at least" in error for error in short.errors)


def test_register_rejects_duplicate_email(db, user):
    result = register_user("ASHA@example.com", "another-pass")
    assert not result.success
    assert result.errors == ["Email already registered"]


def test_authenticate_failures(db, user):
    assert not authenticate("asha@example.com", "wrong-pass").success
    assert not authenticate("nobody@example.com", "secret123").success
    assert not authenticate("asha@example.com", "").success


def test_password_hashing(db):
    hashed = hash_password("s3cret!")
    assert check_password("s3cret!", hashed)
    assert not check_password("other", hashed)
    assert not check_password("s3cret!", "not-a-bcrypt-hash")


def test_display_name_fallback():
    assert display_name_for(User(email="kiran@example.com", display_name=None, password_hash="x")) == "kiran"
    assert display_name_for(User(email="kiran@example.com", display_name="Kiran R", password_hash="x")) == "Kiran R"


def test_get_user(db, user):
    assert get_user(user.id).email == "asha@example.com"
    assert get_user(9999) is None
