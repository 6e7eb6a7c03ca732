# Overview: Password hashing and local account lookup for the seed gate and login.

"""
Local accounts.

Passwords are hashed with bcrypt. The cost factor comes from the app config
(BCRYPT_ROUNDS) so tests can run with a cheap one.

Nicknames are unique and looked up case-insensitively: "Admin" and "admin"
are the same account.
"""

import bcrypt
from flask import current_app
from sqlalchemy import func

from ..errors import ValidationError
from ..extensions import db
from ..models import User


MIN_PASSWORD_LENGTH = 6


class PasswordValidationError(ValidationError):
    """Raised when a password is too weak to store."""
    pass


def validate_password(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def hash_password(password: str) -> str:
    """Validate and hash a password; the hash is stored as text."""
    validate_password(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash
        return False


def find_user(nickname: str) -> User | None:
    if not nickname:
        return None
    return (
        db.session.query(User)
        .filter(func.lower(User.nickname) == nickname.strip().lower())
        .first()
    )


def create_user(nickname: str, password: str) -> User:
    """
    Insert a user. Caller commits.

    Raises ValidationError for a blank or taken nickname and
    PasswordValidationError for a weak password.
    """
    nickname = (nickname or "").strip()
    if not nickname:
        raise ValidationError("Nickname is required")
    if find_user(nickname) is not None:
        raise ValidationError("Nickname already taken", details={"nickname": nickname})

    user = User(nickname=nickname, password=hash_password(password))
    db.session.add(user)
    db.session.flush()
    return user


def authenticate(nickname: str, password: str) -> User | None:
    """Return the user when the credentials match, else None."""
    user = find_user(nickname)
    if user is None:
        return None
    if not verify_password(password, user.password):
        return None
    return user
