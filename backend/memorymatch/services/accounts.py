from typing import Optional

from sqlalchemy.exc import IntegrityError

from memorymatch import bcrypt, db
from memorymatch.models import User


class UsernameTaken(Exception):
    """Raised when registering a username that is already stored."""


_dummy_hash: Optional[str] = None


def _burn_password_check(password: str) -> None:
    """Spend one bcrypt check so unknown usernames cost as much as known ones."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = bcrypt.generate_password_hash('not-a-real-password').decode('utf-8')
    bcrypt.check_password_hash(_dummy_hash, password)


def register_user(username: str, password: str) -> User:
    """Create a user with a bcrypt-hashed password.

    Uniqueness is enforced by the database constraint; a violation is rolled
    back and re-raised as UsernameTaken so callers can report it distinctly.
    """
    user = User(username=username)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise UsernameTaken(username) from exc
    return user


def authenticate(username: str, password: str) -> Optional[User]:
    """Return the user for valid credentials, else None.

    An unknown username and a wrong password are indistinguishable to callers.
    """
    user = User.query.filter_by(username=username).first()
    if user is None:
        _burn_password_check(password)
        return None
    if user.check_password(password):
        return user
    return None
