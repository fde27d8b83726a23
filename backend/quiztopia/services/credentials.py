from typing import Optional

from flask import current_app

from quiztopia import bcrypt, db
from quiztopia.errors import Conflict
from quiztopia.models import User, new_id, utcnow
from quiztopia.services.store import store_operation

EMAIL_TAKEN = 'User with this email already exists'


def normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_password(password: str) -> str:
    return bcrypt.generate_password_hash(password).decode('utf-8')


def create_user(email: str, username: str, password: str) -> User:
    """Register a new identity record.

    The email index is consulted first so a duplicate is rejected before any
    write; the unique constraint still catches a concurrent registration.
    """
    email = normalize_email(email)
    if get_user_by_email(email) is not None:
        raise Conflict(EMAIL_TAKEN)

    user = User(
        id=new_id(),
        email=email,
        username=username.strip(),
        password_hash=hash_password(password),
        created_at=utcnow(),
        is_active=True,
        email_verified=False,
    )
    with store_operation('create_user', conflict_message=EMAIL_TAKEN, user_id=user.id):
        db.session.add(user)
        db.session.commit()
    current_app.logger.info(f"[register] user={user.id}")
    return user


def get_user_by_email(email: str) -> Optional[User]:
    with store_operation('get_user_by_email'):
        return User.query.filter_by(email=normalize_email(email)).first()


def get_user_by_id(user_id: str) -> Optional[User]:
    with store_operation('get_user_by_id', user_id=user_id):
        return db.session.get(User, user_id)


def verify_credentials(email: str, password: str) -> Optional[User]:
    """Return the user when ``password`` matches, otherwise None.

    Unknown email, wrong password and deactivated account all look the same
    to the caller.
    """
    user = get_user_by_email(email)
    if user is None:
        current_app.logger.info("[login-failed] cause=unknown-email")
        return None
    if not bcrypt.check_password_hash(user.password_hash, password):
        current_app.logger.info(f"[login-failed] user={user.id} cause=bad-password")
        return None
    if not user.is_active:
        current_app.logger.info(f"[login-failed] user={user.id} cause=inactive")
        return None
    return user
