"""Bearer-token authentication.

``authenticate`` turns a raw ``Authorization`` header into an ``Identity`` or
raises ``AuthenticationError`` with an operator-facing cause. The Flask-Login
request loader below logs that cause and hands Flask-Login ``None``, so every
rejection reaches the client as the same 401.
"""

from flask import current_app
from flask_login import UserMixin

from quiztopia.errors import Unauthorized
from quiztopia.services.credentials import get_user_by_id
from quiztopia.services.tokens import TokenError, get_token_service

BEARER_PREFIX = 'Bearer '


class AuthenticationError(Exception):
    def __init__(self, cause: str):
        super().__init__(cause)
        self.cause = cause


class Identity(UserMixin):
    """The verified caller: id, email and username only."""

    def __init__(self, user_id: str, email: str, username: str):
        self.user_id = user_id
        self.email = email
        self.username = username

    @property
    def id(self):
        return self.user_id

    @classmethod
    def from_user(cls, user):
        return cls(user_id=user.id, email=user.email, username=user.username)

    def to_dict(self):
        return {'user_id': self.user_id, 'email': self.email, 'username': self.username}


def extract_bearer_token(header_value) -> str:
    if not header_value:
        raise AuthenticationError('missing-header')
    if not header_value.startswith(BEARER_PREFIX):
        raise AuthenticationError('not-bearer')
    token = header_value[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError('empty-token')
    return token


def authenticate(header_value) -> Identity:
    token = extract_bearer_token(header_value)
    try:
        payload = get_token_service().verify(token)
    except TokenError as exc:
        raise AuthenticationError(f'invalid-token ({exc})') from exc

    # The token alone is not enough: the subject must still exist
    user = get_user_by_id(payload.user_id)
    if user is None:
        raise AuthenticationError(f'subject-not-found user={payload.user_id}')
    if not user.is_active:
        raise AuthenticationError(f'subject-inactive user={payload.user_id}')
    return Identity.from_user(user)


def load_identity_from_request(req):
    try:
        return authenticate(req.headers.get('Authorization'))
    except AuthenticationError as exc:
        current_app.logger.info(f"[auth-reject] path={req.path} cause={exc.cause}")
        return None


def reject_unauthenticated():
    raise Unauthorized()


def init_login_manager(manager) -> None:
    manager.request_loader(load_identity_from_request)
    manager.unauthorized_handler(reject_unauthenticated)
