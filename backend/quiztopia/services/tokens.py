"""Signed, time-bound identity assertions.

Tokens are compact JWTs (HS256 by default) carrying the user id as ``sub``
plus the email and username. Nothing is stored server-side, so a token stays
valid until it expires; deleting or deactivating the account is the only way
to cut one short (the authenticator re-resolves the subject on every request).
"""

from datetime import datetime, timedelta, timezone
from typing import NamedTuple

from flask import current_app
from jose import JWTError, jwt


class TokenError(Exception):
    """Raised when a token cannot be trusted (bad signature, expired, malformed)."""


class TokenPayload(NamedTuple):
    user_id: str
    email: str
    username: str
    issued_at: datetime
    expires_at: datetime


class TokenService:
    def __init__(self, secret: str, lifetime: timedelta, algorithm: str = 'HS256'):
        if not secret:
            raise ValueError('Token secret must not be empty')
        self._secret = secret
        self.lifetime = lifetime
        self.algorithm = algorithm

    def issue(self, identity) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            'sub': identity.user_id,
            'email': identity.email,
            'username': identity.username,
            'iat': now,
            'exp': now + self.lifetime,
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenPayload:
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except JWTError as exc:
            raise TokenError(str(exc)) from exc

        missing = [k for k in ('sub', 'email', 'username', 'iat', 'exp') if claims.get(k) in (None, '')]
        if missing:
            raise TokenError(f"missing claims: {', '.join(missing)}")

        try:
            return TokenPayload(
                user_id=str(claims['sub']),
                email=claims['email'],
                username=claims['username'],
                issued_at=datetime.fromtimestamp(int(claims['iat']), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(int(claims['exp']), tz=timezone.utc),
            )
        except (TypeError, ValueError) as exc:
            raise TokenError('malformed time claims') from exc


def get_token_service() -> TokenService:
    return current_app.extensions['token_service']
