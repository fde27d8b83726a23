from datetime import timedelta

import pytest
from jose import jwt

from quiztopia.services.auth import AuthenticationError, Identity, extract_bearer_token
from quiztopia.services.tokens import TokenError, TokenService

SECRET = 'unit-test-secret'


def _identity():
    return Identity(user_id='u-1', email='alice@example.com', username='alice')


def test_issue_and_verify_roundtrip_payload():
    service = TokenService(SECRET, lifetime=timedelta(hours=1))
    payload = service.verify(service.issue(_identity()))
    assert payload.user_id == 'u-1'
    assert payload.email == 'alice@example.com'
    assert payload.username == 'alice'
    assert payload.expires_at - payload.issued_at == timedelta(hours=1)


def test_expired_token_fails():
    service = TokenService(SECRET, lifetime=timedelta(seconds=-1))
    with pytest.raises(TokenError):
        service.verify(service.issue(_identity()))


def test_wrong_secret_fails():
    token = TokenService('other-secret', lifetime=timedelta(hours=1)).issue(_identity())
    with pytest.raises(TokenError):
        TokenService(SECRET, lifetime=timedelta(hours=1)).verify(token)


def test_tampered_token_fails():
    service = TokenService(SECRET, lifetime=timedelta(hours=1))
    header, _, signature = service.issue(_identity()).split('.')
    # Graft another user's claims onto the original signature
    other = service.issue(Identity(user_id='u-2', email='mallory@example.com', username='mallory'))
    tampered = '.'.join([header, other.split('.')[1], signature])
    with pytest.raises(TokenError):
        service.verify(tampered)


def test_token_missing_identity_claims_fails():
    token = jwt.encode({'sub': 'u-1', 'exp': 4102444800, 'iat': 1700000000}, SECRET, algorithm='HS256')
    with pytest.raises(TokenError):
        TokenService(SECRET, lifetime=timedelta(hours=1)).verify(token)


def test_empty_secret_is_refused():
    with pytest.raises(ValueError):
        TokenService('', lifetime=timedelta(hours=1))


@pytest.mark.parametrize('header', [None, '', 'Basic abc', 'bearer abc', 'Bearer ', 'Bearer    '])
def test_extract_bearer_token_rejects(header):
    with pytest.raises(AuthenticationError):
        extract_bearer_token(header)


def test_extract_bearer_token():
    assert extract_bearer_token('Bearer abc.def.ghi') == 'abc.def.ghi'
