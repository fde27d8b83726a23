from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from quiztopia.api import json_body
from quiztopia.errors import Unauthorized, ValidationFailed
from quiztopia.responses import created, success
from quiztopia.services.auth import Identity
from quiztopia.services.credentials import create_user, verify_credentials
from quiztopia.services.tokens import get_token_service
from quiztopia.validation import validate_login, validate_registration

main = Blueprint('main', __name__)

LOGIN_FAILED = 'Invalid email or password'


def _auth_payload(user):
    identity = Identity.from_user(user)
    return {'user': user.to_dict(), 'token': get_token_service().issue(identity)}


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Quiztopia API!'})


@main.route('/api/auth/register', methods=['POST'])
def register():
    data = json_body()
    validation = validate_registration(data)
    if not validation.is_valid:
        raise ValidationFailed(errors=validation.errors)

    user = create_user(email=data['email'], username=data['username'], password=data['password'])
    return created(_auth_payload(user), 'User registered successfully')


@main.route('/api/auth/login', methods=['POST'])
def login():
    data = json_body()
    validation = validate_login(data)
    if not validation.is_valid:
        raise ValidationFailed(errors=validation.errors)

    user = verify_credentials(data['email'], data['password'])
    if user is None:
        raise Unauthorized(LOGIN_FAILED)
    return success(_auth_payload(user), 'Login successful')


@main.route('/api/auth/me')
@login_required
def me():
    return success(current_user.to_dict(), 'Authenticated')
