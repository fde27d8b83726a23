"""JSON response envelope shared by every endpoint.

Every body has the shape ``{success, message, data?, errors?}``.
"""

from flask import jsonify


def envelope(status_code: int, message: str, data=None, errors=None, include_data: bool = False):
    body = {'success': 200 <= status_code < 300, 'message': message}
    if data is not None or include_data:
        body['data'] = data
    if errors:
        body['errors'] = list(errors)
    return jsonify(body), status_code


def success(data=None, message: str = 'Success'):
    return envelope(200, message, data, include_data=True)


def created(data, message: str = 'Created successfully'):
    return envelope(201, message, data, include_data=True)
