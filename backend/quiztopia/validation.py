"""Field-level validation of inbound payloads.

Each ``validate_*`` function returns a ``ValidationResult``; callers only branch
on ``is_valid`` and forward ``errors`` to the client.
"""

import math
import re
from enum import Enum
from typing import NamedTuple, Optional

from quiztopia.models import DIFFICULTIES, MAX_STORED_INT


class ValidationResult(NamedTuple):
    is_valid: bool
    errors: list


class Field(Enum):
    EMAIL = 'email'
    PASSWORD = 'password'
    USERNAME = 'username'
    QUIZ_NAME = 'name'
    DESCRIPTION = 'description'
    QUESTION_TEXT = 'question'
    ANSWER = 'answer'
    LONGITUDE = 'longitude'
    LATITUDE = 'latitude'
    DIFFICULTY = 'difficulty'
    POINTS = 'points'
    SCORE = 'score'


class Problem(Enum):
    REQUIRED = 'required'
    TOO_SHORT = 'too_short'
    TOO_LONG = 'too_long'
    INVALID = 'invalid'
    NOT_A_NUMBER = 'not_a_number'
    TOO_SMALL = 'too_small'
    TOO_LARGE = 'too_large'


class Rule(NamedTuple):
    required: bool = False
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[re.Pattern] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None


EMAIL_RULE = Rule(required=True, max_length=255, pattern=re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$'))
PASSWORD_RULE = Rule(required=True, min_length=6, max_length=128)
USERNAME_RULE = Rule(required=True, min_length=3, max_length=50)
QUIZ_NAME_RULE = Rule(required=True, min_length=3, max_length=100)
DESCRIPTION_RULE = Rule(max_length=500)
QUESTION_TEXT_RULE = Rule(required=True, min_length=10, max_length=500)
ANSWER_RULE = Rule(required=True, min_length=1, max_length=200)
LONGITUDE_RULE = Rule(required=True, minimum=-180, maximum=180)
LATITUDE_RULE = Rule(required=True, minimum=-90, maximum=90)

RULES = {
    Field.EMAIL: EMAIL_RULE,
    Field.PASSWORD: PASSWORD_RULE,
    Field.USERNAME: USERNAME_RULE,
    Field.QUIZ_NAME: QUIZ_NAME_RULE,
    Field.DESCRIPTION: DESCRIPTION_RULE,
    Field.QUESTION_TEXT: QUESTION_TEXT_RULE,
    Field.ANSWER: ANSWER_RULE,
    Field.LONGITUDE: LONGITUDE_RULE,
    Field.LATITUDE: LATITUDE_RULE,
}

# Field-specific wording; anything not listed falls back to DEFAULT_MESSAGES.
MESSAGES = {
    (Field.EMAIL, Problem.REQUIRED): 'Email is required',
    (Field.EMAIL, Problem.INVALID): 'Invalid email format',
    (Field.PASSWORD, Problem.REQUIRED): 'Password is required',
    (Field.PASSWORD, Problem.TOO_SHORT): f'Password must be at least {PASSWORD_RULE.min_length} characters long',
    (Field.USERNAME, Problem.REQUIRED): 'Username is required',
    (Field.USERNAME, Problem.TOO_SHORT): f'Username must be at least {USERNAME_RULE.min_length} characters long',
    (Field.QUIZ_NAME, Problem.REQUIRED): 'Quiz name is required',
    (Field.QUIZ_NAME, Problem.TOO_SHORT): f'Quiz name must be at least {QUIZ_NAME_RULE.min_length} characters long',
    (Field.QUESTION_TEXT, Problem.REQUIRED): 'Question text is required',
    (Field.ANSWER, Problem.REQUIRED): 'Answer is required',
    (Field.LONGITUDE, Problem.NOT_A_NUMBER): 'Coordinates must be numbers',
    (Field.LATITUDE, Problem.NOT_A_NUMBER): 'Coordinates must be numbers',
    (Field.DIFFICULTY, Problem.INVALID): f"Difficulty must be one of: {', '.join(DIFFICULTIES)}",
    (Field.POINTS, Problem.INVALID): 'Points must be a positive integer',
    (Field.SCORE, Problem.REQUIRED): 'Score is required',
    (Field.SCORE, Problem.INVALID): 'Score must be a non-negative integer',
}

LIMIT_INVALID = 'Limit must be a number between 1 and {maximum}'

DEFAULT_MESSAGES = {
    Problem.REQUIRED: '{field} is required',
    Problem.TOO_SHORT: '{field} must be at least {rule.min_length} characters long',
    Problem.TOO_LONG: '{field} must be no more than {rule.max_length} characters long',
    Problem.INVALID: '{field} format is invalid',
    Problem.NOT_A_NUMBER: '{field} must be a number',
    Problem.TOO_SMALL: '{field} must be at least {rule.minimum}',
    Problem.TOO_LARGE: '{field} must be no more than {rule.maximum}',
}

COORDINATES_REQUIRED = 'Longitude and latitude coordinates are required'


def message_for(field: Field, problem: Problem, rule: Rule = Rule()) -> str:
    specific = MESSAGES.get((field, problem))
    if specific is not None:
        return specific
    return DEFAULT_MESSAGES[problem].format(field=field.value, rule=rule)


def is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_integer(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_blank(value) -> bool:
    return value is None or value == ''


def check_field(value, field: Field) -> Optional[str]:
    """Return the first problem with ``value`` under the rule for ``field``."""
    rule = RULES[field]
    if _is_blank(value):
        return message_for(field, Problem.REQUIRED, rule) if rule.required else None

    if rule.minimum is not None or rule.maximum is not None:
        if not is_number(value) or not math.isfinite(value):
            return message_for(field, Problem.NOT_A_NUMBER, rule)
        if rule.minimum is not None and value < rule.minimum:
            return message_for(field, Problem.TOO_SMALL, rule)
        if rule.maximum is not None and value > rule.maximum:
            return message_for(field, Problem.TOO_LARGE, rule)
        return None

    if not isinstance(value, str):
        return message_for(field, Problem.INVALID, rule)
    if rule.min_length is not None and len(value.strip()) < rule.min_length:
        return message_for(field, Problem.TOO_SHORT, rule)
    if rule.max_length is not None and len(value) > rule.max_length:
        return message_for(field, Problem.TOO_LONG, rule)
    if rule.pattern is not None and not rule.pattern.match(value):
        return message_for(field, Problem.INVALID, rule)
    return None


def _collect(*messages) -> ValidationResult:
    errors = [m for m in messages if m]
    return ValidationResult(is_valid=not errors, errors=errors)


def validate_registration(data) -> ValidationResult:
    data = data or {}
    return _collect(
        check_field(data.get('email'), Field.EMAIL),
        check_field(data.get('password'), Field.PASSWORD),
        check_field(data.get('username'), Field.USERNAME),
    )


def validate_login(data) -> ValidationResult:
    data = data or {}
    email, password = data.get('email'), data.get('password')
    return _collect(
        None if email and isinstance(email, str) else message_for(Field.EMAIL, Problem.REQUIRED),
        None if password and isinstance(password, str) else message_for(Field.PASSWORD, Problem.REQUIRED),
    )


def validate_quiz(data) -> ValidationResult:
    data = data or {}
    return _collect(
        check_field(data.get('name'), Field.QUIZ_NAME),
        check_field(data.get('description'), Field.DESCRIPTION),
    )


def validate_question(data) -> ValidationResult:
    data = data or {}
    errors = [
        check_field(data.get('question'), Field.QUESTION_TEXT),
        check_field(data.get('answer'), Field.ANSWER),
    ]

    longitude, latitude = data.get('longitude'), data.get('latitude')
    if longitude is None or latitude is None:
        errors.append(COORDINATES_REQUIRED)
    else:
        errors.append(check_field(longitude, Field.LONGITUDE))
        lat_error = check_field(latitude, Field.LATITUDE)
        # Both coordinates share the "must be numbers" wording; report it once
        if lat_error not in errors:
            errors.append(lat_error)

    difficulty = data.get('difficulty')
    if difficulty is not None and difficulty not in DIFFICULTIES:
        errors.append(message_for(Field.DIFFICULTY, Problem.INVALID))

    points = data.get('points')
    if points is not None and not (is_integer(points) and 0 < points <= MAX_STORED_INT):
        errors.append(message_for(Field.POINTS, Problem.INVALID))

    return _collect(*errors)


def validate_score(data) -> ValidationResult:
    score = (data or {}).get('score')
    if score is None:
        return _collect(message_for(Field.SCORE, Problem.REQUIRED))
    if not is_integer(score) or not 0 <= score <= MAX_STORED_INT:
        return _collect(message_for(Field.SCORE, Problem.INVALID))
    return _collect()


def parse_leaderboard_limit(raw, default: int = 10, maximum: int = 100):
    """Parse the ``limit`` query parameter into an int within [1, maximum].

    Returns ``(limit, ValidationResult)``; ``limit`` is None when invalid.
    """
    if raw is None or raw == '':
        return default, _collect()
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        limit = None
    if limit is None or not 1 <= limit <= maximum:
        return None, _collect(LIMIT_INVALID.format(maximum=maximum))
    return limit, _collect()
