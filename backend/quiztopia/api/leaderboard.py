from flask import Blueprint, current_app, request
from flask_login import current_user, login_required

from quiztopia.api import json_body
from quiztopia.errors import NotFound, ValidationFailed
from quiztopia.responses import created, success
from quiztopia.services import quizzes as store
from quiztopia.services.ownership import QUIZ_NOT_FOUND
from quiztopia.validation import parse_leaderboard_limit, validate_score

leaderboard = Blueprint('leaderboard', __name__)


def _require_quiz(quiz_id):
    quiz = store.get_quiz(quiz_id)
    if quiz is None:
        raise NotFound(QUIZ_NOT_FOUND)
    return quiz


@leaderboard.route('/<string:quiz_id>', methods=['POST'])
@login_required
def register_score(quiz_id):
    _require_quiz(quiz_id)

    data = json_body()
    validation = validate_score(data)
    if not validation.is_valid:
        raise ValidationFailed(errors=validation.errors)

    entry = store.create_or_update_score(
        quiz_id=quiz_id,
        user_id=current_user.user_id,
        username=current_user.username,
        score=data['score'],
    )
    return created(entry.to_dict(), 'Score registered successfully')


@leaderboard.route('/<string:quiz_id>', methods=['GET'])
def get_leaderboard(quiz_id):
    cfg = current_app.config
    limit, validation = parse_leaderboard_limit(
        request.args.get('limit'),
        default=int(cfg.get('LEADERBOARD_DEFAULT_LIMIT', 10)),
        maximum=int(cfg.get('LEADERBOARD_MAX_LIMIT', 100)),
    )
    if not validation.is_valid:
        raise ValidationFailed(validation.errors[0], errors=validation.errors)

    quiz = _require_quiz(quiz_id)
    entries = store.get_leaderboard(quiz.id, limit)
    return success({
        'quiz_id': quiz.id,
        'quiz_name': quiz.name,
        'leaderboard': store.rank_entries(entries),
    }, 'Leaderboard retrieved successfully')
