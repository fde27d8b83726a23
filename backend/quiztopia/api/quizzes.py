from flask import Blueprint
from flask_login import current_user, login_required

from quiztopia.api import json_body
from quiztopia.errors import ValidationFailed
from quiztopia.responses import created, success
from quiztopia.services import quizzes as store
from quiztopia.services.ownership import Action, authorize_ownership
from quiztopia.validation import validate_question, validate_quiz

quizzes = Blueprint('quizzes', __name__)


@quizzes.route('', methods=['GET'])
def list_quizzes():
    return success([q.to_summary() for q in store.list_quizzes()], 'Quizzes retrieved successfully')


@quizzes.route('', methods=['POST'])
@login_required
def create_quiz():
    data = json_body()
    validation = validate_quiz(data)
    if not validation.is_valid:
        raise ValidationFailed(errors=validation.errors)

    quiz = store.create_quiz(data['name'], data.get('description'), owner=current_user)
    return created(quiz.to_dict(), 'Quiz created successfully')


@quizzes.route('/<string:quiz_id>', methods=['GET'])
@login_required
def get_quiz(quiz_id):
    # Detail (answers included) is owner-only
    quiz = authorize_ownership(current_user, store.get_quiz(quiz_id), Action.READ)
    questions = store.get_questions_by_quiz(quiz.id)
    return success(quiz.to_dict(include_questions=questions), 'Quiz retrieved successfully')


@quizzes.route('/<string:quiz_id>', methods=['DELETE'])
@login_required
def delete_quiz(quiz_id):
    quiz = authorize_ownership(current_user, store.get_quiz(quiz_id), Action.DELETE)
    store.delete_quiz(quiz.id)
    return success(None, 'Quiz deleted successfully')


@quizzes.route('/<string:quiz_id>/questions', methods=['POST'])
@login_required
def add_question(quiz_id):
    quiz = authorize_ownership(current_user, store.get_quiz(quiz_id), Action.ADD_QUESTION)

    data = json_body()
    validation = validate_question(data)
    if not validation.is_valid:
        raise ValidationFailed(errors=validation.errors)

    question = store.create_question(quiz, data, creator_id=current_user.user_id)
    return created(question.to_dict(), 'Question created successfully')
