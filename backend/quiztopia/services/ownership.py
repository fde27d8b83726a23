"""Owner-only access to quizzes.

``created_by`` is the only thing consulted: no roles, no sharing. Reads of a
quiz someone else owns answer "not found" so non-owners cannot discover
existence; mutations answer "forbidden".
"""

from enum import Enum

from quiztopia.errors import Forbidden, NotFound

QUIZ_NOT_FOUND = 'Quiz not found'


class Action(Enum):
    READ = 'read'
    ADD_QUESTION = 'add_question'
    DELETE = 'delete'


FORBIDDEN_MESSAGES = {
    Action.ADD_QUESTION: 'You can only add questions to your own quizzes',
    Action.DELETE: 'You can only delete your own quizzes',
}


def is_owner(identity, quiz) -> bool:
    return quiz is not None and identity is not None and identity.user_id == quiz.created_by


def authorize_ownership(identity, quiz, action: Action):
    """Return ``quiz`` if ``identity`` may perform ``action`` on it."""
    if quiz is None:
        raise NotFound(QUIZ_NOT_FOUND)
    if is_owner(identity, quiz):
        return quiz
    if action is Action.READ:
        raise NotFound("Quiz not found or you don't have permission to access it")
    raise Forbidden(FORBIDDEN_MESSAGES[action])
