"""Quiz, question and leaderboard storage.

Related records are tied together by id only; the store has no native
cascade, so ``delete_quiz`` fetches and removes children itself.
"""

from typing import List, Optional

from flask import current_app
from sqlalchemy import insert, update
from sqlalchemy.dialects import postgresql, sqlite

from quiztopia import db
from quiztopia.models import (
    DEFAULT_DIFFICULTY,
    DEFAULT_POINTS,
    LeaderboardEntry,
    Question,
    Quiz,
    leaderboard_key,
    new_id,
    utcnow,
)
from quiztopia.services.store import store_operation

# Dialects with native INSERT ... ON CONFLICT DO UPDATE
UPSERT_DIALECTS = {
    'sqlite': sqlite.insert,
    'postgresql': postgresql.insert,
}


# ----- quizzes -----

def create_quiz(name: str, description, owner) -> Quiz:
    now = utcnow()
    quiz = Quiz(
        id=new_id(),
        name=name.strip(),
        description=(description or '').strip(),
        created_by=owner.user_id,
        created_by_username=owner.username,
        created_at=now,
        updated_at=now,
        question_count=0,
        is_active=True,
        is_public=True,
    )
    with store_operation('create_quiz', user_id=owner.user_id):
        db.session.add(quiz)
        db.session.commit()
    current_app.logger.info(f"[quiz-create] quiz={quiz.id} user={owner.user_id}")
    return quiz


def list_quizzes() -> List[Quiz]:
    with store_operation('list_quizzes'):
        return (
            Quiz.query.filter_by(is_active=True, is_public=True)
            .order_by(Quiz.created_at.desc())
            .all()
        )


def get_quiz(quiz_id: str) -> Optional[Quiz]:
    with store_operation('get_quiz', quiz_id=quiz_id):
        return db.session.get(Quiz, quiz_id)


def delete_quiz(quiz_id: str) -> None:
    """Delete a quiz together with its questions and leaderboard entries.

    Children are fetched and removed first, then the quiz itself. Every
    removal tolerates an already-missing row, so retrying after a failure
    converges on the same end state.
    """
    with store_operation('delete_quiz', quiz_id=quiz_id):
        questions_removed = _delete_all(
            Question.query.filter_by(quiz_id=quiz_id).all()
        )
        entries_removed = _delete_all(
            LeaderboardEntry.query.filter_by(quiz_id=quiz_id).all()
        )
        quiz = db.session.get(Quiz, quiz_id)
        if quiz is not None:
            db.session.delete(quiz)
        db.session.commit()
    current_app.logger.info(
        f"[quiz-delete] quiz={quiz_id} questions={questions_removed} entries={entries_removed}"
    )


def _delete_all(rows) -> int:
    for row in rows:
        db.session.delete(row)
    return len(rows)


# ----- questions -----

def create_question(quiz: Quiz, data: dict, creator_id: str) -> Question:
    """Persist a validated question under ``quiz`` and bump its count."""
    now = utcnow()
    question = Question(
        id=new_id(),
        quiz_id=quiz.id,
        question=data['question'].strip(),
        answer=data['answer'].strip(),
        longitude=float(data['longitude']),
        latitude=float(data['latitude']),
        difficulty=data.get('difficulty') or DEFAULT_DIFFICULTY,
        points=data.get('points') or DEFAULT_POINTS,
        created_by=creator_id,
        is_active=True,
        created_at=now,
    )
    with store_operation('create_question', quiz_id=quiz.id, user_id=creator_id):
        db.session.add(question)
        # Incremented in SQL so concurrent adds never overwrite each other
        db.session.execute(
            update(Quiz)
            .where(Quiz.id == quiz.id)
            .values(question_count=Quiz.question_count + 1, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
    return question


def get_questions_by_quiz(quiz_id: str) -> List[Question]:
    with store_operation('get_questions_by_quiz', quiz_id=quiz_id):
        return (
            Question.query.filter_by(quiz_id=quiz_id, is_active=True)
            .order_by(Question.created_at.asc())
            .all()
        )


# ----- leaderboard -----

def create_or_update_score(quiz_id: str, user_id: str, username: str, score: int) -> LeaderboardEntry:
    """Record ``score`` for (quiz, user), replacing any earlier submission.

    Last submission wins, whether it is higher or lower than the previous one.
    The write is a single upsert keyed on the composite id, so two first
    submissions racing each other still leave exactly one row.
    """
    key = leaderboard_key(quiz_id, user_id)
    now = utcnow()
    values = {
        'id': key,
        'quiz_id': quiz_id,
        'user_id': user_id,
        'username': username,
        'score': int(score),
        'created_at': now,
        'updated_at': now,
        'is_active': True,
    }
    with store_operation('create_or_update_score', quiz_id=quiz_id, user_id=user_id):
        _upsert_entry(values)
        db.session.commit()
        return db.session.get(LeaderboardEntry, key, populate_existing=True)


def _upsert_entry(values: dict) -> None:
    # created_at is left out of the update set so it keeps the first submission time
    replaced = ('username', 'score', 'updated_at', 'is_active')
    dialect = db.engine.dialect.name
    if dialect in UPSERT_DIALECTS:
        stmt = UPSERT_DIALECTS[dialect](LeaderboardEntry).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=['id'],
            set_={name: stmt.excluded[name] for name in replaced},
        )
        db.session.execute(stmt)
        return

    result = db.session.execute(
        update(LeaderboardEntry)
        .where(LeaderboardEntry.id == values['id'])
        .values(**{name: values[name] for name in replaced})
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.session.execute(insert(LeaderboardEntry).values(**values))


def get_leaderboard(quiz_id: str, limit: int = 10) -> List[LeaderboardEntry]:
    """Top ``limit`` active entries for a quiz, highest score first."""
    with store_operation('get_leaderboard', quiz_id=quiz_id):
        return (
            LeaderboardEntry.query.filter_by(quiz_id=quiz_id, is_active=True)
            .order_by(LeaderboardEntry.score.desc(), LeaderboardEntry.updated_at.asc())
            .limit(limit)
            .all()
        )


def rank_entries(entries) -> List[dict]:
    # Entries arrive sorted; rank is just the 1-based position
    return [
        {'rank': position, **entry.to_dict()}
        for position, entry in enumerate(entries, start=1)
    ]
