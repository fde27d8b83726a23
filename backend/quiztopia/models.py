from datetime import datetime, timezone
import uuid

from quiztopia import db

DIFFICULTIES = ('easy', 'medium', 'hard')
DEFAULT_DIFFICULTY = 'medium'
DEFAULT_POINTS = 10
# Largest value an Integer column holds on every supported backend
MAX_STORED_INT = 2 ** 31 - 1


def utcnow() -> datetime:
    # Stored datetimes are naive and always UTC; _iso() relies on this
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return str(uuid.uuid4())


def leaderboard_key(quiz_id: str, user_id: str) -> str:
    """Composite identity of a leaderboard row: one per user per quiz."""
    return f'{quiz_id}#{user_id}'


def _iso(value):
    return value.isoformat() + 'Z' if value else None


class User(db.Model):
    __tablename__ = 'user'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    username = db.Column(db.String(50), nullable=False)
    password_hash = db.Column(db.String(128), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    email_verified = db.Column(db.Boolean, nullable=False, default=False)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'username': self.username,
            'created_at': _iso(self.created_at),
        }


class Quiz(db.Model):
    __tablename__ = 'quiz'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=False, default='')
    # Ownership anchor; never reassigned after creation
    created_by = db.Column(db.String(36), nullable=False, index=True)
    created_by_username = db.Column(db.String(50), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    question_count = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_public = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self, include_questions=None):
        payload = {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'created_by': self.created_by,
            'created_by_username': self.created_by_username,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
            'question_count': self.question_count,
        }
        if include_questions is not None:
            payload['questions'] = [q.to_dict() for q in include_questions]
        return payload

    def to_summary(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'created_by': self.created_by,
            'created_at': _iso(self.created_at),
            'question_count': self.question_count,
        }


class Question(db.Model):
    __tablename__ = 'question'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    quiz_id = db.Column(db.String(36), nullable=False, index=True)
    question = db.Column(db.String(500), nullable=False)
    answer = db.Column(db.String(200), nullable=False)
    longitude = db.Column(db.Float, nullable=False)
    latitude = db.Column(db.Float, nullable=False)
    difficulty = db.Column(db.String(16), nullable=False, default=DEFAULT_DIFFICULTY)
    points = db.Column(db.Integer, nullable=False, default=DEFAULT_POINTS)
    created_by = db.Column(db.String(36), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'quiz_id': self.quiz_id,
            'question': self.question,
            'answer': self.answer,
            'longitude': self.longitude,
            'latitude': self.latitude,
            'difficulty': self.difficulty,
            'points': self.points,
            'created_at': _iso(self.created_at),
        }


class LeaderboardEntry(db.Model):
    __tablename__ = 'leaderboard_entry'
    __table_args__ = (
        db.Index('ix_leaderboard_entry_quiz_score', 'quiz_id', 'score'),
    )
    # "<quiz_id>#<user_id>"
    id = db.Column(db.String(80), primary_key=True)
    quiz_id = db.Column(db.String(36), nullable=False)
    user_id = db.Column(db.String(36), nullable=False)
    username = db.Column(db.String(50), nullable=False)
    score = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self):
        return {
            'id': self.id,
            'quiz_id': self.quiz_id,
            'user_id': self.user_id,
            'username': self.username,
            'score': self.score,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }
