from datetime import datetime, timedelta

import pytest

from conftest import auth_headers
from quiztopia import db
from quiztopia.models import LeaderboardEntry
from quiztopia.services import quizzes as store


def _submit(client, token, quiz_id, score):
    return client.post(f'/api/leaderboard/{quiz_id}', json={'score': score}, headers=auth_headers(token))


def test_submit_score(client, register, make_quiz):
    user, token = register('alice')
    quiz = make_quiz(token)
    res = _submit(client, token, quiz['id'], 42)
    assert res.status_code == 201
    entry = res.get_json()['data']
    assert entry['id'] == f"{quiz['id']}#{user['id']}"
    assert entry['score'] == 42
    assert entry['username'] == 'alice'


def test_resubmission_overwrites_single_entry(flask_app, client, register, make_quiz, monkeypatch):
    user, token = register('alice')
    quiz = make_quiz(token)

    first, second = datetime(2026, 1, 1, 12, 0, 0), datetime(2026, 1, 1, 12, 5, 0)
    clock = iter([first, second])
    monkeypatch.setattr(store, 'utcnow', lambda: next(clock))

    assert _submit(client, token, quiz['id'], 80).status_code == 201
    res = _submit(client, token, quiz['id'], 30)
    assert res.status_code == 201

    with flask_app.app_context():
        rows = LeaderboardEntry.query.filter_by(quiz_id=quiz['id'], user_id=user['id']).all()
        assert len(rows) == 1
        # Last submission wins even when it is lower
        assert rows[0].score == 30
        assert rows[0].updated_at == second
        assert rows[0].created_at == first


def test_same_score_twice_is_idempotent(flask_app, client, register, make_quiz):
    _, token = register('alice')
    quiz = make_quiz(token)
    _submit(client, token, quiz['id'], 55)
    _submit(client, token, quiz['id'], 55)
    res = client.get(f"/api/leaderboard/{quiz['id']}")
    board = res.get_json()['data']['leaderboard']
    assert [e['score'] for e in board] == [55]


def test_ranked_read_orders_by_score_and_limits(client, register, make_quiz):
    _, owner = register('owner')
    quiz = make_quiz(owner)
    for name, score in [('ann', 5), ('ben', 90), ('cat', 40)]:
        _, token = register(name)
        _submit(client, token, quiz['id'], score)

    res = client.get(f"/api/leaderboard/{quiz['id']}?limit=2")
    assert res.status_code == 200
    data = res.get_json()['data']
    assert data['quiz_id'] == quiz['id']
    assert data['quiz_name'] == quiz['name']
    assert [(e['rank'], e['score'], e['username']) for e in data['leaderboard']] == [
        (1, 90, 'ben'),
        (2, 40, 'cat'),
    ]


def test_default_limit_is_ten(client, register, make_quiz):
    _, owner = register('owner')
    quiz = make_quiz(owner)
    for i in range(12):
        _, token = register(f'player{i}')
        _submit(client, token, quiz['id'], i)

    board = client.get(f"/api/leaderboard/{quiz['id']}").get_json()['data']['leaderboard']
    assert len(board) == 10
    assert board[0]['score'] == 11
    assert [e['rank'] for e in board] == list(range(1, 11))


@pytest.mark.parametrize('limit', ['0', '101', 'abc', '-3'])
def test_invalid_limit_rejected(client, register, make_quiz, limit):
    _, token = register('alice')
    quiz = make_quiz(token)
    res = client.get(f"/api/leaderboard/{quiz['id']}?limit={limit}")
    assert res.status_code == 400
    assert res.get_json()['errors'] == ['Limit must be a number between 1 and 100']


@pytest.mark.parametrize('limit', ['1', '100'])
def test_limit_bounds_accepted(client, register, make_quiz, limit):
    _, token = register('alice')
    quiz = make_quiz(token)
    assert client.get(f"/api/leaderboard/{quiz['id']}?limit={limit}").status_code == 200


def test_empty_leaderboard(client, register, make_quiz):
    _, token = register('alice')
    quiz = make_quiz(token)
    res = client.get(f"/api/leaderboard/{quiz['id']}")
    assert res.status_code == 200
    assert res.get_json()['data']['leaderboard'] == []


def test_unknown_quiz(client, register):
    _, token = register('alice')
    assert client.get('/api/leaderboard/nope').status_code == 404
    assert _submit(client, token, 'nope', 10).status_code == 404


def test_score_boundaries(client, register, make_quiz):
    _, token = register('alice')
    quiz = make_quiz(token)
    assert _submit(client, token, quiz['id'], 0).status_code == 201

    negative = _submit(client, token, quiz['id'], -1)
    assert negative.status_code == 400
    assert negative.get_json()['errors'] == ['Score must be a non-negative integer']

    for bad in ['10', 12.5, True]:
        assert _submit(client, token, quiz['id'], bad).status_code == 400

    missing = client.post(f"/api/leaderboard/{quiz['id']}", json={}, headers=auth_headers(token))
    assert missing.get_json()['errors'] == ['Score is required']


def test_submitting_requires_authentication(client, register, make_quiz):
    _, token = register('alice')
    quiz = make_quiz(token)
    res = client.post(f"/api/leaderboard/{quiz['id']}", json={'score': 10})
    assert res.status_code == 401


def test_rank_entries_uses_position_only():
    entries = [
        LeaderboardEntry(id='q#a', quiz_id='q', user_id='a', username='a', score=3,
                         created_at=datetime(2026, 1, 1), updated_at=datetime(2026, 1, 1)),
        LeaderboardEntry(id='q#b', quiz_id='q', user_id='b', username='b', score=7,
                         created_at=datetime(2026, 1, 1), updated_at=datetime(2026, 1, 1) + timedelta(minutes=1)),
    ]
    # No re-sorting: the store's order is kept as-is
    assert [(e['rank'], e['user_id']) for e in store.rank_entries(entries)] == [(1, 'a'), (2, 'b')]


def test_score_beyond_integer_column_rejected(flask_app, client, register, make_quiz):
    user, token = register('alice')
    quiz = make_quiz(token)
    assert _submit(client, token, quiz['id'], 2 ** 31 - 1).status_code == 201

    for huge in [2 ** 31, 10 ** 20]:
        res = _submit(client, token, quiz['id'], huge)
        assert res.status_code == 400
        assert res.get_json()['errors'] == ['Score must be a non-negative integer']

    with flask_app.app_context():
        row = LeaderboardEntry.query.filter_by(quiz_id=quiz['id'], user_id=user['id']).one()
        assert row.score == 2 ** 31 - 1


def test_first_submission_after_concurrent_insert_updates_row(flask_app, register, make_quiz):
    user, token = register('alice')
    quiz = make_quiz(token)
    key = f"{quiz['id']}#{user['id']}"
    earlier = datetime(2026, 1, 1, 9, 0, 0)

    with flask_app.app_context():
        # Another request committed the row between this one's lookup and insert
        db.session.add(LeaderboardEntry(
            id=key, quiz_id=quiz['id'], user_id=user['id'], username='alice',
            score=10, created_at=earlier, updated_at=earlier, is_active=True,
        ))
        db.session.commit()

        entry = store.create_or_update_score(quiz['id'], user['id'], 'alice', 70)
        assert entry.score == 70

    with flask_app.app_context():
        rows = LeaderboardEntry.query.filter_by(quiz_id=quiz['id'], user_id=user['id']).all()
        assert len(rows) == 1
        assert rows[0].score == 70
        assert rows[0].created_at == earlier
        assert rows[0].updated_at > earlier
