from memorymatch import db
from memorymatch.models import Score, User


def register(client, username, password='secret'):
    return client.post('/api/register', json={'username': username, 'password': password})


def login(client, username, password='secret'):
    return client.post('/api/login', json={'username': username, 'password': password})


def test_index_and_health(client):
    assert client.get('/').status_code == 200
    assert client.get('/health').get_json() == {'status': 'ok'}


def test_register_then_login(client):
    res = register(client, 'alice')
    assert res.status_code == 201
    assert res.get_json() == {'success': True}

    res = login(client, 'alice')
    assert res.status_code == 200
    data = res.get_json()
    assert data['success'] is True
    assert isinstance(data['userId'], int)


def test_password_is_hashed(client):
    register(client, 'alice', 'hunter2')
    user = User.query.filter_by(username='alice').first()
    assert user.password_hash != 'hunter2'
    assert user.check_password('hunter2')


def test_register_duplicate_username(client):
    register(client, 'alice', 'first')
    original_hash = User.query.filter_by(username='alice').first().password_hash

    res = register(client, 'alice', 'second')
    assert res.get_json() == {'success': False, 'message': 'Username already exists'}

    assert User.query.filter_by(username='alice').count() == 1
    user = User.query.filter_by(username='alice').first()
    assert user.password_hash == original_hash
    assert user.check_password('first')


def test_login_failures_are_indistinguishable(client):
    register(client, 'alice', 'right')
    wrong_password = login(client, 'alice', 'wrong').get_json()
    unknown_user = login(client, 'nobody', 'right').get_json()
    assert wrong_password['success'] is False
    assert 'userId' not in wrong_password
    assert wrong_password == unknown_user


def test_login_missing_fields(client):
    res = client.post('/api/login', json={'username': 'alice'})
    assert res.status_code == 400
    assert 'error' in res.get_json()


def test_register_missing_fields_writes_nothing(client):
    res = client.post('/api/register', json={'password': 'x'})
    assert res.status_code == 400
    assert User.query.count() == 0


def test_malformed_json_is_rejected(client):
    res = client.post('/api/register', data='{not json', content_type='application/json')
    assert res.status_code == 400
    assert res.get_json() == {'error': 'Invalid JSON data'}
    assert User.query.count() == 0


def test_save_score(client):
    register(client, 'alice')
    user_id = login(client, 'alice').get_json()['userId']
    res = client.post('/api/save-score', json={'userId': user_id, 'score': 8, 'timeRemaining': 12})
    assert res.status_code == 201
    assert res.get_json() == {'success': True}
    row = Score.query.one()
    assert (row.user_id, row.score, row.time_remaining) == (user_id, 8, 12)


def test_save_score_missing_field(client):
    res = client.post('/api/save-score', json={'userId': 1, 'score': 3})
    assert res.status_code == 400
    assert Score.query.count() == 0


def test_save_score_rejects_non_integers(client):
    res = client.post('/api/save-score', json={'userId': 1, 'score': 'lots', 'timeRemaining': 3})
    assert res.status_code == 400
    assert Score.query.count() == 0


def test_save_score_does_not_check_user(client):
    res = client.post('/api/save-score', json={'userId': 999, 'score': 1, 'timeRemaining': 0})
    assert res.status_code == 201
    # Orphan rows have no player name, so they stay off the leaderboard
    assert client.get('/api/leaderboard').get_json() == []


def test_leaderboard_empty(client):
    res = client.get('/api/leaderboard')
    assert res.status_code == 200
    assert res.get_json() == []


def test_leaderboard_ordering(client):
    ids = {}
    for name in ('A', 'B', 'C'):
        register(client, name)
        ids[name] = login(client, name).get_json()['userId']
    # Insert out of order to prove sorting happens on read
    for name, score, time_left in (('C', 90, 20), ('B', 100, 5), ('A', 100, 10)):
        client.post('/api/save-score', json={'userId': ids[name], 'score': score, 'timeRemaining': time_left})

    board = client.get('/api/leaderboard').get_json()
    assert [(e['rank'], e['player'], e['score'], e['time_left']) for e in board] == [
        (1, 'A', 100, 10),
        (2, 'B', 100, 5),
        (3, 'C', 90, 20),
    ]


def test_leaderboard_ties_get_consecutive_ranks(client):
    register(client, 'first')
    register(client, 'second')
    first = login(client, 'first').get_json()['userId']
    second = login(client, 'second').get_json()['userId']
    client.post('/api/save-score', json={'userId': first, 'score': 5, 'timeRemaining': 7})
    client.post('/api/save-score', json={'userId': second, 'score': 5, 'timeRemaining': 7})

    board = client.get('/api/leaderboard').get_json()
    assert [e['rank'] for e in board] == [1, 2]
    assert [e['player'] for e in board] == ['first', 'second']


def test_leaderboard_limit(flask_app, client):
    register(client, 'alice')
    user_id = login(client, 'alice').get_json()['userId']
    for score in range(5):
        client.post('/api/save-score', json={'userId': user_id, 'score': score, 'timeRemaining': 0})
    flask_app.config['LEADERBOARD_LIMIT'] = 2
    board = client.get('/api/leaderboard').get_json()
    assert [e['score'] for e in board] == [4, 3]


def test_unknown_endpoint(client):
    res = client.post('/api/nope', json={})
    assert res.status_code == 404
    assert res.get_json() == {'error': 'Endpoint not found'}


def test_wrong_method(client):
    res = client.get('/api/login')
    assert res.status_code == 405
    assert res.get_json() == {'error': 'Method not allowed'}


def test_storage_failure_is_opaque_500(client, monkeypatch):
    def broken_commit():
        raise RuntimeError('disk on fire')

    monkeypatch.setattr(db.session, 'commit', broken_commit)
    res = client.post('/api/save-score', json={'userId': 1, 'score': 1, 'timeRemaining': 1})
    assert res.status_code == 500
    assert res.get_json() == {'error': 'disk on fire'}


def test_long_password_register_and_login(client):
    password = 'p' * 100
    res = register(client, 'alice', password)
    assert res.status_code == 201
    res = login(client, 'alice', password)
    assert res.get_json()['success'] is True
    # Only the first 72 bytes used to count; a different tail must fail
    res = login(client, 'alice', 'p' * 99 + 'q')
    assert res.get_json()['success'] is False


def test_long_password_failures_are_indistinguishable(client):
    register(client, 'alice', 'short')
    known = login(client, 'alice', 'x' * 200)
    unknown = login(client, 'nobody', 'x' * 200)
    assert known.status_code == unknown.status_code == 200
    assert known.get_json() == unknown.get_json() == {'success': False, 'message': 'Invalid credentials'}


def test_unknown_username_still_checks_a_hash(client, monkeypatch):
    from memorymatch import bcrypt

    calls = []
    real_check = bcrypt.check_password_hash

    def counting_check(pw_hash, password):
        calls.append(password)
        return real_check(pw_hash, password)

    monkeypatch.setattr(bcrypt, 'check_password_hash', counting_check)
    assert login(client, 'nobody', 'guess').get_json()['success'] is False
    assert calls == ['guess']


def test_save_score_rejects_floats_and_booleans(client):
    for payload in (
        {'userId': 1, 'score': 7.9, 'timeRemaining': 3},
        {'userId': 1, 'score': 7, 'timeRemaining': True},
        {'userId': 1.0, 'score': 7, 'timeRemaining': 3},
        {'userId': 1, 'score': '7.5', 'timeRemaining': 3},
    ):
        res = client.post('/api/save-score', json=payload)
        assert res.status_code == 400, payload
    assert Score.query.count() == 0


def test_save_score_accepts_digit_strings(client):
    res = client.post('/api/save-score', json={'userId': '1', 'score': '7', 'timeRemaining': '12'})
    assert res.status_code == 201
    row = Score.query.one()
    assert (row.user_id, row.score, row.time_remaining) == (1, 7, 12)
