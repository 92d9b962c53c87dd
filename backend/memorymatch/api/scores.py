from flask import Blueprint, jsonify, request, current_app
from memorymatch.services.accounts import register_user, authenticate, UsernameTaken
from memorymatch.services.scores import record_score, leaderboard


api = Blueprint('api', __name__)


def _json_body():
    """Return the request's JSON object, or None if it is missing or malformed."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None
    return data


def _present(data, *fields):
    return all(data.get(f) is not None for f in fields)


def _as_int(value):
    """Accept JSON integers or digit strings; floats and booleans are rejected."""
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip('-').isdigit():
        return int(value)
    raise ValueError(value)


@api.route('/login', methods=['POST'])
def login():
    data = _json_body()
    if data is None:
        return jsonify({'error': 'Invalid JSON data'}), 400
    if not _present(data, 'username', 'password'):
        return jsonify({'error': 'Missing username or password'}), 400

    user = authenticate(str(data['username']), str(data['password']))
    if user is None:
        current_app.logger.info("[login-failed]")
        return jsonify({'success': False, 'message': 'Invalid credentials'})
    current_app.logger.info(f"[login] user={user.id}")
    return jsonify({'success': True, 'userId': user.id})


@api.route('/register', methods=['POST'])
def register():
    data = _json_body()
    if data is None:
        return jsonify({'error': 'Invalid JSON data'}), 400
    if not _present(data, 'username', 'password'):
        return jsonify({'error': 'Missing username or password'}), 400

    username = str(data['username'])
    try:
        user = register_user(username, str(data['password']))
    except UsernameTaken:
        current_app.logger.info(f"[register-conflict] username={username}")
        return jsonify({'success': False, 'message': 'Username already exists'})
    current_app.logger.info(f"[register] user={user.id} username={user.username}")
    return jsonify({'success': True}), 201


@api.route('/save-score', methods=['POST'])
def save_score():
    data = _json_body()
    if data is None:
        return jsonify({'error': 'Invalid JSON data'}), 400
    if not _present(data, 'userId', 'score', 'timeRemaining'):
        return jsonify({'error': 'Missing required score data'}), 400
    try:
        user_id = _as_int(data['userId'])
        score = _as_int(data['score'])
        time_remaining = _as_int(data['timeRemaining'])
    except ValueError:
        return jsonify({'error': 'Score data must be integers'}), 400

    record_score(user_id, score, time_remaining)
    current_app.logger.info(f"[score-saved] user={user_id} score={score} time={time_remaining}")
    return jsonify({'success': True}), 201


@api.route('/leaderboard', methods=['GET'])
def get_leaderboard():
    limit = int(current_app.config.get('LEADERBOARD_LIMIT', 0) or 0)
    return jsonify(leaderboard(limit=limit or None))
