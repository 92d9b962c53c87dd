import threading
from typing import Dict, Optional

from flask import current_app, request
from flask_socketio import emit

from memorymatch import socketio
from memorymatch.services.game import (
    BackgroundScheduler,
    GameEngine,
    GridConfigurationError,
    ManualScheduler,
)
from memorymatch.services.scores import leaderboard, record_score

NAMESPACE = '/ws'

_EVENT_NAMES = {
    'state': 'game_state',
    'game_over': 'game_over',
}


class LiveGame:
    """One socket's game: an engine, its scheduler and the player's user id."""

    def __init__(self, app, sid: str, user_id: Optional[int] = None):
        self.app = app
        self.sid = sid
        self.user_id = user_id
        self.lock = threading.RLock()
        cfg = app.config
        if cfg.get('TESTING'):
            self.scheduler = ManualScheduler()
        else:
            self.scheduler = BackgroundScheduler(socketio, app=app, lock=self.lock)
        self.engine = GameEngine(
            self.scheduler,
            submit_score=self._submit_score,
            listener=self._push,
            pair_count=int(cfg.get('PAIR_COUNT', 8)),
            duration=int(cfg.get('GAME_DURATION_SEC', 60)),
            tick_interval=float(cfg.get('TICK_INTERVAL_SEC', 1)),
            reveal_delay=int(cfg.get('REVEAL_DELAY_MS', 800)) / 1000.0,
            submit_on_quit=bool(cfg.get('SUBMIT_SCORE_ON_QUIT', True)),
            logger=app.logger,
        )

    def _push(self, event: str, payload: dict) -> None:
        socketio.emit(_EVENT_NAMES[event], payload, to=self.sid, namespace=NAMESPACE)

    def _submit_score(self, outcome: str, score: int, time_remaining: int) -> None:
        if self.user_id is None:
            self.app.logger.info(f"[score-skip] sid={self.sid} outcome={outcome} anonymous player")
            return
        with self.app.app_context():
            record_score(self.user_id, score, time_remaining)
            self.app.logger.info(
                f"[score-saved] user={self.user_id} outcome={outcome} score={score} time={time_remaining}"
            )
            entries = leaderboard(limit=int(self.app.config.get('LEADERBOARD_LIMIT', 0) or 0) or None)
        socketio.emit('leaderboard', entries, to=self.sid, namespace=NAMESPACE)

    def dispose(self) -> None:
        with self.lock:
            self.engine.dispose()


_games: Dict[str, LiveGame] = {}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _current_game() -> Optional[LiveGame]:
    game = _games.get(_get_sid())
    if game is None:
        emit('error', {'message': 'No game in progress; send start_game first'})
    return game


def _dispatch(game: LiveGame, action: str, **payload) -> None:
    with game.lock:
        applied = game.engine.dispatch(action, **payload)
    if not applied:
        emit('error', {'message': f'{action} ignored in state {game.engine.state.value}'})


def handle_connect(*_args):
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*_args):
    game = _games.pop(_get_sid(), None)
    if game:
        game.dispose()
        current_app.logger.info(f"[disconnect] sid={game.sid} game disposed")


def handle_start_game(data=None):
    sid = _get_sid()
    user_id = (data or {}).get('user_id')
    if user_id is not None:
        try:
            user_id = int(user_id)
        except (TypeError, ValueError):
            emit('error', {'message': 'user_id must be an integer'})
            return

    game = _games.get(sid)
    if game is None:
        try:
            game = LiveGame(current_app._get_current_object(), sid, user_id)
        except GridConfigurationError as exc:
            current_app.logger.error(f"[config] {exc}")
            emit('error', {'message': str(exc)})
            return
        _games[sid] = game
    elif user_id is not None:
        with game.lock:
            game.user_id = user_id
    _dispatch(game, 'start')


def handle_select_card(data=None):
    game = _current_game()
    if game is None:
        return
    try:
        index = int((data or {}).get('index'))
    except (TypeError, ValueError):
        emit('error', {'message': 'index must be an integer'})
        return
    _dispatch(game, 'select', index=index)


def handle_pause_game(*_args):
    game = _current_game()
    if game is not None:
        _dispatch(game, 'pause')


def handle_resume_game(*_args):
    game = _current_game()
    if game is not None:
        _dispatch(game, 'resume')


def handle_quit_game(*_args):
    game = _current_game()
    if game is not None:
        _dispatch(game, 'quit')


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the '/ws' namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('start_game', handle_start_game, namespace=NAMESPACE)
    socketio.on_event('select_card', handle_select_card, namespace=NAMESPACE)
    socketio.on_event('pause_game', handle_pause_game, namespace=NAMESPACE)
    socketio.on_event('resume_game', handle_resume_game, namespace=NAMESPACE)
    socketio.on_event('quit_game', handle_quit_game, namespace=NAMESPACE)
