import logging
import random
from typing import Any, Callable, Optional, Sequence

from .grid import DEFAULT_SYMBOLS, generate_grid
from .session import GameSession, GameState


# (outcome, score, time_remaining)
ScoreSubmitter = Callable[[str, int, int], None]
# (event, payload)
Listener = Callable[[str, dict], None]

QUIT = 'quit'


class GameEngine:
    """Memory-match state machine.

    ``start -> playing -> {paused <-> playing} -> {won | lost} -> start``

    Player actions go through ``dispatch``; the countdown and the reveal delay
    arrive as scheduled callbacks. After every mutation the win/loss guards are
    evaluated once. Concluding a game is idempotent: the first conclusion
    cancels all timers, submits one score and replaces the session with a
    fresh one in ``start``.
    """

    def __init__(self, scheduler, submit_score: Optional[ScoreSubmitter] = None,
                 listener: Optional[Listener] = None, pair_count: int = 8,
                 duration: int = 60, tick_interval: float = 1.0, reveal_delay: float = 0.8,
                 symbols: Sequence[str] = DEFAULT_SYMBOLS, rng: Optional[random.Random] = None,
                 submit_on_quit: bool = True, logger: Optional[logging.Logger] = None):
        self.scheduler = scheduler
        self.pair_count = pair_count
        self.duration = duration
        self.tick_interval = tick_interval
        self.reveal_delay = reveal_delay
        self.symbols = symbols
        self.submit_on_quit = submit_on_quit
        self.logger = logger or logging.getLogger(__name__)
        self._submit_score = submit_score
        self._listener = listener
        self._rng = rng or random.Random()
        self._tick_handle = None
        self._reveal_handle = None
        self._disposed = False
        self.session = self._new_session()

    def _new_session(self) -> GameSession:
        grid = generate_grid(self.pair_count, self.symbols, self._rng)
        return GameSession(grid=grid, remaining_time=self.duration)

    @property
    def state(self) -> GameState:
        return self.session.state

    def snapshot(self) -> dict:
        return self.session.to_dict()

    # ---- Actions ----

    def dispatch(self, action: str, **payload: Any) -> bool:
        """Apply a player action. Returns False when the action was ignored."""
        handlers = {
            'start': self._start,
            'select': self._select,
            'pause': self._pause,
            'resume': self._resume,
            'quit': self._quit,
        }
        handler = handlers.get(action)
        if handler is None:
            raise ValueError(f'Unknown action: {action}')
        if self._disposed:
            return False
        applied = handler(**payload)
        if applied:
            self._evaluate()
            self._emit('state', self.snapshot())
        return applied

    def _start(self) -> bool:
        if self.session.state != GameState.START:
            return False
        self.session.state = GameState.PLAYING
        self._schedule_tick()
        self.logger.info(f"[game-start] pairs={self.session.pair_count} duration={self.session.remaining_time}s")
        return True

    def _select(self, index: int) -> bool:
        s = self.session
        if s.state != GameState.PLAYING:
            return False
        if not isinstance(index, int) or not 0 <= index < len(s.grid):
            return False
        if len(s.selection) >= 2 or index in s.selection or s.grid[index] in s.matched:
            return False

        s.selection.append(index)
        if len(s.selection) == 2:
            first, second = s.selection
            if s.grid[first] == s.grid[second]:
                s.matched.add(s.grid[first])
            self._reveal_handle = self.scheduler.call_later(self.reveal_delay, self._reveal, s)
        return True

    def _pause(self) -> bool:
        if self.session.state != GameState.PLAYING:
            return False
        handle = self._tick_handle
        self.session.tick_remainder = handle.remaining() if handle is not None else self.tick_interval
        self._cancel(handle)
        self._tick_handle = None
        self.session.state = GameState.PAUSED
        return True

    def _resume(self) -> bool:
        if self.session.state != GameState.PAUSED:
            return False
        self.session.state = GameState.PLAYING
        self._schedule_tick()
        return True

    def _quit(self) -> bool:
        if self.session.state not in (GameState.PLAYING, GameState.PAUSED):
            return False
        return self._conclude(QUIT)

    # ---- Scheduled callbacks ----

    def _schedule_tick(self) -> None:
        # After a resume the first tick only waits out the rest of the paused interval
        delay = self.session.tick_remainder
        self.session.tick_remainder = None
        if delay is None:
            delay = self.tick_interval
        self._cancel(self._tick_handle)
        self._tick_handle = self.scheduler.call_later(delay, self._tick, self.session)

    def _tick(self, session: GameSession) -> None:
        # Stale ticks from a previous session or a paused game are dropped
        if self._disposed or session is not self.session or session.state != GameState.PLAYING:
            return
        self._tick_handle = None
        session.remaining_time = max(0, session.remaining_time - 1)
        if session.remaining_time > 0:
            self._schedule_tick()
        self._evaluate()
        self._emit('state', self.snapshot())

    def _reveal(self, session: GameSession) -> None:
        if self._disposed or session is not self.session:
            return
        self._reveal_handle = None
        session.selection.clear()
        self._emit('state', self.snapshot())

    # ---- Transitions ----

    def _evaluate(self) -> None:
        s = self.session
        if s.state != GameState.PLAYING or s.concluding:
            return
        if s.is_complete():
            self._conclude(GameState.WON.value)
        elif s.remaining_time <= 0:
            self._conclude(GameState.LOST.value)

    def _conclude(self, outcome: str) -> bool:
        s = self.session
        if s.concluding or s.state not in (GameState.PLAYING, GameState.PAUSED):
            return False
        s.concluding = True
        self._cancel_timers()

        if outcome == GameState.WON.value:
            s.state = GameState.WON
        elif outcome == GameState.LOST.value:
            s.state = GameState.LOST
            s.remaining_time = 0
        score, time_left = s.score, s.remaining_time

        self.logger.info(f"[game-over] outcome={outcome} score={score} time={time_left}")
        self._emit('game_over', {'outcome': outcome, 'score': score, 'time_remaining': time_left})
        if outcome != QUIT or self.submit_on_quit:
            self._submit(outcome, score, time_left)

        self.session = self._new_session()
        return True

    def _submit(self, outcome: str, score: int, time_left: int) -> None:
        if self._submit_score is None:
            return
        try:
            self._submit_score(outcome, score, time_left)
        except Exception:
            # A failed save never blocks the reset
            self.logger.exception(f"[score-submit-failed] outcome={outcome} score={score} time={time_left}")

    # ---- Teardown ----

    def _cancel_timers(self) -> None:
        self._cancel(self._tick_handle)
        self._cancel(self._reveal_handle)
        self._tick_handle = None
        self._reveal_handle = None

    @staticmethod
    def _cancel(handle) -> None:
        if handle is not None:
            handle.cancel()

    def dispose(self) -> None:
        self._disposed = True
        self._cancel_timers()

    def _emit(self, event: str, payload: dict) -> None:
        if self._listener is not None:
            self._listener(event, payload)
