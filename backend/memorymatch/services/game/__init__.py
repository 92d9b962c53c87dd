"""Game domain services: grid generation, session state and timers.

This package holds the memory-match state machine. It has no knowledge of
HTTP, sockets or the database; score persistence reaches it as an injected
callable, so socket handlers and tests drive the same engine.
"""

from .engine import GameEngine
from .grid import DEFAULT_SYMBOLS, GridConfigurationError, generate_grid
from .session import GameSession, GameState
from .timers import BackgroundScheduler, ManualScheduler

__all__ = [
    'BackgroundScheduler',
    'DEFAULT_SYMBOLS',
    'GameEngine',
    'GameSession',
    'GameState',
    'GridConfigurationError',
    'ManualScheduler',
    'generate_grid',
]
