from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set


class GameState(str, Enum):
    START = 'start'
    PLAYING = 'playing'
    PAUSED = 'paused'
    WON = 'won'
    LOST = 'lost'


@dataclass
class GameSession:
    """Mutable state of one game, owned by a single GameEngine."""
    grid: List[str]
    remaining_time: int
    state: GameState = GameState.START
    selection: List[int] = field(default_factory=list)
    matched: Set[str] = field(default_factory=set)
    # Set once a terminal transition has begun; blocks re-entrant conclusions
    concluding: bool = False
    # Unused part of the tick interval at the moment of pausing
    tick_remainder: Optional[float] = None

    @property
    def pair_count(self) -> int:
        return len(self.grid) // 2

    @property
    def score(self) -> int:
        return len(self.matched)

    def is_complete(self) -> bool:
        return len(self.matched) == self.pair_count

    def card_visible(self, index: int) -> bool:
        return index in self.selection or self.grid[index] in self.matched

    def to_dict(self) -> dict:
        # Face-down cards are sent without their symbol
        return {
            'state': self.state.value,
            'cards': [
                {
                    'index': i,
                    'symbol': symbol if self.card_visible(i) else None,
                    'matched': symbol in self.matched,
                }
                for i, symbol in enumerate(self.grid)
            ],
            'selection': list(self.selection),
            'matches': len(self.matched),
            'pair_count': self.pair_count,
            'remaining_time': self.remaining_time,
        }
