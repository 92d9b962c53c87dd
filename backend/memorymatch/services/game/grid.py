import random
from typing import List, Optional, Sequence


DEFAULT_SYMBOLS = (
    '🐶', '🐱', '🐭', '🐹', '🐰', '🦊', '🐻', '🐼',
    '🐨', '🦁', '🐷', '🐸', '🐵', '🐮', '🐯', '🦒',
)


class GridConfigurationError(ValueError):
    """The symbol alphabet cannot produce the requested grid."""


def generate_grid(pair_count: int, symbols: Sequence[str] = DEFAULT_SYMBOLS,
                  rng: Optional[random.Random] = None) -> List[str]:
    """Build a shuffled grid of ``2 * pair_count`` cards.

    Draws ``pair_count`` distinct symbols without replacement, duplicates each
    and returns a uniform permutation of the result.
    """
    rng = rng or random.Random()
    alphabet = list(dict.fromkeys(symbols))
    if pair_count < 1:
        raise GridConfigurationError(f'pair_count must be at least 1, got {pair_count}')
    if len(alphabet) < pair_count:
        raise GridConfigurationError(
            f'Need {pair_count} distinct symbols, alphabet has {len(alphabet)}'
        )
    chosen = rng.sample(alphabet, pair_count)
    cards = chosen * 2
    rng.shuffle(cards)
    return cards
