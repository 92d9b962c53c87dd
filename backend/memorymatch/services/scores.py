from typing import List, Optional

from memorymatch import db
from memorymatch.models import Score, User


def record_score(user_id: int, score: int, time_remaining: int) -> Score:
    """Append a score row. The user id is not checked against the user table."""
    row = Score(user_id=user_id, score=score, time_remaining=time_remaining)
    db.session.add(row)
    db.session.commit()
    return row


def leaderboard(limit: Optional[int] = None) -> List[dict]:
    """Rank every score, best first.

    Order is score desc, then time remaining desc, then insertion order.
    Ranks are positional (1, 2, 3, ...): equal rows still get consecutive ranks.
    """
    query = (
        db.session.query(Score, User.username)
        .join(User, Score.user_id == User.id)
        .order_by(Score.score.desc(), Score.time_remaining.desc(), Score.id.asc())
    )
    if limit:
        query = query.limit(limit)
    return [
        {
            'rank': rank,
            'player': username,
            'score': s.score,
            'time_left': s.time_remaining,
        }
        for rank, (s, username) in enumerate(query.all(), start=1)
    ]
