import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///memorymatch.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Browser origins allowed to call the API (comma separated)
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173'
    ).split(',') if o.strip()]
    # Game clock (seconds)
    GAME_DURATION_SEC = int(os.environ.get('GAME_DURATION_SEC', '60'))
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '1'))
    # How long a selected pair stays face up before it is cleared (ms)
    REVEAL_DELAY_MS = int(os.environ.get('REVEAL_DELAY_MS', '800'))
    # Distinct symbols per grid; grid holds twice as many cards
    PAIR_COUNT = int(os.environ.get('PAIR_COUNT', '8'))
    # Record a score for games abandoned with quit
    SUBMIT_SCORE_ON_QUIT = os.environ.get('SUBMIT_SCORE_ON_QUIT', '1').lower() in ('1', 'true', 'yes')
    # Optional: cap leaderboard rows. 0 disables.
    LEADERBOARD_LIMIT = int(os.environ.get('LEADERBOARD_LIMIT', '0'))
    # Pre-hash passwords so bcrypt never sees more than its 72-byte limit
    BCRYPT_HANDLE_LONG_PASSWORDS = True
