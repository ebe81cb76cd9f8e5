import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///gitwars.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Shared countdown record and its defaults
    TIMER_STATE_PATH = os.environ.get('TIMER_STATE_PATH', 'gameState/current')
    TIMER_DEFAULT_SEC = int(os.environ.get('TIMER_DEFAULT_SEC', '30'))
    # Controller tick interval (seconds)
    TIMER_TICK_SEC = float(os.environ.get('TIMER_TICK_SEC', '1'))
    # 'cached' decides ticks from the last pushed snapshot, 'fresh' reads the store
    TIMER_CONSISTENCY = os.environ.get('TIMER_CONSISTENCY', 'cached')
    # Collections clients may read, write and subscribe to
    DOCUMENT_COLLECTIONS = tuple(
        c.strip() for c in os.environ.get('DOCUMENT_COLLECTIONS', 'gameState').split(',') if c.strip()
    )
    # Points added or removed by the leaderboard score buttons
    SCORE_STEP = int(os.environ.get('SCORE_STEP', '10'))
